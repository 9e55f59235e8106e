"""Test module for mini_html_parser package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import mini_html_parser

    # Assert
    assert mini_html_parser is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import mini_html_parser

    # Assert
    assert isinstance(mini_html_parser.__version__, str)
    assert mini_html_parser.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    import mini_html_parser

    assert mini_html_parser.__author__ == "Mini HTML Parser Team"


def test_package_all_exports() -> None:
    """Test that __all__ contains expected exports."""
    # Arrange & Act
    import mini_html_parser

    # Assert
    for name in ("tokenize", "build_tree", "print_tree", "parse", "MarkupParser"):
        assert name in mini_html_parser.__all__
    for name in mini_html_parser.__all__:
        assert hasattr(mini_html_parser, name), name


def test_pipeline_through_top_level_names() -> None:
    """Test the three pipeline stages reachable from the package root."""
    from mini_html_parser import build_tree, render_tree, tokenize

    root = build_tree(tokenize("<a><b>x</b></a>"))

    assert render_tree(root) == (
        "<document>\n"
        "  <a>\n"
        "    <b>\n"
        '      Text: "x"\n'
        "    </b>\n"
        "  </a>\n"
    )
