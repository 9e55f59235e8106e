"""Tests for the CLI main module."""

import io
import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from mini_html_parser.cli.main import (
    COMMANDS,
    CLIConfig,
    MarkupProcessor,
    create_argument_parser,
    format_results,
    main,
)

DEMO_OUTPUT = (
    "Tokens:\n"
    "StartTag: html\n"
    "StartTag: body\n"
    "StartTag: div\n"
    "Text: Hello \n"
    "StartTag: b\n"
    "Text: world\n"
    "EndTag: b\n"
    "EndTag: div\n"
    "EndTag: body\n"
    "EndTag: html\n"
    "\n"
    "DOM Tree:\n"
    "<document>\n"
    "  <html>\n"
    "    <body>\n"
    "      <div>\n"
    '        Text: "Hello "\n'
    "        <b>\n"
    '          Text: "world"\n'
    "        </b>\n"
    "      </div>\n"
    "    </body>\n"
    "  </html>\n"
)


@pytest.fixture
def markup_dir(tmp_path: Path) -> Path:
    """Directory with one well-formed, one irregular and one ignored file."""
    (tmp_path / "good.html").write_text("<p>ok</p>")
    (tmp_path / "bad.htm").write_text("<p>oops</b>")
    (tmp_path / "notes.txt").write_text("<p>not markup</p>")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "deep.html").write_text("<div></div>")
    return tmp_path


class TestCLIConfig:
    """Test CLI configuration management."""

    def test_default_config(self):
        config = CLIConfig()
        assert config.parser_config.name == "lenient"
        assert config.output_format == "text"
        assert config.verbose is False
        assert config.quiet is False

    def test_config_from_file(self, tmp_path: Path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({
            "parser_preset": "strict",
            "output_format": "json",
        }))

        config = CLIConfig.from_file(config_path)

        assert config.parser_config.is_strict
        assert config.output_format == "json"

    def test_config_with_parser_section(self, tmp_path: Path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({
            "parser": {"tree": {"closing_policy": "STRICT"}},
        }))

        config = CLIConfig.from_file(config_path)

        assert config.parser_config.tree.closing_policy.name == "STRICT"
        assert config.parser_config.tokenizer.policy.name == "LENIENT"

    def test_config_from_nonexistent_file(self):
        config = CLIConfig.from_file(Path("nonexistent.json"))
        assert config.output_format == "text"

    @pytest.mark.parametrize("content", [
        "{broken",
        json.dumps({"output_format": "csv"}),
        json.dumps({"parser": {"tokenizer": {"policy": "sloppy"}}}),
        "[1]",
        json.dumps({"parser": {"api": {"default_encoding": "bogus"}}}),
    ])
    def test_invalid_config_falls_back_to_defaults(self, tmp_path: Path, capsys, content):
        config_path = tmp_path / "config.json"
        config_path.write_text(content)

        config = CLIConfig.from_file(config_path)

        assert config.output_format == "text"
        assert not config.parser_config.is_strict
        assert "Could not load config file" in capsys.readouterr().err

    def test_make_strict(self):
        config = CLIConfig()
        config.make_strict()
        assert config.parser_config.tokenizer.policy.name == "STRICT"
        assert config.parser_config.tree.closing_policy.name == "STRICT"


class TestMarkupProcessor:
    """Test batch processing."""

    def test_find_markup_files(self, markup_dir: Path):
        processor = MarkupProcessor(CLIConfig())
        found = [p.name for p in processor.find_markup_files(markup_dir, recursive=False)]
        assert found == ["bad.htm", "good.html"]

    def test_find_markup_files_recursive(self, markup_dir: Path):
        processor = MarkupProcessor(CLIConfig())
        found = {p.name for p in processor.find_markup_files(markup_dir)}
        assert found == {"bad.htm", "good.html", "deep.html"}

    def test_missing_path_yields_nothing(self, tmp_path: Path):
        processor = MarkupProcessor(CLIConfig())
        assert list(processor.find_markup_files(tmp_path / "absent")) == []

    def test_process_single_file(self, markup_dir: Path):
        report = MarkupProcessor(CLIConfig()).process_single_file(markup_dir / "good.html")

        assert report["file"] == str(markup_dir / "good.html")
        assert report["success"] is True
        assert report["element_count"] == 1
        assert report["text_node_count"] == 1
        assert report["unclosed_elements"] == []


class TestFormatResults:
    """Test result formatting."""

    def test_json_format(self):
        results = [{"file": "a.html", "success": True}]
        assert json.loads(format_results(results, "json")) == results

    def test_text_format(self):
        results = [
            {"file": "a.html", "success": True, "element_count": 2,
             "text_node_count": 1, "max_depth": 2, "diagnostics": []},
            {"file": "b.html", "success": False, "diagnostics": [
                {"severity": "ERROR", "message": "End tag </b> does not match open element <p>"},
            ]},
        ]
        output = format_results(results, "text")
        assert "Processed 2 files, 1 successful" in output
        assert "OK   a.html" in output
        assert "FAIL b.html" in output
        assert "Error: End tag </b> does not match open element <p>" in output

    def test_text_format_empty(self):
        assert format_results([], "text") == "No results to display."


class TestArgumentParser:
    """Test argument parsing."""

    def test_global_options(self):
        args = create_argument_parser().parse_args(["--strict", "-q", "tree", "-s", "<a>"])
        assert args.strict
        assert args.quiet
        assert args.command == "tree"
        assert args.string == "<a>"
        assert args.path is None

    def test_parse_command_arguments(self):
        args = create_argument_parser().parse_args(["parse", "a.html", "b", "-r", "-f", "text"])
        assert args.paths == [Path("a.html"), Path("b")]
        assert args.recursive
        assert args.format == "text"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out


class TestTokensCommand:
    """Test the tokens command."""

    def test_inline_string(self, capsys):
        assert main(["tokens", "-s", "hello<b>world</b>"]) == 0
        assert capsys.readouterr().out == (
            "Text: hello\nStartTag: b\nText: world\nEndTag: b\n"
        )

    def test_file_input(self, tmp_path: Path, capsys):
        file_path = tmp_path / "doc.html"
        file_path.write_text("<a></a>")
        assert main(["tokens", str(file_path)]) == 0
        assert capsys.readouterr().out == "StartTag: a\nEndTag: a\n"

    def test_stdin_input(self, capsys):
        with patch("sys.stdin", io.StringIO("<i>")):
            assert main(["tokens"]) == 0
        assert capsys.readouterr().out == "StartTag: i\n"

    def test_lenient_warning(self, capsys):
        assert main(["tokens", "-s", "<a"]) == 0
        captured = capsys.readouterr()
        assert captured.out == "StartTag: a\n"
        assert "Warning: Unterminated tag at end of input" in captured.err

    def test_quiet_suppresses_warnings(self, capsys):
        assert main(["-q", "tokens", "-s", "<a"]) == 0
        assert "Warning" not in capsys.readouterr().err

    def test_strict_error(self, capsys):
        assert main(["--strict", "tokens", "-s", "x<a"]) == 1
        captured = capsys.readouterr()
        assert captured.out == "Text: x\n"
        assert "Error: End of input reached inside a tag" in captured.err

    def test_missing_file(self, tmp_path: Path, capsys):
        assert main(["tokens", str(tmp_path / "missing.html")]) == 1
        assert "Error reading input" in capsys.readouterr().err


class TestTreeCommand:
    """Test the tree command."""

    def test_tree_output(self, capsys):
        assert main(["tree", "-s", "<a><b>x</b></a>"]) == 0
        assert capsys.readouterr().out == (
            "<document>\n"
            "  <a>\n"
            "    <b>\n"
            '      Text: "x"\n'
            "    </b>\n"
            "  </a>\n"
        )

    def test_stray_end_tag(self, capsys):
        assert main(["tree", "-s", "</a>"]) == 0
        captured = capsys.readouterr()
        assert captured.out == "<document>\n"
        assert "Warning: End tag </a> ignored: no open element" in captured.err

    def test_strict_mismatch_prints_partial_tree(self, capsys):
        assert main(["--strict", "tree", "-s", "<a></b>"]) == 1
        captured = capsys.readouterr()
        assert captured.out == "<document>\n  <a>\n  </a>\n"
        assert "Error: End tag </b> does not match open element <a>" in captured.err

    def test_json_format(self, capsys):
        assert main(["tree", "-s", "<a>x</a>", "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["name"] == "document"
        assert data["children"][0]["children"] == [{"type": "text", "text": "x"}]

    def test_format_from_config_file(self, tmp_path: Path, capsys):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"output_format": "json"}))
        assert main(["--config", str(config_path), "tree", "-s", "<a>"]) == 0
        assert json.loads(capsys.readouterr().out)["type"] == "element"

    def test_missing_config_file_warns(self, tmp_path: Path, capsys):
        assert main(["-c", str(tmp_path / "none.json"), "tree", "-s", "<a></a>"]) == 0
        assert "Config file not found" in capsys.readouterr().err

    @pytest.mark.parametrize("content", [
        "[1]",
        json.dumps({"parser": {"api": {"default_encoding": "bogus"}}}),
    ])
    def test_unusable_config_file_uses_defaults(self, tmp_path: Path, capsys, content):
        config_path = tmp_path / "config.json"
        config_path.write_text(content)
        markup = tmp_path / "page.html"
        markup.write_text("<a>x</a>")

        assert main(["-c", str(config_path), "tree", str(markup)]) == 0
        captured = capsys.readouterr()
        assert captured.out == "<document>\n  <a>\n    Text: \"x\"\n  </a>\n"
        assert "Could not load config file" in captured.err


class TestParseCommand:
    """Test the batch parse command."""

    def test_json_report(self, markup_dir: Path, capsys):
        assert main(["parse", str(markup_dir)]) == 0
        results = json.loads(capsys.readouterr().out)

        assert [Path(r["file"]).name for r in results] == ["bad.htm", "good.html"]
        assert all(r["success"] for r in results)
        bad = results[0]
        assert any(d["severity"] == "WARNING" for d in bad["diagnostics"])

    def test_strict_failure_exit_code(self, markup_dir: Path, capsys):
        assert main(["--strict", "parse", str(markup_dir)]) == 1
        results = json.loads(capsys.readouterr().out)
        assert [r["success"] for r in results] == [False, True]

    def test_recursive_text_report(self, markup_dir: Path, capsys):
        assert main(["parse", str(markup_dir), "-r", "-f", "text"]) == 0
        output = capsys.readouterr().out
        assert "Processed 3 files, 3 successful" in output
        assert "deep.html" in output

    def test_output_file(self, markup_dir: Path, tmp_path: Path, capsys):
        output_path = tmp_path / "report.json"
        assert main(["parse", str(markup_dir / "good.html"), "-o", str(output_path)]) == 0

        assert capsys.readouterr().out == ""
        assert json.loads(output_path.read_text())[0]["success"] is True

    def test_no_files_found(self, tmp_path: Path, capsys):
        assert main(["parse", str(tmp_path / "absent")]) == 1
        assert json.loads(capsys.readouterr().out) == []


class TestDemoAndMain:
    """Test the demo command and top-level dispatch."""

    def test_demo_output(self, capsys):
        assert main(["demo"]) == 0
        assert capsys.readouterr().out == DEMO_OUTPUT

    def test_demo_is_repeatable(self, capsys):
        main(["demo"])
        first = capsys.readouterr().out
        main(["demo"])
        assert capsys.readouterr().out == first

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage: mini-html" in capsys.readouterr().out

    def test_keyboard_interrupt(self, capsys):
        with patch.dict(COMMANDS, {"demo": Mock(side_effect=KeyboardInterrupt)}):
            assert main(["demo"]) == 130
        assert "Operation interrupted by user" in capsys.readouterr().err
