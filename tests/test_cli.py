import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

import changelog_writer.cli as cli
from changelog_writer import __version__

MAIN = '{% include "header" %}{% for g in commitGroups %}{{ g.title }}: {% for c in g.commits %}{{ c.subject }}{% endfor %}\n{% endfor %}'
HEADER = "## {{ version }}\n"

COMMITS = [
    {"version": "1.0.0", "type": "chore", "subject": "release", "header": "chore: release", "notes": []},
    {"type": "feat", "subject": "a", "header": "feat: a", "notes": []},
    {"type": "fix", "subject": "b", "header": "fix: b", "notes": []},
]
EXPECTED = "## 1.0.0\nchore: release\nfeat: a\nfix: b\n"


def json_lines(commits):
    return "\n".join(json.dumps(c) for c in commits) + "\n"


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "main.j2").write_text(MAIN)
        (self.root / "header.j2").write_text(HEADER)
        self.runner = CliRunner()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def template_args(self):
        return ["--template", str(self.root / "main.j2"), "--header-partial", str(self.root / "header.j2")]


class TestCLI(CliTestCase):
    def test_renders_json_lines_from_stdin(self) -> None:
        result = self.runner.invoke(cli.main, self.template_args() + ["--no-flush"], input=json_lines(COMMITS))
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(result.output, EXPECTED)

    def test_renders_json_array_file_to_output_file(self) -> None:
        commits_path = self.root / "commits.json"
        commits_path.write_text(json.dumps(COMMITS))
        out_path = self.root / "CHANGELOG.md"
        result = self.runner.invoke(
            cli.main,
            self.template_args() + ["--no-flush", "-o", str(out_path), str(commits_path)],
        )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(out_path.read_text(), EXPECTED)

    def test_config_file_templates_and_context(self) -> None:
        config = {
            "do_flush": False,
            "group_by": "missing",
            "context": {"title": "from config"},
            "templates": {"main": "main.j2", "partials": {"header": "title.j2"}},
        }
        (self.root / "title.j2").write_text("# {{ title }} {{ version }}\n")
        config_path = self.root / "writer.json"
        config_path.write_text(json.dumps(config))
        context_path = self.root / "context.json"
        context_path.write_text(json.dumps({"title": "from file"}))

        result = self.runner.invoke(
            cli.main,
            ["--config", str(config_path), "--context", str(context_path)],
            input=json_lines(COMMITS),
        )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(result.output, "# from file 1.0.0\nFalse: releaseab\n")

    def test_extra_partial_option(self) -> None:
        (self.root / "other.j2").write_text("other\n")
        result = self.runner.invoke(
            cli.main,
            self.template_args() + ["--partial", f"header={self.root / 'other.j2'}", "--no-flush"],
            input=json_lines(COMMITS),
        )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertTrue(result.output.startswith("other\n"))

    def test_reverse_flag(self) -> None:
        newest_first = [COMMITS[2], COMMITS[1], COMMITS[0]]
        result = self.runner.invoke(
            cli.main, self.template_args() + ["--reverse", "--no-flush"], input=json_lines(newest_first)
        )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertEqual(result.output, "## 1.0.0\nfix: b\nfeat: a\nchore: release\n")

    def test_missing_template(self) -> None:
        result = self.runner.invoke(cli.main, [], input=json_lines(COMMITS))
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertIn("Configuration error", result.output)

    def test_unreadable_template(self) -> None:
        result = self.runner.invoke(cli.main, ["--template", str(self.root / "nope.j2")], input="")
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_invalid_config_file(self) -> None:
        config_path = self.root / "writer.json"
        config_path.write_text(json.dumps({"reverse": "sometimes"}))
        result = self.runner.invoke(cli.main, self.template_args() + ["--config", str(config_path)], input="")
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_invalid_context_file(self) -> None:
        context_path = self.root / "context.json"
        context_path.write_text("[1, 2]")
        result = self.runner.invoke(cli.main, self.template_args() + ["--context", str(context_path)], input="")
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_template_syntax_error(self) -> None:
        (self.root / "main.j2").write_text("{% for %}")
        result = self.runner.invoke(cli.main, self.template_args(), input=json_lines(COMMITS))
        self.assertEqual(result.exit_code, cli.EXIT_TEMPLATE_ERROR)
        self.assertIn("Template error", result.output)

    def test_invalid_commit_input(self) -> None:
        result = self.runner.invoke(cli.main, self.template_args(), input="[not json")
        self.assertEqual(result.exit_code, cli.EXIT_INPUT_ERROR)

    def test_bad_partial_option(self) -> None:
        result = self.runner.invoke(cli.main, self.template_args() + ["--partial", "nopath"], input="")
        self.assertEqual(result.exit_code, 2)

    def test_unexpected_error(self) -> None:
        with patch.object(cli, "write_changelog", side_effect=RuntimeError("boom")):
            result = self.runner.invoke(cli.main, self.template_args(), input=json_lines(COMMITS))
        self.assertEqual(result.exit_code, cli.EXIT_GENERIC_ERROR)
        self.assertIn("Unexpected error: boom", result.output)

    def test_verbose_reports_progress(self) -> None:
        result = self.runner.invoke(cli.main, self.template_args() + ["--verbose"], input=json_lines(COMMITS))
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("Rendered changelog from 3 commit(s)", result.output)

    def test_version(self) -> None:
        result = self.runner.invoke(cli.main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)


class TestHelpers(unittest.TestCase):
    def test_read_chunks_json_lines(self) -> None:
        self.assertEqual(cli.read_chunks('{"a": 1}\n\n  \n{"b": 2}\n'), ['{"a": 1}', '{"b": 2}'])

    def test_read_chunks_json_array(self) -> None:
        self.assertEqual(cli.read_chunks('  [{"a": 1}, "x"]'), [{"a": 1}, "x"])

    def test_read_chunks_invalid_array(self) -> None:
        with self.assertRaises(ValueError):
            cli.read_chunks("[1,")

    def test_build_options(self) -> None:
        options = cli.build_options(
            {"group_by": "scope", "context": {}, "templates": {}, "_base_dir": Path(".")},
            {"main_template": "x"},
            {"group_by": None, "reverse": True},
        )
        self.assertEqual(options, {"group_by": "scope", "main_template": "x", "reverse": True})


if __name__ == "__main__":
    unittest.main()
