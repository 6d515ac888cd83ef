import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from changelog_writer.config.loader import ConfigError, load_config, load_templates, validate_config


class TestConfigLoader(unittest.TestCase):
    """Tests for the configuration loader."""

    def test_load_config_success(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "writer.json"
            config = {
                "group_by": "scope",
                "commits_sort": ["scope", "subject"],
                "generate_on": "version",
                "reverse": True,
                "transform": {"scope": "core"},
                "context": {"title": "x"},
                "templates": {"main": "main.j2", "partials": {"extra": "extra.j2"}},
            }
            config_path.write_text(json.dumps(config))

            result = load_config(config_path)
            self.assertEqual(result["group_by"], "scope")
            self.assertEqual(result["commits_sort"], ["scope", "subject"])
            self.assertTrue(result["reverse"])
            self.assertEqual(result["_base_dir"], Path(tmp))

    def test_load_config_missing_explicit_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                load_config(Path(tmp) / "missing.json")

    def test_load_config_missing_default_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            default = Path(tmp) / ".changelog-writer.json"
            with patch("changelog_writer.config.loader._get_default_config_path", return_value=default):
                result = load_config()
        self.assertEqual(set(result), {"_base_dir"})

    def test_load_config_default_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            default = Path(tmp) / ".changelog-writer.json"
            default.write_text(json.dumps({"do_flush": False}))
            with patch("changelog_writer.config.loader._get_default_config_path", return_value=default):
                result = load_config()
        self.assertFalse(result["do_flush"])

    def test_load_config_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "writer.json"
            config_path.write_text("{invalid}")
            with self.assertRaises(ConfigError):
                load_config(config_path)


class TestValidateConfig(unittest.TestCase):
    def test_rejects_invalid_documents(self) -> None:
        invalid = [
            [],
            {"unknown": 1},
            {"reverse": "yes"},
            {"commits_sort": 3},
            {"commits_sort": ["a", 1]},
            {"group_by": ["type"]},
            {"generate_on": 1},
            {"transform": "x"},
            {"context": []},
            {"templates": []},
            {"templates": {"main": 1}},
            {"templates": {"body": "x"}},
            {"templates": {"partials": {"a": 1}}},
        ]
        for data in invalid:
            with self.subTest(data=data):
                with self.assertRaises(ConfigError):
                    validate_config(data)

    def test_accepts_null_and_false_generate_on(self) -> None:
        self.assertIsNone(validate_config({"generate_on": None})["generate_on"])
        self.assertFalse(validate_config({"generate_on": False})["generate_on"])


class TestLoadTemplates(unittest.TestCase):
    def test_reads_relative_and_absolute_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            (base / "main.j2").write_text("main")
            (base / "header.j2").write_text("header")
            extra = base / "extra.j2"
            extra.write_text("extra")
            options = load_templates(
                {"main": "main.j2", "header": "header.j2", "partials": {"extra": str(extra)}},
                base,
            )
        self.assertEqual(options["main_template"], "main")
        self.assertEqual(options["header_partial"], "header")
        self.assertEqual(options["partials"], {"extra": "extra"})
        self.assertNotIn("footer_partial", options)

    def test_unreadable_template(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                load_templates({"main": "missing.j2"}, Path(tmp))


if __name__ == "__main__":
    unittest.main()
