"""
Command line interface for the changelog_writer tool.

This module defines the ``main`` function used as the entry point of
the ``changelog-writer`` command. It loads the configuration file and
templates, reads commit records (JSON lines or a JSON array) from a file
or standard input, and writes the rendered changelog to standard output
or a file. Status messages go to standard error so the changelog can be
piped.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from changelog_writer import __version__
from changelog_writer.config.loader import ConfigError, load_config, load_templates
from changelog_writer.rendering.templates import TemplateError
from changelog_writer.writer import write_changelog

# Module-level logger with a null handler; ``main`` configures the root
# logger and re-enables propagation.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_CONFIG_ERROR = 5
EXIT_TEMPLATE_ERROR = 9
EXIT_INPUT_ERROR = 10


def print_success(message: str) -> None:
    click.echo(f"✓ {message}", err=True)


def print_error(message: str) -> None:
    click.echo(f"✗ {message}", err=True)


def read_chunks(text: str) -> List[Any]:
    """Split commit input into chunks.

    A document starting with ``[`` is read as one JSON array; anything
    else is treated as JSON lines, one chunk per non-blank line. Lines
    are passed on as text and decoded by the writer.
    """
    stripped = text.lstrip()
    if stripped.startswith("["):
        try:
            items = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON array: {exc}") from exc
        if not isinstance(items, list):
            raise ValueError("Expected a JSON array of commits")
        return items
    return [line for line in text.splitlines() if line.strip()]


def _parse_partials(values: Tuple[str, ...]) -> Dict[str, str]:
    partials: Dict[str, str] = {}
    for value in values:
        name, sep, path = value.partition("=")
        if not sep or not name or not path:
            raise click.BadParameter(f"expected NAME=PATH, got '{value}'", param_hint="--partial")
        partials[name] = path
    return partials


def _load_context(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid context file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Context file {path} must hold a JSON object")
    return data


def _enable_package_logging() -> None:
    """Let the package's module loggers reach the root handlers."""
    for name in list(logging.root.manager.loggerDict):
        if name == "changelog_writer" or name.startswith("changelog_writer."):
            logging.getLogger(name).propagate = True


def build_options(
    config: Dict[str, Any],
    templates: Dict[str, Any],
    overrides: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge configuration file values, template contents and flags."""
    options = {
        key: value
        for key, value in config.items()
        if key not in ("context", "templates", "_base_dir")
    }
    options.update(templates)
    options.update({key: value for key, value in overrides.items() if value is not None})
    return options


@click.command()
@click.argument("commits_file", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--template", "template_path", type=click.Path(dir_okay=False, path_type=Path), help="Main template file.")
@click.option("--header-partial", type=click.Path(dir_okay=False, path_type=Path), help="Header partial file.")
@click.option("--commit-partial", type=click.Path(dir_okay=False, path_type=Path), help="Commit partial file.")
@click.option("--footer-partial", type=click.Path(dir_okay=False, path_type=Path), help="Footer partial file.")
@click.option("--partial", "partials", multiple=True, metavar="NAME=PATH", help="Additional named partial (repeatable).")
@click.option("--context", "context_path", type=click.Path(dir_okay=False, path_type=Path), help="JSON file with the base render context.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="JSON configuration file.")
@click.option("--group-by", help="Commit field used to group commits.")
@click.option("--reverse/--no-reverse", default=None, help="Input runs from newest to oldest commit.")
@click.option("--flush/--no-flush", default=None, help="Emit releases not closed by a boundary.")
@click.option("--ignore-reverted/--keep-reverted", default=None, help="Drop reverted commits.")
@click.option("--output", "-o", type=click.File("w", encoding="utf-8"), default="-", help="Output file.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="changelog-writer")
def main(
    commits_file,
    template_path: Optional[Path],
    header_partial: Optional[Path],
    commit_partial: Optional[Path],
    footer_partial: Optional[Path],
    partials: Tuple[str, ...],
    context_path: Optional[Path],
    config_path: Optional[Path],
    group_by: Optional[str],
    reverse: Optional[bool],
    flush: Optional[bool],
    ignore_reverted: Optional[bool],
    output,
    verbose: bool,
) -> None:
    """Render a changelog from commit records.

    COMMITS_FILE holds one JSON commit per line, or a JSON array of
    commits. Reads standard input when omitted.
    """
    # force=True so repeated invocations (tests) reconfigure handlers.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    if verbose:
        _enable_package_logging()

    try:
        try:
            config = load_config(config_path)
            base_dir = config["_base_dir"]
            template_files = dict(config.get("templates", {}))
            for key, path in (
                ("main", template_path),
                ("header", header_partial),
                ("commit", commit_partial),
                ("footer", footer_partial),
            ):
                if path is not None:
                    template_files[key] = str(path.resolve())
            extra = _parse_partials(partials)
            if extra:
                template_files["partials"] = {
                    **template_files.get("partials", {}),
                    **{name: str(Path(p).resolve()) for name, p in extra.items()},
                }
            if not template_files.get("main"):
                raise ConfigError("No main template given; use --template or the 'templates' config section")
            templates = load_templates(template_files, base_dir)
            context = {**config.get("context", {}), **_load_context(context_path)}
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        options = build_options(
            config,
            templates,
            {
                "group_by": group_by,
                "reverse": reverse,
                "do_flush": flush,
                "ignore_reverted": ignore_reverted,
                "debug": logger.debug if verbose else None,
            },
        )

        try:
            chunks = read_chunks(commits_file.read())
        except (OSError, ValueError) as exc:
            print_error(f"Cannot read commits: {exc}")
            raise click.exceptions.Exit(EXIT_INPUT_ERROR)
        logger.debug("Read %d commit chunk(s)", len(chunks))

        try:
            changelog = write_changelog(chunks, context, options)
        except TemplateError as exc:
            print_error(f"Template error: {exc}")
            raise click.exceptions.Exit(EXIT_TEMPLATE_ERROR)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        output.write(changelog)
        if verbose:
            print_success(f"Rendered changelog from {len(chunks)} commit(s)")
        raise click.exceptions.Exit(EXIT_SUCCESS)

    except (click.exceptions.Exit, click.ClickException):
        # Click handles its own exit and usage exceptions
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
