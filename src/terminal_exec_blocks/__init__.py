"""Decorate terminal.exec tool calls in chat transcripts as readable markdown or shell blocks."""

import json
from pathlib import Path

import click
from click_default_group import DefaultGroup

from .config import Config
from .decorate import (
    STYLES,
    decorate_block,
    decorate_message,
    decorate_message_markdown,
    decorate_message_shell,
    decorate_stream_event,
    decorate_stream_event_markdown,
    decorate_stream_event_shell,
    get_block_builder,
)
from .fields import (
    ExecutionFacts,
    as_record,
    extract_execution_facts,
    read_boolean,
    read_number,
    read_string,
)
from .markdown_block import (
    PREVIEW_LINES,
    build_preview,
    build_terminal_exec_markdown_block,
    fence_for,
)
from .presentation import (
    build_shell_presentation_block,
    build_sources_block,
    build_todos_block,
)
from .shell_block import build_terminal_exec_shell_block, compose_terminal_output

__all__ = [
    "Config",
    "ExecutionFacts",
    "PREVIEW_LINES",
    "STYLES",
    "as_record",
    "build_preview",
    "build_shell_presentation_block",
    "build_sources_block",
    "build_terminal_exec_markdown_block",
    "build_terminal_exec_shell_block",
    "build_todos_block",
    "cli",
    "compose_terminal_output",
    "decorate_block",
    "decorate_message",
    "decorate_message_markdown",
    "decorate_message_shell",
    "decorate_payload",
    "decorate_stream_event",
    "decorate_stream_event_markdown",
    "decorate_stream_event_shell",
    "decorate_stream_lines",
    "extract_execution_facts",
    "fence_for",
    "get_block_builder",
    "read_boolean",
    "read_number",
    "read_string",
]


def decorate_payload(payload, build):
    """Decorate a single message or a list of messages.

    Args:
        payload: A message dict, or a list of message dicts.
        build: The tool-call builder to apply.

    Returns:
        A ``(decorated, changed_count, total)`` tuple.

    Raises:
        click.ClickException: If the payload is neither a message nor a list.
    """
    if isinstance(payload, dict):
        decorated = decorate_message(payload, build)
        return decorated, int(decorated is not payload), 1
    if isinstance(payload, list):
        decorated = [decorate_message(message, build) for message in payload]
        changed = sum(
            1 for before, after in zip(payload, decorated) if after is not before
        )
        return decorated, changed, len(payload)
    raise click.ClickException(
        "Expected a JSON message object or a JSON list of messages"
    )


def decorate_stream_lines(lines, build, on_skip=None):
    """Decorate JSONL stream events, yielding ``(event, changed)`` pairs.

    Blank lines are ignored. Lines that are not JSON objects are passed to
    ``on_skip(line_number, reason)`` and dropped.
    """
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            event = json.loads(line)
        except json.JSONDecodeError as e:
            if on_skip:
                on_skip(line_number, f"invalid JSON ({e.msg})")
            continue
        if not isinstance(event, dict):
            if on_skip:
                on_skip(line_number, "not a JSON object")
            continue
        decorated = decorate_stream_event(event, build)
        yield decorated, decorated is not event


def resolve_builder(style, preview_lines):
    """Resolve the builder from CLI options, falling back to the environment."""
    try:
        config = Config()
    except ValueError as e:
        raise click.ClickException(str(e))
    style = style or config.style
    if preview_lines is None:
        preview_lines = config.preview_lines
    return get_block_builder(style, preview_lines=max(1, preview_lines))


def read_json_file(json_file):
    """Load JSON from a path, or from stdin when the path is ``-``."""
    if json_file != "-" and not Path(json_file).exists():
        raise click.ClickException(f"File not found: {json_file}")
    try:
        with click.open_file(json_file, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {json_file}: {e}")
    except OSError as e:
        raise click.ClickException(f"Could not read {json_file}: {e}")


@click.group(cls=DefaultGroup, default="message")
@click.version_option(None, "-v", "--version", package_name="terminal-exec-blocks")
def cli():
    """Decorate terminal.exec tool calls in chat messages and stream events."""
    pass


@cli.command("message")
@click.argument("json_file", type=click.Path())
@click.option(
    "-o",
    "--output",
    type=click.Path(),
    help="Output file. If not specified, writes JSON to stdout.",
)
@click.option(
    "--style",
    type=click.Choice(STYLES),
    help="Presentation style (default: TERMINAL_EXEC_BLOCK_STYLE or markdown).",
)
@click.option(
    "--preview-lines",
    type=int,
    help="Output lines shown in the markdown preview (default: 5).",
)
@click.option(
    "--indent",
    default=2,
    help="JSON indentation; 0 writes compact JSON (default: 2).",
)
@click.option("-q", "--quiet", is_flag=True, help="Suppress the summary line.")
def message_cmd(json_file, output, style, preview_lines, indent, quiet):
    """Decorate a JSON message (or list of messages) read from JSON_FILE or '-'."""
    build = resolve_builder(style, preview_lines)
    payload = read_json_file(json_file)
    decorated, changed, total = decorate_payload(payload, build)

    text = json.dumps(decorated, indent=indent or None, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        click.echo(text)

    if not quiet:
        noun = "message" if total == 1 else "messages"
        click.echo(f"Decorated {changed} of {total} {noun}", err=True)


@cli.command("stream")
@click.argument("jsonl_file", type=click.Path())
@click.option(
    "-o",
    "--output",
    type=click.Path(),
    help="Output file. If not specified, writes JSONL to stdout.",
)
@click.option(
    "--style",
    type=click.Choice(STYLES),
    help="Presentation style (default: TERMINAL_EXEC_BLOCK_STYLE or markdown).",
)
@click.option(
    "--preview-lines",
    type=int,
    help="Output lines shown in the markdown preview (default: 5).",
)
@click.option("-q", "--quiet", is_flag=True, help="Suppress the summary line.")
def stream_cmd(jsonl_file, output, style, preview_lines, quiet):
    """Decorate JSONL stream events read from JSONL_FILE or '-'."""
    build = resolve_builder(style, preview_lines)
    if jsonl_file != "-" and not Path(jsonl_file).exists():
        raise click.ClickException(f"File not found: {jsonl_file}")

    def on_skip(line_number, reason):
        click.echo(f"Skipping line {line_number}: {reason}", err=True)

    changed = 0
    total = 0
    try:
        with click.open_file(jsonl_file, "r", encoding="utf-8") as source:
            with click.open_file(output or "-", "w", encoding="utf-8") as sink:
                events = decorate_stream_lines(source, build, on_skip)
                for event, event_changed in events:
                    sink.write(json.dumps(event, ensure_ascii=False) + "\n")
                    total += 1
                    changed += int(event_changed)
    except OSError as e:
        raise click.ClickException(f"Could not process {jsonl_file}: {e}")

    if not quiet:
        click.echo(f"Decorated {changed} of {total} events", err=True)


def main():
    cli()
