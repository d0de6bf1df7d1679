"""Render ``terminal.exec`` tool calls as a single markdown document block."""

import json
import re

from .fields import as_text, extract_execution_facts, round_half_up, tool_name_of
from .models import MARKDOWN, TERMINAL_EXEC_TOOL_NAME, MarkdownBlock

PREVIEW_LINES = 5
NO_OUTPUT = "(no output)"
EMPTY_STREAM = "(empty)"
TRUNCATION_NOTICE = "_Output truncated. Expand the full output below._"

# In-flight calls keep their tool-call presentation in this style
DECORATED_STATUSES = ("success", "error")

BACKTICK_RUN_PATTERN = re.compile(r"`+")
LINE_ENDING_PATTERN = re.compile(r"\r\n?")


def longest_backtick_run(text):
    return max((len(run) for run in BACKTICK_RUN_PATTERN.findall(text)), default=0)


def fence_for(content):
    """Return a backtick fence that cannot be closed by anything in ``content``.

    Args:
        content: The text that will sit between the fences.

    Returns:
        A run of backticks one longer than the longest run in ``content``,
        and never shorter than three.
    """
    return "`" * max(3, longest_backtick_run(content) + 1)


def fenced(content, info=""):
    fence = fence_for(content)
    return f"{fence}{info}\n{content}\n{fence}"


def inline_code(text):
    """Wrap ``text`` in an inline code span, escaping embedded backticks."""
    ticks = "`" * (longest_backtick_run(text) + 1)
    if text.startswith("`") or text.endswith("`"):
        text = f" {text} "
    return f"{ticks}{text}{ticks}"


def build_preview(text, max_lines=PREVIEW_LINES):
    """Cut ``text`` down to its first few lines.

    Args:
        text: Raw command output. ``None`` counts as empty.
        max_lines: How many lines to keep; anything below 1 keeps one line.

    Returns:
        A ``(preview, truncated)`` tuple. ``preview`` is ``"(no output)"``
        when the text holds no lines once trailing empty lines are dropped.
    """
    normalized = LINE_ENDING_PATTERN.sub("\n", as_text(text))
    lines = normalized.split("\n")
    while lines and lines[-1] == "":
        lines.pop()
    if not lines:
        return NO_OUTPUT, False
    limit = max(1, int(max_lines))
    return "\n".join(lines[:limit]), len(lines) > limit


def status_label(status, timed_out):
    if timed_out:
        return "timed out"
    if status == "success":
        return "success"
    if status == "error":
        return "failed"
    return ""


def format_execution_line(facts, status):
    parts = []
    label = status_label(status, facts.timed_out)
    if label:
        parts.append(f"status {label}")
    if facts.exit_code is not None:
        parts.append(f"exit {round_half_up(facts.exit_code)}")
    if facts.duration_ms is not None and facts.duration_ms >= 0:
        parts.append(f"{round_half_up(facts.duration_ms)}ms")
    if not parts:
        return ""
    return "**Execution**: " + " · ".join(parts)


def format_metadata(metadata):
    """Serialize metadata as indented JSON, or ``{}`` if it cannot be encoded."""
    try:
        return json.dumps(metadata, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return "{}"


def execution_metadata(facts, status, tool_id):
    metadata = {
        "status": status,
        "tool_id": tool_id or None,
        "exit_code": facts.exit_code,
        "duration_ms": facts.duration_ms,
        "timed_out": facts.timed_out,
        "truncated": facts.truncated,
    }
    return {key: value for key, value in metadata.items() if value is not None}


def _full_stream(text):
    if not text.strip():
        return EMPTY_STREAM
    return text.rstrip()


def compose_full_output(facts, status, tool_id):
    metadata = execution_metadata(facts, status, tool_id)
    return "\n\n".join(
        [
            "<details>\n<summary>Full output</summary>",
            "**stdout**",
            fenced(_full_stream(facts.stdout)),
            "**stderr**",
            fenced(_full_stream(facts.stderr)),
            "**Metadata**",
            fenced(format_metadata(metadata), "json"),
            "</details>",
        ]
    )


def compose_terminal_markdown(
    facts, status, tool_id="", preview_lines=PREVIEW_LINES
):
    """Compose the markdown document describing one command execution.

    Args:
        facts: ``ExecutionFacts`` extracted from the tool call.
        status: The tool-call status (``"success"`` or ``"error"``).
        tool_id: The tool-call id, recorded in the metadata when present.
        preview_lines: Number of output lines shown before the fold.

    Returns:
        The markdown document as a string.
    """
    sections = [fenced(facts.command, "bash")]

    execution = format_execution_line(facts, status)
    if execution:
        sections.append(execution)
    if facts.cwd:
        sections.append(f"**Working directory**: {inline_code(facts.cwd)}")
    if facts.timeout_ms is not None and facts.timeout_ms > 0:
        sections.append(f"**Timeout**: {round_half_up(facts.timeout_ms)}ms")
    if facts.tool_error and facts.tool_error not in facts.stderr:
        sections.append(f"**Error**: {facts.tool_error}")

    if status == "success":
        source = facts.stdout
    else:
        source = facts.stderr if facts.stderr.strip() else facts.stdout
    preview, preview_truncated = build_preview(source, preview_lines)
    sections.append("**Output preview**:")
    sections.append(fenced(preview))
    if preview_truncated or facts.truncated:
        sections.append(TRUNCATION_NOTICE)

    sections.append(compose_full_output(facts, status, tool_id))
    return "\n\n".join(sections)


def build_terminal_exec_markdown_block(
    block, preview_lines=PREVIEW_LINES
) -> MarkdownBlock | None:
    """Turn a finished ``terminal.exec`` tool call into a markdown block.

    Returns ``None`` for other tools and for calls still in flight.
    """
    if tool_name_of(block) != TERMINAL_EXEC_TOOL_NAME:
        return None
    status = block.get("status")
    if status not in DECORATED_STATUSES:
        return None

    facts = extract_execution_facts(block)
    content = compose_terminal_markdown(
        facts,
        status,
        tool_id=as_text(block.get("toolId")).strip(),
        preview_lines=preview_lines,
    )
    return {"type": MARKDOWN, "content": content}
