"""Typed lookups over the loosely shaped ``args`` / ``result`` of a tool call."""

import math
import re
from dataclasses import dataclass

from .models import ToolCallBlock

EMPTY_COMMAND = "(empty command)"

COMMAND_KEYS = ["command"]
CWD_KEYS = ["cwd", "workdir"]
TIMEOUT_KEYS = ["timeout_ms", "timeoutMs"]
STDOUT_KEYS = ["stdout"]
STDERR_KEYS = ["stderr"]
EXIT_CODE_KEYS = ["exit_code", "exitCode"]
DURATION_KEYS = ["duration_ms", "durationMs"]
TIMED_OUT_KEYS = ["timed_out", "timedOut"]
TRUNCATED_KEYS = ["truncated"]

DECIMAL_PATTERN = re.compile(
    r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII
)
PREFIXED_INTEGER_PATTERN = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")


@dataclass(frozen=True)
class ExecutionFacts:
    """Everything worth showing about one ``terminal.exec`` invocation."""

    command: str = EMPTY_COMMAND
    cwd: str = ""
    timeout_ms: int | float | None = None
    stdout: str = ""
    stderr: str = ""
    exit_code: int | float | None = None
    duration_ms: int | float | None = None
    timed_out: bool = False
    truncated: bool = False
    tool_error: str = ""
    output_ref: dict | None = None


def as_record(value):
    """Return ``value`` if it is a mapping of keys to values, otherwise ``{}``."""
    if isinstance(value, dict):
        return value
    return {}


def as_text(value):
    """Stringify a possibly missing value, treating ``None`` as empty."""
    if value is None:
        return ""
    return str(value)


def read_string(bag, keys):
    """Return the first string under ``keys`` that has non-whitespace content.

    The string is returned untrimmed. Returns ``""`` when nothing matches.
    """
    bag = as_record(bag)
    for key in keys:
        value = bag.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def _parse_numeric_string(text):
    """Parse decimal, scientific or 0x/0o/0b strings; anything else is ``None``."""
    text = text.strip()
    if PREFIXED_INTEGER_PATTERN.fullmatch(text):
        return int(text, 0)
    if DECIMAL_PATTERN.fullmatch(text):
        return float(text)
    return None


def _finite_number(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = _parse_numeric_string(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        # 12.0 and "12" both read as 12
        return int(value) if value.is_integer() else value
    return None


def read_number(bag, keys):
    """Return the first finite number under ``keys``.

    Numeric strings such as ``"12"``, ``"1.5"`` or ``"2e3"`` are parsed.
    Returns ``None`` when nothing matches.
    """
    bag = as_record(bag)
    for key in keys:
        number = _finite_number(bag.get(key))
        if number is not None:
            return number
    return None


def read_boolean(bag, keys):
    """Return the first boolean-like value under ``keys``, defaulting to ``False``.

    Accepts native booleans, the numbers ``1`` / ``0`` and the strings
    ``"true"``, ``"false"``, ``"1"`` and ``"0"`` (case-insensitive).
    """
    bag = as_record(bag)
    for key in keys:
        value = bag.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            if value == 1:
                return True
            if value == 0:
                return False
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in ("true", "1"):
                return True
            if normalized in ("false", "0"):
                return False
    return False


def round_half_up(value):
    """Round to the nearest integer, halves rounding towards positive infinity."""
    if isinstance(value, int):
        return value
    return int(math.floor(value + 0.5))


def read_output_ref(result):
    """Return ``{"runId", "toolId"}`` from ``result["output_ref"]`` or ``None``."""
    ref = result.get("output_ref")
    if not isinstance(ref, dict):
        return None
    run_id = as_text(_first_present(ref, "run_id", "runId")).strip()
    tool_id = as_text(_first_present(ref, "tool_id", "toolId")).strip()
    if not run_id or not tool_id:
        return None
    return {"runId": run_id, "toolId": tool_id}


def _first_present(bag, *keys):
    for key in keys:
        if bag.get(key) is not None:
            return bag[key]
    return None


def tool_name_of(block):
    return as_text(block.get("toolName")).strip()


def extract_execution_facts(block: ToolCallBlock) -> ExecutionFacts:
    """Collect the execution facts of a ``terminal.exec`` tool-call block."""
    args = as_record(block.get("args"))
    result = as_record(block.get("result"))
    return ExecutionFacts(
        command=read_string(args, COMMAND_KEYS) or EMPTY_COMMAND,
        cwd=read_string(args, CWD_KEYS),
        timeout_ms=read_number(args, TIMEOUT_KEYS),
        stdout=read_string(result, STDOUT_KEYS),
        stderr=read_string(result, STDERR_KEYS),
        exit_code=read_number(result, EXIT_CODE_KEYS),
        duration_ms=read_number(result, DURATION_KEYS),
        timed_out=read_boolean(result, TIMED_OUT_KEYS),
        truncated=read_boolean(result, TRUNCATED_KEYS),
        tool_error=as_text(block.get("error")).strip(),
        output_ref=read_output_ref(result),
    )
