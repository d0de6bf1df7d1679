"""Render ``terminal.exec`` tool calls as shell transcript blocks."""

from .fields import extract_execution_facts, round_half_up, tool_name_of
from .models import SHELL, TERMINAL_EXEC_TOOL_NAME, ShellBlock


def to_shell_status(status):
    """Map a tool-call status onto ``running`` / ``success`` / ``error``."""
    if status == "success":
        return "success"
    if status == "error":
        return "error"
    return "running"


def compose_info_header(facts):
    info = []
    if facts.cwd:
        info.append(f"[cwd] {facts.cwd}")
    if facts.timeout_ms is not None and facts.timeout_ms > 0:
        info.append(f"[timeout] {round_half_up(facts.timeout_ms)}ms")
    if facts.duration_ms is not None and facts.duration_ms >= 0:
        info.append(f"[duration] {round_half_up(facts.duration_ms)}ms")
    if facts.timed_out:
        info.append("[status] timed out")
    if facts.truncated:
        info.append("[notice] output truncated")
    return "\n".join(info)


def compose_terminal_output(facts):
    """Compose the transcript text shown under the command.

    Sections are the info header, stdout, stderr and the tool's own error
    message, separated by blank lines. stderr is labelled only when stdout
    precedes it, and the error is left out when stderr already contains it.
    """
    sections = []
    header = compose_info_header(facts)
    if header:
        sections.append(header)

    stdout = facts.stdout.rstrip()
    stderr = facts.stderr.rstrip()
    if stdout:
        sections.append(stdout)
    if stderr:
        sections.append(f"[stderr]\n{stderr}" if stdout else stderr)
    if facts.tool_error and facts.tool_error not in stderr:
        sections.append(f"[error] {facts.tool_error}")

    return "\n\n".join(sections).strip()


def build_terminal_exec_shell_block(block) -> ShellBlock | None:
    """Turn a ``terminal.exec`` tool call, finished or not, into a shell block.

    Returns ``None`` for any other tool.
    """
    if tool_name_of(block) != TERMINAL_EXEC_TOOL_NAME:
        return None

    facts = extract_execution_facts(block)
    shell = {"type": SHELL, "command": facts.command}

    # Output stored elsewhere is only inlined when the call produced some itself
    has_inline_output = bool(facts.stdout or facts.stderr or facts.tool_error)
    if has_inline_output or facts.output_ref is None:
        output = compose_terminal_output(facts)
        if output:
            shell["output"] = output
    if facts.output_ref is not None:
        shell["outputRef"] = facts.output_ref
    if facts.cwd:
        shell["cwd"] = facts.cwd
    if facts.timeout_ms is not None and facts.timeout_ms > 0:
        shell["timeoutMs"] = round_half_up(facts.timeout_ms)
    if facts.duration_ms is not None and facts.duration_ms >= 0:
        shell["durationMs"] = round_half_up(facts.duration_ms)
    shell["timedOut"] = facts.timed_out
    shell["truncated"] = facts.truncated
    if facts.exit_code is not None:
        shell["exitCode"] = round_half_up(facts.exit_code)
    shell["status"] = to_shell_status(block.get("status"))
    return shell
