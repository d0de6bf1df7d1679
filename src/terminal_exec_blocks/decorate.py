"""Rewrite message block trees, replacing tool calls with presentation blocks.

Every function here returns its input object unchanged when nothing inside
it was decorated, so callers can use ``is`` to detect a change. Where
something was decorated only the path from the root to that block is
copied; untouched siblings are shared with the input.
"""

from functools import partial

from .markdown_block import PREVIEW_LINES, build_terminal_exec_markdown_block
from .models import BLOCK_SET, TOOL_CALL, Message, StreamEvent
from .presentation import build_shell_presentation_block

STYLES = ("markdown", "shell")


def _decorate_all(blocks, build):
    """Decorate each block, returning ``(blocks, changed)``."""
    changed = False
    decorated = []
    for block in blocks:
        next_block = decorate_block(block, build)
        if next_block is not block:
            changed = True
        decorated.append(next_block)
    return decorated, changed


def decorate_block(block, build):
    """Decorate one block and, failing that, its children.

    Args:
        block: A block dict. Anything other than a ``tool-call`` passes through.
        build: Callable taking a tool-call block and returning its
            replacement, or ``None`` to leave it alone.

    Returns:
        The replacement block, a shallow copy with decorated children, or
        ``block`` itself when nothing changed.
    """
    if not isinstance(block, dict) or block.get("type") != TOOL_CALL:
        return block

    decorated = build(block)
    if decorated is not None:
        return decorated

    children = block.get("children")
    if not isinstance(children, (list, tuple)) or not children:
        return block

    next_children, changed = _decorate_all(children, build)
    if not changed:
        return block
    return {**block, "children": next_children}


def decorate_message(message: Message, build) -> Message:
    """Decorate every top-level block of a message."""
    if not isinstance(message, dict):
        return message
    blocks = message.get("blocks")
    if not isinstance(blocks, (list, tuple)) or not blocks:
        return message

    next_blocks, changed = _decorate_all(blocks, build)
    if not changed:
        return message
    return {**message, "blocks": next_blocks}


def decorate_stream_event(event: StreamEvent, build) -> StreamEvent:
    """Decorate the block carried by a ``block-set`` stream event."""
    if not isinstance(event, dict) or event.get("type") != BLOCK_SET:
        return event
    block = event.get("block")
    next_block = decorate_block(block, build)
    if next_block is block:
        return event
    return {**event, "block": next_block}


def get_block_builder(style, preview_lines=PREVIEW_LINES):
    """Return the tool-call builder for ``style`` (``"markdown"`` or ``"shell"``).

    Raises:
        ValueError: If ``style`` is not one of ``STYLES``.
    """
    if style == "markdown":
        if preview_lines == PREVIEW_LINES:
            return build_terminal_exec_markdown_block
        return partial(
            build_terminal_exec_markdown_block, preview_lines=preview_lines
        )
    if style == "shell":
        return build_shell_presentation_block
    raise ValueError(
        f"Unknown decoration style: {style!r} (expected one of {', '.join(STYLES)})"
    )


def decorate_message_markdown(message):
    return decorate_message(message, build_terminal_exec_markdown_block)


def decorate_stream_event_markdown(event):
    return decorate_stream_event(event, build_terminal_exec_markdown_block)


def decorate_message_shell(message):
    return decorate_message(message, build_shell_presentation_block)


def decorate_stream_event_shell(event):
    return decorate_stream_event(event, build_shell_presentation_block)
