"""Presentation blocks for the ``write_todos`` and ``sources`` tools.

These accompany the shell-style ``terminal.exec`` decoration so that one
decorator pass can present every tool the chat renderer has a block for.
"""

import re
from urllib.parse import urlparse

from .fields import as_record, as_text, read_number, tool_name_of
from .models import (
    SOURCES,
    SOURCES_TOOL_NAME,
    TODOS,
    TOOL_CALL,
    WRITE_TODOS_TOOL_NAME,
    Block,
    SourcesBlock,
    TodosBlock,
)
from .shell_block import build_terminal_exec_shell_block

TODO_STATUSES = ("in_progress", "completed", "cancelled")
WHITESPACE_PATTERN = re.compile(r"\s+")
AUTHORITY_END_PATTERN = re.compile(r"[/\\?#]")
FORBIDDEN_HOST_PATTERN = re.compile(r"[\s#/:<>?@\[\\\]^|]")
MAX_PORT = 65535


def normalize_todo_status(value):
    status = as_text(value).strip().lower()
    if status in TODO_STATUSES:
        return status
    return "pending"


def normalize_todo_items(value):
    """Keep the todo entries that have content, filling in ids and statuses."""
    if not isinstance(value, list):
        return []
    todos = []
    for index, entry in enumerate(value, start=1):
        item = as_record(entry)
        content = as_text(item.get("content")).strip()
        if not content:
            continue
        todo = {
            "id": as_text(item.get("id")).strip() or f"todo_{index}",
            "content": content,
            "status": normalize_todo_status(item.get("status")),
        }
        note = as_text(item.get("note")).strip()
        if note:
            todo["note"] = note
        todos.append(todo)
    return todos


def _non_negative(bag, key):
    number = read_number(bag, [key])
    if number is None:
        return 0
    return max(0, number)


def build_todos_block(block) -> TodosBlock | None:
    """Present a successful ``write_todos`` call as a ``todos`` block.

    Todos reported in the result win; the call's own arguments are the
    fallback when the result lists none.
    """
    if tool_name_of(block) != WRITE_TODOS_TOOL_NAME:
        return None
    if block.get("status") != "success":
        return None

    result = as_record(block.get("result"))
    todos = normalize_todo_items(result.get("todos"))
    if not todos:
        todos = normalize_todo_items(as_record(block.get("args")).get("todos"))
    return {
        "type": TODOS,
        "version": _non_negative(result, "version"),
        "updatedAtUnixMs": _non_negative(result, "updated_at_unix_ms"),
        "todos": todos,
    }


def _valid_port(port):
    return not port or (port.isascii() and port.isdigit() and int(port) <= MAX_PORT)


def _valid_authority(authority):
    host = authority.rpartition("@")[2]
    if host.startswith("["):
        address, bracket, port = host[1:].partition("]")
        if not bracket or not address:
            return False
        return port == "" or (port.startswith(":") and _valid_port(port[1:]))
    host, _, port = host.partition(":")
    if not host or FORBIDDEN_HOST_PATTERN.search(host):
        return False
    return _valid_port(port)


def is_web_url(value):
    """Return whether ``value`` is an absolute ``http`` or ``https`` URL.

    Slashes after the scheme are optional (``http:example.com`` names the
    host ``example.com``), but the host must be present and well formed.
    """
    text = as_text(value).strip()
    if not text:
        return False
    try:
        parsed = urlparse(text)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    rest = text[len(parsed.scheme) + 1 :].lstrip("/\\")
    authority = AUTHORITY_END_PATTERN.split(rest, maxsplit=1)[0]
    return _valid_authority(authority)


def build_sources_block(block) -> SourcesBlock | None:
    """Present a ``sources`` call as a de-duplicated list of web links."""
    if tool_name_of(block) != SOURCES_TOOL_NAME:
        return None

    result = as_record(block.get("result"))
    entries = result.get("sources")
    if not isinstance(entries, list):
        return None

    sources = []
    seen = set()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        url = as_text(entry.get("url")).strip()
        if not is_web_url(url) or url in seen:
            continue
        seen.add(url)
        title = WHITESPACE_PATTERN.sub(" ", as_text(entry.get("title"))).strip()
        sources.append({"title": title or url, "url": url})

    if not sources:
        return None
    return {"type": SOURCES, "sources": sources}


SHELL_BUILDERS = (
    build_terminal_exec_shell_block,
    build_todos_block,
    build_sources_block,
)


def build_shell_presentation_block(block) -> Block | None:
    """Try each shell-style presentation in turn; ``None`` if none applies."""
    if block.get("type") != TOOL_CALL:
        return None
    for build in SHELL_BUILDERS:
        decorated = build(block)
        if decorated is not None:
            return decorated
    return None
