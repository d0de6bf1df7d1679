"""Typed shapes for the chat message, block and stream-event contract."""

from typing import Any, Literal, NotRequired, TypedDict

TOOL_CALL = "tool-call"
MARKDOWN = "markdown"
SHELL = "shell"
TODOS = "todos"
SOURCES = "sources"
BLOCK_SET = "block-set"

TERMINAL_EXEC_TOOL_NAME = "terminal.exec"
WRITE_TODOS_TOOL_NAME = "write_todos"
SOURCES_TOOL_NAME = "sources"


class ToolCallBlock(TypedDict):
    type: Literal["tool-call"]
    toolName: str
    toolId: str
    status: str  # pending, running, success, error
    args: dict[str, Any]
    result: NotRequired[Any]
    error: NotRequired[str]
    children: NotRequired[list[dict[str, Any]]]


class MarkdownBlock(TypedDict):
    type: Literal["markdown"]
    content: str


class OutputRef(TypedDict):
    runId: str
    toolId: str


class ShellBlock(TypedDict):
    type: Literal["shell"]
    command: str
    status: Literal["running", "success", "error"]
    output: NotRequired[str]
    exitCode: NotRequired[int]
    outputRef: NotRequired[OutputRef]
    cwd: NotRequired[str]
    timeoutMs: NotRequired[int]
    durationMs: NotRequired[int]
    timedOut: bool
    truncated: bool


class TodoItem(TypedDict):
    id: str
    content: str
    status: Literal["pending", "in_progress", "completed", "cancelled"]
    note: NotRequired[str]


class TodosBlock(TypedDict):
    type: Literal["todos"]
    version: int | float
    updatedAtUnixMs: int | float
    todos: list[TodoItem]


class SourceItem(TypedDict):
    title: str
    url: str


class SourcesBlock(TypedDict):
    type: Literal["sources"]
    sources: list[SourceItem]


class Message(TypedDict):
    blocks: list[dict[str, Any]]


# Blocks, messages and events travel as plain dicts; any variant not named
# above is opaque and passed through.
Block = dict[str, Any]
StreamEvent = dict[str, Any]
