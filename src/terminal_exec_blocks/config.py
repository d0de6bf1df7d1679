"""Configuration management for terminal-exec block decoration."""

import os

from .decorate import STYLES
from .markdown_block import PREVIEW_LINES


class Config:
    """Configuration for the decorator command line."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Presentation style: markdown documents or shell transcripts
        self.style = os.environ.get("TERMINAL_EXEC_BLOCK_STYLE", "markdown").strip()
        if self.style not in STYLES:
            raise ValueError(
                f"TERMINAL_EXEC_BLOCK_STYLE must be one of: {', '.join(STYLES)}"
            )

        # Output lines shown before the fold (markdown style)
        try:
            self.preview_lines = int(
                os.environ.get("TERMINAL_EXEC_PREVIEW_LINES", str(PREVIEW_LINES))
            )
        except ValueError:
            raise ValueError("TERMINAL_EXEC_PREVIEW_LINES must be an integer")
        self.preview_lines = max(1, self.preview_lines)

    def __repr__(self):
        """Return a string representation of the config."""
        return f"<Config(style='{self.style}', preview_lines={self.preview_lines})>"
