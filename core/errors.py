from __future__ import annotations


class ValidationError(Exception):
    """Raised for invalid tool inputs or disallowed operations."""
    pass


class ToolExecutionError(Exception):
    """Raised by a tool when its underlying work fails.

    The message is what the caller sees after the dispatcher prefixes the
    tool name, so it should be readable on its own. Raise it with
    ``raise ToolExecutionError(...) from e`` so the original failure stays in
    the logged traceback.
    """
    pass
