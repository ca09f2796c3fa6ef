"""Exception types for the tool system."""

from typing import Any, Optional


class ToolSystemError(Exception):
    """Base class for all tool system errors."""

    pass


class RegistrationError(ToolSystemError, ValueError):
    """Tool could not be registered (duplicate id or tag, invalid config)."""

    pass


class ToolNotFoundError(ToolSystemError, LookupError):
    """No tool is registered under the requested id."""

    def __init__(self, tool_id: str):
        self.tool_id = tool_id
        super().__init__(f"Tool '{tool_id}' is not registered")


class ToolValidationError(ToolSystemError):
    """A captured block could not be decoded or failed its schema.

    Never raised to the caller of process_stream; delivered through the
    tool_error event instead.
    """

    def __init__(self, message: str, tool_id: str, data: Any = None):
        self.tool_id = tool_id
        self.data = data
        super().__init__(message)


class ParseRecoveryError(ToolSystemError):
    """Recoverable parser condition: unknown tag in strict mode or an
    unterminated block at end of stream."""

    def __init__(self, message: str, tag_name: Optional[str] = None, data: Optional[str] = None):
        self.tag_name = tag_name
        self.data = data
        super().__init__(message)
