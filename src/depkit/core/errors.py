"""
Error types for spec parsing, spec compilation, and sink execution.
"""

from dataclasses import dataclass


class DepkitError(Exception):
    """Base exception for all depkit errors."""

    def __init__(self, message: str, context: "ErrorContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.message}\n{self.context.format()}"
        return self.message


class SpecSyntaxError(DepkitError):
    """
    Raised when a spec string cannot be parsed.

    Examples:
    - Empty input
    - Unterminated call or quoted literal
    - Empty argument (leading, trailing or doubled comma)
    - Stray closing parenthesis
    - Bare literal at the root
    """

    def __init__(
        self,
        message: str,
        context: "ErrorContext | None" = None,
        fragment: str = "",
    ):
        self.fragment = fragment
        super().__init__(message, context)


class SpecConfigError(DepkitError):
    """
    Raised when a parsed spec cannot be compiled by a builder.

    Examples:
    - Unknown op name for the active domain
    - Too many or too few arguments for an op
    - Argument of the wrong family (a string where a matcher is expected)
    - Malformed primitive parameter (blank suffix, bad glob segment count)
    - Unresolvable ${name} placeholder
    """

    def __init__(
        self,
        message: str,
        context: "ErrorContext | None" = None,
        op: str | None = None,
    ):
        self.op = op
        super().__init__(message, context)


class SinkError(DepkitError):
    """
    Raised when a compiled sink fails while accepting artifacts.

    Examples:
    - Overwrite prevented in a flat directory
    - Target path escapes the sink directory
    - Artifact has no backing file to copy
    """

    pass


class ConfigError(DepkitError):
    """Raised when depkit.toml cannot be read or has invalid values."""

    pass


@dataclass
class ErrorContext:
    """
    Location of an error inside a spec string.

    Attributes:
        source: The full spec text
        column: Column number (1-indexed)
        op: Optional name of the op being compiled
    """

    source: str
    column: int
    op: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            The spec text with a marker under the offending column
        """
        location = f"at column {self.column}"
        if self.op:
            location += f" in op {self.op}()"
        return f"{location}\n{self._format_snippet()}"

    def _format_snippet(self) -> str:
        prefix = "  | "
        marker_pos = len(prefix) + max(self.column, 1) - 1
        return f"{prefix}{self.source}\n" + " " * marker_pos + "^"


def make_syntax_error(message: str, source: str, pos: int) -> SpecSyntaxError:
    """
    Helper to create a SpecSyntaxError pointing at a 0-based offset.

    Args:
        message: Error description
        source: The spec text being parsed
        pos: Offset of the offending character

    Returns:
        SpecSyntaxError carrying the offending fragment
    """
    fragment = source[pos : pos + 16] if pos < len(source) else ""
    return SpecSyntaxError(message, ErrorContext(source=source, column=pos + 1), fragment)


def make_config_error(message: str, op: str | None = None) -> SpecConfigError:
    """Helper to create a SpecConfigError naming the offending op."""
    if op:
        message = f"{message} (op {op})"
    return SpecConfigError(message, op=op)
