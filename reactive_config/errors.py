"""
Error handling for reactive-config.

Structured error codes shared by the JSONC editor, the configuration store and
the i18n registry.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from .jsonc.parser import ParseDiagnostic


class ErrorCode(Enum):
    """
    Error codes for reactive-config.

    Ranges:
    - 1000-1099: Syntax errors in JSONC text
    - 1300-1399: Argument errors
    - 1400-1499: i18n errors

    File system failures are not wrapped; OSError propagates unchanged.
    """

    # Syntax errors (1000-1099)
    SYNTAX_ERROR = 1000

    # Argument errors (1300-1399)
    ILLEGAL_ARGUMENT = 1300
    INDEX_OUT_OF_BOUNDS = 1301

    # i18n errors (1400-1499)
    LANGUAGE_NOT_FOUND = 1400


class ConfigError(Exception):
    """Base exception for reactive-config errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize configuration error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to a plain dictionary (for logs and CLI output).

        Returns:
            Error dictionary with code, message, suggestion, and context
        """
        result = {
            "code": self.code.value,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class JsoncSyntaxError(ConfigError, ValueError):
    """Malformed JSONC text.

    The first diagnostic is attached as ``__cause__`` by the parser; all of
    them are available on ``diagnostics``.
    """

    def __init__(self, diagnostics: Sequence["ParseDiagnostic"], file_path: Optional[str] = None):
        self.diagnostics: List["ParseDiagnostic"] = list(diagnostics)
        first = self.diagnostics[0] if self.diagnostics else None
        where = f" in {file_path}" if file_path else ""
        if first is not None:
            message = f"Invalid JSONC{where}: {first}"
        else:
            message = f"Invalid JSONC{where}"

        context: Dict[str, Any] = {"errors": [d.to_dict() for d in self.diagnostics]}
        if file_path:
            context["file_path"] = file_path

        super().__init__(
            code=ErrorCode.SYNTAX_ERROR,
            message=message,
            suggestion="Fix the reported syntax error (comments and trailing commas are allowed)",
            context=context
        )


class IllegalArgumentError(ConfigError, ValueError):
    """A caller-supplied object is not of the kind an operation requires."""

    def __init__(self, value: Any, reason: str):
        """
        Initialize illegal argument error.

        Args:
            value: The offending value (kept for inspection)
            reason: Why the value was rejected
        """
        self.value = value
        super().__init__(
            code=ErrorCode.ILLEGAL_ARGUMENT,
            message=f"Illegal argument {value!r}: {reason}",
            context={"value": repr(value), "reason": reason}
        )


class IndexOutOfBoundsError(ConfigError, IndexError):
    """Sequence index outside the current bounds."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(
            code=ErrorCode.INDEX_OUT_OF_BOUNDS,
            message=f"Index {index} out of bounds for sequence of length {length}",
            context={"index": index, "length": length}
        )


class LanguageNotFoundError(ConfigError, LookupError):
    """Language code requested from the registry was never loaded."""

    def __init__(self, code: str, available: Optional[Sequence[str]] = None):
        self.language_code = code
        super().__init__(
            code=ErrorCode.LANGUAGE_NOT_FOUND,
            message=f"Language '{code}' not found. Please load it first.",
            suggestion="Call load_language() or load_all_languages() before get()",
            context={"language": code, "available": sorted(available or [])}
        )
