"""Custom exception classes for STIG Checklist.

All exceptions in the application inherit from STIGError base class
to provide consistent error handling and context propagation.

Input-document problems (ParseError and its subclasses) are terminal and
user-visible. InternalInconsistency signals a bug in the conversion code,
not a bad input file, and is reported separately.
"""

from __future__ import annotations
from typing import Optional, Dict, Any


class STIGError(Exception):
    """Base exception with context.

    Attributes:
        msg: The error message
        ctx: Optional dictionary of contextual information (e.g., paths, finding ids)
    """

    def __init__(self, msg: str, ctx: Optional[Dict[str, Any]] = None):
        super().__init__(msg)
        self.msg = msg
        self.ctx = ctx or {}

    def __str__(self) -> str:
        if self.ctx:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.ctx.items())
            return f"{self.msg} [{ctx_str}]"
        return self.msg


class ValidationError(STIGError):
    """Raised when a user-supplied value is invalid."""


class FileError(STIGError):
    """Raised when file operations fail."""


class ParseError(STIGError):
    """Raised when an input document cannot be converted."""


class MalformedDocument(ParseError):
    """Input text is not well-formed XML.

    The underlying parser message is kept in ``reason``.
    """

    def __init__(self, reason: str, ctx: Optional[Dict[str, Any]] = None):
        super().__init__(f"Malformed XML document: {reason}", ctx)
        self.reason = reason


class UnrecognizedDocumentShape(ParseError):
    """Well-formed XML whose root is neither Benchmark nor CHECKLIST."""


class IncompleteDocument(ParseError):
    """Recognized root missing a structurally required descendant."""

    def __init__(self, path: str, ctx: Optional[Dict[str, Any]] = None):
        super().__init__(f"Document is missing required element: {path}", ctx)
        self.path = path


class InternalInconsistency(STIGError):
    """A canonical invariant was violated by code that should have prevented it."""
