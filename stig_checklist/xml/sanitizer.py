"""Input sanitization and output escaping utilities.

Philosophy:
- Fail fast: Raise ValidationError on invalid input, never silently accept bad data
- No silent coercion of user-supplied identifiers: reject them explicitly
- Every string written into a checklist passes through ``San.xml``

Security Features:
- Null byte and oversize checks on file paths
- Control character filtering (characters XML 1.0 cannot carry)
- XML entity escaping (&, <, >, ", ')
"""

from __future__ import annotations
import re
from pathlib import Path
from typing import Any, Optional, Union

from stig_checklist.core.constants import IS_WINDOWS, MAX_FILE_SIZE
from stig_checklist.exceptions import ValidationError


class San:
    """Input sanitization and validation utilities.

    Validation methods raise ValidationError on invalid input; the caller
    must handle it explicitly.

    Thread-safe: Yes (stateless utility class)
    """

    # Validation regex patterns
    HOST = re.compile(r"^[a-zA-Z0-9._-]{1,255}$")
    IP = re.compile(
        r"^((25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9]?[0-9])\.){3}"
        r"(25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9]?[0-9])$"
    )
    MAC = re.compile(r"^([0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$")

    # Characters XML 1.0 cannot represent
    CTRL = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")

    # Platform-specific path length limits
    MAX_PATH = 260 if IS_WINDOWS else 4096

    @staticmethod
    def path(
        value: Union[str, Path],
        *,
        exist: bool = False,
        file: bool = False,
        mkpar: bool = False,
    ) -> Path:
        """Validate a file system path.

        Args:
            value: Path string or Path object to validate
            exist: If True, path must exist
            file: If True, path must be a file (if it exists)
            mkpar: If True, create parent directories

        Returns:
            Resolved Path object

        Raises:
            ValidationError: If path is invalid or doesn't meet the requirements
        """
        if not value or (isinstance(value, str) and not value.strip()):
            raise ValidationError("Empty path")

        as_str = str(value).strip()
        if "\x00" in as_str:
            raise ValidationError("Null byte in path")

        try:
            path = Path(as_str).expanduser().resolve(strict=False)
        except (OSError, RuntimeError) as exc:
            raise ValidationError(f"Path validation failed for '{value}': {exc}") from exc

        if len(str(path)) > San.MAX_PATH:
            raise ValidationError(f"Path too long: {len(str(path))}")

        if mkpar:
            path.parent.mkdir(parents=True, exist_ok=True)

        if exist and not path.exists():
            raise ValidationError(f"Not found: {path}")

        if file and path.exists() and not path.is_file():
            raise ValidationError(f"Not a file: {path}")

        if path.exists() and path.is_file():
            size = path.stat().st_size
            if size > MAX_FILE_SIZE:
                raise ValidationError(f"File too large: {size}")

        return path

    @staticmethod
    def host(value: str) -> str:
        """Validate a host name for the ASSET block.

        Returns:
            Validated host name, or empty string if input is empty
        """
        if not value or not str(value).strip():
            return ""
        value = str(value).strip()
        if not San.HOST.match(value):
            raise ValidationError(f"Invalid host name: {value}")
        return value

    @staticmethod
    def ip(value: str) -> str:
        """Validate IPv4 address format (octets 0-255, no leading zeros).

        Returns:
            Validated IP address string, or empty string if input is empty
        """
        if not value:
            return ""
        value = str(value).strip()
        if not value:
            return ""
        if not San.IP.match(value):
            raise ValidationError(f"Invalid IP format: {value}")
        return value

    @staticmethod
    def mac(value: str) -> str:
        """Validate MAC address format.

        Accepts both colon and hyphen separators, normalizes to colon-separated
        uppercase format.
        """
        if not value:
            return ""
        value = str(value).strip().upper().replace("-", ":")
        if not value:
            return ""
        if not San.MAC.match(value):
            raise ValidationError(f"Invalid MAC: {value}")
        return value

    @staticmethod
    def text(value: Any, mx: Optional[int] = None) -> str:
        """Coerce a reviewer-entered value to a string, enforcing a length limit.

        Raises:
            ValidationError: If the value is longer than ``mx``
        """
        if value is None:
            return ""
        value = str(value)
        if mx is not None and len(value) > mx:
            raise ValidationError(f"Text too long: {len(value)} characters (max {mx})")
        return value

    @staticmethod
    def xml(value: Any) -> str:
        """Escape a value for XML text or attribute output.

        Removes control characters and escapes XML entities (&, <, >, ", ').

        Returns:
            Escaped string, or empty string if value is None
        """
        if value is None:
            return ""
        if not isinstance(value, str):
            value = str(value)

        value = San.CTRL.sub("", value)

        return (
            value.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&apos;")
        )
