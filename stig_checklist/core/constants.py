"""STIG Checklist constants module.

This module defines application constants, enumerations, and processing limits.
These values control file handling and STIG Viewer compatibility.
"""

from __future__ import annotations

import platform
import sys
from enum import Enum
from typing import FrozenSet


# ──────────────────────────────────────────────────────────────────────────────
# VERSION INFORMATION
# ──────────────────────────────────────────────────────────────────────────────

VERSION = "1.2.0"
BUILD_DATE = "2025-11-16"
APP_NAME = "STIG Checklist Editor"
STIG_VIEWER_VERSION = "2.18"


# ──────────────────────────────────────────────────────────────────────────────
# PLATFORM DETECTION
# ──────────────────────────────────────────────────────────────────────────────

IS_WINDOWS = platform.system() == "Windows"
IS_LINUX = platform.system() == "Linux"
IS_MACOS = platform.system() == "Darwin"
PYTHON_VERSION = sys.version_info
MIN_PYTHON_VERSION = (3, 9)


# ──────────────────────────────────────────────────────────────────────────────
# FILE OPERATION CONSTANTS
# ──────────────────────────────────────────────────────────────────────────────

MAX_RETRIES = 3  # Number of retry attempts for I/O operations
RETRY_DELAY = 0.5  # Seconds between retries


# ──────────────────────────────────────────────────────────────────────────────
# CHARACTER ENCODINGS
# ──────────────────────────────────────────────────────────────────────────────

ENCODINGS = [
    "utf-8-sig",
    "cp1252",
    "latin-1",
]


# ──────────────────────────────────────────────────────────────────────────────
# PROCESSING LIMITS
# ──────────────────────────────────────────────────────────────────────────────

MAX_FILE_SIZE = 500 * 1024 * 1024  # 500MB maximum input size
MAX_FINDING_LENGTH = 65_000  # Maximum characters in finding details
MAX_COMMENT_LENGTH = 32_000  # Maximum characters in comments
MAX_VULNERABILITIES = 15_000  # Warn above this many findings


# ──────────────────────────────────────────────────────────────────────────────
# ENUMERATIONS
# ──────────────────────────────────────────────────────────────────────────────


class Status(str, Enum):
    """Canonical finding status values (STIG Viewer compatible).

    These status values are defined by STIG Viewer and must match exactly
    for compatibility. Legacy lowercase values are translated on read by
    ``StatusMap``.
    """

    NOT_A_FINDING = "NotAFinding"
    OPEN = "Open"
    NOT_REVIEWED = "Not_Reviewed"
    NOT_APPLICABLE = "Not_Applicable"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if a status value is canonical."""
        return value in cls._value2member_map_

    @classmethod
    def all_values(cls) -> FrozenSet[str]:
        return frozenset(m.value for m in cls)


class Severity(str, Enum):
    """Severity levels (CAT I/II/III).

    - HIGH = CAT I
    - MEDIUM = CAT II
    - LOW = CAT III
    - UNKNOWN = source value could not be classified
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls._value2member_map_

    @classmethod
    def all_values(cls) -> FrozenSet[str]:
        return frozenset(m.value for m in cls)
