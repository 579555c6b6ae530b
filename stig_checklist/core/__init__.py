"""Core infrastructure modules.

Provides foundational components including constants, configuration,
logging, and optional dependency detection.
"""

from __future__ import annotations

from stig_checklist.core.constants import (
    VERSION,
    BUILD_DATE,
    APP_NAME,
    STIG_VIEWER_VERSION,
    Status,
    Severity,
    ENCODINGS,
    MAX_FILE_SIZE,
    MAX_FINDING_LENGTH,
    MAX_COMMENT_LENGTH,
    MAX_VULNERABILITIES,
    MAX_RETRIES,
    RETRY_DELAY,
)
from stig_checklist.core.deps import Deps
from stig_checklist.core.config import Cfg, CFG
from stig_checklist.core.logging import Log, LOG

Deps.warn_if_unsafe()

__all__ = [
    "VERSION",
    "BUILD_DATE",
    "APP_NAME",
    "STIG_VIEWER_VERSION",
    "Status",
    "Severity",
    "ENCODINGS",
    "MAX_FILE_SIZE",
    "MAX_FINDING_LENGTH",
    "MAX_COMMENT_LENGTH",
    "MAX_VULNERABILITIES",
    "MAX_RETRIES",
    "RETRY_DELAY",
    "Deps",
    "Cfg",
    "CFG",
    "Log",
    "LOG",
]
