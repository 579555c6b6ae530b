"""
STIG Checklist Configuration.

Application directories and processing limits.
"""

from __future__ import annotations

import os
import platform
import sys
import tempfile
import threading
from contextlib import suppress
from pathlib import Path
from typing import List, Optional, Tuple

from stig_checklist.core.constants import (
    MAX_COMMENT_LENGTH,
    MAX_FILE_SIZE,
    MAX_FINDING_LENGTH,
    MAX_VULNERABILITIES,
    MIN_PYTHON_VERSION,
)


class Cfg:
    """
    Application configuration and directory management.

    Provides:
    - Platform detection (Windows/Linux/macOS)
    - Directory management for logs
    - File size and processing limits

    Thread-safe: Yes (uses RLock for initialization)
    """

    # Platform detection
    IS_WIN = platform.system() == "Windows"
    IS_LIN = platform.system() == "Linux"
    IS_MAC = platform.system() == "Darwin"
    PY_VER = sys.version_info
    MIN_PY = MIN_PYTHON_VERSION

    # Environment override for the home directory
    HOME_ENV = "STIG_CHECKLIST_HOME"

    # Directory paths (initialized on first use)
    HOME: Optional[Path] = None
    APP_DIR: Optional[Path] = None
    LOG_DIR: Optional[Path] = None

    # Limits
    MAX_FILE = MAX_FILE_SIZE
    MAX_FIND = MAX_FINDING_LENGTH
    MAX_COMM = MAX_COMMENT_LENGTH
    MAX_VULNS = MAX_VULNERABILITIES

    _lock = threading.RLock()
    _done = False

    @classmethod
    def _candidates(cls) -> List[Path]:
        override = os.environ.get(cls.HOME_ENV)
        if override:
            return [Path(override)]

        candidates: List[Path] = []
        with suppress(Exception):
            candidates.append(Path.home())

        for env_var in ("USERPROFILE", "HOME"):
            val = os.environ.get(env_var)
            if val and os.path.exists(val):
                candidates.append(Path(val))

        candidates.append(Path(tempfile.gettempdir()) / "stig_checklist_user")
        with suppress(Exception):
            candidates.append(Path.cwd() / ".stig_checklist_home")
        return candidates

    @classmethod
    def init(cls) -> None:
        """Resolve a writable home directory and create the app directories."""
        with cls._lock:
            if cls._done:
                return

            attempted_paths: List[str] = []
            for candidate in cls._candidates():
                attempted_paths.append(str(candidate))
                try:
                    candidate.mkdir(parents=True, exist_ok=True)
                    tmp = candidate / f".stig_test_{os.getpid()}"
                    tmp.write_text("ok", encoding="utf-8")
                    tmp.unlink()
                    cls.HOME = candidate
                    break
                except OSError:
                    continue

            if not cls.HOME:
                raise RuntimeError(
                    f"Cannot find writable home directory. Tried: {', '.join(attempted_paths[:5])}. "
                    f"Set ${cls.HOME_ENV} to a writable directory."
                )

            cls.APP_DIR = cls.HOME / ".stig_checklist"
            cls.LOG_DIR = cls.APP_DIR / "logs"

            for directory in (cls.APP_DIR, cls.LOG_DIR):
                directory.mkdir(parents=True, exist_ok=True)

            cls._done = True

    @classmethod
    def check(cls) -> Tuple[bool, List[str]]:
        """Check if the runtime environment is usable."""
        from stig_checklist.core.deps import Deps

        ET, _ = Deps.get_xml()
        errs: List[str] = []

        if cls.PY_VER < cls.MIN_PY:
            errs.append(f"Python {cls.MIN_PY[0]}.{cls.MIN_PY[1]}+ required")

        try:
            ET.fromstring("<test/>")
        except Exception:
            errs.append("XML parser failed")

        if cls.LOG_DIR and not os.access(cls.LOG_DIR, os.W_OK):
            errs.append(f"No write permission: {cls.LOG_DIR}")

        return len(errs) == 0, errs


# Module-level singleton instance (initialized on first import)
CFG = Cfg
Cfg.init()
