"""
File operations module.

Provides atomic writes and encoding-tolerant reads. Only the command-line
surface touches the file system; conversion itself works on strings.
"""

from __future__ import annotations
import codecs
import functools
import os
import tempfile
import time
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Generator, IO, Optional, Tuple, Union

from stig_checklist.core.config import Cfg
from stig_checklist.core.constants import (
    ENCODINGS,
    MAX_RETRIES,
    RETRY_DELAY,
)
from stig_checklist.core.logging import LOG
from stig_checklist.exceptions import FileError
from stig_checklist.xml.sanitizer import San


# ──────────────────────────────────────────────────────────────────────────────
# RETRY DECORATOR
# ──────────────────────────────────────────────────────────────────────────────

def retry(
    attempts: int = MAX_RETRIES,
    delay: float = RETRY_DELAY,
    exceptions: Tuple[type, ...] = (IOError, OSError),
):
    """Retry decorator with exponential backoff."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            wait = delay
            last_err: Optional[BaseException] = None
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as err:
                    last_err = err
                    if attempt < attempts:
                        LOG.d(f"{func.__name__} failed (attempt {attempt}/{attempts}): {err}")
                        time.sleep(wait)
                        wait *= 2
            if last_err:
                raise last_err
            raise RuntimeError("Retry failed without captured exception")

        return wrapper

    return decorator


# ──────────────────────────────────────────────────────────────────────────────
# FILE OPERATIONS CLASS
# ──────────────────────────────────────────────────────────────────────────────

class FO:
    """Safe file operations with atomic writes and encoding detection."""

    @staticmethod
    @contextmanager
    def atomic(target: Union[str, Path], mode: str = "w", enc: str = "utf-8") -> Generator[IO, None, None]:
        """Atomic file write: data lands in a temp file that replaces ``target`` on success.

        Args:
            target: Target file path
            mode: File mode (w or wb)
            enc: Encoding for text mode

        Yields:
            File handle for writing

        Raises:
            FileError: On write failure (``target`` is left untouched)
        """
        target = San.path(target, mkpar=True)
        tmp_path: Optional[Path] = None
        fh = None

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=str(target.parent),
                prefix=f".stig_tmp_{os.getpid()}_",
                suffix=".tmp",
                text="b" not in mode,
            )
            tmp_path = Path(tmp_name)

            if "b" in mode:
                fh = os.fdopen(fd, mode)
            else:
                fh = os.fdopen(fd, mode, encoding=enc, newline="\n")

            try:
                yield fh

                fh.flush()
                with suppress(OSError):
                    os.fsync(fh.fileno())
            finally:
                if fh and not fh.closed:
                    fh.close()
                fh = None

            if Cfg.IS_WIN and target.exists():
                target.unlink()
            tmp_path.replace(target)
            tmp_path = None
        except FileError:
            raise
        except Exception as exc:
            raise FileError(f"Atomic write failed: {exc}", {"file": str(target)}) from exc
        finally:
            if tmp_path and tmp_path.exists():
                with suppress(Exception):
                    tmp_path.unlink()

    @staticmethod
    @retry()
    def read(path: Union[str, Path]) -> str:
        """Read file with automatic encoding detection.

        UTF-16 is used only when the file starts with a UTF-16 byte order
        mark; otherwise each of ``ENCODINGS`` is tried in turn.

        Raises:
            FileError: If file cannot be decoded with any known encoding
        """
        path = San.path(path, exist=True, file=True)
        raw = path.read_bytes()

        if raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            candidates = ["utf-16"]
        else:
            candidates = ENCODINGS

        for encoding in candidates:
            try:
                data = raw.decode(encoding)
            except UnicodeError:
                continue
            LOG.d(f"Read {path.name} as {encoding}")
            return data.lstrip("\ufeff")

        raise FileError(f"Unable to decode file with any known encoding: {path}")

    @staticmethod
    def write_text(target: Union[str, Path], text: str) -> Path:
        """Write ``text`` to ``target`` as UTF-8, atomically."""
        with FO.atomic(target, mode="wb") as handle:
            handle.write(text.encode("utf-8"))
        return San.path(target)


__all__ = ["FO", "retry"]
