"""
Pytest configuration and shared fixtures for STIG Checklist tests.

This module provides:
- Sample XCCDF and CKL documents (see ``tests.samples``)
- Temporary file/directory management
- Log capture for the package logger
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

from stig_checklist.core.logging import LOG
from tests.samples import CKL_SAMPLE, XCCDF_SAMPLE


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp(prefix="stig_test_"))
    try:
        yield tmp
    finally:
        if tmp.exists():
            shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_xccdf_content() -> str:
    """Valid XCCDF benchmark with three rules."""
    return XCCDF_SAMPLE


@pytest.fixture
def sample_ckl_content() -> str:
    """Valid CKL checklist with two VULNs."""
    return CKL_SAMPLE


@pytest.fixture
def sample_xccdf_file(temp_dir: Path, sample_xccdf_content: str) -> Path:
    xccdf_file = temp_dir / "test_benchmark.xml"
    xccdf_file.write_text(sample_xccdf_content, encoding="utf-8")
    return xccdf_file


@pytest.fixture
def sample_ckl_file(temp_dir: Path, sample_ckl_content: str) -> Path:
    ckl_file = temp_dir / "test_checklist.ckl"
    ckl_file.write_text(sample_ckl_content, encoding="utf-8")
    return ckl_file


# ============================================================================
# Log Capture
# ============================================================================

class LogCapture(logging.Handler):
    """Collects records emitted through the package logger."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self, level: int = logging.DEBUG) -> List[str]:
        return [r.getMessage() for r in self.records if r.levelno >= level]


@pytest.fixture
def log_capture() -> Generator[LogCapture, None, None]:
    """Attach a capturing handler to ``LOG`` for the duration of a test."""
    handler = LogCapture()
    LOG.log.addHandler(handler)
    try:
        yield handler
    finally:
        LOG.log.removeHandler(handler)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
