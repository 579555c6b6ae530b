"""
I/O and file operations modules.

Atomic writes and encoding-tolerant reads for the command-line surface.
"""

from __future__ import annotations

from stig_checklist.io.file_ops import FO, retry

__all__ = ["FO", "retry"]
