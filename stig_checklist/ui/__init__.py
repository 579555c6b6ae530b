"""User interface modules.

Public API:
    - main: CLI entry point function
"""

from __future__ import annotations

from stig_checklist.ui.cli import main

__all__ = ["main"]
