"""Optional dependency detection and XML parser management."""

from __future__ import annotations
from contextlib import suppress
import sys


class Deps:
    """Optional dependency detection."""

    HAS_DEFUSEDXML = False

    @classmethod
    def check(cls) -> None:
        """Check for available optional dependencies."""
        with suppress(Exception):
            from defusedxml import ElementTree as DET

            DET.fromstring("<test/>")
            cls.HAS_DEFUSEDXML = True

    @classmethod
    def get_xml(cls):
        """Get XML parser (preferring defusedxml for security)."""
        if cls.HAS_DEFUSEDXML:
            from defusedxml import ElementTree as ET
            from defusedxml.ElementTree import ParseError as XMLParseError
        else:
            import xml.etree.ElementTree as ET  # noqa: N813
            from xml.etree.ElementTree import ParseError as XMLParseError

        return ET, XMLParseError

    @classmethod
    def warn_if_unsafe(cls) -> None:
        """Warn if defusedxml is not available (security risk)."""
        if not cls.HAS_DEFUSEDXML:
            warning_msg = """
╔════════════════════════════════════════════════════════════╗
║ SECURITY WARNING: defusedxml not installed                ║
║                                                            ║
║ Using unsafe XML parser vulnerable to XXE/billion laughs  ║
║ attacks. Do not open checklists from untrusted sources.   ║
║                                                            ║
║ Install with: pip install defusedxml                      ║
╚════════════════════════════════════════════════════════════╝
"""
            print(warning_msg, file=sys.stderr)


# Automatically check dependencies on import
Deps.check()
