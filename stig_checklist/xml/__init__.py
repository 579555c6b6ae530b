"""
XML processing modules.

This package contains schema constants, output escaping, the attributed-tree
codec, and tree helpers for processing XCCDF and CKL documents.
"""

from __future__ import annotations

from stig_checklist.xml.schema import Sch
from stig_checklist.xml.sanitizer import San
from stig_checklist.xml.tree import XmlTree
from stig_checklist.xml.utils import XmlUtils

__all__ = [
    "Sch",
    "San",
    "XmlTree",
    "XmlUtils",
]
