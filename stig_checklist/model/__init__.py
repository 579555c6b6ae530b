"""
Canonical data model.

Assessment/Finding (what a document says), Annotation/AnnotationStore
(what the reviewer changed), and the severity/status vocabularies.
"""

from __future__ import annotations

from stig_checklist.model.mapping import SeverityMap, StatusMap
from stig_checklist.model.assessment import Assessment, Finding
from stig_checklist.model.annotations import Annotation, AnnotationStore

__all__ = [
    "SeverityMap",
    "StatusMap",
    "Assessment",
    "Finding",
    "Annotation",
    "AnnotationStore",
]
