"""STIG Checklist - XCCDF benchmark / CKL checklist converter.

Reads a DISA STIG XCCDF benchmark or an existing STIG Viewer checklist,
normalizes it into one format-agnostic assessment model, applies reviewer
annotations, and writes a STIG Viewer compatible CKL file.

Package Structure:
    core/           - Core infrastructure (constants, config, logging, deps)
    xml/            - XML processing (schema, tree codec, escaping, utilities)
    model/          - Assessment, findings, annotations, vocabularies
    processor/      - Normalizer, Projector, statistics
    io/             - File operations (atomic writes, encoding detection)
    ui/             - Command-line interface

Example:
    >>> from stig_checklist import Normalizer, Projector
    >>> assessment = Normalizer().normalize_text(xccdf_text)
    >>> ckl_text = Projector().project(assessment, {"V-1": {"status": "open"}})
"""

from __future__ import annotations

from stig_checklist.core.constants import VERSION, BUILD_DATE, APP_NAME, STIG_VIEWER_VERSION, Severity, Status
from stig_checklist.exceptions import (
    STIGError,
    ValidationError,
    FileError,
    ParseError,
    MalformedDocument,
    UnrecognizedDocumentShape,
    IncompleteDocument,
    InternalInconsistency,
)
from stig_checklist.model import Annotation, AnnotationStore, Assessment, Finding
from stig_checklist.processor import Normalizer, Projector, Stats

__version__ = VERSION
__build_date__ = BUILD_DATE
__app_name__ = APP_NAME
__stig_viewer_version__ = STIG_VIEWER_VERSION

__all__ = [
    "VERSION",
    "BUILD_DATE",
    "APP_NAME",
    "STIG_VIEWER_VERSION",
    "Severity",
    "Status",
    "STIGError",
    "ValidationError",
    "FileError",
    "ParseError",
    "MalformedDocument",
    "UnrecognizedDocumentShape",
    "IncompleteDocument",
    "InternalInconsistency",
    "Annotation",
    "AnnotationStore",
    "Assessment",
    "Finding",
    "Normalizer",
    "Projector",
    "Stats",
]
