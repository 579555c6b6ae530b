"""
Conversion pipeline.

Normalizer (XCCDF/CKL -> Assessment), Projector (Assessment -> CKL) and
compliance statistics.
"""

from __future__ import annotations

from stig_checklist.processor.normalizer import Normalizer
from stig_checklist.processor.projector import Projector
from stig_checklist.processor.stats import Stats

__all__ = ["Normalizer", "Projector", "Stats"]
