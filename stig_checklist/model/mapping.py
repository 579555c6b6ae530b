"""Severity and status vocabularies.

Source documents use several vocabularies for the same concepts. Everything
entering the canonical model passes through ``SeverityMap.map`` or
``StatusMap.map`` exactly once; nothing downstream compares raw strings.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Tuple

from stig_checklist.core.constants import Severity, Status
from stig_checklist.core.logging import LOG
from stig_checklist.exceptions import InternalInconsistency


class SeverityMap:
    """
    Source severity string -> ``Severity``.

    Accepted, case-insensitively:
    - Roman-numeral CAT codes, exact match: I, II, III
    - Free text containing high / medium / low (first match in that order)

    Anything else maps to ``Severity.UNKNOWN``. The mapping is one-way:
    checklists are written with the canonical code, never the source text.
    """

    ROMAN: Dict[str, Severity] = {
        "i": Severity.HIGH,
        "ii": Severity.MEDIUM,
        "iii": Severity.LOW,
    }

    KEYWORDS: Tuple[Tuple[str, Severity], ...] = (
        ("high", Severity.HIGH),
        ("medium", Severity.MEDIUM),
        ("low", Severity.LOW),
    )

    # CAT label per severity, for reports
    CAT: Dict[Severity, str] = {
        Severity.HIGH: "I",
        Severity.MEDIUM: "II",
        Severity.LOW: "III",
    }

    @classmethod
    def map(cls, raw: Any) -> Severity:
        """
        Example:
            >>> SeverityMap.map("II")
            <Severity.MEDIUM: 'medium'>
            >>> SeverityMap.map("HIGH sev")
            <Severity.HIGH: 'high'>
        """
        if isinstance(raw, Severity):
            return raw
        if raw is None:
            return Severity.UNKNOWN

        key = str(raw).strip().lower()
        if key in cls.ROMAN:
            return cls.ROMAN[key]
        for needle, severity in cls.KEYWORDS:
            if needle in key:
                return severity
        return Severity.UNKNOWN

    @staticmethod
    def to_ckl(severity: Any) -> str:
        """Checklist form of a canonical severity (upper-cased code).

        Raises:
            InternalInconsistency: If ``severity`` is not a ``Severity`` member
        """
        if not isinstance(severity, Severity):
            raise InternalInconsistency(
                "Severity outside the canonical set reached the projector",
                {"severity": repr(severity)},
            )
        return severity.value.upper()


class StatusMap:
    """
    Source status string -> ``Status`` (the DISA vocabulary).

    Two vocabularies are read:
    - legacy:  not applicable | not finding | open | default
    - disa:    Not_Applicable | NotAFinding | Open | Not_Reviewed

    Unlisted strings are matched by substring with precedence
    applicability > not-finding > open > not-reviewed, so
    "not applicable (was open)" is Not_Applicable. Empty input and
    unrecognized text are Not_Reviewed.
    """

    LEGACY_TO_CANONICAL: Dict[str, Status] = {
        "not applicable": Status.NOT_APPLICABLE,
        "not finding": Status.NOT_A_FINDING,
        "open": Status.OPEN,
        "default": Status.NOT_REVIEWED,
    }

    CANONICAL_TO_LEGACY: Dict[Status, str] = {
        canonical: legacy for legacy, canonical in LEGACY_TO_CANONICAL.items()
    }

    DISA_TO_CANONICAL: Dict[str, Status] = {s.value: s for s in Status}

    VOCABULARIES: Dict[str, Dict[str, Status]] = {
        "legacy": LEGACY_TO_CANONICAL,
        "disa": DISA_TO_CANONICAL,
    }

    # Checked in order; first hit wins
    PRECEDENCE: Tuple[Tuple[Tuple[str, ...], Status], ...] = (
        (("not applicable", "notapplicable"), Status.NOT_APPLICABLE),
        (("not a finding", "notafinding", "not finding"), Status.NOT_A_FINDING),
        (("open",), Status.OPEN),
        (("not reviewed", "notreviewed", "default"), Status.NOT_REVIEWED),
    )

    _SEPARATORS = re.compile(r"[\s_\-]+")

    @classmethod
    def map(cls, raw: Any) -> Status:
        """
        Example:
            >>> StatusMap.map("not finding")
            <Status.NOT_A_FINDING: 'NotAFinding'>
            >>> StatusMap.map("not applicable (was open)")
            <Status.NOT_APPLICABLE: 'Not_Applicable'>
        """
        if isinstance(raw, Status):
            return raw
        if raw is None:
            return Status.NOT_REVIEWED

        text = str(raw).strip()
        if not text:
            return Status.NOT_REVIEWED

        if text in cls.DISA_TO_CANONICAL:
            return cls.DISA_TO_CANONICAL[text]

        key = cls._SEPARATORS.sub(" ", text.lower())
        if key in cls.LEGACY_TO_CANONICAL:
            return cls.LEGACY_TO_CANONICAL[key]

        for needles, status in cls.PRECEDENCE:
            if any(needle in key for needle in needles):
                return status

        LOG.w(f"Unrecognized status {text!r}, treating as {Status.NOT_REVIEWED.value}")
        return Status.NOT_REVIEWED

    @classmethod
    def to_legacy(cls, status: Any) -> str:
        """Legacy lowercase label of a status, for display."""
        return cls.CANONICAL_TO_LEGACY[cls.map(status)]
