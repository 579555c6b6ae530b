"""
Canonical assessment model.

An ``Assessment`` is format-agnostic: the same shape comes out of an XCCDF
benchmark or a CKL checklist. ``severity`` and ``status`` on every
``Finding`` are always enum members, never source strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from stig_checklist.core.constants import Severity, Status
from stig_checklist.model.mapping import SeverityMap, StatusMap


@dataclass
class Finding:
    """
    One checklist item (a Group/Rule pair, or a VULN).

    Content fields are extracted from the source document; ``status``,
    ``finding_details`` and ``comments`` belong to the reviewer.
    """

    id: str
    group_title: str = ""
    rule_id: str = ""
    rule_version: str = ""
    rule_title: str = ""
    severity: Severity = Severity.UNKNOWN
    vulnerability_discussion: str = ""
    check_content: str = ""
    fix_text: str = ""
    status: Status = Status.NOT_REVIEWED
    finding_details: str = ""
    comments: str = ""
    cci_refs: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.severity = SeverityMap.map(self.severity)
        self.status = StatusMap.map(self.status)
        for name in ("group_title", "rule_id", "rule_version", "rule_title",
                     "vulnerability_discussion", "check_content", "fix_text",
                     "finding_details", "comments"):
            if getattr(self, name) is None:
                setattr(self, name, "")

    def as_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["severity"] = self.severity.value
        data["status"] = self.status.value
        data["cci_refs"] = list(self.cci_refs)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Assessment:
    """
    A normalized benchmark or checklist.

    Provenance fields are never None: missing values take the fallbacks in
    ``DEFAULTS``. ``findings`` keeps document order.
    """

    DEFAULTS = {
        "title": "Unknown STIG",
        "description": "",
        "version": "Unknown Version",
        "release_info": "Unknown Release",
        "release_date": "",
        "source": "Unknown Source",
        "benchmark_id": "Unknown Benchmark",
    }

    title: str = DEFAULTS["title"]
    description: str = DEFAULTS["description"]
    version: str = DEFAULTS["version"]
    release_info: str = DEFAULTS["release_info"]
    release_date: str = DEFAULTS["release_date"]
    source: str = DEFAULTS["source"]
    benchmark_id: str = DEFAULTS["benchmark_id"]
    findings: List[Finding] = field(default_factory=list)
    asset: Dict[str, str] = field(default_factory=dict)
    source_format: str = ""
    source_file: str = ""

    def __post_init__(self) -> None:
        for name, fallback in self.DEFAULTS.items():
            value = getattr(self, name)
            if value is None or not str(value).strip():
                setattr(self, name, fallback)
            else:
                setattr(self, name, str(value).strip())

    def __len__(self) -> int:
        return len(self.findings)

    def ids(self) -> List[str]:
        return [f.id for f in self.findings]

    def finding(self, finding_id: str) -> Optional[Finding]:
        for item in self.findings:
            if item.id == finding_id:
                return item
        return None

    def duplicate_ids(self) -> List[str]:
        """Ids occurring more than once, in first-seen order."""
        seen: Dict[str, int] = {}
        for fid in self.ids():
            seen[fid] = seen.get(fid, 0) + 1
        return [fid for fid, count in seen.items() if count > 1]

    def as_dict(self) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in self.DEFAULTS}
        data["findings"] = [f.as_dict() for f in self.findings]
        data["asset"] = dict(self.asset)
        data["source_format"] = self.source_format
        data["source_file"] = self.source_file
        return data
