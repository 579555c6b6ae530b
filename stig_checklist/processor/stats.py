"""Compliance statistics for an assessment."""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from typing import Any, Dict, Union

from stig_checklist.core.constants import Severity, Status
from stig_checklist.core.logging import LOG
from stig_checklist.exceptions import ValidationError
from stig_checklist.model.annotations import AnnotationStore
from stig_checklist.model.assessment import Assessment
from stig_checklist.model.mapping import SeverityMap

# Display order
SEVERITY_ORDER = (Severity.HIGH, Severity.MEDIUM, Severity.LOW, Severity.UNKNOWN)
STATUS_ORDER = (Status.OPEN, Status.NOT_A_FINDING, Status.NOT_APPLICABLE, Status.NOT_REVIEWED)


class Stats:
    """Status and severity counts with reviewer annotations applied."""

    FORMATS = ("text", "csv", "json")

    @classmethod
    def collect(cls, assessment: Assessment, annotations: Any = None) -> Dict[str, Any]:
        """Raw statistics dict (the ``json`` output)."""
        store = AnnotationStore.coerce(annotations)

        by_status = {s.value: 0 for s in STATUS_ORDER}
        by_severity = {s.value: 0 for s in SEVERITY_ORDER}
        open_by_severity = {s.value: 0 for s in SEVERITY_ORDER}

        for finding in assessment.findings:
            status = store.resolve(finding).status
            by_status[status.value] += 1
            by_severity[finding.severity.value] += 1
            if status is Status.OPEN:
                open_by_severity[finding.severity.value] += 1

        total = len(assessment.findings)
        reviewed = total - by_status[Status.NOT_REVIEWED.value]
        compliant = by_status[Status.NOT_A_FINDING.value]

        return {
            "title": assessment.title,
            "file": assessment.source_file,
            "generated": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
            "total_vulns": total,
            "by_status": by_status,
            "by_severity": by_severity,
            "open_by_severity": open_by_severity,
            "reviewed": reviewed,
            "completion_pct": (reviewed / total * 100) if total else 0,
            "compliant": compliant,
            "compliance_pct": (compliant / reviewed * 100) if reviewed else 0,
        }

    @classmethod
    def generate(
        cls,
        assessment: Assessment,
        annotations: Any = None,
        *,
        output_format: str = "text",
    ) -> Union[str, Dict[str, Any]]:
        """
        Generate compliance statistics.

        Args:
            assessment: Normalized benchmark or checklist
            annotations: Reviewer edits applied before counting
            output_format: 'text', 'json', or 'csv'

        Returns:
            Formatted statistics (string for text/csv, dict for json)
        """
        if output_format not in cls.FORMATS:
            raise ValidationError(f"Unknown stats format: {output_format}",
                                  {"choices": "/".join(cls.FORMATS)})

        LOG.ctx(op="generate_stats", benchmark=assessment.benchmark_id)
        try:
            stats = cls.collect(assessment, annotations)
            LOG.i(f"Statistics for {stats['total_vulns']} finding(s)")
        finally:
            LOG.clear()

        if output_format == "json":
            return stats
        if output_format == "csv":
            return cls._format_csv(stats)
        return cls._format_text(stats)

    @staticmethod
    def _pct(count: int, total: int) -> float:
        return (count / total * 100) if total else 0

    @classmethod
    def _format_text(cls, stats: Dict[str, Any]) -> str:
        total = stats["total_vulns"]
        lines = [
            "=" * 80,
            "STIG Compliance Statistics",
            "=" * 80,
            f"Benchmark: {stats['title']}",
        ]
        if stats["file"]:
            lines.append(f"File: {stats['file']}")
        lines += [
            f"Generated: {stats['generated']}",
            "",
            f"Total Vulnerabilities: {total}",
            f"Reviewed: {stats['reviewed']} ({stats['completion_pct']:.1f}%)",
            f"Compliant: {stats['compliant']} ({stats['compliance_pct']:.1f}% of reviewed)",
            "",
            "Status Breakdown:",
            "-" * 40,
        ]
        for status, count in stats["by_status"].items():
            lines.append(f"  {status:20} {count:6} ({cls._pct(count, total):5.1f}%)")

        lines += ["", "Severity Breakdown:", "-" * 40]
        for severity in SEVERITY_ORDER:
            count = stats["by_severity"][severity.value]
            opened = stats["open_by_severity"][severity.value]
            cat = SeverityMap.CAT.get(severity, "-")
            lines.append(f"  CAT {cat:3} ({severity.value:7}) {count:6}   open {opened:6}")
        lines.append("=" * 80)
        return "\n".join(lines)

    @staticmethod
    def _format_csv(stats: Dict[str, Any]) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(["Metric", "Value"])
        writer.writerow(["Benchmark", stats["title"]])
        writer.writerow(["File", stats["file"]])
        writer.writerow(["Generated", stats["generated"]])
        writer.writerow(["Total Vulnerabilities", stats["total_vulns"]])
        writer.writerow(["Reviewed", stats["reviewed"]])
        writer.writerow(["Completion %", f"{stats['completion_pct']:.1f}"])
        writer.writerow(["Compliant", stats["compliant"]])
        writer.writerow(["Compliance %", f"{stats['compliance_pct']:.1f}"])
        writer.writerow([])
        writer.writerow(["Status", "Count"])
        for status, count in stats["by_status"].items():
            writer.writerow([status, count])
        writer.writerow([])
        writer.writerow(["Severity", "Count", "Open"])
        for severity in SEVERITY_ORDER:
            writer.writerow([severity.value, stats["by_severity"][severity.value],
                             stats["open_by_severity"][severity.value]])
        return buf.getvalue()
