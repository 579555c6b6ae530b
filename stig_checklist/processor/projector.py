"""Projector: canonical ``Assessment`` + reviewer annotations -> CKL text.

The output skeleton is fixed: CHECKLIST root with its namespace
attributes, one ASSET block, one iSTIG holding STIG_INFO and one VULN per
finding in assessment order. Every text and attribute value is escaped
by the serializer.
"""

from __future__ import annotations

import re
import uuid
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from stig_checklist.core.logging import LOG
from stig_checklist.exceptions import InternalInconsistency
from stig_checklist.model.annotations import Annotation, AnnotationStore
from stig_checklist.model.assessment import Assessment, Finding
from stig_checklist.model.mapping import SeverityMap
from stig_checklist.xml.sanitizer import San
from stig_checklist.xml.schema import Sch
from stig_checklist.xml.tree import Tree, XmlTree

Annotations = Union[AnnotationStore, Mapping[str, Any], None]


class Projector:
    """
    Build CKL documents.

    ``asset`` overrides are applied on top of the assessment's own ASSET
    values and the defaults in ``Sch.DEFS``; ``None`` values are ignored.

    Thread-safe: Yes (overrides are read-only after construction)
    """

    def __init__(self, asset: Optional[Mapping[str, Optional[str]]] = None):
        self.asset = {k: v for k, v in (asset or {}).items() if v is not None}
        unknown = sorted(set(self.asset) - set(Sch.ASSET))
        if unknown:
            LOG.w(f"Ignoring unknown ASSET field(s): {', '.join(unknown)}")

    def project(self, assessment: Assessment, annotations: Annotations = None) -> str:
        """
        Render ``assessment`` as CKL text.

        Raises:
            InternalInconsistency: If the assessment violates a canonical invariant
        """
        LOG.ctx(op="project", benchmark=assessment.benchmark_id)
        try:
            document = self.build(assessment, annotations)
            text = XmlTree.dumps(document, escape=San.xml)
            LOG.i(f"Projected {len(assessment.findings)} finding(s) to CKL")
            return text
        except InternalInconsistency as exc:
            LOG.c(f"Projection aborted: {exc}", exc=True)
            raise
        finally:
            LOG.clear()

    def write(
        self,
        assessment: Assessment,
        target: Union[str, Path],
        annotations: Annotations = None,
    ) -> Path:
        """Project and write atomically to ``target``."""
        from stig_checklist.io.file_ops import FO

        return FO.write_text(target, self.project(assessment, annotations))

    def build(self, assessment: Assessment, annotations: Annotations = None) -> Tree:
        """Document tree for ``assessment`` (unescaped values)."""
        store = AnnotationStore.coerce(annotations)
        self._check_ids(assessment)

        stray = [fid for fid in store if assessment.finding(fid) is None]
        if stray:
            LOG.w(f"{len(stray)} annotation(s) match no finding and are ignored")

        vulns = [self._vuln(f, store.resolve(f)) for f in assessment.findings]

        root: Dict[str, Any] = {Sch.attr(name): value for name, value in Sch.ROOT_ATTRS}
        root["ASSET"] = self._asset(assessment)
        root[Sch.STIGS] = {
            Sch.ISTIG: {
                Sch.attr("version"): Sch.ISTIG_VERSION,
                Sch.STIG_INFO: self._stig_info(assessment),
                Sch.VULN_ELEM: vulns,
            }
        }
        return {Sch.ROOT: root}

    @staticmethod
    def suggest_filename(assessment: Assessment) -> str:
        """
        Output filename derived from the benchmark title.

        Example:
            >>> Projector.suggest_filename(Assessment(title="Windows 10 STIG"))
            'windows_10_stig.ckl'
        """
        return re.sub(r"[^a-z0-9]", "_", assessment.title.lower()) + ".ckl"

    @staticmethod
    def stig_uuid(assessment: Assessment) -> str:
        """Stable uuid for a benchmark id and version."""
        return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{assessment.benchmark_id}:{assessment.version}"))

    # ---------------------------------------------------------------- parts
    @staticmethod
    def _check_ids(assessment: Assessment) -> None:
        missing = [i for i, f in enumerate(assessment.findings) if not f.id]
        if missing:
            raise InternalInconsistency(
                "Finding without id reached the projector", {"index": missing[0]}
            )
        duplicates = assessment.duplicate_ids()
        if duplicates:
            raise InternalInconsistency(
                "Duplicate finding ids reached the projector",
                {"ids": ", ".join(duplicates[:5])},
            )

    def _asset(self, assessment: Assessment) -> Dict[str, str]:
        values = {k: Sch.DEFS.get(k, "") for k in Sch.ASSET}
        values.update({k: v for k, v in assessment.asset.items() if k in values})
        values.update({k: str(v) for k, v in self.asset.items() if k in values})
        return values

    def _stig_info(self, assessment: Assessment) -> Dict[str, List[Dict[str, str]]]:
        release_info = assessment.release_info
        if assessment.release_date and "Benchmark Date" not in release_info:
            try:
                stamp = date.fromisoformat(assessment.release_date).strftime("%d %b %Y")
            except ValueError:
                LOG.w(f"Ignoring unreadable release date {assessment.release_date!r}")
            else:
                release_info = f"{release_info} Benchmark Date: {stamp}"

        values = {
            "version": assessment.version,
            "classification": Sch.DEFS["classification"],
            "customname": Sch.DEFS["customname"],
            "stigid": assessment.benchmark_id,
            "description": assessment.description,
            "filename": assessment.source_file,
            "releaseinfo": release_info,
            "title": assessment.title,
            "uuid": self.stig_uuid(assessment),
            "notice": Sch.DEFS["notice"],
            "source": assessment.source,
        }
        return {
            Sch.SI_DATA: [{Sch.SID_NAME: name, Sch.SID_DATA: values[name]} for name in Sch.STIG]
        }

    @staticmethod
    def _vuln(finding: Finding, effective: Annotation) -> Dict[str, Any]:
        status = effective.status
        content = {
            "Vuln_Num": finding.id,
            "Group_Title": finding.group_title,
            "Rule_ID": finding.rule_id,
            "Rule_Ver": finding.rule_version,
            "Rule_Title": finding.rule_title,
            "Vuln_Discuss": finding.vulnerability_discussion,
            "Check_Content": finding.check_content,
            "Fix_Text": finding.fix_text,
        }
        reviewer = {
            "STATUS": status.value,
            "FINDING_DETAILS": effective.finding_details or "",
            "COMMENTS": effective.comments or "",
            "SEVERITY": SeverityMap.to_ckl(finding.severity),
            "SEVERITY_OVERRIDE": "",
            "SEVERITY_JUSTIFICATION": "",
        }

        vuln: Dict[str, Any] = {Sch.attr("status"): status.value}
        vuln[Sch.STIG_DATA] = [
            {Sch.VULN_ATTRIBUTE: name, Sch.ATTRIBUTE_DATA: content[name]} for name in Sch.VULN
        ]
        vuln.update((name, reviewer[name]) for name in Sch.STATUS)
        return vuln
