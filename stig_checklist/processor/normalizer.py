"""Normalizer: XCCDF benchmark or CKL checklist -> canonical ``Assessment``.

Both input shapes arrive as attributed trees from ``XmlTree``. The
normalizer undoes the codec's single-child collapse, folds CKL STIG_DATA
pairs, resolves the polymorphic rule description, and maps every severity
and status into the canonical enums.

The conversion is pure and all-or-nothing: it returns a complete
``Assessment`` or raises.
"""

from __future__ import annotations

import hashlib
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from stig_checklist.core.config import Cfg
from stig_checklist.core.logging import LOG
from stig_checklist.exceptions import (
    IncompleteDocument,
    InternalInconsistency,
    MalformedDocument,
    STIGError,
    UnrecognizedDocumentShape,
)
from stig_checklist.model.assessment import Assessment, Finding
from stig_checklist.xml.schema import Sch
from stig_checklist.xml.tree import Tree, XmlTree
from stig_checklist.xml.utils import XmlUtils


class Normalizer:
    """Raw XCCDF/CKL tree -> ``Assessment``.

    Thread-safe: Yes (holds no state between calls)
    """

    BENCHMARK_DATE = re.compile(r"Benchmark Date:\s*(\d{1,2}\s+[A-Za-z]{3,9}\s+\d{4})")
    DATE_FORMATS = ("%d %b %Y", "%d %B %Y", "%m/%d/%Y", "%Y%m%d")
    # Descriptions whose prose carries a bare & or < do not parse as XML
    LOOSE_DISCUSSION = re.compile(r"<VulnDiscussion\b[^>]*>(.*?)</VulnDiscussion>", re.DOTALL)

    # ------------------------------------------------------------------ entry
    def load(self, path: Union[str, Path]) -> Assessment:
        """Read and normalize a benchmark or checklist file."""
        from stig_checklist.io.file_ops import FO

        text = FO.read(path)
        return self.normalize_text(text, source_file=Path(path).name)

    def normalize_text(self, text: str, *, source_file: str = "") -> Assessment:
        """Parse XML text and normalize it.

        Raises:
            MalformedDocument: If the text is not well-formed XML
        """
        tree = XmlTree.loads(text)
        return self.normalize(tree, source_file=source_file)

    def normalize(self, tree: Tree, *, source_file: str = "") -> Assessment:
        """Normalize a parsed tree.

        Raises:
            UnrecognizedDocumentShape: Root is neither Benchmark nor CHECKLIST
            IncompleteDocument: A required element is missing
            InternalInconsistency: The normalizer failed on a recognized document
        """
        root_name, node = self._root(tree)
        LOG.ctx(op="normalize", root=root_name, file=source_file or "-")
        try:
            if root_name == Sch.ROOT:
                assessment = self._from_ckl(node)
            elif root_name == Sch.BENCHMARK:
                assessment = self._from_xccdf(node)
            else:
                raise UnrecognizedDocumentShape(
                    f"Unsupported document root <{root_name}>; expected <{Sch.BENCHMARK}> or <{Sch.ROOT}>",
                    {"root": root_name},
                )

            assessment.source_file = source_file
            self._finalize_ids(assessment.findings)

            if len(assessment.findings) > Cfg.MAX_VULNS:
                LOG.w(f"Large checklist: {len(assessment.findings)} findings")
            LOG.i(f"Normalized {assessment.source_format.upper()} '{assessment.title}' "
                  f"with {len(assessment.findings)} finding(s)")
            return assessment
        except STIGError:
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            LOG.c(f"Normalizer failed on a recognized document: {exc}", exc=True)
            raise InternalInconsistency(
                f"Normalizer failed on a recognized <{root_name}> document: {exc}",
                {"root": root_name},
            ) from exc
        finally:
            LOG.clear()

    @staticmethod
    def _root(tree: Any):
        if not isinstance(tree, dict):
            raise UnrecognizedDocumentShape("Document tree is not an element mapping")
        # Processing-instruction keys ("?xml") from other codecs are not roots
        roots = [key for key in tree if not key.startswith("?")]
        if len(roots) != 1:
            raise UnrecognizedDocumentShape(
                f"Expected exactly one root element, found {len(roots)}",
                {"roots": ", ".join(roots[:5])},
            )
        return roots[0], tree[roots[0]]

    # ------------------------------------------------------------------ xccdf
    def _from_xccdf(self, bench: Any) -> Assessment:
        bench = XmlUtils.as_dict(bench)
        if Sch.XCCDF_GROUP not in bench:
            raise IncompleteDocument(f"{Sch.BENCHMARK}.{Sch.XCCDF_GROUP}")

        status = self._first(bench.get(Sch.XCCDF_STATUS))
        findings = [self._finding_from_group(g) for g in self._collect_groups(bench)]

        return Assessment(
            title=XmlUtils.text_of(self._first(bench.get(Sch.XCCDF_TITLE))),
            description=XmlUtils.text_of(self._first(bench.get(Sch.XCCDF_DESCRIPTION))),
            version=self._benchmark_version(bench),
            release_info=XmlUtils.text_of(status),
            release_date=self.iso_date(XmlUtils.attr_of(status, "date")),
            source=self._reference_source(bench.get(Sch.XCCDF_REFERENCE)),
            benchmark_id=XmlUtils.attr_of(bench, "id"),
            findings=findings,
            source_format="xccdf",
        )

    def _collect_groups(self, node: Any) -> List[Dict[str, Any]]:
        """Groups in document order, nested groups flattened.

        A group holding nested groups but no Rule is a container only.
        """
        groups: List[Dict[str, Any]] = []
        for group in XmlUtils.as_list(XmlUtils.child(node, Sch.XCCDF_GROUP)):
            group = XmlUtils.as_dict(group)
            if Sch.XCCDF_GROUP in group:
                if Sch.XCCDF_RULE in group:
                    groups.append(group)
                groups.extend(self._collect_groups(group))
            else:
                groups.append(group)
        return groups

    def _finding_from_group(self, group: Dict[str, Any]) -> Finding:
        group_id = XmlUtils.attr_of(group, "id")
        rules = XmlUtils.as_list(group.get(Sch.XCCDF_RULE))
        if len(rules) > 1:
            LOG.w(f"Group {group_id} has {len(rules)} rules; using the first")
        rule = XmlUtils.as_dict(rules[0]) if rules else {}
        if not rules:
            LOG.d(f"Group {group_id} has no Rule")

        return Finding(
            id=group_id,
            group_title=XmlUtils.text_of(self._first(group.get(Sch.XCCDF_TITLE))),
            rule_id=XmlUtils.attr_of(rule, "id"),
            rule_version=XmlUtils.text_of(self._first(rule.get(Sch.XCCDF_VERSION))),
            rule_title=XmlUtils.text_of(self._first(rule.get(Sch.XCCDF_TITLE))),
            severity=XmlUtils.attr_of(rule, "severity"),
            vulnerability_discussion=self.extract_discussion(rule.get(Sch.XCCDF_DESCRIPTION)),
            check_content=self._check_content(rule.get(Sch.XCCDF_CHECK)),
            fix_text=XmlUtils.text_of(self._first(rule.get(Sch.XCCDF_FIXTEXT))),
            status=XmlUtils.text_of(group.get("status")),
            finding_details=XmlUtils.text_of(group.get("findingDetails")),
            comments=XmlUtils.text_of(group.get("comments")),
            cci_refs=self._cci_refs(rule.get(Sch.XCCDF_IDENT)),
        )

    def _benchmark_version(self, bench: Dict[str, Any]) -> str:
        plain = XmlUtils.as_list(bench.get(Sch.XCCDF_PLAIN_TEXT))
        for item in plain:
            if XmlUtils.attr_of(item, "id") == "release-info":
                return XmlUtils.text_of(item)
        if plain:
            return XmlUtils.text_of(plain[0])
        return XmlUtils.text_of(self._first(bench.get(Sch.XCCDF_VERSION)))

    @staticmethod
    def _reference_source(reference: Any) -> str:
        reference = Normalizer._first(reference)
        # Dublin Core children: <dc:publisher>, <dc:source>
        source = XmlUtils.child(reference, "source")
        if source is not None:
            return XmlUtils.text_of(source)
        return XmlUtils.text_of(reference)

    @staticmethod
    def _check_content(check: Any) -> str:
        for item in XmlUtils.as_list(check):
            content = XmlUtils.child(item, Sch.XCCDF_CHECK_CONTENT)
            if content is not None:
                return XmlUtils.text_of(content)
        return ""

    @staticmethod
    def _cci_refs(idents: Any) -> List[str]:
        refs: List[str] = []
        for ident in XmlUtils.as_list(idents):
            text = XmlUtils.text_of(ident).strip()
            if not text:
                continue
            system = XmlUtils.attr_of(ident, "system").lower()
            if "cci" in system or text.upper().startswith("CCI-"):
                refs.append(text)
        return refs

    @staticmethod
    def extract_discussion(description: Any) -> str:
        """
        Vulnerability discussion from a Rule description.

        Resolution order:
            1. plain string, used directly (unless it carries embedded markup)
            2. object with a ``VulnDiscussion`` child
            3. object with only text
            4. empty string

        A string containing markup is re-parsed and its ``VulnDiscussion``
        element used. Markup that does not parse is searched for a
        ``VulnDiscussion`` element directly. Failing both, the string itself
        is the discussion.

        Example:
            >>> Normalizer.extract_discussion("<VulnDiscussion>x</VulnDiscussion>")
            'x'
            >>> Normalizer.extract_discussion({"VulnDiscussion": "x"})
            'x'
        """
        if isinstance(description, list):
            description = description[0] if description else None

        if description is None:
            return ""

        if isinstance(description, str):
            embedded = Normalizer._embedded_discussion(description)
            return description if embedded is None else embedded

        if isinstance(description, dict):
            if Sch.VULN_DISCUSSION in description:
                return XmlUtils.text_of(description[Sch.VULN_DISCUSSION])
            if Sch.TEXT in description:
                return Normalizer.extract_discussion(str(description[Sch.TEXT]))
            return ""

        return str(description)

    @staticmethod
    def _embedded_discussion(text: str) -> Optional[str]:
        if not XmlUtils.looks_like_xml(text):
            return None
        try:
            # Descriptions hold sibling elements, so give them a common parent
            fragment = XmlTree.loads(f"<description>{text}</description>")
        except MalformedDocument as exc:
            match = Normalizer.LOOSE_DISCUSSION.search(text)
            if match is None:
                LOG.d(f"Description markup did not parse, keeping raw text: {exc.reason}")
                return None
            LOG.d(f"Description markup did not parse, matched VulnDiscussion directly: {exc.reason}")
            return match.group(1).strip()
        found = XmlUtils.find_key(fragment, Sch.VULN_DISCUSSION)
        if found is None:
            return None
        return XmlUtils.text_of(found)

    # -------------------------------------------------------------------- ckl
    def _from_ckl(self, checklist: Any) -> Assessment:
        checklist = XmlUtils.as_dict(checklist)
        if Sch.STIGS not in checklist:
            raise IncompleteDocument(f"{Sch.ROOT}.{Sch.STIGS}")

        istigs = XmlUtils.as_list(XmlUtils.dig(checklist, Sch.STIGS, Sch.ISTIG))
        if not istigs:
            raise IncompleteDocument(f"{Sch.ROOT}.{Sch.STIGS}.{Sch.ISTIG}")
        if len(istigs) > 1:
            LOG.w(f"Checklist holds {len(istigs)} STIGs; only the first is loaded")
        istig = XmlUtils.as_dict(istigs[0])

        info = self._stig_info(istig.get(Sch.STIG_INFO))
        findings = [self._finding_from_vuln(v) for v in XmlUtils.as_list(istig.get(Sch.VULN_ELEM))]
        release_info = info.get("releaseinfo", "")

        return Assessment(
            title=info.get("title"),
            description=info.get("description"),
            version=info.get("version"),
            release_info=release_info,
            release_date=self.release_date(release_info),
            source=info.get("source"),
            benchmark_id=info.get("stigid"),
            findings=findings,
            asset=self._asset(checklist.get("ASSET")),
            source_format="ckl",
        )

    @staticmethod
    def _stig_info(node: Any) -> Dict[str, str]:
        """STIG_INFO as lower-case name -> value, from SI_DATA pairs or direct children."""
        node = XmlUtils.as_dict(node)
        values: Dict[str, str] = {}
        for pair in XmlUtils.as_list(node.get(Sch.SI_DATA)):
            name = XmlUtils.text_of(XmlUtils.child(pair, Sch.SID_NAME)).strip()
            if name:
                values[name.lower()] = XmlUtils.text_of(XmlUtils.child(pair, Sch.SID_DATA))
        for key, name in Sch.STIG_LEGACY.items():
            if key in node and name not in values:
                values[name] = XmlUtils.text_of(node[key])
        return values

    @staticmethod
    def _asset(node: Any) -> Dict[str, str]:
        node = XmlUtils.as_dict(node)
        return {
            key: XmlUtils.text_of(value)
            for key, value in node.items()
            if not Sch.is_attr(key) and key != Sch.TEXT
        }

    @staticmethod
    def _finding_from_vuln(vuln: Any) -> Finding:
        vuln = XmlUtils.as_dict(vuln)

        data: Dict[str, str] = {}
        cci_refs: List[str] = []
        for pair in XmlUtils.as_list(vuln.get(Sch.STIG_DATA)):
            name = XmlUtils.text_of(XmlUtils.child(pair, Sch.VULN_ATTRIBUTE)).strip()
            if not name:
                continue
            value = XmlUtils.text_of(XmlUtils.child(pair, Sch.ATTRIBUTE_DATA))
            if name == Sch.CCI_REF and value:
                cci_refs.append(value)
            data[name] = value

        severity = XmlUtils.text_of(vuln.get("SEVERITY")) or data.get("Severity", "")
        status = XmlUtils.text_of(vuln.get("STATUS")) or XmlUtils.attr_of(vuln, "status")

        return Finding(
            id=data.get("Vuln_Num", ""),
            group_title=data.get("Group_Title", ""),
            rule_id=data.get("Rule_ID", ""),
            rule_version=data.get("Rule_Ver", ""),
            rule_title=data.get("Rule_Title", ""),
            severity=severity,
            vulnerability_discussion=data.get("Vuln_Discuss", ""),
            check_content=data.get("Check_Content", ""),
            fix_text=data.get("Fix_Text", ""),
            status=status,
            finding_details=XmlUtils.text_of(vuln.get("FINDING_DETAILS")),
            comments=XmlUtils.text_of(vuln.get("COMMENTS")),
            cci_refs=cci_refs,
        )

    # ---------------------------------------------------------------- helpers
    @staticmethod
    def _first(value: Any) -> Any:
        items = XmlUtils.as_list(value)
        return items[0] if items else None

    @staticmethod
    def synthetic_id(finding: Finding) -> str:
        """Stable id for a finding without one, derived from its rule."""
        digest = hashlib.sha1(f"{finding.rule_id}|{finding.rule_title}".encode("utf-8")).hexdigest()
        return f"V-{digest[:8]}"

    def _finalize_ids(self, findings: List[Finding]) -> None:
        """Fill missing ids and rename duplicates so every id is unique."""
        used = set()
        counters: Dict[str, int] = {}
        for finding in findings:
            finding.id = (finding.id or "").strip()
            if not finding.id:
                finding.id = self.synthetic_id(finding)
                LOG.w(f"Finding without id (rule {finding.rule_id or '?'}); assigned {finding.id}")

            if finding.id in used:
                base = finding.id
                n = counters.get(base, 1)
                candidate = base
                while candidate in used:
                    n += 1
                    candidate = f"{base}_{n}"
                counters[base] = n
                LOG.w(f"Duplicate finding id {base}; renamed to {candidate}")
                finding.id = candidate
            used.add(finding.id)

    @classmethod
    def iso_date(cls, value: str) -> str:
        """ISO ``YYYY-MM-DD`` form of a date string, or "" if it cannot be read."""
        value = (value or "").strip()
        if not value:
            return ""
        try:
            return date.fromisoformat(value[:10]).isoformat()
        except ValueError:
            pass
        for fmt in cls.DATE_FORMATS:
            try:
                return datetime.strptime(value, fmt).date().isoformat()
            except ValueError:
                continue
        LOG.d(f"Unreadable date: {value!r}")
        return ""

    @classmethod
    def release_date(cls, release_info: str) -> str:
        """Date from a ``Release: N Benchmark Date: DD Mon YYYY`` string."""
        match = cls.BENCHMARK_DATE.search(release_info or "")
        return cls.iso_date(match.group(1)) if match else ""
