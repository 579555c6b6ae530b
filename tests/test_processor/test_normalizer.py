"""
Tests for the Normalizer (XCCDF/CKL -> Assessment).

Tests cover:
- XCCDF metadata and finding extraction
- CKL STIG_DATA folding, STIG_INFO variants and ASSET capture
- Single-element collapse (one Group, one VULN)
- Description polymorphism
- Missing and duplicate ids
- Malformed, unrecognized and incomplete documents
"""

import logging
import unittest

from stig_checklist.core.constants import Severity, Status
from stig_checklist.core.logging import LOG
from stig_checklist.exceptions import (
    IncompleteDocument,
    MalformedDocument,
    ParseError,
    UnrecognizedDocumentShape,
)
from stig_checklist.processor.normalizer import Normalizer
from tests.samples import (
    CKL_LEGACY_INFO,
    CKL_NO_VULNS,
    CKL_SAMPLE,
    XCCDF_SAMPLE,
    XCCDF_SINGLE_GROUP,
    xccdf_document,
    xccdf_group,
)


class TestXccdf(unittest.TestCase):
    """XCCDF benchmark normalization."""

    @classmethod
    def setUpClass(cls):
        cls.assessment = Normalizer().normalize_text(XCCDF_SAMPLE, source_file="bench.xml")

    def test_metadata(self):
        a = self.assessment
        self.assertEqual(a.title, "Test Operating System STIG")
        self.assertEqual(a.description, "Sample benchmark for testing")
        self.assertEqual(a.version, "Release: 3 Benchmark Date: 15 Jan 2024")
        self.assertEqual(a.release_info, "accepted")
        self.assertEqual(a.release_date, "2024-01-15")
        self.assertEqual(a.source, "STIG.DOD.MIL")
        self.assertEqual(a.benchmark_id, "Test_OS_STIG")
        self.assertEqual(a.source_format, "xccdf")
        self.assertEqual(a.source_file, "bench.xml")

    def test_findings_in_document_order(self):
        self.assertEqual(self.assessment.ids(), ["V-1001", "V-1002", "V-1003"])

    def test_finding_fields(self):
        f = self.assessment.finding("V-1001")
        self.assertEqual(f.group_title, "SRG-OS-000001-GPOS-00001")
        self.assertEqual(f.rule_id, "SV-1001r1_rule")
        self.assertEqual(f.rule_version, "TOS-00-000010")
        self.assertEqual(f.rule_title, "The operating system must require authentication.")
        self.assertIs(f.severity, Severity.HIGH)
        self.assertEqual(f.check_content, "Verify authentication is required.")
        self.assertEqual(f.fix_text, "Enable authentication.")
        self.assertEqual(f.cci_refs, ["CCI-000764"])

    def test_reviewer_fields_default(self):
        for f in self.assessment.findings:
            self.assertIs(f.status, Status.NOT_REVIEWED)
            self.assertEqual(f.finding_details, "")
            self.assertEqual(f.comments, "")

    def test_embedded_discussion(self):
        self.assertEqual(self.assessment.finding("V-1001").vulnerability_discussion,
                         "Unauthenticated access is dangerous.")
        self.assertEqual(self.assessment.finding("V-1003").vulnerability_discussion,
                         "Users must see the banner.")

    def test_plain_discussion(self):
        self.assertEqual(self.assessment.finding("V-1002").vulnerability_discussion,
                         "Plain discussion text.")

    def test_severities(self):
        self.assertEqual([f.severity for f in self.assessment.findings],
                         [Severity.HIGH, Severity.MEDIUM, Severity.LOW])

    def test_single_group_collapse(self):
        a = Normalizer().normalize_text(XCCDF_SINGLE_GROUP)
        self.assertEqual(len(a.findings), 1)
        self.assertEqual(a.findings[0].id, "V-1")
        self.assertEqual(a.findings[0].vulnerability_discussion, "Only discussion")
        self.assertEqual(a.version, "Release: 1")
        self.assertEqual(a.release_info, "Unknown Release")
        self.assertEqual(a.source, "Unknown Source")

    def test_version_element_fallback(self):
        a = Normalizer().normalize_text(
            '<Benchmark id="B"><version>4</version>' + xccdf_group("V-1", "R") + "</Benchmark>"
        )
        self.assertEqual(a.version, "4")

    def test_reviewer_fields_on_group(self):
        xml = ('<Benchmark id="B"><Group id="V-1"><status>open</status>'
               "<findingDetails>found it</findingDetails><comments>see ticket</comments>"
               '<Rule id="SV-1" severity="II"><title>T</title></Rule></Group></Benchmark>')
        f = Normalizer().normalize_text(xml).findings[0]
        self.assertIs(f.status, Status.OPEN)
        self.assertEqual(f.finding_details, "found it")
        self.assertEqual(f.comments, "see ticket")
        self.assertIs(f.severity, Severity.MEDIUM)

    def test_nested_groups_flattened(self):
        xml = ('<Benchmark id="B"><Group id="G-container">'
               + xccdf_group("V-1", "First") + xccdf_group("V-2", "Second")
               + "</Group>" + xccdf_group("V-3", "Third") + "</Benchmark>")
        self.assertEqual(Normalizer().normalize_text(xml).ids(), ["V-1", "V-2", "V-3"])

    def test_multiple_rules_use_first(self):
        xml = ('<Benchmark id="B"><Group id="V-1">'
               '<Rule id="SV-a" severity="high"><title>A</title></Rule>'
               '<Rule id="SV-b" severity="low"><title>B</title></Rule>'
               "</Group></Benchmark>")
        f = Normalizer().normalize_text(xml).findings[0]
        self.assertEqual(f.rule_id, "SV-a")
        self.assertIs(f.severity, Severity.HIGH)

    def test_unknown_severity(self):
        xml = xccdf_document(xccdf_group("V-1", "R", severity="critical"))
        self.assertIs(Normalizer().normalize_text(xml).findings[0].severity, Severity.UNKNOWN)


class TestDescription(unittest.TestCase):
    """The three description shapes."""

    def test_plain_string(self):
        self.assertEqual(Normalizer.extract_discussion("just text"), "just text")

    def test_object_with_discussion(self):
        self.assertEqual(
            Normalizer.extract_discussion({"VulnDiscussion": "x", "FalsePositives": ""}), "x"
        )

    def test_embedded_markup(self):
        text = "<Vuln><VulnDiscussion>x</VulnDiscussion></Vuln>"
        self.assertEqual(Normalizer.extract_discussion(text), "x")

    def test_text_only_object(self):
        self.assertEqual(Normalizer.extract_discussion({"@_lang": "en", "#text": "y"}), "y")

    def test_empty_shapes(self):
        self.assertEqual(Normalizer.extract_discussion(None), "")
        self.assertEqual(Normalizer.extract_discussion({}), "")
        self.assertEqual(Normalizer.extract_discussion({"@_lang": "en"}), "")

    def test_markup_without_discussion_kept(self):
        text = "<FalsePositives>none</FalsePositives>"
        self.assertEqual(Normalizer.extract_discussion(text), text)

    def test_bare_ampersand_in_markup(self):
        text = "<VulnDiscussion>Audit & accountability</VulnDiscussion><FalsePositives></FalsePositives>"
        self.assertEqual(Normalizer.extract_discussion(text), "Audit & accountability")

    def test_bare_less_than_in_markup(self):
        text = "<VulnDiscussion>\nKeep retries < 5\nper session.\n</VulnDiscussion><Documentable>false</Documentable>"
        self.assertEqual(Normalizer.extract_discussion(text), "Keep retries < 5\nper session.")

    def test_unparseable_markup_without_discussion_kept(self):
        text = "<FalsePositives>a & b</FalsePositives>"
        self.assertEqual(Normalizer.extract_discussion(text), text)

    def test_list_uses_first(self):
        self.assertEqual(Normalizer.extract_discussion(["first", "second"]), "first")

    def test_parsed_object_from_document(self):
        xml = xccdf_document(xccdf_group(
            "V-1", "R", description="<VulnDiscussion>nested</VulnDiscussion><Mitigations/>"
        ))
        self.assertEqual(Normalizer().normalize_text(xml).findings[0].vulnerability_discussion, "nested")

    def test_double_encoded_with_escaped_ampersand(self):
        xml = xccdf_document(xccdf_group(
            "V-1", "R",
            description="&lt;VulnDiscussion&gt;A &amp; B&lt;/VulnDiscussion&gt;&lt;FalsePositives&gt;&lt;/FalsePositives&gt;",
        ))
        self.assertEqual(Normalizer().normalize_text(xml).findings[0].vulnerability_discussion, "A & B")


class TestCkl(unittest.TestCase):
    """CKL checklist normalization."""

    @classmethod
    def setUpClass(cls):
        cls.assessment = Normalizer().normalize_text(CKL_SAMPLE)

    def test_metadata(self):
        a = self.assessment
        self.assertEqual(a.title, "Test CKL STIG")
        self.assertEqual(a.version, "2")
        self.assertEqual(a.benchmark_id, "Test_CKL_STIG")
        self.assertEqual(a.release_info, "Release: 1 Benchmark Date: 01 Jan 2025")
        self.assertEqual(a.release_date, "2025-01-01")
        self.assertEqual(a.source, "STIG.DOD.MIL")
        self.assertEqual(a.description, "")
        self.assertEqual(a.source_format, "ckl")

    def test_asset_captured(self):
        asset = self.assessment.asset
        self.assertEqual(asset["HOST_NAME"], "TEST-SERVER")
        self.assertEqual(asset["ROLE"], "Member Server")
        self.assertEqual(asset["TECH_AREA"], "")

    def test_stig_data_folded(self):
        f = self.assessment.finding("V-2001")
        self.assertEqual(f.group_title, "SRG-APP-000001")
        self.assertEqual(f.rule_id, "SV-2001r1_rule")
        self.assertEqual(f.rule_version, "APP-001")
        self.assertEqual(f.rule_title, "The application must be configured.")
        self.assertEqual(f.vulnerability_discussion, "Misconfiguration is risky.")
        self.assertEqual(f.check_content, "Check the configuration.")
        self.assertEqual(f.fix_text, "Fix the configuration.")
        self.assertEqual(f.cci_refs, ["CCI-000366", "CCI-001199"])

    def test_severity_from_stig_data(self):
        self.assertIs(self.assessment.finding("V-2001").severity, Severity.HIGH)
        self.assertIs(self.assessment.finding("V-2002").severity, Severity.MEDIUM)

    def test_reviewer_fields(self):
        first, second = self.assessment.findings
        self.assertIs(first.status, Status.OPEN)
        self.assertEqual(first.finding_details, "Setting is disabled.")
        self.assertIs(second.status, Status.NOT_A_FINDING)
        self.assertEqual(second.comments, "Verified by hand.")

    def test_missing_pairs_are_empty(self):
        f = self.assessment.finding("V-2002")
        self.assertEqual(f.group_title, "")
        self.assertEqual(f.fix_text, "")

    def test_legacy_stig_info_and_single_vuln(self):
        a = Normalizer().normalize_text(CKL_LEGACY_INFO)
        self.assertEqual(a.title, "Legacy STIG")
        self.assertEqual(a.version, "Release: 7")
        self.assertEqual(a.benchmark_id, "Legacy_STIG")
        self.assertEqual(a.release_info, "accepted")
        self.assertEqual(a.release_date, "")
        self.assertEqual(a.source, "Legacy Source")
        self.assertEqual(a.asset, {"HOST_NAME": "LEGACY-HOST"})
        self.assertEqual(len(a.findings), 1)
        f = a.findings[0]
        self.assertEqual(f.id, "V-3001")
        self.assertIs(f.status, Status.NOT_APPLICABLE)
        self.assertIs(f.severity, Severity.LOW)

    def test_zero_vulns(self):
        a = Normalizer().normalize_text(CKL_NO_VULNS)
        self.assertEqual(a.findings, [])
        self.assertEqual(a.title, "Empty STIG")
        self.assertEqual(a.asset, {})

    def test_last_write_wins(self):
        xml = ("<CHECKLIST><STIGS><iSTIG><VULN>"
               "<STIG_DATA><VULN_ATTRIBUTE>Vuln_Num</VULN_ATTRIBUTE><ATTRIBUTE_DATA>V-1</ATTRIBUTE_DATA></STIG_DATA>"
               "<STIG_DATA><VULN_ATTRIBUTE>Rule_Title</VULN_ATTRIBUTE><ATTRIBUTE_DATA>old</ATTRIBUTE_DATA></STIG_DATA>"
               "<STIG_DATA><VULN_ATTRIBUTE>Rule_Title</VULN_ATTRIBUTE><ATTRIBUTE_DATA>new</ATTRIBUTE_DATA></STIG_DATA>"
               "</VULN></iSTIG></STIGS></CHECKLIST>")
        self.assertEqual(Normalizer().normalize_text(xml).findings[0].rule_title, "new")

    def test_severity_element_preferred(self):
        xml = ("<CHECKLIST><STIGS><iSTIG><VULN>"
               "<STIG_DATA><VULN_ATTRIBUTE>Vuln_Num</VULN_ATTRIBUTE><ATTRIBUTE_DATA>V-1</ATTRIBUTE_DATA></STIG_DATA>"
               "<STIG_DATA><VULN_ATTRIBUTE>Severity</VULN_ATTRIBUTE><ATTRIBUTE_DATA>low</ATTRIBUTE_DATA></STIG_DATA>"
               "<SEVERITY>HIGH</SEVERITY></VULN></iSTIG></STIGS></CHECKLIST>")
        self.assertIs(Normalizer().normalize_text(xml).findings[0].severity, Severity.HIGH)

    def test_fallback_metadata(self):
        a = Normalizer().normalize_text("<CHECKLIST><STIGS><iSTIG></iSTIG></STIGS></CHECKLIST>")
        self.assertEqual(a.title, "Unknown STIG")
        self.assertEqual(a.benchmark_id, "Unknown Benchmark")
        self.assertEqual(a.findings, [])


class TestIds(unittest.TestCase):
    """Synthetic and duplicate ids."""

    def test_synthetic_id_is_deterministic(self):
        xml = xccdf_document(xccdf_group("", "No Id Rule", rule_id="SV-9"))
        first = Normalizer().normalize_text(xml).findings[0].id
        second = Normalizer().normalize_text(xml).findings[0].id
        self.assertEqual(first, second)
        self.assertRegex(first, r"^V-[0-9a-f]{8}$")

    def test_synthetic_id_depends_on_rule(self):
        a = Normalizer().normalize_text(xccdf_document(xccdf_group("", "One", rule_id="SV-1")))
        b = Normalizer().normalize_text(xccdf_document(xccdf_group("", "Two", rule_id="SV-1")))
        self.assertNotEqual(a.findings[0].id, b.findings[0].id)

    def test_duplicates_renamed(self):
        xml = xccdf_document(
            xccdf_group("V-1", "A"), xccdf_group("V-1", "B"),
            xccdf_group("V-1_2", "C"), xccdf_group("V-1", "D"),
        )
        ids = Normalizer().normalize_text(xml).ids()
        self.assertEqual(len(set(ids)), 4)
        self.assertEqual(ids[:2], ["V-1", "V-1_2"])

    def test_identical_missing_ids_renamed(self):
        group = xccdf_group("", "Same", rule_id="SV-1")
        ids = Normalizer().normalize_text(xccdf_document(group, group)).ids()
        self.assertEqual(ids[1], ids[0] + "_2")


def test_warnings_logged(log_capture):
    group = xccdf_group("", "Same", rule_id="SV-1")
    Normalizer().normalize_text(xccdf_document(group, group))
    warnings = log_capture.messages(logging.WARNING)
    assert any("assigned V-" in m for m in warnings)
    assert any("Duplicate finding id" in m for m in warnings)


def test_info_logged_with_context(log_capture):
    Normalizer().normalize_text(CKL_SAMPLE, source_file="sample.ckl")
    infos = log_capture.messages(logging.INFO)
    assert any("Normalized CKL 'Test CKL STIG' with 2 finding(s)" in m for m in infos)
    assert any("file=sample.ckl" in m for m in infos)
    assert LOG._context_str() == ""


class TestErrors(unittest.TestCase):
    """Input-document errors."""

    def test_malformed(self):
        with self.assertRaises(MalformedDocument):
            Normalizer().normalize_text("<Benchmark><Group></Benchmark>")

    def test_unrecognized_root(self):
        with self.assertRaises(UnrecognizedDocumentShape) as ctx:
            Normalizer().normalize_text("<html><body/></html>")
        self.assertIn("html", str(ctx.exception))

    def test_unrecognized_tree(self):
        with self.assertRaises(UnrecognizedDocumentShape):
            Normalizer().normalize("not a tree")
        with self.assertRaises(UnrecognizedDocumentShape):
            Normalizer().normalize({"a": {}, "b": {}})

    def test_processing_instruction_keys_ignored(self):
        tree = {"?xml": {"@_version": "1.0"}, "CHECKLIST": {"STIGS": {"iSTIG": ""}}}
        self.assertEqual(Normalizer().normalize(tree).findings, [])

    def test_benchmark_without_groups(self):
        with self.assertRaises(IncompleteDocument) as ctx:
            Normalizer().normalize_text('<Benchmark id="B"><title>T</title></Benchmark>')
        self.assertEqual(ctx.exception.path, "Benchmark.Group")

    def test_checklist_without_stigs(self):
        with self.assertRaises(IncompleteDocument) as ctx:
            Normalizer().normalize_text("<CHECKLIST><ASSET/></CHECKLIST>")
        self.assertEqual(ctx.exception.path, "CHECKLIST.STIGS")

    def test_checklist_without_istig(self):
        with self.assertRaises(IncompleteDocument) as ctx:
            Normalizer().normalize_text("<CHECKLIST><STIGS/></CHECKLIST>")
        self.assertEqual(ctx.exception.path, "CHECKLIST.STIGS.iSTIG")

    def test_all_are_parse_errors(self):
        for cls in (MalformedDocument, UnrecognizedDocumentShape, IncompleteDocument):
            self.assertTrue(issubclass(cls, ParseError))


class TestDates(unittest.TestCase):

    def test_iso_date(self):
        self.assertEqual(Normalizer.iso_date("2024-01-15"), "2024-01-15")
        self.assertEqual(Normalizer.iso_date("2024-01-15T00:00:00"), "2024-01-15")
        self.assertEqual(Normalizer.iso_date("15 Jan 2024"), "2024-01-15")
        self.assertEqual(Normalizer.iso_date("not a date"), "")
        self.assertEqual(Normalizer.iso_date(""), "")

    def test_release_date(self):
        self.assertEqual(Normalizer.release_date("Release: 2 Benchmark Date: 26 Jul 2023"), "2023-07-26")
        self.assertEqual(Normalizer.release_date("Release: 2"), "")


if __name__ == "__main__":
    unittest.main()
