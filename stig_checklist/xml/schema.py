"""
STIG Checklist XML Schema Definitions.

Defines XML namespaces, element names, the attributed-tree key convention,
and the fixed CKL output skeleton.

This module provides:
- Namespace constants written on the CHECKLIST root
- Element name constants for CHECKLIST, ASSET, STIG_INFO, VULN sections
- The fixed field orders used when projecting a checklist
- Default values for asset and STIG_INFO fields
- Namespace resolution and tag manipulation utilities
"""

from __future__ import annotations
from typing import Dict, Tuple



class Sch:
    """
    XML schema definitions for STIG/CKL processing.

    Tree convention (used in both the parse and serialize directions):
    attribute names are keyed ``ATTR + name`` and element text is held
    under ``TEXT``. Element-name keys never start with either marker.

    Thread-safe: Yes (immutable class constants)
    """

    # Attributed-tree key convention
    ATTR = "@_"
    TEXT = "#text"

    # Document roots
    ROOT = "CHECKLIST"
    BENCHMARK = "Benchmark"

    # Namespaces recognized when naming prefixed attributes
    NS: Dict[str, str] = {
        "xsi": "http://www.w3.org/2001/XMLSchema-instance",
        "dsig": "http://www.w3.org/2000/09/xmldsig#",
        "xccdf": "http://checklists.nist.gov/xccdf/1.1",
        "xccdf12": "http://checklists.nist.gov/xccdf/1.2",
        "dc": "http://purl.org/dc/elements/1.1/",
        "xhtml": "http://www.w3.org/1999/xhtml",
        "xml": "http://www.w3.org/XML/1998/namespace",
    }

    # Attributes advertised on every produced CHECKLIST root, in order
    ROOT_ATTRS: Tuple[Tuple[str, str], ...] = (
        ("xmlns:xsi", "http://www.w3.org/2001/XMLSchema-instance"),
        ("xmlns:dsig", "http://www.w3.org/2000/09/xmldsig#"),
        ("xmlns", "http://checklists.nist.gov/xccdf/1.1"),
        ("xsi:schemaLocation", "http://checklists.nist.gov/xccdf/1.1 xccdf_checklist.1.1.xsd"),
    )
    ISTIG_VERSION = "1.0"

    # Asset metadata elements (in ASSET section)
    ASSET: Tuple[str, ...] = (
        "ROLE",
        "ASSET_TYPE",
        "MARKING",
        "HOST_NAME",
        "HOST_IP",
        "HOST_MAC",
        "HOST_FQDN",
        "TARGET_COMMENT",
        "TECH_AREA",
        "TARGET_KEY",
        "WEB_OR_DATABASE",
        "WEB_DB_SITE",
        "WEB_DB_INSTANCE",
    )

    # STIG metadata names (SID_NAME values in STIG_INFO)
    STIG: Tuple[str, ...] = (
        "version",
        "classification",
        "customname",
        "stigid",
        "description",
        "filename",
        "releaseinfo",
        "title",
        "uuid",
        "notice",
        "source",
    )

    # Upper-case STIG_INFO children written by older exporters
    STIG_LEGACY: Dict[str, str] = {
        "TITLE": "title",
        "VERSION": "version",
        "RELEASE_INFO": "releaseinfo",
        "SOURCE": "source",
        "STIG_ID": "stigid",
        "DESCRIPTION": "description",
        "FILENAME": "filename",
        "CLASSIFICATION": "classification",
        "NOTICE": "notice",
        "UUID": "uuid",
        "STIG_UUID": "uuid",
    }

    # STIG_DATA attributes emitted per VULN, in this order
    VULN: Tuple[str, ...] = (
        "Vuln_Num",
        "Group_Title",
        "Rule_ID",
        "Rule_Ver",
        "Rule_Title",
        "Vuln_Discuss",
        "Check_Content",
        "Fix_Text",
    )

    # Reviewer / severity elements following STIG_DATA in each VULN
    STATUS: Tuple[str, ...] = (
        "STATUS",
        "FINDING_DETAILS",
        "COMMENTS",
        "SEVERITY",
        "SEVERITY_OVERRIDE",
        "SEVERITY_JUSTIFICATION",
    )

    # CKL element names
    STIGS = "STIGS"
    ISTIG = "iSTIG"
    STIG_INFO = "STIG_INFO"
    VULN_ELEM = "VULN"
    STIG_DATA = "STIG_DATA"
    VULN_ATTRIBUTE = "VULN_ATTRIBUTE"
    ATTRIBUTE_DATA = "ATTRIBUTE_DATA"
    SI_DATA = "SI_DATA"
    SID_NAME = "SID_NAME"
    SID_DATA = "SID_DATA"
    CCI_REF = "CCI_REF"

    # XCCDF element names
    XCCDF_GROUP = "Group"
    XCCDF_RULE = "Rule"
    XCCDF_TITLE = "title"
    XCCDF_DESCRIPTION = "description"
    XCCDF_VERSION = "version"
    XCCDF_PLAIN_TEXT = "plain-text"
    XCCDF_STATUS = "status"
    XCCDF_REFERENCE = "reference"
    XCCDF_FIXTEXT = "fixtext"
    XCCDF_CHECK = "check"
    XCCDF_CHECK_CONTENT = "check-content"
    XCCDF_IDENT = "ident"
    VULN_DISCUSSION = "VulnDiscussion"

    # Default values for ASSET and STIG_INFO fields
    DEFS: Dict[str, str] = {
        "ROLE": "None",
        "ASSET_TYPE": "Computing",
        "MARKING": "CUI",
        "WEB_OR_DATABASE": "false",
        "classification": "UNCLASSIFIED",
        "customname": "",
        "notice": "terms-of-use",
    }

    @staticmethod
    def attr(name: str) -> str:
        """
        Tree key for an attribute name.

        Example:
            >>> Sch.attr("id")
            '@_id'
        """
        return f"{Sch.ATTR}{name}"

    @staticmethod
    def is_attr(key: str) -> bool:
        return key.startswith(Sch.ATTR)

    @staticmethod
    def qualify(tag: str) -> str:
        """
        Render an ElementTree ``{uri}local`` name for a tree key.

        Elements lose their namespace entirely. Attributes in a known
        namespace keep its prefix (``xsi:schemaLocation``); attributes in an
        unknown namespace lose it.

        Example:
            >>> Sch.qualify("{http://www.w3.org/2001/XMLSchema-instance}schemaLocation")
            'xsi:schemaLocation'
        """
        if "}" not in tag:
            return tag
        uri, local = tag[1:].split("}", 1)
        for prefix, known in Sch.NS.items():
            if known == uri and prefix in ("xsi", "dsig", "xml"):
                return f"{prefix}:{local}"
        return local

    @staticmethod
    def strip_ns(tag: str) -> str:
        """
        Remove namespace prefix from tag.

        Example:
            >>> Sch.strip_ns("{http://checklists.nist.gov/xccdf/1.2}Rule")
            'Rule'
        """
        if '}' in tag:
            return tag.split('}', 1)[1]
        return tag
