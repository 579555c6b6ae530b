"""
STIG Checklist XML Utility Functions.

Shared helpers for walking attributed trees produced by ``XmlTree``.
"""

from __future__ import annotations
import re
from typing import Any, Dict, List, Optional

from stig_checklist.xml.schema import Sch


class XmlUtils:
    """
    Shared attributed-tree utilities.

    Provides:
    - Array coercion for fields the codec collapses to a scalar
    - Text extraction from string / ``#text`` / mixed nodes
    - Path lookup and recursive key search
    - Embedded-markup detection for double-encoded descriptions

    Thread-safe: Yes (stateless utility class)
    """

    # "<" followed by a tag name and a closing ">" before the next "<"
    TAG_OPEN = re.compile(r"<[A-Za-z_][\w.:-]*(?:\s[^<>]*)?/?>")

    @staticmethod
    def as_list(value: Any) -> List[Any]:
        """
        Coerce a possibly-collapsed field to a list.

        Example:
            >>> XmlUtils.as_list({"@_id": "V-1"})
            [{'@_id': 'V-1'}]
            >>> XmlUtils.as_list(None)
            []
        """
        if value is None:
            return []
        if isinstance(value, list):
            return value
        return [value]

    @staticmethod
    def as_dict(value: Any) -> Dict[str, Any]:
        """Coerce a node to a dict; bare text becomes ``{"#text": text}``."""
        if isinstance(value, dict):
            return value
        if value is None or value == "":
            return {}
        return {Sch.TEXT: str(value)}

    @staticmethod
    def child(node: Any, key: str) -> Any:
        """Child ``key`` of ``node``, or None if ``node`` has no children."""
        if isinstance(node, dict):
            return node.get(key)
        return None

    @staticmethod
    def dig(node: Any, *keys: str) -> Any:
        """
        Follow a chain of child keys, returning None as soon as one is missing.

        A list along the way is narrowed to its first element.
        """
        for key in keys:
            if isinstance(node, list):
                node = node[0] if node else None
            node = XmlUtils.child(node, key)
            if node is None:
                return None
        return node

    @staticmethod
    def text_of(value: Any, default: str = "") -> str:
        """
        Text content of a node.

        Strings are returned as-is; dicts yield their ``#text`` or, for nodes
        holding only child elements, the children's text joined by newlines;
        lists are joined by newlines.

        Example:
            >>> XmlUtils.text_of({"@_date": "2024-01-01", "#text": "accepted"})
            'accepted'
        """
        if value is None:
            return default
        if isinstance(value, str):
            return value
        if isinstance(value, list):
            parts = [XmlUtils.text_of(item) for item in value]
            joined = "\n".join(p for p in parts if p)
            return joined or default
        if isinstance(value, dict):
            if Sch.TEXT in value:
                return str(value[Sch.TEXT])
            parts = [
                XmlUtils.text_of(val)
                for key, val in value.items()
                if not Sch.is_attr(key)
            ]
            joined = "\n".join(p for p in parts if p)
            return joined or default
        return str(value)

    @staticmethod
    def attr_of(node: Any, name: str, default: str = "") -> str:
        """Attribute ``name`` of ``node`` as a string."""
        if isinstance(node, dict):
            value = node.get(Sch.attr(name))
            if value is not None:
                return str(value)
        return default

    @staticmethod
    def find_key(node: Any, key: str) -> Optional[Any]:
        """Depth-first search for the first occurrence of ``key``."""
        if isinstance(node, list):
            for item in node:
                found = XmlUtils.find_key(item, key)
                if found is not None:
                    return found
            return None
        if not isinstance(node, dict):
            return None
        if key in node:
            return node[key]
        for name, value in node.items():
            if Sch.is_attr(name) or name == Sch.TEXT:
                continue
            found = XmlUtils.find_key(value, key)
            if found is not None:
                return found
        return None

    @staticmethod
    def looks_like_xml(text: Any) -> bool:
        """True if ``text`` is a string containing an element start tag."""
        return isinstance(text, str) and XmlUtils.TAG_OPEN.search(text) is not None
