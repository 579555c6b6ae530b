"""
Attributed-tree XML codec.

Converts XML text to nested dicts and back using the key convention in
``Sch``: attributes under ``"@_" + name``, element text under ``"#text"``.

Parsing rules:
    - Namespace URIs are dropped from element names.
    - An element with no attributes and no children collapses to its
      (stripped) text, ``""`` when empty.
    - Repeated sibling elements become a list; a single child stays a
      scalar. Callers coerce with ``XmlUtils.as_list``.
    - Attribute values are left as strings.

Example:
    >>> XmlTree.loads('<a id="1"><b>x</b><b>y</b></a>')
    {'a': {'@_id': '1', 'b': ['x', 'y']}}
"""

from __future__ import annotations
import re
from typing import Any, Callable, Dict, List, Optional

from stig_checklist.core.deps import Deps
from stig_checklist.exceptions import MalformedDocument
from stig_checklist.xml.schema import Sch

Tree = Dict[str, Any]

_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


class XmlTree:
    """XML text <-> attributed tree.

    Thread-safe: Yes (stateless utility class)
    """

    PROLOG = '<?xml version="1.0" encoding="UTF-8"?>'

    @classmethod
    def loads(cls, text: str) -> Tree:
        """Parse well-formed XML text into an attributed tree.

        Raises:
            MalformedDocument: If the text is empty or not well-formed
        """
        if text is None or not str(text).strip():
            raise MalformedDocument("document is empty")

        text = str(text).lstrip("\ufeff")
        # Already-decoded text; an encoding declaration would only confuse expat
        text = _DECLARATION.sub("", text, count=1)

        ET, XMLParseError = Deps.get_xml()
        try:
            root = ET.fromstring(text)
        except XMLParseError as exc:
            raise MalformedDocument(str(exc)) from exc
        except ValueError as exc:
            # defusedxml refuses entity declarations and external references
            raise MalformedDocument(str(exc) or type(exc).__name__) from exc

        return {Sch.strip_ns(root.tag): cls._node(root)}

    @classmethod
    def _node(cls, elem) -> Any:
        attrs = {Sch.attr(Sch.qualify(k)): v for k, v in elem.attrib.items()}
        children = list(elem)

        parts = [elem.text] + [child.tail for child in children]
        text = " ".join(p.strip() for p in parts if p and p.strip())

        if not attrs and not children:
            return text

        node: Tree = dict(attrs)
        for child in children:
            key = Sch.strip_ns(child.tag)
            value = cls._node(child)
            if key not in node:
                node[key] = value
            elif isinstance(node[key], list):
                node[key].append(value)
            else:
                node[key] = [node[key], value]

        if text:
            node[Sch.TEXT] = text
        return node

    @classmethod
    def dumps(
        cls,
        tree: Tree,
        escape: Callable[[Any], str],
        *,
        declaration: bool = True,
        indent: str = "  ",
    ) -> str:
        """Serialize an attributed tree to XML text.

        Args:
            tree: Single-key mapping ``{root_name: node}``
            escape: Applied to every text value and attribute value; the
                codec performs no escaping of its own
            declaration: Emit the UTF-8 XML declaration
            indent: Indentation unit for nested elements

        Returns:
            XML document text ending with a newline
        """
        if not isinstance(tree, dict) or len(tree) != 1:
            raise ValueError("Tree must have exactly one root element")

        lines: List[str] = [cls.PROLOG] if declaration else []
        (name, node), = tree.items()
        cls._emit(name, node, 0, lines, escape, indent)
        return "\n".join(lines) + "\n"

    @classmethod
    def _emit(
        cls,
        name: str,
        value: Any,
        depth: int,
        out: List[str],
        escape: Callable[[Any], str],
        indent: str,
    ) -> None:
        pad = indent * depth

        if isinstance(value, list):
            for item in value:
                cls._emit(name, item, depth, out, escape, indent)
            return

        if not isinstance(value, dict):
            out.append(f"{pad}<{name}>{cls._body(value, escape)}</{name}>")
            return

        attrs = "".join(
            f' {key[len(Sch.ATTR):]}="{escape(val)}"'
            for key, val in value.items()
            if Sch.is_attr(key)
        )
        children = [
            (key, val) for key, val in value.items()
            if not Sch.is_attr(key) and key != Sch.TEXT
        ]
        text = cls._body(value.get(Sch.TEXT), escape)

        if not children:
            out.append(f"{pad}<{name}{attrs}>{text}</{name}>")
            return

        out.append(f"{pad}<{name}{attrs}>")
        if text:
            out.append(f"{pad}{indent}{text}")
        for key, val in children:
            cls._emit(key, val, depth + 1, out, escape, indent)
        out.append(f"{pad}</{name}>")

    @staticmethod
    def _body(value: Optional[Any], escape: Callable[[Any], str]) -> str:
        if value is None:
            return ""
        return escape(value)
