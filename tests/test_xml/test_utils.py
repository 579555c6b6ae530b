"""
Unit tests for stig_checklist.xml.utils module.

Tests the XmlUtils class including:
- Array coercion of collapsed fields
- Text extraction from strings, text nodes and mixed nodes
- Path lookup and recursive key search
- Embedded markup detection
"""

import unittest

from stig_checklist.xml.utils import XmlUtils


class TestCoercion(unittest.TestCase):

    def test_as_list(self):
        self.assertEqual(XmlUtils.as_list(None), [])
        self.assertEqual(XmlUtils.as_list("x"), ["x"])
        self.assertEqual(XmlUtils.as_list({"a": 1}), [{"a": 1}])
        items = [1, 2]
        self.assertIs(XmlUtils.as_list(items), items)

    def test_as_dict(self):
        self.assertEqual(XmlUtils.as_dict(None), {})
        self.assertEqual(XmlUtils.as_dict(""), {})
        self.assertEqual(XmlUtils.as_dict("text"), {"#text": "text"})
        node = {"a": "b"}
        self.assertIs(XmlUtils.as_dict(node), node)


class TestLookup(unittest.TestCase):

    def test_child(self):
        self.assertEqual(XmlUtils.child({"a": "1"}, "a"), "1")
        self.assertIsNone(XmlUtils.child("text", "a"))

    def test_dig_narrows_lists(self):
        tree = {"STIGS": {"iSTIG": [{"STIG_INFO": "first"}, {"STIG_INFO": "second"}]}}
        self.assertEqual(XmlUtils.dig(tree, "STIGS", "iSTIG", "STIG_INFO"), "first")
        self.assertIsNone(XmlUtils.dig(tree, "STIGS", "missing", "x"))

    def test_find_key_depth_first(self):
        tree = {"description": {"Vuln": [{"Other": "x"}, {"VulnDiscussion": "found"}]}}
        self.assertEqual(XmlUtils.find_key(tree, "VulnDiscussion"), "found")
        self.assertIsNone(XmlUtils.find_key(tree, "Missing"))

    def test_find_key_skips_attributes(self):
        self.assertIsNone(XmlUtils.find_key({"@_VulnDiscussion": "attr"}, "VulnDiscussion"))

    def test_attr_of(self):
        node = {"@_id": "V-1", "@_weight": "10.0"}
        self.assertEqual(XmlUtils.attr_of(node, "id"), "V-1")
        self.assertEqual(XmlUtils.attr_of(node, "missing", "dflt"), "dflt")
        self.assertEqual(XmlUtils.attr_of("text", "id"), "")


class TestText(unittest.TestCase):

    def test_string(self):
        self.assertEqual(XmlUtils.text_of("abc"), "abc")

    def test_text_node(self):
        self.assertEqual(XmlUtils.text_of({"@_date": "2024-01-01", "#text": "accepted"}), "accepted")

    def test_children_joined(self):
        node = {"@_href": "x", "publisher": "DISA", "source": "STIG.DOD.MIL"}
        self.assertEqual(XmlUtils.text_of(node), "DISA\nSTIG.DOD.MIL")

    def test_list_joined(self):
        self.assertEqual(XmlUtils.text_of(["a", "", "b"]), "a\nb")

    def test_default(self):
        self.assertEqual(XmlUtils.text_of(None, "none"), "none")
        self.assertEqual(XmlUtils.text_of({"@_id": "1"}, "none"), "none")


class TestLooksLikeXml(unittest.TestCase):

    def test_markup(self):
        self.assertTrue(XmlUtils.looks_like_xml("<VulnDiscussion>x</VulnDiscussion>"))
        self.assertTrue(XmlUtils.looks_like_xml('text <a href="x"/> more'))

    def test_plain_text(self):
        self.assertFalse(XmlUtils.looks_like_xml("a < b and c > d"))
        self.assertFalse(XmlUtils.looks_like_xml("no markup"))
        self.assertFalse(XmlUtils.looks_like_xml(None))


if __name__ == "__main__":
    unittest.main()
