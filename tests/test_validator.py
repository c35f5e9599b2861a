from __future__ import annotations

from textpager.types import Page
from textpager.validator import check_pages


class TestCheckPages:
    def test_valid_partition(self):
        doc = "Hello world\nfoo   bar"
        assert check_pages(doc, [Page(0, 12), Page(12, 21)]) == []

    def test_empty_document(self):
        assert check_pages("", [Page(0, 0)]) == []
        assert check_pages("", [Page(0, 0), Page(0, 0)]) != []

    def test_gap_and_overlap(self):
        doc = "aaa bbb ccc"
        assert any("not contiguous" in e for e in check_pages(doc, [Page(0, 4), Page(5, 11)]))
        assert any("not contiguous" in e for e in check_pages(doc, [Page(0, 5), Page(4, 11)]))

    def test_incomplete_cover(self):
        errors = check_pages("aaa bbb", [Page(0, 4)])
        assert any("last page ends" in e for e in errors)
        assert any("reassemble" in e for e in errors)

    def test_word_split(self):
        errors = check_pages("abcdef", [Page(0, 3), Page(3, 6)])
        assert errors == ["page[0] splits a word at offset 3"]

    def test_forced_page_may_split(self):
        assert check_pages("abcdef", [Page(0, 3, forced=True), Page(3, 6)]) == []

    def test_empty_page_in_the_middle(self):
        errors = check_pages("aa bb", [Page(0, 3), Page(3, 3), Page(3, 5)])
        assert any("is empty" in e for e in errors)
