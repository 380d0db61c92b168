"""Tests for client-side filtering and sorting."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from NdlSearch.core.models import SearchItem
from NdlSearch.services.refine import ItemFilter, SortSpec, filter_items, item_year, refine_items, sort_items


def _item(title: str, *, date: str | None = None, language: str | None = None, creators=()) -> SearchItem:
    return SearchItem(title=title, date=date, language=language, creators=tuple(creators))


class TestFilterItems(unittest.TestCase):
    def setUp(self) -> None:
        self.items = [
            _item("A", date="1990-05", language="jpn", creators=["Natsume Soseki"]),
            _item("B", date="2001", language="eng", creators=["Lafcadio Hearn"]),
            _item("C", language="jpn"),
            _item("D", date="c.2015"),
        ]

    def test_language_drops_items_without_language(self) -> None:
        result = filter_items(self.items, ItemFilter(language="jpn"))
        self.assertEqual([i.title for i in result], ["A", "C"])

    def test_language_list(self) -> None:
        result = filter_items(self.items, ItemFilter(language=["jpn", "eng"]))
        self.assertEqual([i.title for i in result], ["A", "B", "C"])

    def test_date_range_keeps_undated_items(self) -> None:
        result = filter_items(self.items, ItemFilter(date_from="2000", date_to="2010-12-31"))
        self.assertEqual([i.title for i in result], ["B", "C"])

    def test_creator_substring_is_case_insensitive(self) -> None:
        result = filter_items(self.items, ItemFilter(creator="soseki"))
        self.assertEqual([i.title for i in result], ["A"])

    def test_no_match_is_empty(self) -> None:
        self.assertEqual(filter_items(self.items, ItemFilter(creator="nobody")), [])

    def test_item_year(self) -> None:
        self.assertEqual(item_year(_item("x", date="c.2015")), "2015")
        self.assertIsNone(item_year(_item("x", date="unknown")))
        self.assertIsNone(item_year(_item("x")))


class TestSortItems(unittest.TestCase):
    def test_title_natural_order(self) -> None:
        items = [_item("第10巻"), _item("第2巻"), _item("abc")]
        result = sort_items(items, SortSpec("title"))
        self.assertEqual([i.title for i in result], ["abc", "第2巻", "第10巻"])

    def test_title_is_case_and_width_insensitive(self) -> None:
        items = [_item("beta"), _item("ＡＬＰＨＡ")]
        result = sort_items(items, SortSpec("title"))
        self.assertEqual([i.title for i in result], ["ＡＬＰＨＡ", "beta"])

    def test_date_descending_puts_undated_last(self) -> None:
        items = [_item("old", date="1990"), _item("none"), _item("new", date="2001")]
        result = sort_items(items, SortSpec("date", "desc"))
        self.assertEqual([i.title for i in result], ["new", "old", "none"])

    def test_creator_sort_uses_first_creator(self) -> None:
        items = [_item("x", creators=["Zed"]), _item("y", creators=["amy", "Zed"]), _item("z")]
        result = sort_items(items, SortSpec("creator"))
        self.assertEqual([i.title for i in result], ["z", "y", "x"])

    def test_unknown_field_raises(self) -> None:
        with self.assertRaises(ValueError):
            sort_items([], SortSpec("publisher"))  # type: ignore[arg-type]


class TestRefineItems(unittest.TestCase):
    def test_filter_then_sort(self) -> None:
        items = [
            _item("b", date="2005", language="jpn"),
            _item("a", date="2003", language="jpn"),
            _item("c", date="2004", language="eng"),
        ]
        result = refine_items(items, item_filter=ItemFilter(language="jpn"), sort=SortSpec("title"))
        self.assertEqual([i.title for i in result], ["a", "b"])

    def test_nothing_requested_keeps_order(self) -> None:
        items = [_item("b"), _item("a")]
        self.assertEqual(refine_items(items), items)


if __name__ == "__main__":
    unittest.main()
