"""
Unit tests for receipt selection and folder expansion state.
"""

import pytest
from datetime import date

from receipt_directory.selection import (
    SelectionSet, ExpandedFolders, folder_id, FOLDER_ALL, FOLDER_SOME, FOLDER_NONE
)
from tests.conftest import make_record


class TestSelectionSet:
    """Test cases for SelectionSet."""

    @pytest.fixture
    def march_records(self):
        return [
            make_record("m1", date(2024, 3, 1)),
            make_record("m2", date(2024, 3, 2)),
            make_record("m3", date(2024, 3, 3)),
        ]

    def test_toggle(self):
        selection = SelectionSet()

        assert selection.toggle("a") is True
        assert selection.is_selected("a")
        assert selection.toggle("a") is False
        assert not selection.is_selected("a")
        assert selection.size() == 0

    def test_toggle_twice_restores_membership(self):
        selection = SelectionSet(["a", "b"])
        before = selection.ids()

        selection.toggle("b")
        selection.toggle("b")
        selection.toggle("c")
        selection.toggle("c")

        assert selection.ids() == before

    def test_select_all_idempotent(self, march_records):
        once = SelectionSet()
        once.select_all(march_records)

        twice = SelectionSet()
        twice.select_all(march_records)
        twice.select_all(march_records)

        assert once == twice
        assert twice.size() == 3

    def test_select_all_accepts_ids(self):
        selection = SelectionSet()
        selection.select_all(["x", "y"])
        assert "x" in selection and "y" in selection
        assert len(selection) == 2

    def test_folder_isolation(self, march_records):
        """Test selecting a folder leaves ids outside it untouched."""
        selection = SelectionSet(["other-1"])
        outside = ["other-1", "other-2"]
        before = {record_id: selection.is_selected(record_id) for record_id in outside}

        selection.select_all(march_records)
        assert {record_id: selection.is_selected(record_id) for record_id in outside} == before

        selection.deselect_all(march_records)
        assert {record_id: selection.is_selected(record_id) for record_id in outside} == before
        assert selection.ids() == frozenset(["other-1"])

    def test_clear(self, march_records):
        selection = SelectionSet(["zzz"])
        selection.select_all(march_records)
        selection.clear()
        assert selection.size() == 0

    def test_folder_state(self, march_records):
        selection = SelectionSet()
        assert selection.folder_state(march_records) == FOLDER_NONE

        selection.toggle("m1")
        assert selection.folder_state(march_records) == FOLDER_SOME

        selection.select_all(march_records)
        assert selection.folder_state(march_records) == FOLDER_ALL

        assert selection.folder_state([]) == FOLDER_NONE

    def test_resolve_keeps_record_order(self, march_records):
        selection = SelectionSet(["m3", "m1", "missing"])
        assert [r.id for r in selection.resolve(march_records)] == ["m1", "m3"]

    def test_round_trip_through_list(self):
        selection = SelectionSet(["b", "a"])
        assert selection.to_list() == ["a", "b"]
        assert SelectionSet.from_list(selection.to_list()) == selection


class TestExpandedFolders:
    """Test cases for ExpandedFolders."""

    def test_folder_ids(self):
        assert folder_id(2024) == "2024"
        assert folder_id(2024, 2) == "2024-2"
        assert folder_id(2024, 0) == "2024-0"

    def test_toggle_expand_collapse(self):
        expanded = ExpandedFolders()

        assert expanded.toggle("2024") is True
        assert expanded.is_expanded("2024")
        assert expanded.toggle("2024") is False

        expanded.expand("2024-2")
        expanded.expand("2024-2")
        assert len(expanded) == 1

        expanded.collapse("2024-2")
        expanded.collapse("2024-2")
        assert not expanded.is_expanded("2024-2")

    def test_expansion_independent_of_selection(self):
        selection = SelectionSet(["r1"])
        expanded = ExpandedFolders()

        expanded.toggle("2024")
        expanded.clear()

        assert selection.ids() == frozenset(["r1"])
