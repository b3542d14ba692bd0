"""Tests for checklist progress aggregation."""

import pytest

from app.core.progress import progress, with_progress


def items(done: int, total: int):
    return [{"id": str(i), "completed": i < done} for i in range(total)]


class TestProgress:
    """Tests for the progress percentage."""

    def test_empty_checklist_is_zero(self):
        """No items means 0, not a division error."""
        assert progress([]) == 0

    def test_all_and_none_completed(self):
        """Bounds are 0 and 100."""
        assert progress(items(0, 4)) == 0
        assert progress(items(4, 4)) == 100

    @pytest.mark.parametrize(
        "done,total,expected",
        [(1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 8, 38), (1, 2, 50), (1, 200, 1)],
    )
    def test_rounds_half_up(self, done, total, expected):
        """Halves round up (12.5 -> 13), unlike Python's round()."""
        assert progress(items(done, total)) == expected

    def test_accepts_generators(self):
        """Any iterable of item rows is accepted."""
        assert progress(i for i in items(1, 4)) == 25

    def test_missing_completed_flag_counts_as_open(self):
        """Items without a completed value are not done."""
        assert progress([{"id": "a"}, {"id": "b", "completed": True}]) == 50


class TestWithProgress:
    """Tests for shaping a checklist row with its items."""

    def test_orders_items_by_position(self):
        """Items come back sorted by position."""
        checklist = {"id": "c1", "title": "Launch"}
        rows = [
            {"id": "b", "position": 2, "completed": True},
            {"id": "a", "position": 0, "completed": False},
            {"id": "c", "position": 1, "completed": False},
        ]
        shaped = with_progress(checklist, rows)
        assert [i["id"] for i in shaped["checklist_items"]] == ["a", "c", "b"]
        assert shaped["progress"] == 33
        assert shaped["title"] == "Launch"

    def test_does_not_mutate_checklist(self):
        """The input row is left untouched."""
        checklist = {"id": "c1"}
        with_progress(checklist, [])
        assert "progress" not in checklist
