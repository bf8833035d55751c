# tests/test_selection_store.py
import pytest

from database.models.paper_model import PersonalizedPaper
from services.errors import StorageError
from services.selection_store import replace_selections


def entry(paper_id, rank):
    return {
        "paper_id": paper_id,
        "title": f"Paper {paper_id}",
        "category": "communication",
        "week_topic": "Social Bots",
        "relevance_ranking": rank,
        "matching_reason": f"reason {rank}",
    }


def keys(db, user_id, week):
    rows = db.query(PersonalizedPaper).filter_by(user_id=user_id, week_number=week).all()
    return sorted((r.paper_id, r.relevance_ranking) for r in rows)


def test_replace_returns_rows_sorted_by_rank(db, student):
    rows = replace_selections(db, student.id, "4", [entry("C", 3), entry("A", 1), entry("B", 2)])

    assert [r.paper_id for r in rows] == ["A", "B", "C"]
    assert all(r.id is not None for r in rows)


def test_replace_discards_old_rows(db, student):
    replace_selections(db, student.id, "4", [entry("A", 1), entry("B", 2), entry("C", 3)])

    replace_selections(db, student.id, "4", [entry("D", 1), entry("A", 2)])

    assert keys(db, student.id, "4") == [("A", 2), ("D", 1)]


def test_replace_with_nothing_clears_the_key(db, student):
    replace_selections(db, student.id, "4", [entry("A", 1)])

    assert replace_selections(db, student.id, "4", []) == []
    assert keys(db, student.id, "4") == []


def test_failed_insert_rolls_back_the_delete(db, student):
    replace_selections(db, student.id, "4", [entry("A", 1), entry("B", 2), entry("C", 3)])

    # duplicate rank violates the (user, week, rank) constraint
    with pytest.raises(StorageError) as excinfo:
        replace_selections(db, student.id, "4", [entry("D", 1), entry("E", 1)])

    assert excinfo.value.message == "Failed to save personalized papers"
    assert keys(db, student.id, "4") == [("A", 1), ("B", 2), ("C", 3)]


def test_other_weeks_are_not_touched(db, student):
    replace_selections(db, student.id, "4", [entry("A", 1)])
    replace_selections(db, student.id, "5", [entry("B", 1)])

    replace_selections(db, student.id, "4", [entry("C", 1)])

    assert keys(db, student.id, "5") == [("B", 1)]
