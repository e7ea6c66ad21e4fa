"""Tests for visit and profile persistence."""

import pytest

from been_there.db import repository
from been_there.db.database import SessionLocal
from been_there.exceptions import DuplicateVisitError, NotFoundError


@pytest.fixture
def db(clean_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def test_create_visit_assigns_id_and_timestamp(db):
    visit = repository.create_visit(db, "user-1", 48.8566, 2.3522, "Paris, France", "France", "fr")
    assert visit.id
    assert visit.created_at is not None
    assert visit.country_code == "fr"


def test_create_visit_rejects_nearby_visit(db):
    repository.create_visit(db, "user-1", 48.8566, 2.3522, "Paris, France")
    with pytest.raises(DuplicateVisitError):
        repository.create_visit(db, "user-1", 48.8600, 2.3500, "Paris, France")


def test_nearby_check_is_per_user(db):
    repository.create_visit(db, "user-1", 48.8566, 2.3522, "Paris, France")
    visit = repository.create_visit(db, "user-2", 48.8566, 2.3522, "Paris, France")
    assert visit.user_id == "user-2"


def test_list_user_visits_only_returns_own(db):
    repository.create_visit(db, "user-1", 48.8566, 2.3522, "Paris, France")
    repository.create_visit(db, "user-1", 41.9028, 12.4964, "Rome, Italy")
    repository.create_visit(db, "user-2", 35.6762, 139.6503, "Tokyo, Japan")

    visits = repository.list_user_visits(db, "user-1")
    assert {v.place_name for v in visits} == {"Paris, France", "Rome, Italy"}


def test_list_recent_visits_limit(db):
    for i in range(5):
        repository.create_visit(db, "user-1", float(i), float(i), f"Place {i}")
    assert len(repository.list_recent_visits(db, limit=3)) == 3


def test_delete_visit(db):
    visit = repository.create_visit(db, "user-1", 48.8566, 2.3522, "Paris, France")
    visit_id = visit.id

    deleted = repository.delete_visit(db, "user-1", visit_id)

    assert deleted["id"] == visit_id
    assert repository.list_user_visits(db, "user-1") == []


def test_delete_missing_visit(db):
    with pytest.raises(NotFoundError):
        repository.delete_visit(db, "user-1", "does-not-exist")


def test_delete_other_users_visit(db):
    visit = repository.create_visit(db, "user-1", 48.8566, 2.3522, "Paris, France")
    with pytest.raises(NotFoundError):
        repository.delete_visit(db, "user-2", visit.id)


def test_upsert_profile_inserts_then_updates(db):
    repository.upsert_profile(db, "user-1", name="Alice Smith", display_name="Alice")
    repository.upsert_profile(db, "user-1", name="Alice Smith", display_name="Ali")

    profile = repository.get_profile(db, "user-1")
    assert profile.display_name == "Ali"
    assert profile.name == "Alice Smith"


def test_display_names(db):
    repository.upsert_profile(db, "user-1", name="Alice Smith", display_name="Alice")
    names = repository.display_names(db, ["user-1", "user-2", "user-1"])
    assert names == {"user-1": "Alice"}
    assert repository.display_names(db, []) == {}
