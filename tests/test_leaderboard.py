"""Tests for the user and country leaderboards."""

from types import SimpleNamespace

from been_there.leaderboard.aggregator import country_leaderboard, user_leaderboard


def test_user_leaderboard_counts_and_names():
    visits = [{"user_id": "A"}, {"user_id": "A"}, {"user_id": "B"}]
    names = {"A": "Alice", "B": "Bob"}

    result = user_leaderboard(visits, names.get)

    assert [entry.model_dump() for entry in result] == [
        {"user_id": "A", "name": "Alice", "visit_count": 2},
        {"user_id": "B", "name": "Bob", "visit_count": 1},
    ]


def test_user_leaderboard_defaults_to_traveler():
    visits = [{"user_id": "A"}, {"user_id": "B"}, {"user_id": "B"}]
    names = {"B": None}

    result = user_leaderboard(visits, names.get)

    assert [(e.user_id, e.name) for e in result] == [("B", "Traveler"), ("A", "Traveler")]


def test_user_leaderboard_skips_rows_without_user():
    visits = [{"user_id": None}, {}, {"user_id": ""}, {"user_id": "A"}]
    result = user_leaderboard(visits, lambda user_id: "Alice")
    assert [(e.user_id, e.visit_count) for e in result] == [("A", 1)]


def test_user_leaderboard_ties_ordered_by_user_id():
    visits = [{"user_id": "c"}, {"user_id": "a"}, {"user_id": "b"}]
    result = user_leaderboard(visits, lambda user_id: None)
    assert [e.user_id for e in result] == ["a", "b", "c"]


def test_user_leaderboard_top_50():
    visits = [{"user_id": f"user-{i:03d}"} for i in range(60)]
    visits += [{"user_id": "user-059"}]

    result = user_leaderboard(visits, lambda user_id: None)

    assert len(result) == 50
    assert result[0].user_id == "user-059"
    assert result[0].visit_count == 2


def test_user_leaderboard_accepts_orm_like_rows():
    visits = [SimpleNamespace(user_id="A"), SimpleNamespace(user_id="A")]
    result = user_leaderboard(visits, {"A": "Alice"}.get)
    assert result[0].visit_count == 2


def test_user_leaderboard_empty():
    assert user_leaderboard([], lambda user_id: None) == []


def test_country_leaderboard_ranks_by_visits():
    visits = [
        {"country_code": "fr", "country": "France"},
        {"country_code": "fr", "country": "France"},
        {"country_code": "us", "country": "USA"},
    ]

    result = country_leaderboard(visits)

    assert [entry.model_dump() for entry in result] == [
        {"country_code": "fr", "country": "France", "visit_count": 2},
        {"country_code": "us", "country": "USA", "visit_count": 1},
    ]


def test_country_leaderboard_excludes_missing_code():
    visits = [
        {"country_code": None, "country": "France"},
        {"country": "France"},
        {"country_code": "", "country": "France"},
        {"country_code": "de", "country": "Germany"},
    ]

    result = country_leaderboard(visits)

    assert [(e.country_code, e.visit_count) for e in result] == [("de", 1)]


def test_country_leaderboard_groups_codes_case_insensitively():
    visits = [
        {"country_code": "US", "country": "United States"},
        {"country_code": "us", "country": "United States"},
    ]
    result = country_leaderboard(visits)
    assert len(result) == 1
    assert result[0].country_code == "us"
    assert result[0].visit_count == 2


def test_country_label_most_frequent_wins():
    visits = [
        {"country_code": "us", "country": "USA"},
        {"country_code": "us", "country": "United States"},
        {"country_code": "us", "country": "United States"},
    ]
    assert country_leaderboard(visits)[0].country == "United States"


def test_country_label_tie_goes_to_first_seen():
    visits = [
        {"country_code": "de", "country": "Deutschland"},
        {"country_code": "de", "country": "Germany"},
    ]
    assert country_leaderboard(visits)[0].country == "Deutschland"


def test_country_label_falls_back_to_uppercase_code():
    visits = [{"country_code": "jp", "country": None}, {"country_code": "jp"}]
    result = country_leaderboard(visits)
    assert result[0].country == "JP"
    assert result[0].visit_count == 2


def test_country_leaderboard_ties_ordered_by_code():
    visits = [{"country_code": code, "country": code} for code in ("it", "es", "fr")]
    assert [e.country_code for e in country_leaderboard(visits)] == ["es", "fr", "it"]


def test_country_leaderboard_top_50():
    visits = [{"country_code": f"{chr(97 + i // 26)}{chr(97 + i % 26)}"} for i in range(60)]
    assert len(country_leaderboard(visits)) == 50


def test_missing_country_name_votes_as_code():
    visits = [
        {"country_code": "jp", "country": None},
        {"country_code": "jp", "country": ""},
        {"country_code": "jp", "country": "Japan"},
    ]
    result = country_leaderboard(visits)
    assert result[0].country == "JP"
    assert result[0].visit_count == 3
