import logging
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional

from been_there.models.leaderboard import CountryLeaderboardEntry, LeaderboardEntry

DEFAULT_DISPLAY_NAME = "Traveler"
LEADERBOARD_LIMIT = 50

# Get logger
logger = logging.getLogger(__name__)


def _field(visit: Any, name: str) -> Any:
    """Read a field from a dict row or an ORM object."""
    if isinstance(visit, dict):
        return visit.get(name)
    return getattr(visit, name, None)


def user_leaderboard(
    visits: Iterable[Any],
    display_name_of: Callable[[str], Optional[str]],
    limit: int = LEADERBOARD_LIMIT,
) -> List[LeaderboardEntry]:
    """
    Rank users by number of visits.

    Visits without a user_id are ignored. Users with equal counts are ordered
    by user_id ascending.
    """
    counts_by_user = Counter()
    for visit in visits:
        user_id = _field(visit, "user_id")
        if not user_id:
            continue
        counts_by_user[user_id] += 1

    leaderboard = [
        LeaderboardEntry(
            user_id=str(user_id),
            name=display_name_of(user_id) or DEFAULT_DISPLAY_NAME,
            visit_count=count,
        )
        for user_id, count in counts_by_user.items()
    ]
    leaderboard.sort(key=lambda entry: (-entry.visit_count, entry.user_id))

    logger.debug(f"User leaderboard built from {len(counts_by_user)} users")
    return leaderboard[:limit]


def country_leaderboard(
    visits: Iterable[Any],
    limit: int = LEADERBOARD_LIMIT,
) -> List[CountryLeaderboardEntry]:
    """
    Rank countries by number of visits.

    Country names come from the geocoder as free text, so one code can be seen
    under several labels; the most frequent label wins, first seen on a tie.
    A visit without a country name counts as the uppercased code.
    Visits without a country_code do not count anywhere.
    """
    # Format: {code: {"visit_count": int, "labels": {label: count}}}
    buckets: Dict[str, Dict[str, Any]] = {}

    for visit in visits:
        raw_code = _field(visit, "country_code")
        if not raw_code or not isinstance(raw_code, str):
            continue
        code = raw_code.lower()

        bucket = buckets.setdefault(code, {"visit_count": 0, "labels": {}})
        bucket["visit_count"] += 1

        # A missing name still votes, as the uppercased code
        label = _field(visit, "country") or code.upper()
        bucket["labels"][label] = bucket["labels"].get(label, 0) + 1

    leaderboard = []
    for code, bucket in buckets.items():
        best_label = None
        best_count = 0
        # dicts keep insertion order, so strict > keeps the first seen label
        for label, count in bucket["labels"].items():
            if count > best_count:
                best_label, best_count = label, count

        leaderboard.append(
            CountryLeaderboardEntry(
                country_code=code,
                country=best_label,
                visit_count=bucket["visit_count"],
            )
        )

    leaderboard.sort(key=lambda entry: (-entry.visit_count, entry.country_code))

    logger.debug(f"Country leaderboard built from {len(buckets)} countries")
    return leaderboard[:limit]
