"""
Visit and profile persistence used by the API routes and the leaderboards.
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from been_there.db.database import VisitDB, ProfileDB
from been_there.exceptions import DuplicateVisitError, NotFoundError

# Roughly 1km in both directions
NEARBY_DEGREES = 0.01
PUBLIC_VISITS_LIMIT = 500

# Get logger
logger = logging.getLogger(__name__)


def create_visit(
    db: Session,
    user_id: str,
    lat: float,
    lng: float,
    place_name: str,
    country: Optional[str] = None,
    country_code: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> VisitDB:
    nearby = (
        db.query(VisitDB)
        .filter(
            VisitDB.user_id == user_id,
            VisitDB.lat >= lat - NEARBY_DEGREES,
            VisitDB.lat <= lat + NEARBY_DEGREES,
            VisitDB.lng >= lng - NEARBY_DEGREES,
            VisitDB.lng <= lng + NEARBY_DEGREES,
        )
        .first()
    )
    if nearby:
        raise DuplicateVisitError("You already have a visit nearby")

    visit = VisitDB(
        user_id=user_id,
        lat=float(lat),
        lng=float(lng),
        place_name=place_name,
        country=country or None,
        country_code=country_code or None,
        photo_url=photo_url or None,
    )
    db.add(visit)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateVisitError("Duplicate visit at this exact location") from e

    db.refresh(visit)
    logger.info(f"Visit {visit.id} created for user {user_id}: {place_name}")
    return visit


def list_user_visits(db: Session, user_id: str) -> List[VisitDB]:
    return (
        db.query(VisitDB)
        .filter(VisitDB.user_id == user_id)
        .order_by(VisitDB.created_at.desc())
        .all()
    )


def list_recent_visits(db: Session, limit: int = PUBLIC_VISITS_LIMIT) -> List[VisitDB]:
    return db.query(VisitDB).order_by(VisitDB.created_at.desc()).limit(limit).all()


def all_visits(db: Session) -> List[VisitDB]:
    return db.query(VisitDB).all()


def count_visits(db: Session) -> int:
    return db.query(func.count(VisitDB.id)).scalar()


def delete_visit(db: Session, user_id: str, visit_id: str) -> dict:
    """Delete one of the user's visits; another user's visit counts as not found."""
    visit = (
        db.query(VisitDB)
        .filter(VisitDB.id == visit_id, VisitDB.user_id == user_id)
        .first()
    )
    if not visit:
        raise NotFoundError("Visit not found")

    deleted = visit.to_dict()
    db.delete(visit)
    db.commit()
    logger.info(f"Visit {visit_id} deleted for user {user_id}")
    return deleted


def get_profile(db: Session, user_id: str) -> Optional[ProfileDB]:
    return db.query(ProfileDB).filter(ProfileDB.id == user_id).first()


def upsert_profile(db: Session, user_id: str, name: str, display_name: str) -> ProfileDB:
    profile = get_profile(db, user_id)
    if profile:
        profile.name = name
        profile.display_name = display_name
    else:
        profile = ProfileDB(id=user_id, name=name, display_name=display_name)
        db.add(profile)

    db.commit()
    db.refresh(profile)
    return profile


def display_names(db: Session, user_ids: Iterable[str]) -> Dict[str, Optional[str]]:
    ids = list(set(user_ids))
    if not ids:
        return {}

    profiles = db.query(ProfileDB.id, ProfileDB.display_name).filter(ProfileDB.id.in_(ids)).all()
    return {profile_id: display_name for profile_id, display_name in profiles}
