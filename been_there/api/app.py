from fastapi import FastAPI, HTTPException, Depends, Body, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session
import logging
import os
from typing import Any, Dict, List

from been_there.auth.tokens import AuthenticatedUser, get_current_user
from been_there.db import repository
from been_there.db.database import get_db
from been_there.exceptions import DuplicateVisitError, InvalidInputError, NotFoundError, ProviderError
from been_there.geocoding.cache import GeoCache
from been_there.geocoding.nominatim import NominatimResolver
from been_there.leaderboard.aggregator import DEFAULT_DISPLAY_NAME, country_leaderboard, user_leaderboard
from been_there.models.leaderboard import CountryLeaderboardEntry, LeaderboardEntry
from been_there.models.place import PlaceDescription
from been_there.models.visit import DeletedVisit, ProfileOut, ProfileUpdate, PublicVisit, Visit, VisitCreate

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

DISPLAY_NAME_MAX_LENGTH = 50

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:4000,http://localhost:3000").split(",")
    if origin.strip()
]

app = FastAPI(
    title="Been There API",
    description="Travel check-in game: visits, leaderboards and reverse geocoding",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One cache for the whole process, shared by every request
geo_cache = GeoCache()
resolver = NominatimResolver(cache=geo_cache)


def get_resolver() -> NominatimResolver:
    return resolver


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"error": "API endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    logger.info(f"Rejected request to {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.get("/api/db-test")
def db_test(db: Session = Depends(get_db)):
    try:
        repository.count_visits(db)
        return {"status": "connected", "message": "Database connection successful"}
    except Exception as e:
        logger.error(f"Database connection test failed: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


# ===== User profile =====

@app.get("/api/user/profile", response_model=ProfileOut)
def get_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        profile = repository.get_profile(db, user.id)
        return ProfileOut(
            display_name=profile.display_name if profile else None,
            fallback_name=user.full_name or DEFAULT_DISPLAY_NAME,
        )
    except Exception as e:
        logger.error(f"Error fetching profile for {user.id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load profile")


@app.post("/api/user/profile", response_model=ProfileOut)
def update_profile(
    payload: ProfileUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    safe_name = (payload.display_name or "").strip()[:DISPLAY_NAME_MAX_LENGTH]
    if not safe_name:
        logger.info(f"Profile update rejected for {user.id}: empty display name")
        raise HTTPException(status_code=400, detail="Display name is required")

    try:
        # name is NOT NULL, display_name is the nickname
        repository.upsert_profile(db, user.id, name=user.full_name or safe_name, display_name=safe_name)
        logger.info(f"Profile updated for {user.id}: {safe_name}")
        return ProfileOut(display_name=safe_name)
    except Exception as e:
        logger.error(f"Error updating profile for {user.id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save profile")


# ===== Visits =====

@app.get("/api/visits", response_model=List[Visit])
def list_visits(
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return repository.list_user_visits(db, user.id)
    except Exception as e:
        logger.error(f"Error fetching visits for {user.id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load visits")


@app.post("/api/visits", response_model=Visit)
def create_visit(
    payload: VisitCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if payload.lat is None or payload.lng is None or not payload.place_name:
        raise HTTPException(status_code=400, detail="lat, lng, and place_name required")

    try:
        return repository.create_visit(
            db,
            user_id=user.id,
            lat=payload.lat,
            lng=payload.lng,
            place_name=payload.place_name,
            country=payload.country,
            country_code=payload.country_code.lower() if payload.country_code else None,
            photo_url=payload.photo_url,
        )
    except DuplicateVisitError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating visit for {user.id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/visits/public", response_model=List[PublicVisit])
def list_public_visits(db: Session = Depends(get_db)):
    """Most recent visits from every user, for the public map."""
    try:
        visits = repository.list_recent_visits(db)
        if not visits:
            return []

        try:
            names = repository.display_names(db, [v.user_id for v in visits if v.user_id])
        except Exception as e:
            # Names are cosmetic here, everyone becomes a Traveler
            logger.error(f"Error fetching profiles for public visits: {str(e)}")
            names = {}

        return [
            PublicVisit(**v.to_dict(), display_name=names.get(v.user_id) or DEFAULT_DISPLAY_NAME)
            for v in visits
        ]
    except Exception as e:
        logger.error(f"Error fetching public visits: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load public visits")


@app.delete("/api/visits/{visit_id}", response_model=DeletedVisit)
def delete_visit(
    visit_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        deleted = repository.delete_visit(db, user.id, visit_id)
        return {"message": "Visit deleted", "visit": deleted}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting visit {visit_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


# ===== Leaderboards =====

@app.get("/api/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(db: Session = Depends(get_db)):
    try:
        visits = repository.all_visits(db)
        names = repository.display_names(db, [v.user_id for v in visits if v.user_id])
        return user_leaderboard(visits, names.get)
    except Exception as e:
        logger.error(f"Unexpected error in /api/leaderboard: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch leaderboard")


@app.get("/api/leaderboard/countries", response_model=List[CountryLeaderboardEntry])
def get_country_leaderboard(db: Session = Depends(get_db)):
    try:
        return country_leaderboard(repository.all_visits(db))
    except Exception as e:
        logger.error(f"Unexpected error in /api/leaderboard/countries: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch country leaderboard")


# ===== Reverse geocoding =====

@app.post("/api/reverse-geocode", response_model=PlaceDescription)
def reverse_geocode(
    payload: Dict[str, Any] = Body(...),
    user: AuthenticatedUser = Depends(get_current_user),
    geocoder: NominatimResolver = Depends(get_resolver)
):
    """
    Resolve a map pin to a place name.

    Body: {"lat": number, "lng": number}
    Returns: {place_name, country, country_code, raw}
    """
    try:
        return geocoder.resolve(payload.get("lat"), payload.get("lng"))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        logger.error(f"Reverse geocode provider failure for {user.id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Geocoding provider error")
    except Exception as e:
        logger.error(f"Reverse geocode error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to reverse-geocode location")
