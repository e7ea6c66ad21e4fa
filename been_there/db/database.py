import os
import uuid
import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine, Column, String, Float, DateTime, UniqueConstraint
from sqlalchemy.orm import declarative_base, sessionmaker

# Get logger
logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DB_URL", "sqlite:///./been_there.db")
Base = declarative_base()


def _new_id():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)


# Define the Visit table structure
class VisitDB(Base):
    __tablename__ = "visits"
    __table_args__ = (UniqueConstraint("user_id", "lat", "lng", name="uq_visits_user_location"),)

    id = Column(String, primary_key=True, index=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    place_name = Column(String, nullable=False)
    country = Column(String, nullable=True)
    country_code = Column(String(2), nullable=True)
    photo_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "lat": self.lat,
            "lng": self.lng,
            "place_name": self.place_name,
            "country": self.country,
            "country_code": self.country_code,
            "photo_url": self.photo_url,
            "created_at": self.created_at,
        }


# Define the Profile table structure
class ProfileDB(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    display_name = Column(String, nullable=True)  # Nickname shown on leaderboards


engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables():
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created (if they didn't exist previously).")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
