from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VisitCreate(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None
    place_name: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = Field(default=None, max_length=2)
    photo_url: Optional[str] = None


class Visit(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    lat: float
    lng: float
    place_name: str
    country: Optional[str] = None
    country_code: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None


class PublicVisit(Visit):
    display_name: str


class DeletedVisit(BaseModel):
    message: str
    visit: Visit


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None


class ProfileOut(BaseModel):
    display_name: Optional[str] = None
    fallback_name: Optional[str] = None
