from typing import Any, Optional

from pydantic import BaseModel


class PlaceDescription(BaseModel):
    """Normalized reverse geocoding result."""

    place_name: str
    country: Optional[str] = None
    country_code: Optional[str] = None
    raw: Any = None
