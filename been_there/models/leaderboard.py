from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    user_id: str
    name: str
    visit_count: int


class CountryLeaderboardEntry(BaseModel):
    country_code: str
    country: str
    visit_count: int
