"""
API Module
---------
Provides RESTful API endpoints for the travel check-in game using FastAPI.
Features include:
- Managing visits and user profiles
- Public map feed
- User and country leaderboards
- Reverse geocoding of map pins
"""
