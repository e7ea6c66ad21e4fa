"""
Geocoding Module
--------------
Handles reverse geocoding operations to convert map pins to place names.
Uses OpenStreetMap's Nominatim API with a time-limited in-memory cache.
"""
