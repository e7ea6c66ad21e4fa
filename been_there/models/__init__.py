"""
Data Models Module
----------------
Contains Pydantic models for request validation and response serialization.
"""
