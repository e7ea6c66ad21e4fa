"""
Auth Module
-----------
Verifies bearer tokens issued by the identity provider and exposes the
authenticated user to the API routes.
"""
