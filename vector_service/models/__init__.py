"""
API request and response models.

Pydantic schemas for the HTTP surface.
"""
