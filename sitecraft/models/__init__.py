"""Pydantic models for the site content model and the HTTP wire format."""
