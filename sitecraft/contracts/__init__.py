"""Typed data shapes shared across SiteCraft modules."""
