"""Pydantic models shared by the store, services and API."""
