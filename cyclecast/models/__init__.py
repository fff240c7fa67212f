"""Pydantic schemas for persisting period history and prediction results."""
