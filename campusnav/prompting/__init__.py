"""Prompt text package for chat and location-extraction requests."""
