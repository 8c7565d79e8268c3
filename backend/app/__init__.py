"""Strava Link & Sync backend."""
