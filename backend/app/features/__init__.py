"""
Feature modules.

Each feature is a self-contained module with:
- models.py - SQLAlchemy models (optional)
- repository.py - Data access (optional)
- service / client modules - Business logic and external calls
"""
