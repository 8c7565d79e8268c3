"""
Shared building blocks (NOT business logic).

Usage:
    from app.shared.errors import InputError, PersistenceFailure
    from app.shared.repository import BaseRepository
"""
