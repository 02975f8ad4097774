"""
DentalRef - Entity Store
========================

TTL cache and JSON-backed repositories for materials and procedures.
"""

from dentalref.store.cache import TTLCache
from dentalref.store.repositories import (
    BaseRepository,
    MaterialRepository,
    ProcedureRepository,
)

__all__ = [
    'TTLCache',
    'BaseRepository',
    'MaterialRepository',
    'ProcedureRepository',
]
