"""
DentalRef - Repositories
========================

Read-only repository classes over the bundled JSON datasets.
"""

from dentalref.store.repositories.base import BaseRepository
from dentalref.store.repositories.material import MaterialRepository
from dentalref.store.repositories.procedure import ProcedureRepository

__all__ = [
    'BaseRepository',
    'MaterialRepository',
    'ProcedureRepository',
]
