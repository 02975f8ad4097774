"""
DentalRef - Base Repository
===========================

Abstract base class for the read-only, JSON-backed repositories.

A repository owns one data file (e.g. ``materials.json``) holding
``{"<collection_key>": [...], "categories": [...]}``. The collection is
parsed into frozen pydantic records once and kept in a ``TTLCache``; after
the TTL lapses the next read reloads the file.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from dentalref.core.config import get_settings
from dentalref.shared.exceptions import DataLoadError, EntityNotFoundError
from dentalref.store.cache import TTLCache

logger = logging.getLogger(__name__)

# Generic type for record classes
T = TypeVar('T')


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository with common read operations.

    Subclasses must implement:
    - data_file: str
    - collection_key: str
    - _to_entity(record) -> T
    """

    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        cache: Optional[TTLCache] = None,
    ):
        """
        Initialize repository.

        Args:
            data_dir: Directory holding the JSON data files (default: settings)
            cache: Shared TTL cache (default: a private one sized from settings)
        """
        settings = get_settings()
        self.data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self.cache = cache if cache is not None else TTLCache(
            ttl_seconds=settings.cache_ttl_seconds,
            capacity=settings.cache_capacity,
        )
        self.last_loaded: Optional[datetime] = None

    @property
    @abstractmethod
    def data_file(self) -> str:
        """File name of this repository's dataset."""
        pass

    @property
    @abstractmethod
    def collection_key(self) -> str:
        """Top-level JSON key holding the record list."""
        pass

    @abstractmethod
    def _to_entity(self, record: Dict[str, Any]) -> T:
        """Convert a raw JSON record to an entity object."""
        pass

    @property
    def cache_key(self) -> str:
        return f"dentalref:{self.collection_key}"

    @property
    def path(self) -> Path:
        return self.data_dir / self.data_file

    # =========================================================================
    # Loading
    # =========================================================================

    def _read_document(self) -> Dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError as e:
            raise DataLoadError(f"Data file not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise DataLoadError(f"Invalid JSON in {self.path}: {e}") from e

        if not isinstance(document, dict) or not isinstance(document.get(self.collection_key), list):
            raise DataLoadError(
                f"{self.path} must contain a '{self.collection_key}' list"
            )
        return document

    def _load(self) -> Tuple[T, ...]:
        document = self._read_document()
        records = document[self.collection_key]

        try:
            entities = tuple(self._to_entity(record) for record in records)
        except PydanticValidationError as e:
            raise DataLoadError(f"Invalid record in {self.path}: {e}") from e

        self.last_loaded = datetime.now(timezone.utc)
        logger.info(f"Loaded {len(entities)} {self.collection_key} from {self.path}")
        return entities

    def get_all(self) -> Tuple[T, ...]:
        """All records, loaded on first use and cached until the TTL lapses."""
        return self.cache.get_or_load(self.cache_key, self._load)

    def clear_cache(self) -> None:
        """Forget the cached collection; the next read reloads the file."""
        self.cache.invalidate(self.cache_key)

    # =========================================================================
    # Shared helpers
    # =========================================================================

    def find_by_id(self, id_or_name: str) -> Optional[T]:
        """First record whose id equals, or whose name case-insensitively equals, the key."""
        key = id_or_name.lower()
        for entity in self.get_all():
            if entity.id == id_or_name or entity.name.lower() == key:
                return entity
        return None

    def require(self, id_or_name: str) -> T:
        """Like find_by_id, but raises EntityNotFoundError when nothing matches."""
        entity = self.find_by_id(id_or_name)
        if entity is None:
            raise EntityNotFoundError(f"No {self.collection_key} record matches '{id_or_name}'")
        return entity

    def filter_by_category(self, category: str) -> List[T]:
        category = category.lower()
        return [e for e in self.get_all() if e.category.lower() == category]

    def get_categories(self) -> List[str]:
        """Distinct categories, sorted."""
        return sorted({e.category for e in self.get_all()})


def contains_term(term: str, values: Iterable[str]) -> bool:
    """True when any value contains the (already lower-cased) term."""
    return any(term in v.lower() for v in values)
