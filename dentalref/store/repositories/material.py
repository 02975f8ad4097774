"""
DentalRef - Material Repository
===============================

Read-only access to the dental materials dataset.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from dentalref.shared.enums import AestheticRequirement, Location, StressLevel
from dentalref.shared.models import Material
from dentalref.store.repositories.base import BaseRepository, contains_term

logger = logging.getLogger(__name__)


def _property_matches(material: Material, term: str) -> bool:
    for key, value in material.properties.items():
        if term in key.lower():
            return True
        if not value:
            continue
        values = value if isinstance(value, list) else [value]
        if contains_term(term, values):
            return True
    return False


class MaterialRepository(BaseRepository[Material]):
    """Repository for dental material records."""

    @property
    def data_file(self) -> str:
        return "materials.json"

    @property
    def collection_key(self) -> str:
        return "materials"

    def _to_entity(self, record: Dict[str, Any]) -> Material:
        return Material.model_validate(record)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_all_materials(self) -> Tuple[Material, ...]:
        """Get all materials."""
        return self.get_all()

    def get_material_by_id(self, id_or_name: str) -> Optional[Material]:
        """Get material by id or exact (case-insensitive) name."""
        return self.find_by_id(id_or_name)

    def search_materials(self, query: str) -> List[Material]:
        """
        Search materials by free text.

        Matches name, category, property keys and values, indications and
        handling characteristics. A blank query returns every material.
        """
        materials = self.get_all()
        if not query or not query.strip():
            return list(materials)

        term = query.lower().strip()
        return [
            m for m in materials
            if term in m.name.lower()
            or term in m.category.lower()
            or _property_matches(m, term)
            or contains_term(term, m.indications)
            or contains_term(term, m.handling_characteristics)
        ]

    def get_materials_by_category(self, category: str) -> List[Material]:
        """Get materials whose category equals ``category`` (case-insensitive)."""
        return self.filter_by_category(category)

    def get_available_properties(self) -> List[str]:
        """Distinct property keys across all materials, sorted."""
        keys = set()
        for material in self.get_all():
            keys.update(material.properties)
        return sorted(keys)

    def get_materials_with_contraindication(self, contraindication: str) -> List[Material]:
        """Get materials listing a contraindication that contains the term."""
        term = contraindication.lower()
        return [m for m in self.get_all() if contains_term(term, m.contraindications)]

    def get_materials_for_situation(
        self,
        location: Location = Location.ANY,
        stress_level: StressLevel = StressLevel.MODERATE,
        aesthetic_requirement: AestheticRequirement = AestheticRequirement.IMPORTANT,
    ) -> List[Material]:
        """
        Hard-filter materials for a clinical situation.

        Unlike ranking, this excludes materials outright:
        - anterior requires excellent or good aesthetics
        - posterior excludes materials with "low" strength
        - high stress requires high strength
        - critical aesthetics requires excellent aesthetics
        """
        location = Location(location)
        stress_level = StressLevel(stress_level)
        aesthetic_requirement = AestheticRequirement(aesthetic_requirement)

        suitable = []
        for material in self.get_all():
            aesthetics = material.property_text("aesthetics")
            strength = material.property_text("strength")

            if location == Location.ANTERIOR and "excellent" not in aesthetics and "good" not in aesthetics:
                continue
            if location == Location.POSTERIOR and "low" in strength:
                continue
            if stress_level == StressLevel.HIGH and "high" not in strength:
                continue
            if aesthetic_requirement == AestheticRequirement.CRITICAL and "excellent" not in aesthetics:
                continue
            suitable.append(material)

        return suitable

    def get_stats(self) -> Dict[str, Any]:
        """Dataset statistics."""
        return {
            "total_materials": len(self.get_all()),
            "categories_count": len(self.get_categories()),
            "properties_count": len(self.get_available_properties()),
            "last_loaded": self.last_loaded.isoformat() if self.last_loaded else None,
        }
