"""
DentalRef - Procedure Repository
================================

Read-only access to the dental procedures dataset, including the
"related procedures" lookup used by the relevance linker.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from dentalref.core.config import DEFAULT_ENGINE_CONFIG
from dentalref.core.relevance import common_keywords, rank_related
from dentalref.shared.models import Procedure
from dentalref.store.repositories.base import BaseRepository, contains_term

logger = logging.getLogger(__name__)

EMERGENCY_CATEGORY = "Emergency"

PEDIATRIC_TERMS = ("pediatric", "child")
GERIATRIC_TERMS = ("geriatric", "elderly")
APPROACH_TERMS = ("approach", "option", "alternative")
MULTI_STEP_THRESHOLD = 3


def _management_text(procedure: Procedure) -> str:
    return " ".join(step.description.lower() for step in procedure.management_plan)


class ProcedureRepository(BaseRepository[Procedure]):
    """Repository for dental procedure records."""

    @property
    def data_file(self) -> str:
        return "procedures.json"

    @property
    def collection_key(self) -> str:
        return "procedures"

    def _to_entity(self, record: Dict[str, Any]) -> Procedure:
        return Procedure.model_validate(record)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_all_procedures(self) -> Tuple[Procedure, ...]:
        """Get all procedures."""
        return self.get_all()

    def get_procedure_by_id(self, id_or_name: str) -> Optional[Procedure]:
        """Get procedure by id or exact (case-insensitive) name."""
        return self.find_by_id(id_or_name)

    def search_procedures(self, query: str) -> List[Procedure]:
        """
        Search procedures by free text.

        Matches name, category, diagnosis, differentials, investigations and
        management step titles/descriptions. A blank query returns all.
        """
        procedures = self.get_all()
        if not query or not query.strip():
            return list(procedures)

        term = query.lower().strip()
        return [
            p for p in procedures
            if term in p.name.lower()
            or term in p.category.lower()
            or term in p.diagnosis.lower()
            or contains_term(term, p.differential_diagnosis)
            or contains_term(term, p.investigations)
            or any(
                term in step.title.lower() or term in step.description.lower()
                for step in p.management_plan
            )
        ]

    def get_procedures_by_category(self, category: str) -> List[Procedure]:
        """Get procedures whose category equals ``category`` (case-insensitive)."""
        return self.filter_by_category(category)

    def search_by_condition(self, condition: str) -> List[Procedure]:
        """Procedures whose diagnosis or differentials mention the condition."""
        term = condition.lower().strip()
        return [
            p for p in self.get_all()
            if term in p.diagnosis.lower() or contains_term(term, p.differential_diagnosis)
        ]

    def get_procedures_with_investigation(self, investigation: str) -> List[Procedure]:
        """Procedures requiring an investigation that contains the term."""
        term = investigation.lower().strip()
        return [p for p in self.get_all() if contains_term(term, p.investigations)]

    def get_emergency_procedures(self) -> List[Procedure]:
        return self.get_procedures_by_category(EMERGENCY_CATEGORY)

    def get_procedures_with_multiple_approaches(self) -> List[Procedure]:
        """Procedures offering alternative approaches or more than three steps."""
        result = []
        for procedure in self.get_all():
            has_approach = any(
                any(term in step.description.lower() for term in APPROACH_TERMS)
                for step in procedure.management_plan
            )
            if has_approach or len(procedure.management_plan) > MULTI_STEP_THRESHOLD:
                result.append(procedure)
        return result

    def get_procedures_by_age(self) -> Dict[str, List[Procedure]]:
        """
        Bucket procedures by patient age group.

        Every procedure is adult-suitable; pediatric and geriatric buckets are
        inferred from the name, diagnosis and management descriptions.
        """
        buckets: Dict[str, List[Procedure]] = {"pediatric": [], "adult": [], "geriatric": []}

        for procedure in self.get_all():
            name = procedure.name.lower()
            diagnosis = procedure.diagnosis.lower()
            management = _management_text(procedure)

            if (
                "pediatric" in name
                or "child" in diagnosis
                or any(term in management for term in PEDIATRIC_TERMS)
            ):
                buckets["pediatric"].append(procedure)

            if (
                "geriatric" in name
                or "elderly" in diagnosis
                or any(term in management for term in GERIATRIC_TERMS)
            ):
                buckets["geriatric"].append(procedure)

            buckets["adult"].append(procedure)

        return buckets

    def get_related_procedures(
        self,
        procedure_id: str,
        limit: int = DEFAULT_ENGINE_CONFIG.related_limit,
    ) -> List[Procedure]:
        """
        Procedures related to the given one, most relevant first.

        Candidates share the main procedure's category or at least one
        diagnosis keyword. An unknown id yields an empty list.
        """
        main = self.get_procedure_by_id(procedure_id)
        if main is None:
            logger.warning(f"Procedure not found: {procedure_id}")
            return []

        candidates = [
            p for p in self.get_all()
            if p.id != main.id
            and (p.category == main.category or common_keywords(main, p))
        ]
        return rank_related(main, candidates)[:max(limit, 0)]

    def get_stats(self) -> Dict[str, Any]:
        """Dataset statistics."""
        return {
            "total_procedures": len(self.get_all()),
            "categories_count": len(self.get_categories()),
            "emergency_procedures": len(self.get_emergency_procedures()),
            "last_loaded": self.last_loaded.isoformat() if self.last_loaded else None,
        }
