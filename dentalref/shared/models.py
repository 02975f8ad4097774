"""
DentalRef - Data Models
=======================

Two families of models live here:

1. Records (pydantic): ``Material``, ``Procedure`` and ``CriteriaProfile``.
   These are validated at the boundary (JSON datasets, UI input) and are
   frozen so the engine can never mutate what it was given.
2. Results (dataclasses): transient, per-call views produced by the engine
   (``MatchOutcome``, ``ScoredResult``, comparison rows/totals,
   ``RelatedProcedure``). They are created fresh on every call and never
   persisted.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dentalref.shared.enums import (
    AestheticRequirement,
    CostConstraint,
    Location,
    LongevityExpectation,
    OverallRating,
    PatientAge,
    PropertyCategory,
    StressLevel,
)


PropertyValue = Union[str, List[str]]


# =============================================================================
# RECORDS
# =============================================================================

class ManagementStep(BaseModel):
    """One step of a procedure's management plan."""
    model_config = ConfigDict(frozen=True)

    step: int
    title: str
    description: str = ""


class Material(BaseModel):
    """A dental material record from the materials dataset."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: str
    properties: Dict[str, Optional[PropertyValue]] = Field(default_factory=dict)
    indications: List[str] = Field(default_factory=list)
    contraindications: List[str] = Field(default_factory=list)
    handling_characteristics: List[str] = Field(default_factory=list)
    longevity: str = ""
    cost_considerations: str = ""

    @field_validator("properties", mode="before")
    @classmethod
    def _none_to_empty_dict(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator(
        "indications", "contraindications", "handling_characteristics",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("longevity", "cost_considerations", mode="before")
    @classmethod
    def _none_to_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    def get_property(self, key: str) -> Optional[PropertyValue]:
        """Property value by key, or None when the material lacks it."""
        return self.properties.get(key)

    def property_text(self, key: str) -> str:
        """Lower-cased property value, '' when absent. Lists are joined."""
        value = self.properties.get(key)
        if not value:
            return ""
        if isinstance(value, list):
            return ", ".join(value).lower()
        return value.lower()


class Procedure(BaseModel):
    """A dental procedure record from the procedures dataset."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: str
    diagnosis: str = ""
    differential_diagnosis: List[str] = Field(default_factory=list)
    investigations: List[str] = Field(default_factory=list)
    management_plan: List[ManagementStep] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list)

    @field_validator(
        "differential_diagnosis", "investigations", "management_plan", "references",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("diagnosis", mode="before")
    @classmethod
    def _none_to_blank(cls, v: Any) -> Any:
        return "" if v is None else v


class CriteriaProfile(BaseModel):
    """
    Clinical requirements a candidate set is ranked against.

    Defaults mirror the neutral form state: with only ``procedure_type`` set,
    none of the conditional rules fire. Accepts both snake_case and the
    camelCase keys used by the presentation layer (``stressLevel``).
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    procedure_type: str = ""
    location: Location = Location.ANY
    stress_level: StressLevel = StressLevel.MODERATE
    aesthetic_requirement: AestheticRequirement = AestheticRequirement.IMPORTANT
    patient_age: PatientAge = PatientAge.ADULT
    cost_constraint: CostConstraint = CostConstraint.MODERATE
    longevity: LongevityExpectation = LongevityExpectation.MEDIUM
    contraindications: Tuple[str, ...] = ()

    @field_validator("contraindications", mode="before")
    @classmethod
    def _normalize_contraindications(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        return tuple(c for c in v if c and c.strip())

    @property
    def procedure_text(self) -> str:
        """Lower-cased procedure type."""
        return self.procedure_type.lower()


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class MatchOutcome:
    """Accumulated rule output for one entity against one profile."""
    score_delta: int
    reasoning: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    alternatives: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScoredResult:
    """A ranked, explained recommendation entry."""
    entity: Material
    total_score: int
    category_scores: Dict[str, int]
    reasoning: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    alternatives: Tuple[str, ...] = ()

    @property
    def entity_id(self) -> str:
        return self.entity.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.entity.id,
            "name": self.entity.name,
            "category": self.entity.category,
            "total_score": self.total_score,
            "category_scores": dict(self.category_scores),
            "reasoning": list(self.reasoning),
            "warnings": list(self.warnings),
            "alternatives": list(self.alternatives),
        }


@dataclass(frozen=True)
class ComparisonCell:
    """Score of one material for one compared property."""
    entity_id: str
    value: Optional[PropertyValue]
    score: int


@dataclass(frozen=True)
class ComparisonRow:
    """One property across all compared materials."""
    property_key: str
    label: str
    category: PropertyCategory
    cells: Tuple[ComparisonCell, ...]

    @property
    def per_entity_score(self) -> Dict[str, int]:
        return {cell.entity_id: cell.score for cell in self.cells}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "property": self.property_key,
            "label": self.label,
            "category": self.category.value,
            "values": [
                {"material_id": c.entity_id, "value": c.value, "score": c.score}
                for c in self.cells
            ],
        }


@dataclass(frozen=True)
class EntityTotals:
    """Averaged comparison score for one material."""
    id: str
    name: str
    average_score: float
    category_scores: Dict[str, float]
    rating: OverallRating

    def to_dict(self) -> Dict[str, Any]:
        return {
            "material_id": self.id,
            "material_name": self.name,
            "total_score": round(self.average_score, 4),
            "category_scores": {k: round(v, 4) for k, v in self.category_scores.items()},
            "overall_rating": self.rating.value,
        }


@dataclass(frozen=True)
class ComparisonMatrix:
    """Side-by-side property scores plus per-material totals."""
    materials: Tuple[Material, ...]
    rows: Tuple[ComparisonRow, ...]
    per_entity_totals: Tuple[EntityTotals, ...]

    def row(self, property_key: str) -> Optional[ComparisonRow]:
        for r in self.rows:
            if r.property_key == property_key:
                return r
        return None

    def to_dict(self, generated_at: Optional[datetime] = None) -> Dict[str, Any]:
        """JSON-ready export of the comparison."""
        generated_at = generated_at or datetime.now(timezone.utc)
        return {
            "materials": [
                {
                    "name": m.name,
                    "category": m.category,
                    "longevity": m.longevity,
                    "cost": m.cost_considerations,
                }
                for m in self.materials
            ],
            "rows": [r.to_dict() for r in self.rows],
            "scores": [t.to_dict() for t in self.per_entity_totals],
            "generated_at": generated_at.isoformat(),
        }


@dataclass(frozen=True)
class BestRecommendation:
    """Top-ranked material with runner-up alternatives."""
    recommended: Material
    alternatives: Tuple[Material, ...]
    results: Tuple[ScoredResult, ...]
    comparison: ComparisonMatrix


@dataclass(frozen=True)
class MaterialComparison:
    """Outcome of comparing a hand-picked set of materials."""
    recommended: Material
    alternatives: Tuple[Material, ...]
    comparison: ComparisonMatrix


@dataclass(frozen=True)
class RelatedProcedure:
    """A procedure related to a selected one, with score and label."""
    procedure: Procedure
    relevance_score: int
    relationship: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.procedure.id,
            "name": self.procedure.name,
            "category": self.procedure.category,
            "relevance_score": self.relevance_score,
            "relationship": self.relationship,
        }
