"""
DentalRef - Ranking Aggregator
==============================

Turns per-material rule outcomes into a ranked, explained recommendation
list, and packages the higher-level recommendation helpers built on it.

Pipeline per call:
1. match_entity() for every candidate (rule deltas + explanations)
2. category_scores() for every candidate (clinical / cost / longevity)
3. Stable descending sort on total score, truncated to top N

Usage:
    from dentalref.core.ranking import rank, best_recommendation

    results = rank(materials, profile, already_selected={"mat-002"}, top_n=6)
    best = best_recommendation(materials, profile)
    if best:
        print(best.recommended.name, [m.name for m in best.alternatives])
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from dentalref.core.attribute_scorer import first_match
from dentalref.core.comparison import build_comparison_matrix
from dentalref.core.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from dentalref.core.criteria_rules import DEFAULT_RULES, CriteriaRule, match_entity
from dentalref.shared.enums import AestheticRequirement, Location, StressLevel
from dentalref.shared.exceptions import ComparisonError
from dentalref.shared.models import (
    BestRecommendation,
    CriteriaProfile,
    Material,
    MaterialComparison,
    ScoredResult,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Category Sub-scores
# =============================================================================

CLINICAL_LADDER = (
    (("excellent",), 3),
    (("good",), 2),
    (("moderate",), 1),
)

COST_LADDER = (
    (("low", "cost-effective"), 3),
    (("moderate",), 2),
    (("high",), 1),
)

LONGEVITY_LADDER = (
    (("20+",), 3),
    (("15+",), 2),
    (("10-15",), 1),
)

FLUORIDE_BONUS = 1


def _clamp(score: int, cap: int) -> int:
    return max(0, min(score, cap))


def category_scores(
    material: Material,
    cap: int = DEFAULT_ENGINE_CONFIG.category_score_cap,
) -> Dict[str, int]:
    """
    Clinical, cost and longevity sub-scores for one material.

    clinical combines biocompatibility with a fluoride release bonus; cost
    rewards cheaper materials. Each value is clamped to [0, cap].
    """
    clinical = first_match(material.property_text("biocompatibility"), CLINICAL_LADDER, 0)
    if "yes" in material.property_text("fluoride_release"):
        clinical += FLUORIDE_BONUS

    cost = first_match(material.cost_considerations.lower(), COST_LADDER, 0)
    longevity = first_match(material.longevity.lower(), LONGEVITY_LADDER, 0)

    return {
        "clinical": _clamp(clinical, cap),
        "cost": _clamp(cost, cap),
        "longevity": _clamp(longevity, cap),
    }


# =============================================================================
# Ranking
# =============================================================================

def score_material(
    material: Material,
    profile: CriteriaProfile,
    already_selected: Iterable[str] = (),
    rules: Sequence[CriteriaRule] = DEFAULT_RULES,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ScoredResult:
    """Score and explain a single material."""
    outcome = match_entity(material, profile, already_selected, rules)
    return ScoredResult(
        entity=material,
        total_score=outcome.score_delta,
        category_scores=category_scores(material, config.category_score_cap),
        reasoning=outcome.reasoning,
        warnings=outcome.warnings,
        alternatives=outcome.alternatives,
    )


def rank(
    entities: Sequence[Material],
    profile: CriteriaProfile,
    already_selected: Iterable[str] = (),
    top_n: Optional[int] = None,
    rules: Sequence[CriteriaRule] = DEFAULT_RULES,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> List[ScoredResult]:
    """
    Rank candidate materials against a criteria profile.

    Equal totals keep their input order. Negative totals are kept; nothing
    is filtered out, a matching contraindication only lowers the score.

    Args:
        entities: Candidate materials
        profile: Criteria profile
        already_selected: Ids already picked for comparison (-5 each)
        top_n: Result size, defaults to config.default_top_n
        rules: Rule table for the criteria matcher
        config: Engine constants

    Returns:
        At most top_n ScoredResults, best first
    """
    if top_n is None:
        top_n = config.default_top_n
    selected = frozenset(already_selected)

    results = [
        score_material(entity, profile, selected, rules, config)
        for entity in entities
    ]
    results.sort(key=lambda r: r.total_score, reverse=True)
    ranked = results[:max(top_n, 0)]

    logger.debug(
        f"Ranked {len(results)} materials for '{profile.procedure_type}', "
        f"top score {ranked[0].total_score if ranked else None}"
    )
    return ranked


def select_best_material(
    materials: Sequence[Material],
    profile: CriteriaProfile,
) -> Optional[Material]:
    """
    Pick the single best material for a profile.

    The first material is the fallback; another replaces it only with a
    strictly higher positive score, so ties go to the earlier entry.
    """
    if not materials:
        return None

    best = materials[0]
    best_score = 0
    for material in materials:
        score = match_entity(material, profile).score_delta
        if score > best_score:
            best, best_score = material, score
    return best


def best_recommendation(
    materials: Sequence[Material],
    profile: CriteriaProfile,
    already_selected: Iterable[str] = (),
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> Optional[BestRecommendation]:
    """
    Top recommendation with runner-ups and a comparison across them.

    Returns:
        BestRecommendation, or None for an empty candidate set
    """
    results = rank(
        materials,
        profile,
        already_selected,
        top_n=config.best_recommendation_size,
        config=config,
    )
    if not results:
        return None

    top = tuple(r.entity for r in results)
    return BestRecommendation(
        recommended=top[0],
        alternatives=top[1:],
        results=tuple(results),
        comparison=build_comparison_matrix(top),
    )


# =============================================================================
# Procedure Mapping & Comparison
# =============================================================================

def map_procedure_to_criteria(procedure_id: str) -> CriteriaProfile:
    """
    Derive a criteria profile from a procedure id or name.

    Checks run in order and later matches override earlier ones, so
    "posterior-crown" ends with posterior location and high stress.
    """
    text = procedure_id.lower()
    values = {}

    if "filling" in text or "restoration" in text:
        values["procedure_type"] = "restoration"

    if "crown" in text or "bridge" in text:
        values["procedure_type"] = "crown"
        values["stress_level"] = StressLevel.HIGH

    if "veneer" in text or "anterior" in text:
        values["location"] = Location.ANTERIOR
        values["aesthetic_requirement"] = AestheticRequirement.CRITICAL

    if "posterior" in text or "molar" in text:
        values["location"] = Location.POSTERIOR
        values["stress_level"] = StressLevel.HIGH

    return CriteriaProfile(**values)


def resolve_materials(repository, material_ids: Sequence[str]) -> Tuple[Material, ...]:
    """Look up ids in a repository, skipping (and logging) unknown ones."""
    resolved = []
    for material_id in material_ids:
        material = repository.get_material_by_id(material_id)
        if material is None:
            logger.warning(f"Material not found for comparison: {material_id}")
            continue
        resolved.append(material)
    return tuple(resolved)


def compare_materials(
    repository,
    material_ids: Sequence[str],
    profile: Optional[CriteriaProfile] = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> MaterialComparison:
    """
    Compare a handful of materials from a repository.

    Args:
        repository: Anything exposing get_material_by_id()
        material_ids: Between min_comparison and max_comparison ids
        profile: Optional criteria; without one the first material is recommended
        config: Engine constants

    Returns:
        MaterialComparison: recommended material, the other resolved
        materials in request order, and the comparison matrix

    Raises:
        ComparisonError: Too few/many ids, or too few resolved
    """
    count = len(material_ids)
    if count < config.min_comparison or count > config.max_comparison:
        raise ComparisonError(
            f"Comparison requires {config.min_comparison}-{config.max_comparison} "
            f"materials, got {count}"
        )

    materials = resolve_materials(repository, material_ids)
    if len(materials) < config.min_comparison:
        raise ComparisonError(
            f"Only {len(materials)} of {count} materials could be found"
        )

    if profile is not None:
        recommended = select_best_material(materials, profile)
    else:
        recommended = materials[0]

    return MaterialComparison(
        recommended=recommended,
        alternatives=tuple(m for m in materials if m.id != recommended.id),
        comparison=build_comparison_matrix(materials),
    )
