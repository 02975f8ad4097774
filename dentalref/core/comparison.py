"""
DentalRef - Material Comparison Matrix
======================================

Builds a side-by-side property matrix for a set of materials:

1. Collects the union of property keys across all materials, plus the
   synthetic keys category, longevity and cost_considerations
2. Scores every material against every key (absent values score 0)
3. Groups keys into physical / biological / clinical / optical
4. Averages per material overall and per category, then bands the
   overall average into a rating

Usage:
    from dentalref.core.comparison import build_comparison_matrix

    matrix = build_comparison_matrix(materials, sort_by="optical")
    for totals in matrix.per_entity_totals:
        print(totals.name, totals.average_score, totals.rating.value)
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from dentalref.core.attribute_scorer import score_attribute
from dentalref.shared.enums import OverallRating, PropertyCategory
from dentalref.shared.exceptions import ValidationError
from dentalref.shared.models import (
    ComparisonCell,
    ComparisonMatrix,
    ComparisonRow,
    EntityTotals,
    Material,
    PropertyValue,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Property Classification
# =============================================================================

PROPERTY_CATEGORIES: Dict[PropertyCategory, Tuple[str, ...]] = {
    PropertyCategory.PHYSICAL: (
        "strength", "durability", "wear_resistance", "polishability", "fracture_toughness",
    ),
    PropertyCategory.BIOLOGICAL: ("biocompatibility", "fluoride_release"),
    PropertyCategory.CLINICAL: ("longevity", "cost_considerations", "category"),
    PropertyCategory.OPTICAL: ("aesthetics", "translucency", "color_stability", "radiopacity"),
}

SYNTHETIC_KEYS: Tuple[str, ...] = ("category", "longevity", "cost_considerations")

CATEGORY_ORDER: Dict[PropertyCategory, int] = {
    PropertyCategory.PHYSICAL: 1,
    PropertyCategory.BIOLOGICAL: 2,
    PropertyCategory.CLINICAL: 3,
    PropertyCategory.OPTICAL: 4,
}

PRIORITY_KEYS: Tuple[str, ...] = ("strength", "aesthetics", "durability", "biocompatibility")

SORT_KEYS: Tuple[str, ...] = ("total",) + tuple(c.value for c in PropertyCategory)

# (minimum average, rating), checked top-down
RATING_BANDS: Tuple[Tuple[float, OverallRating], ...] = (
    (3.5, OverallRating.EXCELLENT),
    (2.5, OverallRating.GOOD),
    (1.5, OverallRating.MODERATE),
)


def property_category(property_key: str) -> PropertyCategory:
    """Category of a property key; unknown keys are physical."""
    for category, keys in PROPERTY_CATEGORIES.items():
        if property_key in keys:
            return category
    return PropertyCategory.PHYSICAL


def format_property_name(property_key: str) -> str:
    """'color_stability' -> 'Color Stability'."""
    return re.sub(r"\b\w", lambda m: m.group().upper(), property_key.replace("_", " "))


def property_value(material: Material, property_key: str) -> Optional[PropertyValue]:
    """Raw value a material holds for a compared key, None when absent."""
    if property_key == "category":
        return material.category
    if property_key == "longevity":
        return material.longevity
    if property_key == "cost_considerations":
        return material.cost_considerations
    return material.properties.get(property_key)


def collect_property_keys(materials: Sequence[Material]) -> List[str]:
    """Ordered union of property keys, synthetic keys appended last."""
    keys: Dict[str, None] = {}
    for material in materials:
        for key in material.properties:
            keys.setdefault(key, None)
    for key in SYNTHETIC_KEYS:
        keys.setdefault(key, None)
    return list(keys)


def rating_for(average_score: float) -> OverallRating:
    """Band an averaged score into an overall rating."""
    for minimum, rating in RATING_BANDS:
        if average_score >= minimum:
            return rating
    return OverallRating.POOR


def _row_order(row: ComparisonRow) -> Tuple[int, int, int, str, str]:
    if row.property_key in PRIORITY_KEYS:
        priority = (0, PRIORITY_KEYS.index(row.property_key))
    else:
        priority = (1, 0)
    return (CATEGORY_ORDER[row.category],) + priority + (row.label.casefold(), row.label)


# =============================================================================
# Matrix Construction
# =============================================================================

def build_rows(materials: Sequence[Material]) -> List[ComparisonRow]:
    """Score every material on every compared key, in display order."""
    if not materials:
        return []

    rows = []
    for key in collect_property_keys(materials):
        cells = []
        for material in materials:
            value = property_value(material, key)
            cells.append(ComparisonCell(
                entity_id=material.id,
                value=value,
                score=score_attribute(key, value),
            ))
        rows.append(ComparisonRow(
            property_key=key,
            label=format_property_name(key),
            category=property_category(key),
            cells=tuple(cells),
        ))

    rows.sort(key=_row_order)
    return rows


def compute_totals(
    materials: Sequence[Material],
    rows: Sequence[ComparisonRow],
) -> List[EntityTotals]:
    """Average score per material, overall and per category."""
    totals = []
    for index, material in enumerate(materials):
        total = 0
        category_totals = {c.value: 0 for c in PropertyCategory}
        category_counts = {c.value: 0 for c in PropertyCategory}

        for row in rows:
            score = row.cells[index].score
            total += score
            category_totals[row.category.value] += score
            category_counts[row.category.value] += 1

        category_scores = {
            name: (category_totals[name] / count if count else 0.0)
            for name, count in category_counts.items()
        }
        average = total / len(rows) if rows else 0.0

        totals.append(EntityTotals(
            id=material.id,
            name=material.name,
            average_score=average,
            category_scores=category_scores,
            rating=rating_for(average),
        ))
    return totals


def sort_totals(totals: Sequence[EntityTotals], sort_by: str = "total") -> List[EntityTotals]:
    """
    Order per-material totals descending by the chosen key.

    Args:
        totals: Per-material totals
        sort_by: "total" or a category name (physical, biological, clinical, optical)

    Returns:
        New list, stable for equal scores
    """
    if sort_by not in SORT_KEYS:
        raise ValidationError(f"Unknown sort key '{sort_by}', expected one of {SORT_KEYS}")

    if sort_by == "total":
        return sorted(totals, key=lambda t: t.average_score, reverse=True)
    return sorted(totals, key=lambda t: t.category_scores[sort_by], reverse=True)


def build_comparison_matrix(
    materials: Sequence[Material],
    sort_by: str = "total",
) -> ComparisonMatrix:
    """
    Build the comparison matrix for a set of materials.

    Every material is scored against the full key union; a material lacking
    a property scores 0 for that row rather than being left out of it.

    Args:
        materials: Materials to compare (any count, including zero)
        sort_by: Ordering of per-material totals

    Returns:
        ComparisonMatrix with ordered rows and sorted totals
    """
    rows = build_rows(materials)
    totals = sort_totals(compute_totals(materials, rows), sort_by)

    logger.debug(
        f"Built comparison matrix: {len(materials)} materials, {len(rows)} properties"
    )

    return ComparisonMatrix(
        materials=tuple(materials),
        rows=tuple(rows),
        per_entity_totals=tuple(totals),
    )
