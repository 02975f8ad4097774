"""
DentalRef - Comparison Matrix Unit Tests
========================================

Tests for build_comparison_matrix(), row ordering, averages and ratings.
"""

from datetime import datetime, timezone

import pytest

from dentalref.core.comparison import (
    build_comparison_matrix,
    collect_property_keys,
    format_property_name,
    property_category,
    rating_for,
    sort_totals,
)
from dentalref.shared.enums import OverallRating, PropertyCategory
from dentalref.shared.exceptions import ValidationError
from tests.conftest import make_material

pytestmark = pytest.mark.unit


# =============================================================================
# Helpers
# =============================================================================

class TestPropertyHelpers:
    """Tests for key classification and labels."""

    @pytest.mark.parametrize("key,category", [
        ("strength", PropertyCategory.PHYSICAL),
        ("fracture_toughness", PropertyCategory.PHYSICAL),
        ("fluoride_release", PropertyCategory.BIOLOGICAL),
        ("cost_considerations", PropertyCategory.CLINICAL),
        ("category", PropertyCategory.CLINICAL),
        ("color_stability", PropertyCategory.OPTICAL),
        ("radiopacity", PropertyCategory.OPTICAL),
        ("thermal_conductivity", PropertyCategory.PHYSICAL),
    ])
    def test_property_category(self, key, category):
        assert property_category(key) == category

    def test_format_property_name(self):
        assert format_property_name("color_stability") == "Color Stability"
        assert format_property_name("cost_considerations") == "Cost Considerations"
        assert format_property_name("strength") == "Strength"

    def test_collect_keys_union_plus_synthetic(self, zirconia, composite):
        keys = collect_property_keys([zirconia, composite])

        assert keys == [
            "strength", "aesthetics", "durability", "biocompatibility", "wear_resistance",
            "fluoride_release", "category", "longevity", "cost_considerations",
        ]

    @pytest.mark.parametrize("average,rating", [
        (4.0, OverallRating.EXCELLENT),
        (3.5, OverallRating.EXCELLENT),
        (3.49, OverallRating.GOOD),
        (2.5, OverallRating.GOOD),
        (1.5, OverallRating.MODERATE),
        (1.49, OverallRating.POOR),
        (0.0, OverallRating.POOR),
    ])
    def test_rating_bands(self, average, rating):
        assert rating_for(average) == rating


# =============================================================================
# Matrix
# =============================================================================

class TestBuildComparisonMatrix:
    """Tests for build_comparison_matrix."""

    def test_missing_property_scores_zero(self):
        """A material lacking a property still gets a cell, scored 0."""
        a = make_material("a", properties={"strength": "High"})
        b = make_material("b", properties={"strength": "Low", "fracture_toughness": "High"})

        matrix = build_comparison_matrix([a, b])
        row = matrix.row("fracture_toughness")

        assert row is not None
        assert row.per_entity_score == {"a": 0, "b": 3}
        assert row.cells[0].value is None
        assert row.category == PropertyCategory.PHYSICAL

    def test_row_order(self, zirconia, composite):
        matrix = build_comparison_matrix([zirconia, composite])

        assert [r.property_key for r in matrix.rows] == [
            "strength", "durability", "wear_resistance",
            "biocompatibility", "fluoride_release",
            "category", "cost_considerations", "longevity",
            "aesthetics",
        ]

    def test_synthetic_rows(self, zirconia, composite):
        matrix = build_comparison_matrix([zirconia, composite])

        category = matrix.row("category")
        assert [c.value for c in category.cells] == ["Prosthodontic", "Restorative"]
        assert category.per_entity_score == {"mat-zirconia": 2, "mat-composite": 2}

        longevity = matrix.row("longevity")
        assert longevity.per_entity_score == {"mat-zirconia": 4, "mat-composite": 2}

        cost = matrix.row("cost_considerations")
        assert cost.label == "Cost Considerations"
        assert cost.per_entity_score == {"mat-zirconia": 3, "mat-composite": 2}

    def test_totals(self, zirconia, composite):
        matrix = build_comparison_matrix([zirconia, composite])
        totals = {t.id: t for t in matrix.per_entity_totals}

        zirconia_totals = totals["mat-zirconia"]
        assert zirconia_totals.name == "Zirconia Crown"
        assert zirconia_totals.average_score == pytest.approx(28 / 9)
        assert zirconia_totals.rating == OverallRating.GOOD
        assert zirconia_totals.category_scores == pytest.approx({
            "physical": 4.0, "biological": 2.0, "clinical": 3.0, "optical": 3.0,
        })

        composite_totals = totals["mat-composite"]
        assert composite_totals.average_score == pytest.approx(2.0)
        assert composite_totals.rating == OverallRating.MODERATE
        assert composite_totals.category_scores == pytest.approx({
            "physical": 4 / 3, "biological": 2.0, "clinical": 2.0, "optical": 4.0,
        })

    def test_sort_by_total(self, zirconia, composite):
        matrix = build_comparison_matrix([composite, zirconia])
        assert [t.id for t in matrix.per_entity_totals] == ["mat-zirconia", "mat-composite"]

    def test_sort_by_category(self, zirconia, composite):
        matrix = build_comparison_matrix([zirconia, composite], sort_by="optical")
        assert [t.id for t in matrix.per_entity_totals] == ["mat-composite", "mat-zirconia"]

    def test_empty_category_averages_zero(self):
        material = make_material("a", properties={"strength": "High"})
        totals = build_comparison_matrix([material]).per_entity_totals[0]

        assert totals.category_scores["biological"] == 0.0
        assert totals.category_scores["optical"] == 0.0

    def test_empty_input(self):
        matrix = build_comparison_matrix([])

        assert matrix.rows == ()
        assert matrix.per_entity_totals == ()

    def test_to_dict(self, zirconia, composite):
        generated_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        export = build_comparison_matrix([zirconia, composite]).to_dict(generated_at)

        assert export["generated_at"] == "2024-01-02T03:04:05+00:00"
        assert export["materials"][0] == {
            "name": "Zirconia Crown",
            "category": "Prosthodontic",
            "longevity": "15+ years",
            "cost": "High cost",
        }
        assert export["rows"][0]["property"] == "strength"
        assert export["scores"][0]["overall_rating"] == "good"


class TestSortTotals:
    """Tests for sort_totals."""

    def test_stable(self):
        twins = [make_material(f"t{i}") for i in range(3)]
        totals = build_comparison_matrix(twins).per_entity_totals

        assert [t.id for t in sort_totals(totals, "clinical")] == ["t0", "t1", "t2"]

    def test_unknown_key(self, zirconia):
        totals = build_comparison_matrix([zirconia]).per_entity_totals
        with pytest.raises(ValidationError):
            sort_totals(totals, "price")
