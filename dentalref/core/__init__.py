"""
DentalRef v1.0 - Core Module

Scoring engine: attribute ladders, criteria rules, ranking, comparison
matrices and procedure relevance linking.
"""

from .config import EngineConfig, Settings, get_settings, DEFAULT_ENGINE_CONFIG

from .attribute_scorer import score_attribute

from .criteria_rules import (
    CriteriaRule,
    DEFAULT_RULES,
    RuleContext,
    contraindication_matches,
    evaluate_rules,
    match_entity,
)

from .comparison import (
    build_comparison_matrix,
    format_property_name,
    property_category,
    rating_for,
    sort_totals,
)

from .ranking import (
    best_recommendation,
    category_scores,
    compare_materials,
    map_procedure_to_criteria,
    rank,
    select_best_material,
)

from .relevance import (
    classify_relationship,
    follow_up_treatments,
    link_related,
    preventive_services,
    rank_related,
    relevance,
    service_recommendations,
)

__all__ = [
    # Config
    "EngineConfig",
    "Settings",
    "get_settings",
    "DEFAULT_ENGINE_CONFIG",
    # Scoring
    "score_attribute",
    "CriteriaRule",
    "DEFAULT_RULES",
    "RuleContext",
    "contraindication_matches",
    "evaluate_rules",
    "match_entity",
    # Comparison
    "build_comparison_matrix",
    "format_property_name",
    "property_category",
    "rating_for",
    "sort_totals",
    # Ranking
    "best_recommendation",
    "category_scores",
    "compare_materials",
    "map_procedure_to_criteria",
    "rank",
    "select_best_material",
    # Relevance
    "classify_relationship",
    "follow_up_treatments",
    "link_related",
    "preventive_services",
    "rank_related",
    "relevance",
    "service_recommendations",
]
