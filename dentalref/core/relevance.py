"""
DentalRef - Relevance Linker
============================

Relates procedures to a selected one:

- ``relevance()`` scores a candidate numerically (category, shared
  diagnosis keywords, overlapping differentials and investigations)
- ``classify_relationship()`` labels it for display grouping

The two are independent rule tables; a label never feeds the score.

Usage:
    from dentalref.core.relevance import link_related

    for entry in link_related(selected, candidates):
        print(entry.relevance_score, entry.relationship, entry.procedure.name)
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from dentalref.core.config import DEFAULT_ENGINE_CONFIG
from dentalref.shared.keywords import extract_keywords
from dentalref.shared.models import Procedure, RelatedProcedure

logger = logging.getLogger(__name__)


# =============================================================================
# Relevance Score
# =============================================================================

SAME_CATEGORY_POINTS = 30
KEYWORD_POINTS = 10
DIFFERENTIAL_POINTS = 5
INVESTIGATION_POINTS = 3


def overlaps(a: str, b: str) -> bool:
    """Case-insensitive substring match in either direction."""
    a_l, b_l = a.lower(), b.lower()
    return a_l in b_l or b_l in a_l


def common_keywords(main: Procedure, candidate: Procedure) -> List[str]:
    """Main diagnosis keywords that also occur in the candidate's diagnosis."""
    candidate_keywords = set(extract_keywords(candidate.diagnosis))
    return [k for k in extract_keywords(main.diagnosis) if k in candidate_keywords]


def _count_overlapping(candidate_items: Sequence[str], main_items: Sequence[str]) -> int:
    return sum(
        1 for item in candidate_items
        if any(overlaps(item, main_item) for main_item in main_items)
    )


def relevance(main: Procedure, candidate: Procedure) -> int:
    """
    Relatedness of a candidate procedure to the selected one.

    +30 same category, +10 per shared diagnosis keyword, +5 per candidate
    differential overlapping any of main's, +3 per overlapping investigation.
    Never negative.
    """
    score = 0
    if main.category == candidate.category:
        score += SAME_CATEGORY_POINTS

    score += KEYWORD_POINTS * len(common_keywords(main, candidate))
    score += DIFFERENTIAL_POINTS * _count_overlapping(
        candidate.differential_diagnosis, main.differential_diagnosis
    )
    score += INVESTIGATION_POINTS * _count_overlapping(
        candidate.investigations, main.investigations
    )
    return score


def rank_related(main: Procedure, candidates: Sequence[Procedure]) -> List[Procedure]:
    """Candidates by descending relevance; ties keep input order."""
    return sorted(candidates, key=lambda c: relevance(main, c), reverse=True)


# =============================================================================
# Relationship Labels
# =============================================================================

@dataclass(frozen=True)
class RelationshipRule:
    """First matching rule names the relationship."""
    label: str
    predicate: Callable[[Procedure, Procedure], bool]


def _same_category(main: Procedure, candidate: Procedure) -> bool:
    return main.category == candidate.category


def _names(main: Procedure, candidate: Procedure) -> Tuple[str, str]:
    return main.name.lower(), candidate.name.lower()


def _replacement(main: Procedure, candidate: Procedure) -> bool:
    main_name, cand_name = _names(main, candidate)
    return _same_category(main, candidate) and "extraction" in main_name and "implant" in cand_name


def _restorative_follow_up(main: Procedure, candidate: Procedure) -> bool:
    main_name, cand_name = _names(main, candidate)
    return (
        _same_category(main, candidate)
        and "root canal" in main_name
        and ("crown" in cand_name or "restoration" in cand_name)
    )


def _maintenance(main: Procedure, candidate: Procedure) -> bool:
    main_name, cand_name = _names(main, candidate)
    return _same_category(main, candidate) and "periodontal" in main_name and "maintenance" in cand_name


RELATIONSHIP_RULES: Tuple[RelationshipRule, ...] = (
    RelationshipRule("Replacement therapy", _replacement),
    RelationshipRule("Restorative follow-up", _restorative_follow_up),
    RelationshipRule("Maintenance therapy", _maintenance),
    RelationshipRule("Same specialty", _same_category),
    RelationshipRule(
        "Emergency consideration",
        lambda main, cand: cand.category == "Emergency" and main.category != "Emergency",
    ),
    RelationshipRule(
        "Preventive care",
        lambda main, cand: cand.category in ("Preventive", "Pediatric"),
    ),
)

DEFAULT_RELATIONSHIP = "Related treatment"


def classify_relationship(
    main: Procedure,
    candidate: Procedure,
    rules: Sequence[RelationshipRule] = RELATIONSHIP_RULES,
) -> str:
    """Display label for how a candidate relates to the selected procedure."""
    for rule in rules:
        if rule.predicate(main, candidate):
            return rule.label
    return DEFAULT_RELATIONSHIP


def link_related(main: Procedure, candidates: Sequence[Procedure]) -> List[RelatedProcedure]:
    """Score and label candidates, best first (stable)."""
    linked = [
        RelatedProcedure(
            procedure=candidate,
            relevance_score=relevance(main, candidate),
            relationship=classify_relationship(main, candidate),
        )
        for candidate in candidates
    ]
    linked.sort(key=lambda r: r.relevance_score, reverse=True)
    logger.debug(f"Linked {len(linked)} procedures to {main.id}")
    return linked


# =============================================================================
# Follow-up & Preventive Groupings
# =============================================================================

@dataclass(frozen=True)
class FollowUpRule:
    """When the selected procedure name matches, suggest the first target found."""
    triggers: Tuple[str, ...]
    targets: Tuple[str, ...]
    relevance_score: int
    relationship: str


FOLLOW_UP_RULES: Tuple[FollowUpRule, ...] = (
    FollowUpRule(("extraction", "surgery"), ("post-operative", "follow-up"), 100, "Post-operative care"),
    FollowUpRule(("root canal", "rct"), ("crown", "bridge"), 95, "Restorative completion"),
    FollowUpRule(("periodontal",), ("maintenance", "cleaning"), 90, "Maintenance therapy"),
)

PREVENTIVE_CATEGORY = "Preventive"
PREVENTIVE_NAME_TERMS: Tuple[str, ...] = ("sealant", "fluoride", "prophylaxis")
PREVENTIVE_SCORE = 80
PREVENTIVE_RELATIONSHIP = "Preventive care"
MAX_RELATED_IN_SUMMARY = 3


def _name_contains(procedure: Procedure, terms: Sequence[str]) -> bool:
    name = procedure.name.lower()
    return any(term in name for term in terms)


def follow_up_treatments(
    main: Procedure,
    all_procedures: Sequence[Procedure],
    rules: Sequence[FollowUpRule] = FOLLOW_UP_RULES,
) -> List[RelatedProcedure]:
    """
    Typical next treatments after the selected procedure.

    Each matching rule contributes the first procedure whose name contains
    one of its targets, so at most one entry per rule.
    """
    follow_ups = []
    for rule in rules:
        if not _name_contains(main, rule.triggers):
            continue
        target = next((p for p in all_procedures if _name_contains(p, rule.targets)), None)
        if target is not None:
            follow_ups.append(RelatedProcedure(
                procedure=target,
                relevance_score=rule.relevance_score,
                relationship=rule.relationship,
            ))
    return follow_ups


def preventive_services(
    all_procedures: Sequence[Procedure],
    limit: int = DEFAULT_ENGINE_CONFIG.preventive_limit,
) -> List[RelatedProcedure]:
    """First preventive procedures in dataset order."""
    preventive = [
        p for p in all_procedures
        if p.category == PREVENTIVE_CATEGORY or _name_contains(p, PREVENTIVE_NAME_TERMS)
    ]
    return [
        RelatedProcedure(
            procedure=p,
            relevance_score=PREVENTIVE_SCORE,
            relationship=PREVENTIVE_RELATIONSHIP,
        )
        for p in preventive[:max(limit, 0)]
    ]


def service_recommendations(
    main: Optional[Procedure],
    related: Sequence[RelatedProcedure],
    follow_ups: Sequence[RelatedProcedure] = (),
) -> List[str]:
    """Plain-text service plan: primary, top related, then follow-ups."""
    lines = []
    if main is not None:
        lines.append(f"Primary: {main.name}")
    for entry in related[:MAX_RELATED_IN_SUMMARY]:
        lines.append(f"Related: {entry.procedure.name}")
    for entry in follow_ups:
        lines.append(f"Follow-up: {entry.procedure.name}")
    return lines
