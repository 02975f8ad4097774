"""
DentalRef - Criteria Matching
=============================

Evaluates one material against a criteria profile using an ordered rule
table. Each rule is a ``(predicate, delta, message)`` entry:

- every rule is evaluated, there is no short-circuit
- a rule whose predicate holds adds its delta and appends its message to
  reasoning, warnings or alternatives
- messages are appended in table order and never deduplicated
- every rule carries a message, so no delta is applied silently

Branches of one clinical check (e.g. anterior with good aesthetics vs.
anterior without) are separate rules with mutually exclusive predicates
sharing a group name.

Usage:
    from dentalref.core.criteria_rules import match_entity

    outcome = match_entity(material, profile, already_selected={"mat-003"})
    print(outcome.score_delta, outcome.reasoning, outcome.warnings)
"""

import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from dentalref.shared.enums import (
    AestheticRequirement,
    CostConstraint,
    Location,
    LongevityExpectation,
    MessageKind,
    PatientAge,
    StressLevel,
)
from dentalref.shared.models import CriteriaProfile, MatchOutcome, Material

logger = logging.getLogger(__name__)


# =============================================================================
# Rule Context
# =============================================================================

@dataclass(frozen=True)
class RuleContext:
    """Lower-cased views of one material plus the profile being matched."""
    entity: Material
    profile: CriteriaProfile
    already_selected: FrozenSet[str]
    procedure: str
    name: str
    aesthetics: str
    strength: str
    biocompatibility: str
    fluoride_release: str
    durability: str
    longevity: str
    cost: str

    @classmethod
    def build(
        cls,
        entity: Material,
        profile: CriteriaProfile,
        already_selected: Iterable[str] = (),
    ) -> "RuleContext":
        return cls(
            entity=entity,
            profile=profile,
            already_selected=frozenset(already_selected),
            procedure=profile.procedure_text.strip(),
            name=entity.name.lower(),
            aesthetics=entity.property_text("aesthetics"),
            strength=entity.property_text("strength"),
            biocompatibility=entity.property_text("biocompatibility"),
            fluoride_release=entity.property_text("fluoride_release"),
            durability=entity.property_text("durability"),
            longevity=entity.longevity.lower(),
            cost=entity.cost_considerations.lower(),
        )

    @property
    def category(self) -> str:
        return self.entity.category


Predicate = Callable[[RuleContext], bool]
Message = Union[str, Callable[[RuleContext], str]]


@dataclass(frozen=True)
class CriteriaRule:
    """One scoring rule: predicate, signed delta and explanation."""
    group: str
    predicate: Predicate
    delta: int
    message: Message
    kind: MessageKind = MessageKind.REASONING

    def render(self, ctx: RuleContext) -> str:
        if callable(self.message):
            return self.message(ctx)
        return self.message


@dataclass(frozen=True)
class RuleHit:
    """A rule that fired for a given context."""
    rule: CriteriaRule
    text: str

    @property
    def delta(self) -> int:
        return self.rule.delta

    @property
    def kind(self) -> MessageKind:
        return self.rule.kind


# =============================================================================
# Predicate helpers
# =============================================================================

def _contains_any(text: str, *needles: str) -> bool:
    return any(n in text for n in needles)


def contraindication_matches(tag: str, entity_contraindication: str) -> bool:
    """
    Fuzzy contraindication match, case-insensitive.

    True when either string contains the other, or the requested tag
    contains the first word of the material's contraindication.
    """
    tag_l = tag.lower().strip()
    contra_l = entity_contraindication.lower().strip()
    if not tag_l or not contra_l:
        return False
    if tag_l in contra_l or contra_l in tag_l:
        return True
    return contra_l.split()[0] in tag_l


def _procedure_matches(ctx: RuleContext) -> bool:
    proc = ctx.procedure
    if not proc:
        return False
    if any(proc in ind.lower() for ind in ctx.entity.indications):
        return True
    if "crown" in proc and "crown" in ctx.name:
        return True
    if "restoration" in proc and ctx.category == "Restorative":
        return True
    return "implant" in proc and ctx.category == "Implant"


def _good_aesthetics(ctx: RuleContext) -> bool:
    return _contains_any(ctx.aesthetics, "excellent", "good")


def _high_strength(ctx: RuleContext) -> bool:
    return _contains_any(ctx.strength, "very high", "high")


def _long_lasting(ctx: RuleContext) -> bool:
    return (
        _contains_any(ctx.longevity, "20+", "15+")
        or _contains_any(ctx.durability, "20+", "15+")
    )


def _cheap(ctx: RuleContext) -> bool:
    return _contains_any(ctx.cost, "low", "cost-effective")


def _expensive(ctx: RuleContext) -> bool:
    return _contains_any(ctx.cost, "high", "very high")


def _has_matching_contraindication(ctx: RuleContext) -> bool:
    return any(
        contraindication_matches(tag, contra)
        for tag in ctx.profile.contraindications
        for contra in ctx.entity.contraindications
    )


# =============================================================================
# Rule Table
# =============================================================================

W = MessageKind.WARNING
A = MessageKind.ALTERNATIVE

DEFAULT_RULES: Tuple[CriteriaRule, ...] = (
    # 1. Procedure / indication match
    CriteriaRule(
        "procedure",
        _procedure_matches,
        25,
        lambda ctx: f"Suitable for {ctx.profile.procedure_type}",
    ),

    # 2. Location
    CriteriaRule(
        "location",
        lambda ctx: ctx.profile.location == Location.ANTERIOR and _good_aesthetics(ctx),
        20,
        "Excellent aesthetics for anterior use",
    ),
    CriteriaRule(
        "location",
        lambda ctx: ctx.profile.location == Location.ANTERIOR and not _good_aesthetics(ctx),
        -10,
        "May not meet anterior aesthetic requirements",
        W,
    ),
    CriteriaRule(
        "location",
        lambda ctx: ctx.profile.location == Location.POSTERIOR and _high_strength(ctx),
        20,
        "High strength suitable for posterior loading",
    ),
    CriteriaRule(
        "location",
        lambda ctx: ctx.profile.location == Location.POSTERIOR and not _high_strength(ctx),
        -15,
        "May not withstand posterior occlusal forces",
        W,
    ),

    # 3. Stress level
    CriteriaRule(
        "stress",
        lambda ctx: ctx.profile.stress_level == StressLevel.HIGH and _high_strength(ctx),
        15,
        "Handles high stress situations well",
    ),
    CriteriaRule(
        "stress",
        lambda ctx: ctx.profile.stress_level == StressLevel.HIGH and not _high_strength(ctx),
        -20,
        "May not be suitable for high-stress applications",
        W,
    ),

    # 4. Aesthetic requirement
    CriteriaRule(
        "aesthetics",
        lambda ctx: (
            ctx.profile.aesthetic_requirement == AestheticRequirement.CRITICAL
            and "excellent" in ctx.aesthetics
        ),
        15,
        "Meets critical aesthetic demands",
    ),
    CriteriaRule(
        "aesthetics",
        lambda ctx: (
            ctx.profile.aesthetic_requirement == AestheticRequirement.CRITICAL
            and "excellent" not in ctx.aesthetics
            and "good" in ctx.aesthetics
        ),
        8,
        "Good aesthetics, short of critical demands",
    ),
    CriteriaRule(
        "aesthetics",
        lambda ctx: (
            ctx.profile.aesthetic_requirement == AestheticRequirement.CRITICAL
            and "excellent" not in ctx.aesthetics
            and "good" in ctx.aesthetics
        ),
        0,
        "Consider material with better aesthetics for critical cases",
        A,
    ),
    CriteriaRule(
        "aesthetics",
        lambda ctx: (
            ctx.profile.aesthetic_requirement == AestheticRequirement.CRITICAL
            and not _good_aesthetics(ctx)
        ),
        -15,
        "May not meet critical aesthetic requirements",
        W,
    ),

    # 5. Patient age
    CriteriaRule(
        "age",
        lambda ctx: ctx.profile.patient_age == PatientAge.PEDIATRIC and "yes" in ctx.fluoride_release,
        10,
        "Provides fluoride protection for pediatric patients",
    ),
    CriteriaRule(
        "age",
        lambda ctx: (
            ctx.profile.patient_age == PatientAge.PEDIATRIC
            and ctx.category == "Prosthodontic"
            and "crown" in ctx.name
        ),
        -10,
        "Crowns may not be ideal for pediatric patients",
        W,
    ),
    CriteriaRule(
        "age",
        lambda ctx: ctx.profile.patient_age == PatientAge.GERIATRIC and "excellent" in ctx.biocompatibility,
        8,
        "Excellent biocompatibility suitable for elderly patients",
    ),

    # 6. Cost constraint
    CriteriaRule(
        "cost",
        lambda ctx: ctx.profile.cost_constraint == CostConstraint.BUDGET and _cheap(ctx),
        15,
        "Budget-friendly option",
    ),
    CriteriaRule(
        "cost",
        lambda ctx: (
            ctx.profile.cost_constraint == CostConstraint.BUDGET
            and not _cheap(ctx)
            and _expensive(ctx)
        ),
        -15,
        "May exceed budget constraints",
        W,
    ),
    CriteriaRule(
        "cost",
        lambda ctx: ctx.profile.cost_constraint == CostConstraint.PREMIUM and _expensive(ctx),
        10,
        "Premium option aligns with cost preference",
    ),

    # 7. Longevity expectation
    CriteriaRule(
        "longevity",
        lambda ctx: ctx.profile.longevity == LongevityExpectation.LONG and _long_lasting(ctx),
        15,
        "Excellent long-term durability",
    ),
    CriteriaRule(
        "longevity",
        lambda ctx: (
            ctx.profile.longevity == LongevityExpectation.LONG
            and not _long_lasting(ctx)
            and "10-15" in ctx.longevity
        ),
        8,
        "Good long-term durability",
    ),
    CriteriaRule(
        "longevity",
        lambda ctx: (
            ctx.profile.longevity == LongevityExpectation.SHORT
            and _contains_any(ctx.longevity, "3-5", "5")
        ),
        8,
        "Appropriate for shorter-term applications",
    ),

    # 8. Biocompatibility bonus (always evaluated)
    CriteriaRule(
        "biocompatibility",
        lambda ctx: "excellent" in ctx.biocompatibility,
        10,
        "Excellent biocompatibility profile",
    ),
    CriteriaRule(
        "biocompatibility",
        lambda ctx: "excellent" not in ctx.biocompatibility and "good" in ctx.biocompatibility,
        5,
        "Good biocompatibility profile",
    ),

    # 9. Contraindications
    CriteriaRule(
        "contraindication",
        _has_matching_contraindication,
        -30,
        "Has contraindications that may apply to this case",
        W,
    ),

    # 10. Category-specific bonus
    CriteriaRule(
        "category",
        lambda ctx: ctx.category == "Restorative" and "restoration" in ctx.procedure,
        10,
        "Restorative category matches the requested restoration",
    ),
    CriteriaRule(
        "category",
        lambda ctx: ctx.category == "Prosthodontic" and _contains_any(ctx.procedure, "crown", "bridge"),
        10,
        "Prosthodontic category matches the requested crown or bridge work",
    ),
    CriteriaRule(
        "category",
        lambda ctx: ctx.category == "Implant" and "implant" in ctx.procedure,
        15,
        "Implant category matches the requested implant procedure",
    ),

    # 11. Already selected
    CriteriaRule(
        "selection",
        lambda ctx: ctx.entity.id in ctx.already_selected,
        -5,
        "Already selected for comparison",
    ),
)


# =============================================================================
# Evaluation
# =============================================================================

def evaluate_rule(rule: CriteriaRule, ctx: RuleContext) -> Optional[RuleHit]:
    """Evaluate a single rule; None when its predicate does not hold."""
    if not rule.predicate(ctx):
        return None
    return RuleHit(rule=rule, text=rule.render(ctx))


def evaluate_rules(
    ctx: RuleContext,
    rules: Sequence[CriteriaRule] = DEFAULT_RULES,
) -> List[RuleHit]:
    """All rules that fired, in table order."""
    hits = []
    for rule in rules:
        hit = evaluate_rule(rule, ctx)
        if hit is not None:
            hits.append(hit)
    return hits


def match_entity(
    entity: Material,
    profile: CriteriaProfile,
    already_selected: Iterable[str] = (),
    rules: Sequence[CriteriaRule] = DEFAULT_RULES,
) -> MatchOutcome:
    """
    Score one material against a criteria profile.

    Args:
        entity: Candidate material
        profile: Criteria profile (never mutated)
        already_selected: Ids already picked for comparison
        rules: Rule table, defaults to DEFAULT_RULES

    Returns:
        MatchOutcome with the signed sum of deltas and the explanation lists
    """
    ctx = RuleContext.build(entity, profile, already_selected)
    hits = evaluate_rules(ctx, rules)

    reasoning: List[str] = []
    warnings: List[str] = []
    alternatives: List[str] = []
    buckets = {
        MessageKind.REASONING: reasoning,
        MessageKind.WARNING: warnings,
        MessageKind.ALTERNATIVE: alternatives,
    }

    score = 0
    for hit in hits:
        score += hit.delta
        buckets[hit.kind].append(hit.text)

    return MatchOutcome(
        score_delta=score,
        reasoning=tuple(reasoning),
        warnings=tuple(warnings),
        alternatives=tuple(alternatives),
    )
