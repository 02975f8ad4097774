"""Shared enumerations for criteria profiles, comparison and rule output."""

from enum import Enum


class Location(str, Enum):
    """Anatomical location of the restoration."""
    ANTERIOR = "anterior"
    POSTERIOR = "posterior"
    ANY = "any"


class StressLevel(str, Enum):
    """Expected occlusal stress."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class AestheticRequirement(str, Enum):
    """How much the visible result matters."""
    MINIMAL = "minimal"
    IMPORTANT = "important"
    CRITICAL = "critical"


class PatientAge(str, Enum):
    """Patient age bucket."""
    PEDIATRIC = "pediatric"
    ADULT = "adult"
    GERIATRIC = "geriatric"


class CostConstraint(str, Enum):
    """Budget preference."""
    BUDGET = "budget"
    MODERATE = "moderate"
    PREMIUM = "premium"


class LongevityExpectation(str, Enum):
    """Expected service life."""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class PropertyCategory(str, Enum):
    """Comparison matrix property grouping."""
    PHYSICAL = "physical"
    BIOLOGICAL = "biological"
    CLINICAL = "clinical"
    OPTICAL = "optical"


class OverallRating(str, Enum):
    """Banded rating of an averaged comparison score."""
    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


class MessageKind(Enum):
    """Which explanation list a rule message is appended to."""
    REASONING = "reasoning"
    WARNING = "warning"
    ALTERNATIVE = "alternative"
