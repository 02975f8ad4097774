"""Shared models, enums, exceptions and text utilities."""

from .enums import (
    Location,
    StressLevel,
    AestheticRequirement,
    PatientAge,
    CostConstraint,
    LongevityExpectation,
    PropertyCategory,
    OverallRating,
    MessageKind,
)

from .exceptions import (
    DentalRefException,
    ConfigurationError,
    ValidationError,
    ComparisonError,
    DataStoreError,
    DataLoadError,
    EntityNotFoundError,
)

from .models import (
    ManagementStep,
    Material,
    Procedure,
    CriteriaProfile,
    MatchOutcome,
    ScoredResult,
    ComparisonCell,
    ComparisonRow,
    EntityTotals,
    ComparisonMatrix,
    BestRecommendation,
    MaterialComparison,
    RelatedProcedure,
)

from .keywords import extract_keywords, STOP_WORDS
