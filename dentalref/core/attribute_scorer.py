"""
DentalRef - Attribute Scoring
=============================

Maps a single qualitative property value ("Excellent", "Very High",
"15+ years") onto a small integer scale.

Each known property key has its own ladder: an ordered list of
keyword -> score steps evaluated by first substring match. Order is the
precedence, so a value containing both "good" and "excellent" scores as
excellent on the aesthetics ladder.

Scores:
    0      value absent or "N/A"
    1..4   ladder match
    2      value present but no ladder keyword found (moderate default)

fluoride_release is a binary rule rather than a ladder: 3 when the value
mentions "yes", otherwise 1.
"""

import logging
from typing import Dict, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

Ladder = Tuple[Tuple[Tuple[str, ...], int], ...]

ABSENT_SCORE = 0
DEFAULT_SCORE = 2
NOT_AVAILABLE = "N/A"
VALUE_SEPARATOR = ", "


# =============================================================================
# LADDERS
# =============================================================================

STRENGTH_LADDER: Ladder = (
    (("very high",), 4),
    (("high",), 3),
    (("moderate",), 2),
    (("low",), 1),
)

AESTHETICS_LADDER: Ladder = (
    (("excellent",), 4),
    (("good",), 3),
    (("fair",), 2),
    (("poor",), 1),
)

DURATION_LADDER: Ladder = (
    (("20+", "15+"), 4),
    (("10-15",), 3),
    (("5-10",), 2),
    (("3-5",), 1),
)

# No explicit "poor" tier; unmatched values fall back to DEFAULT_SCORE.
BIOCOMPATIBILITY_LADDER: Ladder = (
    (("excellent",), 4),
    (("good",), 3),
    (("moderate",), 2),
)

WEAR_RESISTANCE_LADDER: Ladder = (
    (("excellent",), 4),
    (("high", "good"), 3),
    (("moderate",), 2),
    (("poor", "low"), 1),
)

GENERIC_LADDER: Ladder = (
    (("excellent",), 4),
    (("good", "high"), 3),
    (("moderate", "fair"), 2),
    (("poor", "low"), 1),
)

PROPERTY_LADDERS: Dict[str, Ladder] = {
    "strength": STRENGTH_LADDER,
    "aesthetics": AESTHETICS_LADDER,
    "durability": DURATION_LADDER,
    "longevity": DURATION_LADDER,
    "biocompatibility": BIOCOMPATIBILITY_LADDER,
    "wear_resistance": WEAR_RESISTANCE_LADDER,
}

FLUORIDE_RELEASE_KEY = "fluoride_release"
FLUORIDE_PRESENT_SCORE = 3
FLUORIDE_ABSENT_SCORE = 1


# =============================================================================
# SCORING
# =============================================================================

def first_match(text: str, ladder: Ladder, default: int) -> int:
    """Score of the first ladder step whose keywords occur in ``text``."""
    for keywords, score in ladder:
        if any(keyword in text for keyword in keywords):
            return score
    return default


def normalize_value(value: Union[str, Sequence[str]]) -> str:
    """Join sequence values and lower-case the result."""
    if isinstance(value, str):
        return value.lower()
    return VALUE_SEPARATOR.join(value).lower()


def score_attribute(
    property_key: str,
    value: Optional[Union[str, Sequence[str]]],
) -> int:
    """
    Score one property value on its key's ladder.

    Args:
        property_key: Property name (e.g. "strength", "aesthetics")
        value: Descriptor string, list of descriptors, or None

    Returns:
        Integer in [0, 4]; {1, 3} for fluoride_release
    """
    if not value or value == NOT_AVAILABLE:
        return ABSENT_SCORE

    text = normalize_value(value)
    key = property_key.lower()

    if key == FLUORIDE_RELEASE_KEY:
        return FLUORIDE_PRESENT_SCORE if "yes" in text else FLUORIDE_ABSENT_SCORE

    ladder = PROPERTY_LADDERS.get(key, GENERIC_LADDER)
    return first_match(text, ladder, DEFAULT_SCORE)
