"""
Personality trait scoring for the onboarding questionnaire.

Research-backed psychometric scales, all answered on a 1-7 Likert scale
(Strongly Disagree -> Strongly Agree):
- Conscientiousness: 7 items (Big Five Inventory)
- Emotional Stability: 7 items (Big Five Inventory)
- Self-Efficacy: 3 items (General Self-Efficacy Scale)
- Goal Orientations: 2 direct slider values (Mastery & Performance)

Negatively-worded items are reverse scored before averaging.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Sequence, Tuple

LIKERT_MIN = 1
LIKERT_MAX = 7

# 1-indexed item positions of negatively-worded items
CONSCIENTIOUSNESS_REVERSE_ITEMS: Tuple[int, ...] = (2, 5, 7)
EMOTIONAL_STABILITY_REVERSE_ITEMS: Tuple[int, ...] = (2, 4, 6)
SELF_EFFICACY_REVERSE_ITEMS: Tuple[int, ...] = ()

SCALE_LENGTHS: Dict[str, int] = {
    'conscientiousness': 7,
    'emotional_stability': 7,
    'self_efficacy': 3,
}


# ============================================================================
# ERRORS
# ============================================================================

class ScoringError(ValueError):
    """Base class for questionnaire scoring errors"""


class LikertRangeError(ScoringError):
    """A single Likert value fell outside 1-7"""


class ResponseLengthError(ScoringError):
    """A scale received the wrong number of responses"""


class EmptyResponsesError(ScoringError):
    """Average requested over zero responses"""


class ProfileValidationError(ScoringError):
    """One of the profile inputs failed validation"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class PersonalityProfile:
    """Five trait scores on the 1-7 scale, rounded to 2 decimals"""
    conscientiousness: float
    emotional_stability: float
    self_efficacy: float
    mastery_orientation: float
    performance_orientation: float

    def to_dict(self) -> Dict[str, float]:
        """camelCase form stored on the user's preference record"""
        return {
            'conscientiousness': self.conscientiousness,
            'emotionalStability': self.emotional_stability,
            'selfEfficacy': self.self_efficacy,
            'masteryOrientation': self.mastery_orientation,
            'performanceOrientation': self.performance_orientation,
        }

    def as_trait_scores(self) -> Dict[str, float]:
        return asdict(self)


# ============================================================================
# CORE SCORING FUNCTIONS
# ============================================================================

def round_score(value: float) -> float:
    """Round half-up to 2 decimal places"""
    rounded = Decimal(repr(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return float(rounded)


def reverse_score(score: int) -> int:
    """Reverse a negatively-worded item (1->7, 2->6, ... 7->1)"""
    if score < LIKERT_MIN or score > LIKERT_MAX:
        raise LikertRangeError(
            f"Invalid Likert value {score}: score must be between {LIKERT_MIN} and {LIKERT_MAX}"
        )
    return (LIKERT_MAX + 1) - score


def calculate_average(scores: Sequence[float]) -> float:
    """Arithmetic mean rounded to 2 decimal places"""
    if len(scores) == 0:
        raise EmptyResponsesError('Cannot calculate average of empty input')
    return round_score(sum(scores) / len(scores))


def _score_scale(
    responses: Sequence[int],
    scale_name: str,
    label: str,
    reverse_items: Tuple[int, ...],
) -> float:
    expected = SCALE_LENGTHS[scale_name]
    if len(responses) != expected:
        raise ResponseLengthError(
            f"{label} requires exactly {expected} responses, got {len(responses)}"
        )

    scored: List[int] = []
    for position, response in enumerate(responses, start=1):
        if position in reverse_items:
            scored.append(reverse_score(response))
        else:
            scored.append(response)
    return calculate_average(scored)


def score_conscientiousness(responses: Sequence[int]) -> float:
    """
    Conscientiousness (7 items)

    Items 2 ("I get distracted easily"), 5 ("I procrastinate frequently")
    and 7 ("I lose track of time when studying") are reverse scored.
    """
    return _score_scale(
        responses,
        'conscientiousness',
        'Conscientiousness',
        CONSCIENTIOUSNESS_REVERSE_ITEMS,
    )


def score_emotional_stability(responses: Sequence[int]) -> float:
    """
    Emotional Stability (7 items)

    Items 2 ("I get stressed easily"), 4 ("I worry about making mistakes")
    and 6 ("I feel overwhelmed by difficult tasks") are reverse scored.
    """
    return _score_scale(
        responses,
        'emotional_stability',
        'Emotional Stability',
        EMOTIONAL_STABILITY_REVERSE_ITEMS,
    )


def score_self_efficacy(responses: Sequence[int]) -> float:
    """Self-Efficacy (3 items, all positively worded)"""
    return _score_scale(
        responses,
        'self_efficacy',
        'Self-Efficacy',
        SELF_EFFICACY_REVERSE_ITEMS,
    )


def validate_scores(scores: Sequence[float]) -> bool:
    """True when every score lies within 1-7"""
    return all(LIKERT_MIN <= score <= LIKERT_MAX for score in scores)


def compute_personality_profile(
    conscientiousness_responses: Sequence[int],
    emotional_stability_responses: Sequence[int],
    self_efficacy_responses: Sequence[int],
    mastery_orientation: float,
    performance_orientation: float,
) -> PersonalityProfile:
    """
    Compute the complete personality profile from onboarding responses

    Args:
        conscientiousness_responses: 7 responses for conscientiousness items
        emotional_stability_responses: 7 responses for emotional stability items
        self_efficacy_responses: 3 responses for self-efficacy items
        mastery_orientation: Single slider value (1-7)
        performance_orientation: Single slider value (1-7)

    Returns:
        PersonalityProfile with all five traits

    Raises:
        ProfileValidationError: naming the first input outside 1-7, checked
            in argument order. Nothing is computed until all inputs pass.
    """
    checks = [
        ('conscientiousness', 'Conscientiousness responses',
         validate_scores(conscientiousness_responses)),
        ('emotional_stability', 'Emotional stability responses',
         validate_scores(emotional_stability_responses)),
        ('self_efficacy', 'Self-efficacy responses',
         validate_scores(self_efficacy_responses)),
        ('mastery_orientation', 'Mastery orientation',
         validate_scores([mastery_orientation])),
        ('performance_orientation', 'Performance orientation',
         validate_scores([performance_orientation])),
    ]
    for field, label, valid in checks:
        if not valid:
            raise ProfileValidationError(field, f"{label} must be between 1 and 7")

    return PersonalityProfile(
        conscientiousness=score_conscientiousness(conscientiousness_responses),
        emotional_stability=score_emotional_stability(emotional_stability_responses),
        self_efficacy=score_self_efficacy(self_efficacy_responses),
        mastery_orientation=round_score(mastery_orientation),
        performance_orientation=round_score(performance_orientation),
    )
