"""Learning-preference extraction, validation and re-embedding."""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from profile_narrative import construct_user_profile_string
from trait_scoring import LIKERT_MAX, LIKERT_MIN

logger = logging.getLogger(__name__)

ALLOWED_FIELDS = (
    'role',
    'learningGoals',
    'learningGoalText',
    'learningChallenges',
    'learningChallengesText',
    'personalityProfile',
    'preferredMaterialsRanked',
    'dailyTimeMinutes',
)

PROFILE_FIELDS = (
    'conscientiousness',
    'emotionalStability',
    'selfEfficacy',
    'masteryOrientation',
    'performanceOrientation',
)

MAX_PREFERRED_MATERIALS = 3


class PreferencesValidationError(ValueError):
    """Learning preferences payload failed validation"""


def extract_learning_preferences(payload: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Copy only the learning-preference fields; anything else is dropped."""
    payload = payload or {}
    return {key: payload[key] for key in ALLOWED_FIELDS if key in payload}


def _is_valid_score(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return LIKERT_MIN <= value <= LIKERT_MAX


def validate_learning_preferences(prefs: Mapping[str, Any]) -> None:
    """Raise PreferencesValidationError on the first rule the record breaks."""
    goals = prefs.get('learningGoals')
    if not goals or not isinstance(goals, list):
        raise PreferencesValidationError('Learning goals are required')

    profile = prefs.get('personalityProfile')
    if profile is not None:
        if not isinstance(profile, Mapping) or not all(
            _is_valid_score(profile.get(name)) for name in PROFILE_FIELDS
        ):
            raise PreferencesValidationError(
                'Personality profile scores must be between 1 and 7'
            )

    materials = prefs.get('preferredMaterialsRanked')
    if materials is not None and not isinstance(materials, list):
        raise PreferencesValidationError('Preferred materials must be a list')
    if materials and len(materials) > MAX_PREFERRED_MATERIALS:
        raise PreferencesValidationError(
            f"Maximum {MAX_PREFERRED_MATERIALS} preferred materials allowed"
        )

    daily_time = prefs.get('dailyTimeMinutes')
    if daily_time is not None:
        if not isinstance(daily_time, (int, float)) or isinstance(daily_time, bool) or daily_time < 0:
            raise PreferencesValidationError('Daily time must be a positive number')


def embed_profile_narrative(
    narrative: str,
    embedder: Optional[Callable[[str], List[float]]] = None,
) -> Optional[List[float]]:
    """
    Embed a narrative, returning None when there is nothing to embed,
    no service configured, or the service failed (logged, never raised).
    """
    if not narrative:
        logger.info('Skipping embedding: profile string is empty')
        return None
    if embedder is None:
        logger.info('Skipping embedding: no embedding service configured')
        return None

    try:
        embedding = embedder(narrative)
    except Exception as e:
        logger.error(f"❌ Failed to generate profile embedding: {e}")
        return None

    logger.info(f"✓ Generated profile embedding ({len(embedding)} dims)")
    return embedding


def prepare_preferences_update(
    payload: Optional[Mapping[str, Any]],
    embedder: Optional[Callable[[str], List[float]]] = None,
) -> Dict[str, Any]:
    """
    Validate a preferences payload and build the record to store

    Args:
        payload: Raw request body
        embedder: Optional callable turning the narrative into a vector

    Returns:
        {'learning': allowed fields, 'narrative': str, 'embedding': list or None}

    A failing embedder is logged and the record is returned without a
    vector, so the save still goes through.
    """
    learning = extract_learning_preferences(payload)
    validate_learning_preferences(learning)

    narrative = construct_user_profile_string(learning)
    logger.debug(f"Constructed profile string: {narrative}")

    return {
        'learning': learning,
        'narrative': narrative,
        'embedding': embed_profile_narrative(narrative, embedder),
    }


def reembed_profiles(
    records: Mapping[str, Dict[str, Any]],
    embed_batch: Callable[[List[str]], List[List[float]]],
) -> int:
    """
    Rebuild every stored narrative and re-embed them in one batch request

    Records with an empty narrative lose their embedding. Errors from
    embed_batch propagate; no record is modified in that case.

    Returns:
        Number of records that received a new vector
    """
    narratives = {
        user_id: construct_user_profile_string(record.get('learning'))
        for user_id, record in records.items()
    }
    pending = [user_id for user_id, narrative in narratives.items() if narrative]

    vectors = embed_batch([narratives[user_id] for user_id in pending]) if pending else []

    for user_id, record in records.items():
        record['narrative'] = narratives[user_id]
        record['embedding'] = None
    for user_id, vector in zip(pending, vectors):
        records[user_id]['embedding'] = vector

    logger.info(f"✓ Re-embedded {len(pending)}/{len(records)} profiles")
    return len(pending)
