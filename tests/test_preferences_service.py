import logging
from unittest.mock import MagicMock

import pytest

from embedding_client import EmbeddingError
from preferences_service import (
    PreferencesValidationError,
    embed_profile_narrative,
    extract_learning_preferences,
    prepare_preferences_update,
    reembed_profiles,
    validate_learning_preferences,
)

VALID_PROFILE = {
    'conscientiousness': 5.14,
    'emotionalStability': 3.86,
    'selfEfficacy': 6,
    'masteryOrientation': 7,
    'performanceOrientation': 2,
}


@pytest.fixture
def payload():
    return {
        'user_id': 'u1',
        'role': 'Student',
        'learningGoals': ['Linear algebra'],
        'personalityProfile': dict(VALID_PROFILE),
        'preferredMaterialsRanked': ['Quizzes', 'Flashcards'],
        'dailyTimeMinutes': 30,
        'subjects': ['legacy field'],
    }


def test_extract_drops_unknown_fields(payload):
    learning = extract_learning_preferences(payload)
    assert 'user_id' not in learning
    assert 'subjects' not in learning
    assert learning['role'] == 'Student'
    assert learning['dailyTimeMinutes'] == 30


def test_extract_handles_none():
    assert extract_learning_preferences(None) == {}


def test_valid_preferences_pass(payload):
    validate_learning_preferences(extract_learning_preferences(payload))


@pytest.mark.parametrize("goals", [None, [], 'Algebra'])
def test_goals_required(payload, goals):
    payload['learningGoals'] = goals
    with pytest.raises(PreferencesValidationError, match="Learning goals are required"):
        validate_learning_preferences(extract_learning_preferences(payload))


@pytest.mark.parametrize("field, value", [
    ('conscientiousness', 0),
    ('selfEfficacy', 7.5),
    ('masteryOrientation', None),
    ('performanceOrientation', 'high'),
])
def test_profile_scores_in_range(payload, field, value):
    payload['personalityProfile'][field] = value
    with pytest.raises(PreferencesValidationError, match="between 1 and 7"):
        validate_learning_preferences(extract_learning_preferences(payload))


def test_too_many_materials(payload):
    payload['preferredMaterialsRanked'] = ['Quizzes', 'Flashcards', 'Mind Maps', 'Study Guides']
    with pytest.raises(PreferencesValidationError, match="Maximum 3"):
        validate_learning_preferences(extract_learning_preferences(payload))


@pytest.mark.parametrize("materials", [5, 'Quizzes', {'a': 1}])
def test_materials_must_be_a_list(payload, materials):
    payload['preferredMaterialsRanked'] = materials
    with pytest.raises(PreferencesValidationError, match="must be a list"):
        validate_learning_preferences(extract_learning_preferences(payload))


def test_negative_daily_time(payload):
    payload['dailyTimeMinutes'] = -5
    with pytest.raises(PreferencesValidationError, match="positive"):
        validate_learning_preferences(extract_learning_preferences(payload))


def test_prepare_without_embedder(payload):
    update = prepare_preferences_update(payload)

    assert update['embedding'] is None
    assert update['narrative'].startswith("I am a Student.")
    assert 'user_id' not in update['learning']


def test_prepare_with_embedder(payload):
    embed = MagicMock(return_value=[0.6, 0.8])

    update = prepare_preferences_update(payload, embedder=embed)

    embed.assert_called_once_with(update['narrative'])
    assert update['embedding'] == [0.6, 0.8]


def test_embedding_failure_does_not_block(payload, caplog):
    embed = MagicMock(side_effect=EmbeddingError("service down"))

    with caplog.at_level(logging.ERROR, logger="preferences_service"):
        update = prepare_preferences_update(payload, embedder=embed)

    assert update['embedding'] is None
    assert update['narrative']
    assert "service down" in caplog.text


def test_invalid_payload_raises_before_embedding(payload):
    embed = MagicMock()
    payload['learningGoals'] = []

    with pytest.raises(PreferencesValidationError):
        prepare_preferences_update(payload, embedder=embed)
    embed.assert_not_called()


def test_embed_skips_empty_narrative():
    embed = MagicMock()
    assert embed_profile_narrative('', embedder=embed) is None
    embed.assert_not_called()


def test_embed_without_embedder():
    assert embed_profile_narrative("I am a Student.") is None


def _stored(learning):
    return {'learning': learning, 'narrative': '', 'embedding': [0.0], 'updated_at': None}


def test_reembed_profiles_in_order():
    records = {
        'a': _stored({'role': 'Student'}),
        'b': _stored({}),
        'c': _stored({'learningGoals': ['Calculus']}),
    }
    embed_batch = MagicMock(return_value=[[1.0], [2.0]])

    count = reembed_profiles(records, embed_batch)

    assert count == 2
    embed_batch.assert_called_once_with([
        "I am a Student.",
        "I am actively looking to acquire knowledge in: Calculus. Keywords: Calculus.",
    ])
    assert records['a']['embedding'] == [1.0]
    assert records['b']['embedding'] is None
    assert records['b']['narrative'] == ''
    assert records['c']['embedding'] == [2.0]
    assert records['c']['narrative'].startswith("I am actively looking")


def test_reembed_without_narratives_skips_request():
    records = {'a': _stored({})}
    embed_batch = MagicMock()

    assert reembed_profiles(records, embed_batch) == 0
    embed_batch.assert_not_called()
    assert records['a']['embedding'] is None


def test_reembed_failure_leaves_records_untouched():
    records = {'a': _stored({'role': 'Student'})}
    embed_batch = MagicMock(side_effect=EmbeddingError("service down"))

    with pytest.raises(EmbeddingError):
        reembed_profiles(records, embed_batch)

    assert records['a']['embedding'] == [0.0]
    assert records['a']['narrative'] == ''
