"""Turn learner preference records into narrative text for embedding."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from trait_scoring import PersonalityProfile

HIGH_TRAIT_THRESHOLD = 5
LOW_TRAIT_THRESHOLD = 3

# Trait order is the order sentences appear in the narrative
TRAIT_TO_PHRASE_MAPPING: Dict[str, Dict[str, str]] = {
    'conscientiousness': {
        'low': "I prefer flexible, spontaneous exploration over rigid plans.",
        'high': "I am highly disciplined, organized, and prefer structured, step-by-step learning paths.",
    },
    'emotional_stability': {
        'low': "I can feel anxious or overwhelmed by difficult material, so I appreciate a supportive, low-pressure pace.",
        'high': "I stay calm under pressure and handle setbacks and challenging material well.",
    },
    'self_efficacy': {
        'low': "I sometimes doubt my ability to master hard concepts and benefit from encouragement and early wins.",
        'high': "I am confident in my ability to master difficult concepts with effort.",
    },
    'mastery_orientation': {
        'low': "I am less driven by curiosity alone and prefer content with clear practical value.",
        'high': "I learn because I genuinely enjoy understanding new concepts in depth.",
    },
    'performance_orientation': {
        'low': "I am not motivated by grades, rankings, or external recognition.",
        'high': "I am motivated by demonstrating competence and achieving measurable results.",
    },
}

PROFILE_KEY_ALIASES: Dict[str, str] = {
    'conscientiousness': 'conscientiousness',
    'emotionalStability': 'emotional_stability',
    'selfEfficacy': 'self_efficacy',
    'masteryOrientation': 'mastery_orientation',
    'performanceOrientation': 'performance_orientation',
}

TIME_BUDGET_SENTENCES: Dict[str, str] = {
    'very_limited': "I have very limited time, so I need short, bite-sized lessons I can finish in a few minutes.",
    'concise': "I prefer concise, focused learning sessions of about half an hour.",
    'deep_dive': "I have time for deep-dive, in-depth study sessions of an hour or more.",
}


@dataclass
class LearningPreferences:
    """Learner preference record; every field is optional."""
    role: Optional[str] = None
    learning_goal_text: Optional[str] = None
    learning_goals: List[str] = field(default_factory=list)
    learning_challenges_text: Optional[str] = None
    learning_challenges: List[str] = field(default_factory=list)
    personality_profile: Optional[Union[PersonalityProfile, Mapping[str, Any]]] = None
    preferred_materials_ranked: List[str] = field(default_factory=list)
    daily_time_minutes: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'LearningPreferences':
        """Build from the camelCase record stored for a user; unknown keys are ignored."""
        data = data or {}
        return cls(
            role=data.get('role'),
            learning_goal_text=data.get('learningGoalText'),
            learning_goals=_as_list(data.get('learningGoals')),
            learning_challenges_text=data.get('learningChallengesText'),
            learning_challenges=_as_list(data.get('learningChallenges')),
            personality_profile=data.get('personalityProfile'),
            preferred_materials_ranked=_as_list(data.get('preferredMaterialsRanked')),
            daily_time_minutes=data.get('dailyTimeMinutes'),
        )


def _as_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _trait_scores(
    profile: Optional[Union[PersonalityProfile, Mapping[str, Any]]],
) -> Dict[str, float]:
    if isinstance(profile, PersonalityProfile):
        return profile.as_trait_scores()
    if not isinstance(profile, Mapping):
        return {}

    scores: Dict[str, float] = {}
    for key, value in profile.items():
        trait = PROFILE_KEY_ALIASES.get(key, key)
        if trait in TRAIT_TO_PHRASE_MAPPING and _is_number(value):
            scores[trait] = value
    return scores


def trait_phrase(trait: str, score: float) -> Optional[str]:
    """Return the high/low sentence for a trait, or None in the 3-5 middle band."""
    phrases = TRAIT_TO_PHRASE_MAPPING.get(trait)
    if not phrases:
        return None
    if score >= HIGH_TRAIT_THRESHOLD:
        return phrases['high']
    if score <= LOW_TRAIT_THRESHOLD:
        return phrases['low']
    return None


def describe_personality(
    profile: Optional[Union[PersonalityProfile, Mapping[str, Any]]],
) -> str:
    """Join the trait sentences of a profile into one paragraph."""
    scores = _trait_scores(profile)
    sentences: List[str] = []
    for trait in TRAIT_TO_PHRASE_MAPPING:
        if trait not in scores:
            continue
        sentence = trait_phrase(trait, scores[trait])
        if sentence:
            sentences.append(sentence)
    return ' '.join(sentences)


def time_budget_sentence(daily_time_minutes: Optional[float]) -> Optional[str]:
    # 31-59 minutes intentionally maps to nothing
    if not _is_number(daily_time_minutes):
        return None
    if daily_time_minutes <= 15:
        return TIME_BUDGET_SENTENCES['very_limited']
    if daily_time_minutes <= 30:
        return TIME_BUDGET_SENTENCES['concise']
    if daily_time_minutes >= 60:
        return TIME_BUDGET_SENTENCES['deep_dive']
    return None


def construct_user_profile_string(
    prefs: Optional[Union[LearningPreferences, Mapping[str, Any]]],
) -> str:
    """
    Build a first-person learner narrative for semantic embedding

    Sections, each emitted only when its source fields are present:
    identity, personality, goals, challenges, materials, time budget,
    keywords. Never raises; an empty record yields an empty string.

    Args:
        prefs: LearningPreferences or the camelCase dict stored for a user

    Returns:
        Narrative sentences joined by single spaces
    """
    if not isinstance(prefs, LearningPreferences):
        prefs = LearningPreferences.from_dict(prefs if isinstance(prefs, Mapping) else None)

    goals = list(prefs.learning_goals or [])
    challenges = list(prefs.learning_challenges or [])
    materials = list(prefs.preferred_materials_ranked or [])
    parts: List[str] = []

    if prefs.role:
        parts.append(f"I am a {prefs.role}.")

    personality_text = describe_personality(prefs.personality_profile)
    if personality_text:
        parts.append(personality_text)

    if prefs.learning_goal_text:
        parts.append(f"My specific goal is to: {prefs.learning_goal_text}.")
    if goals:
        parts.append(
            f"I am actively looking to acquire knowledge in: {', '.join(goals)}."
        )

    if prefs.learning_challenges_text:
        parts.append(f"However, I am currently struggling with: {prefs.learning_challenges_text}.")
    if challenges:
        parts.append(
            f"I face specific technical hurdles with: {', '.join(challenges)}."
        )

    if materials:
        parts.append(
            "I learn best when the content is presented as: "
            f"{', '.join(materials)}."
        )

    time_sentence = time_budget_sentence(prefs.daily_time_minutes)
    if time_sentence:
        parts.append(time_sentence)

    keywords = goals + challenges
    if keywords:
        parts.append(f"Keywords: {' '.join(keywords)}.")

    return ' '.join(parts).strip()
