"""
ONBOARDING PERSONALITY QUESTIONNAIRE
17 Likert items across three scales plus two goal-orientation sliders.

Serves the item catalog to the frontend and turns a submitted
questionnaire into a PersonalityProfile.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from profile_narrative import describe_personality
from trait_scoring import (
    CONSCIENTIOUSNESS_REVERSE_ITEMS,
    EMOTIONAL_STABILITY_REVERSE_ITEMS,
    LIKERT_MAX,
    LIKERT_MIN,
    SELF_EFFICACY_REVERSE_ITEMS,
    compute_personality_profile,
)

SCALE_ITEMS: Dict[str, List[Dict[str, str]]] = {
    'conscientiousness': [
        {'text': 'I make plans and stick to them', 'low': 'Rarely', 'high': 'Always'},
        {'text': 'I get distracted easily', 'low': 'Never', 'high': 'Often'},
        {'text': 'I finish what I start', 'low': 'Rarely', 'high': 'Always'},
        {'text': 'I am organized and methodical', 'low': 'Not at all', 'high': 'Very much'},
        {'text': 'I procrastinate frequently', 'low': 'Never', 'high': 'Often'},
        {'text': 'I follow through on commitments', 'low': 'Rarely', 'high': 'Always'},
        {'text': 'I lose track of time when studying', 'low': 'Never', 'high': 'Often'},
    ],
    'emotionalStability': [
        {'text': 'I stay calm under pressure', 'low': 'Rarely', 'high': 'Always'},
        {'text': 'I get stressed easily', 'low': 'Never', 'high': 'Often'},
        {'text': 'I handle setbacks well', 'low': 'Poorly', 'high': 'Very well'},
        {'text': 'I worry about making mistakes', 'low': 'Never', 'high': 'Often'},
        {'text': 'I remain composed during challenges', 'low': 'Rarely', 'high': 'Always'},
        {'text': 'I feel overwhelmed by difficult tasks', 'low': 'Never', 'high': 'Often'},
        {'text': 'I bounce back quickly from failures', 'low': 'Slowly', 'high': 'Quickly'},
    ],
    'selfEfficacy': [
        {'text': 'I can figure out most things if I try hard enough', 'low': 'Disagree', 'high': 'Agree'},
        {'text': 'Even challenging material is learnable for me', 'low': 'Disagree', 'high': 'Agree'},
        {'text': 'I believe I can master difficult concepts with effort', 'low': 'Disagree', 'high': 'Agree'},
    ],
}

SLIDER_ITEMS: Dict[str, Dict[str, str]] = {
    'masteryOrientation': {
        'text': 'I learn because I enjoy understanding new concepts',
        'low': 'Not me',
        'high': 'Totally me',
    },
    'performanceOrientation': {
        'text': 'I learn to demonstrate competence and achieve goals',
        'low': 'Not me',
        'high': 'Totally me',
    },
}

REVERSE_ITEMS = {
    'conscientiousness': CONSCIENTIOUSNESS_REVERSE_ITEMS,
    'emotionalStability': EMOTIONAL_STABILITY_REVERSE_ITEMS,
    'selfEfficacy': SELF_EFFICACY_REVERSE_ITEMS,
}


class QuestionnaireError(ValueError):
    """Submitted questionnaire is missing sections or has non-numeric answers"""


class PersonalityQuestionnaire:
    """Onboarding questionnaire catalog and submission scoring"""

    def __init__(self):
        self.questions = self._build_catalog()
        self.total_questions = len(self.questions)

    def _build_catalog(self) -> List[Dict[str, Any]]:
        catalog: List[Dict[str, Any]] = []
        for scale, items in SCALE_ITEMS.items():
            for position, item in enumerate(items, start=1):
                catalog.append({
                    'id': f"{scale}_{position}",
                    'scale': scale,
                    'type': 'likert',
                    'question': item['text'],
                    'anchors': {'low': item['low'], 'high': item['high']},
                    'reverse_scored': position in REVERSE_ITEMS[scale],
                })
        for scale, item in SLIDER_ITEMS.items():
            catalog.append({
                'id': scale,
                'scale': scale,
                'type': 'slider',
                'question': item['text'],
                'anchors': {'low': item['low'], 'high': item['high']},
                'reverse_scored': False,
            })
        return catalog

    def get_all_questions(self) -> List[Dict[str, Any]]:
        """Return questions for frontend display (scoring keys hidden)"""
        return [
            {
                'id': q['id'],
                'scale': q['scale'],
                'type': q['type'],
                'question': q['question'],
                'anchors': dict(q['anchors']),
                'min': LIKERT_MIN,
                'max': LIKERT_MAX,
            }
            for q in self.questions
        ]

    def analyze_responses(self, submission: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Score a questionnaire submission

        Args:
            submission: {
                'conscientiousness': [7 answers],
                'emotionalStability': [7 answers],
                'selfEfficacy': [3 answers],
                'masteryOrientation': slider value,
                'performanceOrientation': slider value
            }

        Returns:
            personality_profile (camelCase), summary sentence block, timestamp
        """
        if not submission:
            raise QuestionnaireError('No responses provided')

        scale_answers = {
            scale: self._numeric_list(submission, scale) for scale in SCALE_ITEMS
        }
        sliders = {
            scale: self._numeric_value(submission, scale) for scale in SLIDER_ITEMS
        }

        profile = compute_personality_profile(
            scale_answers['conscientiousness'],
            scale_answers['emotionalStability'],
            scale_answers['selfEfficacy'],
            sliders['masteryOrientation'],
            sliders['performanceOrientation'],
        )

        return {
            'personality_profile': profile.to_dict(),
            'summary': describe_personality(profile),
            'timestamp': datetime.now().isoformat(),
        }

    @staticmethod
    def _numeric_list(submission: Mapping[str, Any], key: str) -> List[float]:
        answers = submission.get(key)
        if not isinstance(answers, (list, tuple)):
            raise QuestionnaireError(f"Missing responses for {key}")
        if not all(_is_number(answer) for answer in answers):
            raise QuestionnaireError(f"Responses for {key} must be numbers")
        return list(answers)

    @staticmethod
    def _numeric_value(submission: Mapping[str, Any], key: str) -> float:
        value = submission.get(key)
        if not _is_number(value):
            raise QuestionnaireError(f"Missing value for {key}")
        return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
