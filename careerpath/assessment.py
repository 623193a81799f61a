# careerpath/assessment.py
# Deterministic profile extraction and answer validation over the question catalogue.

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

from .catalogue import (
    EDUCATION_GOAL_QUESTION,
    TEAM_PREFERENCE_QUESTION,
    WORK_ENVIRONMENT_QUESTION,
    get_questions,
    index_questions,
)
from .schemas import AssessmentAnswer, Question, StudentProfile, ValidationResult
from .utils import uniq_preserve_order

logger = logging.getLogger(__name__)

# (trigger substrings in the question text, label). Every matching rule fires.
INTEREST_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("helping people",), "Helping Others"),
    (("hands", "building"), "Hands-on Work"),
    (("body", "health"), "Healthcare"),
    (("buildings", "infrastructure", "constructed"), "Infrastructure"),
    (("community", "difference"), "Community Impact"),
]

SKILL_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("technology", "software"), "Technology"),
    (("details", "attention"), "Attention to Detail"),
    (("talking", "communication"), "Communication"),
]

# (trigger substrings in the answer, value). First match wins.
WORK_ENVIRONMENT_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("indoors",), "indoor"),
    (("outdoors",), "outdoor"),
]

TEAM_PREFERENCE_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("team",), "team"),
    (("independently",), "solo"),
]

EDUCATION_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("right away",), "high-school"),
    (("certificate", "short training"), "certificate"),
    (("community college",), "associate"),
    (("4-year",), "bachelor"),
]

DEFAULT_INTEREST = "Exploring Options"
DEFAULT_SKILL = "Willingness to Learn"


def _signals_agreement(answer: Any) -> bool:
    return isinstance(answer, str) and ("Agree" in answer or answer == "Strongly Agree")


def _labels_for(text: str, rules: List[Tuple[Tuple[str, ...], str]]) -> List[str]:
    return [label for triggers, label in rules if any(t in text for t in triggers)]


def _first_rule(text: str, rules: List[Tuple[Tuple[str, ...], str]]) -> Optional[str]:
    for triggers, value in rules:
        if any(t in text for t in triggers):
            return value
    return None


def generate_profile(
    answers: Sequence[AssessmentAnswer],
    zip_code: str,
    questions: Optional[Sequence[Question]] = None,
) -> StudentProfile:
    """Map assessment answers to a student profile. Unknown question ids are skipped."""
    by_id = index_questions(questions if questions is not None else get_questions())

    interests: List[str] = []
    skills: List[str] = []
    work_environment = "mixed"
    team_preference = "both"
    education_goal = "certificate"

    for ans in answers or []:
        question = by_id.get(ans.question_id)
        if question is None:
            continue
        value = ans.answer

        if question.category == "interests" and _signals_agreement(value):
            interests.extend(_labels_for(question.text, INTEREST_RULES))

        elif question.category == "skills" and _signals_agreement(value):
            skills.extend(_labels_for(question.text, SKILL_RULES))

        elif question.category == "preferences" and isinstance(value, str):
            if question.id == WORK_ENVIRONMENT_QUESTION:
                work_environment = _first_rule(value, WORK_ENVIRONMENT_RULES) or "mixed"
            elif question.id == TEAM_PREFERENCE_QUESTION:
                team_preference = _first_rule(value, TEAM_PREFERENCE_RULES) or "both"

        elif question.category == "education" and question.id == EDUCATION_GOAL_QUESTION and isinstance(value, str):
            education_goal = _first_rule(value, EDUCATION_RULES) or education_goal

    interests = uniq_preserve_order(interests) or [DEFAULT_INTEREST]
    skills = uniq_preserve_order(skills) or [DEFAULT_SKILL]

    now = datetime.now(timezone.utc)
    profile = StudentProfile(
        interests=interests,
        skills=skills,
        work_environment=work_environment,
        team_preference=team_preference,
        education_goal=education_goal,
        zip_code=zip_code,
        completed_at=now,
        updated_at=now,
    )
    logger.debug("profile_generated answers=%s interests=%s skills=%s", len(answers or []), interests, skills)
    return profile


def validate_answers(
    answers: Sequence[AssessmentAnswer],
    questions: Optional[Sequence[Question]] = None,
) -> ValidationResult:
    """Check completeness and per-question format; all errors are collected."""
    catalogue = list(questions if questions is not None else get_questions())
    by_id = index_questions(catalogue)

    if not answers:
        return ValidationResult(valid=False, errors=["No answers provided"])

    errors: List[str] = []
    if len(answers) < len(catalogue):
        errors.append(f"Incomplete assessment: {len(answers)}/{len(catalogue)} questions answered")

    for ans in answers:
        question = by_id.get(ans.question_id)
        if question is None:
            errors.append(f"Invalid question ID: {ans.question_id}")
            continue
        if question.type in ("scale", "multiple-choice"):
            if not isinstance(ans.answer, str) or ans.answer not in (question.options or []):
                errors.append(f"Invalid answer for question {question.id}")

    return ValidationResult(valid=not errors, errors=errors)
