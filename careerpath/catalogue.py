# careerpath/catalogue.py
# Static assessment question catalogue, loaded once at import.

import json
from pathlib import Path
from typing import Dict, List, Sequence

from .schemas import Question


_PATH = Path(__file__).parent / "data" / "questions.json"

# Malformed catalogue data raises at import.
_QUESTIONS: List[Question] = [
    Question(**q) for q in json.loads(_PATH.read_text(encoding="utf-8"))
]

# Question ids with special meaning to the profile extractor.
WORK_ENVIRONMENT_QUESTION = "q4"
TEAM_PREFERENCE_QUESTION = "q5"
EDUCATION_GOAL_QUESTION = "q9"


def get_questions() -> List[Question]:
    return sorted(_QUESTIONS, key=lambda q: (q.order is None, q.order or 0))


def index_questions(questions: Sequence[Question]) -> Dict[str, Question]:
    """Map question id -> question; the first definition of an id wins."""
    out: Dict[str, Question] = {}
    for q in questions:
        out.setdefault(q.id, q)
    return out
