# tests/test_insights.py
# Insight enrichment with stubbed AI callers (no external calls).

import asyncio
import json
import logging

import pytest

from careerpath import insights
from careerpath.config import Settings
from careerpath.schemas import AssessmentAnswer, Career, CareerMatch, StudentProfile

AI_ON = Settings(use_real_ai=True, openai_api_key="sk-test-dummy", ai_timeout_s=1.0)

PROFILE = StudentProfile(
    interests=["Healthcare", "Helping Others"],
    skills=["Communication"],
    work_environment="indoor",
    team_preference="team",
    education_goal="associate",
    zip_code="43004",
)

ANSWERS = [
    AssessmentAnswer(question_id="q1", answer="Strongly Agree"),
    AssessmentAnswer(question_id="q9", answer="Attend community college"),
]

INSIGHT_JSON = {
    "whyItMatches": "You love helping people.",
    "personalizedDescription": "Care for patients every day.",
    "keyStrengths": ["Empathy", "Listening"],
    "developmentAreas": ["Anatomy"],
    "nextSteps": ["Shadow a nurse"],
}


def _match(i: int, sector: str = "healthcare") -> CareerMatch:
    return CareerMatch(
        career=Career(
            title=f"Career {i}",
            sector=sector,
            description="",
            required_education="associate",
            average_salary=52000,
            growth_outlook="Faster than average",
        ),
        match_score=90 - i,
    )


class StubCaller:
    """Routes prompts by kind; `fail_titles` raise for those careers."""

    def __init__(self, insight_reply=None, fail_titles=(), delays=None):
        self.insight_reply = insight_reply if insight_reply is not None else "```json\n" + json.dumps(INSIGHT_JSON) + "\n```"
        self.fail_titles = set(fail_titles)
        self.delays = delays or {}
        self.prompts = []

    async def call(self, prompt: str) -> str:
        self.prompts.append(prompt)
        title = next(t for t in (f"Career {i}" for i in range(10)) if f"- Title: {t}\n" in prompt)
        await asyncio.sleep(self.delays.get(title, 0))
        if title in self.fail_titles:
            raise RuntimeError("AI service unavailable")
        if "skill gaps" in prompt:
            return json.dumps({"skillGaps": [{"skill": "Phlebotomy", "importance": "Critical", "howToAcquire": "Take a course"}]})
        if "career pathway" in prompt:
            return json.dumps({"steps": ["Finish school", "Get licensed"], "timeline": "2 years"})
        return self.insight_reply


def _assert_complete(m):
    ai = m.ai_insights
    assert ai.why_it_matches and ai.personalized_description
    assert ai.key_strengths and ai.development_areas and ai.next_steps
    assert all(ai.key_strengths) and all(ai.development_areas) and all(ai.next_steps)
    assert m.career_pathway.steps and m.career_pathway.timeline
    assert m.skill_gaps


def _run(base, caller, settings=AI_ON):
    return asyncio.run(insights.get_enhanced_matches(PROFILE, ANSWERS, base, ai_caller=caller, settings=settings))


def test_only_top_five_are_enriched_in_order():
    base = [_match(i) for i in range(8)]
    out = _run(base, StubCaller())

    assert [m.career.title for m in out] == [f"Career {i}" for i in range(5)]
    assert all(m.insight_source == "ai" for m in out)
    for m in out:
        _assert_complete(m)
    assert out[0].ai_insights.why_it_matches == "You love helping people."
    assert out[0].skill_gaps[0].skill == "Phlebotomy"


def test_shorter_input_keeps_length():
    out = _run([_match(0), _match(1)], StubCaller())
    assert len(out) == 2


def test_order_is_preserved_when_calls_finish_out_of_order():
    delays = {"Career 0": 0.05, "Career 1": 0.02, "Career 2": 0.0}
    out = _run([_match(i) for i in range(3)], StubCaller(delays=delays))
    assert [m.career.title for m in out] == ["Career 0", "Career 1", "Career 2"]


def test_one_failing_match_does_not_affect_others(caplog):
    caplog.set_level(logging.WARNING)
    out = _run([_match(i) for i in range(5)], StubCaller(fail_titles={"Career 2"}))

    assert [m.insight_source for m in out] == ["ai", "ai", "fallback", "ai", "ai"]
    for m in out:
        _assert_complete(m)
    assert "88%" in out[2].ai_insights.why_it_matches
    assert "career_insights_fallback career=Career 2" in caplog.text
    assert "career_enhancement_failed" not in caplog.text


def test_unparseable_response_uses_fallback():
    out = _run([_match(0)], StubCaller(insight_reply="Sorry, I cannot help with that."))
    assert out[0].insight_source == "fallback"
    _assert_complete(out[0])
    assert out[0].ai_insights.next_steps[0] == "Research Career 0 job requirements"


def test_missing_fields_are_backfilled_individually():
    reply = json.dumps({"whyItMatches": "Great fit.", "keyStrengths": [], "nextSteps": "Call a clinic"})
    out = _run([_match(0)], StubCaller(insight_reply=reply))

    ai = out[0].ai_insights
    assert out[0].insight_source == "ai"
    assert ai.why_it_matches == "Great fit."
    assert ai.key_strengths == ["Communication"]  # from the profile
    assert ai.next_steps == ["Call a clinic"]
    assert "Career 0" in ai.personalized_description
    assert ai.development_areas
    # pathway requirements were absent and come from the deterministic template
    assert out[0].career_pathway.steps == ["Finish school", "Get licensed"]
    assert "associate" in out[0].career_pathway.requirements


def test_timeout_falls_back():
    slow = Settings(use_real_ai=True, openai_api_key="sk-test-dummy", ai_timeout_s=0.01)
    out = _run([_match(0)], StubCaller(delays={"Career 0": 1.0}), settings=slow)
    assert out[0].insight_source == "fallback"
    _assert_complete(out[0])


def test_ai_disabled_returns_fallbacks_without_calls():
    out = _run([_match(i) for i in range(6)], None, settings=Settings(use_real_ai=False))
    assert len(out) == 5
    assert all(m.insight_source == "fallback" for m in out)
    for m in out:
        _assert_complete(m)


def test_batch_setup_failure_degrades_whole_batch(caplog):
    caplog.set_level(logging.WARNING)
    broken = Settings(use_real_ai=True, ai_provider="not-a-provider", openai_api_key="sk-test-dummy")
    out = _run([_match(i) for i in range(7)], None, settings=broken)

    assert [m.career.title for m in out] == [f"Career {i}" for i in range(5)]
    assert all(m.insight_source == "fallback" for m in out)
    assert "career_enhancement_failed" in caplog.text
    assert "career_insights_fallback" not in caplog.text


def test_unexpected_error_inside_one_match_is_isolated(monkeypatch: pytest.MonkeyPatch):
    real = insights.build_insight_prompt

    def _flaky(profile, answers, match):
        if match.career.title == "Career 1":
            raise KeyError("bad template")
        return real(profile, answers, match)

    monkeypatch.setattr(insights, "build_insight_prompt", _flaky)
    out = _run([_match(i) for i in range(3)], StubCaller())
    assert [m.insight_source for m in out] == ["ai", "fallback", "ai"]


def test_prompt_embeds_profile_career_and_answers():
    caller = StubCaller()
    _run([_match(0)], caller)
    prompt = next(p for p in caller.prompts if "analyzing why" in p)

    assert "Healthcare, Helping Others" in prompt
    assert "Work Environment: indoor" in prompt
    assert "Education Goal: associate" in prompt
    assert "Match Score: 90%" in prompt
    assert "Average Salary: $52,000" in prompt
    assert "Growth Outlook: Faster than average" in prompt
    assert "- q1: Strongly Agree" in prompt
    assert "- q9: Attend community college" in prompt


def test_basic_fallbacks_use_sector_tables():
    tech = insights.basic_skill_gaps(_match(0, sector="technology"))
    other = insights.basic_skill_gaps(_match(0, sector="aerospace"))
    assert tech[0].skill == "Programming Skills"
    assert "Career 0" in tech[0].how_to_acquire
    assert other[0].skill == "Communication"
    assert insights.basic_pathway(_match(0)).timeline == "2-4 years"
