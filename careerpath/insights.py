# careerpath/insights.py
# AI-enhanced career matches: prompt per match, parse JSON, fall back deterministically.

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import Settings, load_settings
from .llm import AICaller, get_ai_caller, request_completion
from .schemas import (
    AIInsights,
    AssessmentAnswer,
    CareerMatch,
    CareerPathway,
    EnhancedCareerMatch,
    SkillGap,
    StudentProfile,
)
from .utils import clean_text, extract_json_block, format_money, format_score

logger = logging.getLogger(__name__)

MAX_ENHANCED_MATCHES = 5

# sector -> [(skill, importance, how to acquire)]; "{title}" is filled per career.
SECTOR_SKILL_GAPS: Dict[str, List[Tuple[str, str, str]]] = {
    "healthcare": [
        ("Medical Terminology", "Critical",
         "Essential for {title} - take health sciences courses and volunteer at a hospital or clinic"),
        ("Patient Care Skills", "Critical",
         "Key for {title} - volunteer with elderly residents and practice active listening"),
    ],
    "technology": [
        ("Programming Skills", "Critical",
         "Necessary for {title} - learn Python or JavaScript online and build small projects"),
        ("Technical Problem Solving", "Important",
         "Valuable for {title} - practice logic puzzles, take math courses, learn data analysis"),
    ],
    "infrastructure": [
        ("Technical/Mechanical Skills", "Critical",
         "Essential for {title} - take shop class, work on DIY projects, look for apprenticeships"),
        ("Safety Protocols", "Critical",
         "Important for {title} - learn OSHA basics and practice workplace safety procedures"),
    ],
    "business": [
        ("Financial Analysis", "Critical",
         "Essential for {title} - learn spreadsheets and take an accounting course"),
        ("Business Communication", "Important",
         "Important for {title} - practice presentations and business writing"),
    ],
    "creative": [
        ("Creative Problem Solving", "Critical",
         "Essential for {title} - work on art projects and build a portfolio"),
        ("Visual Design Skills", "Critical",
         "Key for {title} - learn design software and study composition and color theory"),
    ],
    "education": [
        ("Teaching Methods", "Critical",
         "Essential for {title} - tutor younger students and learn lesson planning"),
        ("Student Assessment", "Important",
         "Important for {title} - learn how learning objectives and feedback work"),
    ],
    "public-service": [
        ("Public Safety Protocols", "Critical",
         "Essential for {title} - learn emergency procedures and conflict resolution"),
        ("Community Relations", "Important",
         "Important for {title} - practice public speaking and volunteer locally"),
    ],
    "science": [
        ("Research Methods", "Critical",
         "Essential for {title} - learn the scientific method and basic statistics"),
        ("Laboratory Skills", "Important",
         "Important for {title} - take lab courses and learn equipment safety"),
    ],
}
SECTOR_SKILL_GAPS["manufacturing"] = SECTOR_SKILL_GAPS["infrastructure"]
SECTOR_SKILL_GAPS["finance"] = SECTOR_SKILL_GAPS["business"]

DEFAULT_SKILL_GAPS: List[Tuple[str, str, str]] = [
    ("Communication", "Important",
     "Essential for {title} - join a speech or debate club and practice presentations"),
    ("Industry Knowledge", "Important",
     "Important for {title} - follow industry news and talk with working professionals"),
]


def _profile_block(profile: StudentProfile) -> str:
    return (
        "STUDENT PROFILE:\n"
        f"- Interests: {', '.join(profile.interests) or 'Various'}\n"
        f"- Skills: {', '.join(profile.skills) or 'Developing'}\n"
        f"- Work Environment: {profile.work_environment or 'Flexible'}\n"
        f"- Education Goal: {profile.education_goal or 'Exploring options'}"
    )


def _answers_block(answers: Sequence[AssessmentAnswer]) -> str:
    lines = [f"- {a.question_id}: {a.answer}" for a in answers or []]
    return "ASSESSMENT RESPONSES:\n" + ("\n".join(lines) or "- (none)")


def build_insight_prompt(profile: StudentProfile, answers: Sequence[AssessmentAnswer], match: CareerMatch) -> str:
    c = match.career
    return f"""You are a career counselor analyzing why a specific career matches a student's profile.

{_profile_block(profile)}

CAREER MATCH:
- Title: {c.title}
- Sector: {c.sector}
- Match Score: {format_score(match.match_score)}
- Required Education: {c.required_education}
- Average Salary: {format_money(c.average_salary)}
- Growth Outlook: {c.growth_outlook or 'Not specified'}

{_answers_block(answers)}

Return ONLY valid JSON with exactly these keys:
{{
  "whyItMatches": "2-3 sentences explaining why this career fits the student",
  "personalizedDescription": "the career description rewritten for this student",
  "keyStrengths": ["strength 1", "strength 2", "strength 3"],
  "developmentAreas": ["area 1", "area 2", "area 3"],
  "nextSteps": ["action 1", "action 2", "action 3"]
}}"""


def build_pathway_prompt(profile: StudentProfile, answers: Sequence[AssessmentAnswer], match: CareerMatch) -> str:
    c = match.career
    return f"""You are a career counselor creating a career pathway for a student.

{_profile_block(profile)}

SPECIFIC CAREER:
- Title: {c.title}
- Sector: {c.sector}
- Required Education: {c.required_education}
- Certifications: {', '.join(c.certifications) or 'None specified'}

{_answers_block(answers)}

Return ONLY valid JSON specific to becoming a {c.title}:
{{
  "steps": ["step 1", "step 2", "step 3"],
  "timeline": "how long the pathway takes",
  "requirements": ["requirement 1", "requirement 2"]
}}"""


def build_skill_gaps_prompt(profile: StudentProfile, answers: Sequence[AssessmentAnswer], match: CareerMatch) -> str:
    c = match.career
    return f"""You are a career counselor identifying skill gaps for a student.

{_profile_block(profile)}

SPECIFIC CAREER:
- Title: {c.title}
- Sector: {c.sector}
- Required Education: {c.required_education}

{_answers_block(answers)}

List the top 3-4 skill gaps that matter for {c.title}. Return ONLY valid JSON:
{{
  "skillGaps": [
    {{"skill": "skill name", "importance": "Critical", "howToAcquire": "specific advice"}}
  ]
}}"""


def basic_insights(match: CareerMatch) -> AIInsights:
    """Deterministic insight built from the match alone."""
    c = match.career
    return AIInsights(
        why_it_matches=(
            f"This career scored {format_score(match.match_score)} based on your assessment "
            "responses and shows strong alignment with your interests."
        ),
        personalized_description=c.description or (
            f"{c.title} professionals work in {c.sector} and typically earn around "
            f"{format_money(c.average_salary)} annually."
        ),
        key_strengths=["Communication skills", "Problem-solving abilities", "Adaptability"],
        development_areas=["Industry-specific knowledge", "Technical skills", "Professional experience"],
        next_steps=[
            f"Research {c.title} job requirements",
            "Connect with professionals in the field",
            f"Explore {c.required_education} programs",
        ],
    )


def _timeline_for(required_education: str) -> str:
    level = required_education.lower()
    if "bachelor" in level:
        return "4-6 years"
    if "associate" in level:
        return "2-4 years"
    return "1-3 years"


def basic_pathway(match: CareerMatch) -> CareerPathway:
    c = match.career
    return CareerPathway(
        steps=[
            f"Complete high school with focus on subjects relevant to {c.title}",
            f"Pursue a {c.required_education} program for {c.title}",
            f"Obtain required certifications for {c.title}: "
            f"{', '.join(c.certifications) or 'Professional certifications'}",
            f"Gain hands-on experience in {c.title} through internships or entry-level positions",
            f"Apply for {c.title} positions in the {c.sector} sector",
        ],
        timeline=_timeline_for(c.required_education),
        requirements=["High school diploma", c.required_education, *(c.certifications or ["Professional development"])],
    )


def basic_skill_gaps(match: CareerMatch) -> List[SkillGap]:
    title = match.career.title
    rows = SECTOR_SKILL_GAPS.get(match.career.sector.lower(), DEFAULT_SKILL_GAPS)
    return [
        SkillGap(skill=skill, importance=importance, how_to_acquire=how.format(title=title))
        for skill, importance, how in rows
    ]


def _text_field(data: Dict[str, Any], key: str) -> Optional[str]:
    return clean_text(data.get(key)) or None


def _list_field(data: Dict[str, Any], key: str) -> Optional[List[str]]:
    value = data.get(key)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return None
    items = [clean_text(str(v)) for v in value if isinstance(v, (str, int, float))]
    return [i for i in items if i] or None


def parse_insights(text: str, profile: StudentProfile, match: CareerMatch) -> Optional[AIInsights]:
    """
    Parse an AI insight response. Missing or empty fields are backfilled one by one;
    returns None only when no JSON object can be recovered at all.
    """
    data = extract_json_block(text)
    if data is None:
        return None
    c = match.career
    interests = " and ".join(profile.interests) or "exploring new options"
    return AIInsights(
        why_it_matches=_text_field(data, "whyItMatches")
        or f"{c.title} aligns well with your interests in {interests}.",
        personalized_description=_text_field(data, "personalizedDescription")
        or c.description
        or f"{c.title} is a rewarding career in the {c.sector} sector.",
        key_strengths=_list_field(data, "keyStrengths")
        or list(profile.skills)
        or ["Communication skills", "Problem-solving", "Adaptability"],
        development_areas=_list_field(data, "developmentAreas")
        or [f"{c.sector.title()} industry knowledge", f"Technical skills for {c.title}", "Professional experience"],
        next_steps=_list_field(data, "nextSteps")
        or [f"Research the {c.title} role", "Talk to professionals in the field", f"Explore {c.required_education} programs"],
    )


def parse_pathway(text: str, match: CareerMatch) -> Optional[CareerPathway]:
    data = extract_json_block(text)
    if data is None:
        return None
    basic = basic_pathway(match)
    return CareerPathway(
        steps=_list_field(data, "steps") or basic.steps,
        timeline=_text_field(data, "timeline") or basic.timeline,
        requirements=_list_field(data, "requirements") or basic.requirements,
    )


def parse_skill_gaps(text: str, match: CareerMatch) -> Optional[List[SkillGap]]:
    data = extract_json_block(text)
    if data is None or not isinstance(data.get("skillGaps"), list):
        return None
    gaps: List[SkillGap] = []
    for row in data["skillGaps"]:
        if not isinstance(row, dict):
            continue
        skill = _text_field(row, "skill")
        if not skill:
            continue
        gaps.append(SkillGap(
            skill=skill,
            importance=_text_field(row, "importance") or "Important",
            how_to_acquire=_text_field(row, "howToAcquire") or f"Build {skill} for a career as a {match.career.title}",
        ))
    return gaps or None


def _enhance(
    match: CareerMatch,
    insights: AIInsights,
    pathway: CareerPathway,
    gaps: List[SkillGap],
    source: str,
) -> EnhancedCareerMatch:
    return EnhancedCareerMatch(
        career=match.career,
        match_score=match.match_score,
        career_id=match.career_id,
        reasoning_factors=list(match.reasoning_factors),
        ai_insights=insights,
        career_pathway=pathway,
        skill_gaps=gaps,
        insight_source=source,
    )


def fallback_match(match: CareerMatch) -> EnhancedCareerMatch:
    return _enhance(match, basic_insights(match), basic_pathway(match), basic_skill_gaps(match), "fallback")


async def _enrich_match(
    caller: AICaller,
    timeout_s: float,
    profile: StudentProfile,
    answers: Sequence[AssessmentAnswer],
    match: CareerMatch,
) -> EnhancedCareerMatch:
    title = match.career.title
    insight_res, pathway_res, gaps_res = await asyncio.gather(
        request_completion(caller, build_insight_prompt(profile, answers, match), timeout_s),
        request_completion(caller, build_pathway_prompt(profile, answers, match), timeout_s),
        request_completion(caller, build_skill_gaps_prompt(profile, answers, match), timeout_s),
    )

    insights = parse_insights(insight_res.text, profile, match) if insight_res.ok else None
    if insights is None:
        logger.warning("career_insights_fallback career=%s: %s", title, insight_res.error or "unparseable response")
    pathway = parse_pathway(pathway_res.text, match) if pathway_res.ok else None
    if pathway is None:
        logger.warning("career_pathway_fallback career=%s: %s", title, pathway_res.error or "unparseable response")
    gaps = parse_skill_gaps(gaps_res.text, match) if gaps_res.ok else None
    if gaps is None:
        logger.warning("skill_gaps_fallback career=%s: %s", title, gaps_res.error or "unparseable response")

    return _enhance(
        match,
        insights or basic_insights(match),
        pathway or basic_pathway(match),
        gaps or basic_skill_gaps(match),
        "ai" if insights is not None else "fallback",
    )


async def _enrich_match_isolated(
    caller: AICaller,
    timeout_s: float,
    profile: StudentProfile,
    answers: Sequence[AssessmentAnswer],
    match: CareerMatch,
) -> EnhancedCareerMatch:
    try:
        return await _enrich_match(caller, timeout_s, profile, answers, match)
    except Exception:
        logger.exception("career_enrichment_failed career=%s", match.career.title)
        return fallback_match(match)


async def get_enhanced_matches(
    profile: StudentProfile,
    answers: Sequence[AssessmentAnswer],
    base_matches: Sequence[CareerMatch],
    ai_caller: Optional[AICaller] = None,
    settings: Optional[Settings] = None,
) -> List[EnhancedCareerMatch]:
    """
    Enrich the first MAX_ENHANCED_MATCHES base matches, preserving their order.
    Never raises: failed matches, or a failed batch, get fallback insights.
    """
    top = list(base_matches or [])[:MAX_ENHANCED_MATCHES]
    try:
        cfg = settings or load_settings()
        caller = ai_caller if ai_caller is not None else get_ai_caller(cfg)
        if caller is None:
            return [fallback_match(m) for m in top]
        enhanced = await asyncio.gather(
            *(_enrich_match_isolated(caller, cfg.ai_timeout_s, profile, answers, m) for m in top)
        )
    except Exception:
        logger.exception("career_enhancement_failed matches=%s", len(top))
        return [fallback_match(m) for m in top]

    logger.info(
        "career_enhancement_done matches=%s ai=%s",
        len(enhanced),
        sum(1 for m in enhanced if m.insight_source == "ai"),
    )
    return list(enhanced)
