# careerpath/orchestrator.py
# Assessment pipeline: validate -> profile -> enrich matches -> (optional) job listings.

import logging
from typing import List, Optional, Sequence

from .assessment import generate_profile, validate_answers
from .insights import get_enhanced_matches
from .job_search import AdzunaJobSearchClient, get_job_recommendations
from .llm import AICaller
from .schemas import AssessmentAnswer, AssessmentResult, CareerJobs, CareerMatch

logger = logging.getLogger(__name__)


async def complete_assessment(
    answers: Sequence[AssessmentAnswer],
    zip_code: str,
    base_matches: Sequence[CareerMatch],
    ai_caller: Optional[AICaller] = None,
    include_jobs: bool = False,
    job_client: Optional[AdzunaJobSearchClient] = None,
) -> AssessmentResult:
    # 1) Validation problems are reported, not raised
    validation = validate_answers(answers)
    if not validation.valid:
        logger.info("assessment_validation_issues count=%s", len(validation.errors))

    # 2) Structured profile from raw answers
    profile = generate_profile(answers, zip_code)

    # 3) Narrative insights for the top base matches
    matches = await get_enhanced_matches(profile, answers, base_matches, ai_caller=ai_caller)

    # 4) Real postings for the leading careers
    jobs: List[CareerJobs] = []
    if include_jobs and matches:
        jobs = await get_job_recommendations(matches, zip_code, client=job_client)

    return AssessmentResult(validation=validation, profile=profile, matches=matches, jobs=jobs)
