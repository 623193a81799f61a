# careerpath/main.py
# Command-line entry point: JSON files in, JSON on stdout.
#
#   python -m careerpath.main validate --answers answers.json
#   python -m careerpath.main profile --answers answers.json --zip 43004
#   python -m careerpath.main enrich --answers answers.json --matches matches.json --zip 43004
#   python -m careerpath.main jobs --title Welder --zip 43004 --limit 5

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, List, Optional, Sequence

from pydantic import TypeAdapter

from .assessment import generate_profile, validate_answers
from .config import configure_logging
from .job_search import search_jobs
from .orchestrator import complete_assessment
from .schemas import AssessmentAnswer, CareerMatch, JobSearchRequest


def _load_list(path: str, item_type: Any) -> List[Any]:
    raw = Path(path).expanduser().read_text(encoding="utf-8")
    return TypeAdapter(List[item_type]).validate_json(raw)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Career assessment profile, insights, and job search.")
    p.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    sub = p.add_subparsers(dest="command", required=True)

    v = sub.add_parser("validate", help="Validate assessment answers.")
    v.add_argument("--answers", required=True, help="JSON list of {questionId, answer}.")

    pr = sub.add_parser("profile", help="Generate a student profile.")
    pr.add_argument("--answers", required=True)
    pr.add_argument("--zip", dest="zip_code", required=True)

    e = sub.add_parser("enrich", help="Run the full assessment pipeline over ranked matches.")
    e.add_argument("--answers", required=True)
    e.add_argument("--matches", required=True, help="JSON list of ranked career matches.")
    e.add_argument("--zip", dest="zip_code", required=True)
    e.add_argument("--with-jobs", action="store_true", help="Attach job listings for the top careers.")

    j = sub.add_parser("jobs", help="Search real job postings.")
    j.add_argument("--title", dest="career_title", default=None)
    j.add_argument("--keywords", default=None)
    j.add_argument("--zip", dest="zip_code", required=True)
    j.add_argument("--radius", dest="radius_miles", type=int, default=25)
    j.add_argument("--limit", type=int, default=10)
    return p.parse_args(argv)


def run(args: argparse.Namespace) -> Any:
    if args.command == "validate":
        return validate_answers(_load_list(args.answers, AssessmentAnswer)).model_dump(mode="json")

    if args.command == "profile":
        answers = _load_list(args.answers, AssessmentAnswer)
        return generate_profile(answers, args.zip_code).model_dump(mode="json")

    if args.command == "enrich":
        answers = _load_list(args.answers, AssessmentAnswer)
        matches = _load_list(args.matches, CareerMatch)
        result = asyncio.run(complete_assessment(answers, args.zip_code, matches, include_jobs=args.with_jobs))
        return result.model_dump(mode="json")

    request = JobSearchRequest(
        career_title=args.career_title,
        keywords=args.keywords,
        zip_code=args.zip_code,
        radius_miles=args.radius_miles,
        limit=args.limit,
    )
    return [job.model_dump(mode="json") for job in asyncio.run(search_jobs(request))]


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)
    print(json.dumps(run(args), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
