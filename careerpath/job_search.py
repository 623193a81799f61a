# careerpath/job_search.py
# Adzuna job search: feature-flagged, paginated, normalized, and never raising.

import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .config import Settings, load_settings
from .schemas import CareerJobs, CareerMatch, JobListing, JobSearchRequest
from .utils import clean_text, format_salary, stable_id

logger = logging.getLogger(__name__)

PAGE_SIZE = 25
MAX_RESULTS_PER_PAGE = 50
RECOMMENDED_CAREERS = 3


def build_query(request: JobSearchRequest) -> str:
    parts = [clean_text(request.career_title), clean_text(request.keywords)]
    return " ".join(p for p in parts if p)


def _nested_name(raw: Dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return clean_text(value.get("display_name")) if isinstance(value, dict) else ""


def _provider_id(raw: Dict[str, Any]) -> str:
    value = raw.get("id")
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return ""
    return str(value).strip()


def normalize_job(raw: Any, zip_code: str, source: str = "adzuna") -> Optional[JobListing]:
    """Map one Adzuna record to a JobListing; records without a link are dropped."""
    if not isinstance(raw, dict):
        return None
    url = clean_text(raw.get("redirect_url"))
    if not url:
        return None
    return JobListing(
        id=_provider_id(raw) or f"{source}_{stable_id(source, url)[:16]}",
        title=clean_text(raw.get("title")) or "Job Opportunity",
        company=_nested_name(raw, "company") or "Employer",
        location=_nested_name(raw, "location") or f"Near {zip_code}",
        salary=format_salary(raw.get("salary_min"), raw.get("salary_max")),
        description=clean_text(raw.get("description")) or "See job description at source.",
        requirements=[],
        posted_date=clean_text(raw.get("created")) or date.today().isoformat(),
        application_url=url,
        source=source,
        experience_level="entry",
        education_required="Not specified",
    )


def _describe_error(exc: Exception) -> str:
    # Request URLs carry the access key, so never log the exception text for HTTP errors.
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    if isinstance(exc, httpx.HTTPError):
        return type(exc).__name__
    return f"{type(exc).__name__}: {exc}"


class AdzunaJobSearchClient:
    """Search Adzuna and normalize results. Disabled unless flag and credentials are set."""

    name = "adzuna"
    base_url = "https://api.adzuna.com/v1/api/jobs"
    user_agent = "careerpath/1.0"

    def __init__(self, settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self._settings = settings or load_settings()
        self._http = http_client
        self._reported_disabled = False

    def is_enabled(self) -> bool:
        return self._settings.job_search_enabled

    def status(self) -> Dict[str, Any]:
        """Operator view of the feature gate; never exposes the credentials."""
        s = self._settings
        return {
            "enabled": s.job_search_enabled,
            "use_real_jobs": s.use_real_jobs,
            "app_id_configured": bool(s.adzuna_app_id),
            "api_key_configured": bool(s.adzuna_api_key),
            "country": s.adzuna_country,
        }

    def _report_disabled(self) -> None:
        if self._reported_disabled:
            return
        self._reported_disabled = True
        st = self.status()
        logger.info(
            "Real job search disabled: set USE_REAL_JOBS=true and provide ADZUNA_APP_ID/ADZUNA_API_KEY "
            "(use_real_jobs=%s app_id=%s api_key=%s)",
            st["use_real_jobs"],
            "present" if st["app_id_configured"] else "missing",
            "present" if st["api_key_configured"] else "missing",
        )

    async def search(self, request: JobSearchRequest) -> List[JobListing]:
        if not self.is_enabled():
            self._report_disabled()
            return []
        query = build_query(request)
        if not query or request.limit <= 0:
            return []

        try:
            if self._http is not None:
                return await self._collect(self._http, request, query)
            async with httpx.AsyncClient(
                timeout=self._settings.adzuna_timeout_s,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            ) as client:
                return await self._collect(client, request, query)
        except Exception:
            logger.exception("job_search_failed query=%r zip=%s", query, request.zip_code)
            return []

    async def _fetch_page(
        self,
        client: httpx.AsyncClient,
        page: int,
        query: str,
        request: JobSearchRequest,
        per_page: int,
    ) -> List[Any]:
        s = self._settings
        params: Dict[str, Any] = {
            "app_id": s.adzuna_app_id,
            "app_key": s.adzuna_api_key,
            "results_per_page": per_page,
            "what": query,
            "where": request.zip_code,
            "content-type": "application/json",
        }
        if request.radius_miles > 0:
            params["distance"] = request.radius_miles

        resp = await client.get(
            f"{self.base_url}/{s.adzuna_country}/search/{page}",
            params=params,
            timeout=s.adzuna_timeout_s,
        )
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, dict):
            raise ValueError("response body is not a JSON object")
        results = payload.get("results") or []
        if not isinstance(results, list):
            raise ValueError("'results' is not a list")
        return results

    async def _collect(self, client: httpx.AsyncClient, request: JobSearchRequest, query: str) -> List[JobListing]:
        limit = request.limit
        pages = math.ceil(limit / PAGE_SIZE)
        per_page = min(MAX_RESULTS_PER_PAGE, limit)
        out: List[JobListing] = []

        # Pages go strictly in order: whether the next one is needed depends on the count so far.
        for page in range(1, pages + 1):
            try:
                results = await self._fetch_page(client, page, query, request, per_page)
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning(
                    "job_search_page_failed page=%s query=%r kept=%s: %s",
                    page, query, len(out), _describe_error(exc),
                )
                break
            if not results:
                break
            for raw in results:
                try:
                    job = normalize_job(raw, request.zip_code, source=self.name)
                except (ValueError, TypeError, OverflowError) as exc:
                    logger.warning("job_record_skipped page=%s: %s", page, exc)
                    continue
                if job is not None:
                    out.append(job)
            if len(out) >= limit:
                break

        logger.info("job_search_done query=%r zip=%s found=%s", query, request.zip_code, min(len(out), limit))
        return out[:limit]


def job_search_status(settings: Optional[Settings] = None) -> Dict[str, Any]:
    return AdzunaJobSearchClient(settings).status()


async def search_jobs(
    request: JobSearchRequest,
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> List[JobListing]:
    """Search real job postings; returns [] when disabled, on an empty query, or on failure."""
    return await AdzunaJobSearchClient(settings, http_client).search(request)


async def get_job_recommendations(
    matches: Sequence[CareerMatch],
    zip_code: str,
    max_jobs_per_career: int = 3,
    radius_miles: int = 25,
    client: Optional[AdzunaJobSearchClient] = None,
) -> List[CareerJobs]:
    """Job listings for each of the top career matches, one search per career."""
    client = client or AdzunaJobSearchClient()
    out: List[CareerJobs] = []
    for match in list(matches)[:RECOMMENDED_CAREERS]:
        jobs = await client.search(
            JobSearchRequest(
                career_title=match.career.title,
                zip_code=zip_code,
                radius_miles=radius_miles,
                limit=max_jobs_per_career,
            )
        )
        out.append(CareerJobs(career_title=match.career.title, jobs=jobs))
    return out
