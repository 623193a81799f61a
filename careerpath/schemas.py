# careerpath/schemas.py
# Pydantic models for assessment, career match, and job listing contracts.

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


WorkEnvironment = Literal["indoor", "outdoor", "mixed"]
TeamPreference = Literal["team", "solo", "both"]
EducationLevel = Literal["high-school", "certificate", "associate", "bachelor"]


class Question(BaseModel):
    """One entry of the static question catalogue."""
    model_config = ConfigDict(frozen=True)

    id: str
    order: Optional[int] = None
    category: str  # "interests" | "skills" | "preferences" | "education" | ...
    text: str
    type: Literal["scale", "multiple-choice", "text", "free-text"]
    options: Optional[List[str]] = None


class AssessmentAnswer(BaseModel):
    """A submitted answer. The question id is not required to exist."""
    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(alias="questionId")
    answer: Any = None  # usually a string; structured values are kept verbatim
    timestamp: Optional[datetime] = None


class StudentProfile(BaseModel):
    """Derived student profile; every field stays optional until derived."""
    model_config = ConfigDict(frozen=True)

    interests: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    work_environment: Optional[WorkEnvironment] = None
    team_preference: Optional[TeamPreference] = None
    education_goal: Optional[EducationLevel] = None
    zip_code: Optional[str] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class Career(BaseModel):
    id: Optional[str] = None
    title: str
    sector: str
    description: str = ""
    required_education: str
    average_salary: float
    growth_outlook: str = ""
    certifications: List[str] = Field(default_factory=list)


class CareerMatch(BaseModel):
    """A career ranked by the external scorer, before enrichment."""
    model_config = ConfigDict(frozen=True)

    career: Career
    match_score: float
    career_id: Optional[str] = None
    reasoning_factors: List[str] = Field(default_factory=list)


class AIInsights(BaseModel):
    """Narrative insight; keys on the wire follow the AI response format."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    why_it_matches: str = Field(alias="whyItMatches", min_length=1)
    personalized_description: str = Field(alias="personalizedDescription", min_length=1)
    key_strengths: List[str] = Field(alias="keyStrengths", min_length=1)
    development_areas: List[str] = Field(alias="developmentAreas", min_length=1)
    next_steps: List[str] = Field(alias="nextSteps", min_length=1)


class CareerPathway(BaseModel):
    model_config = ConfigDict(frozen=True)

    steps: List[str]
    timeline: str
    requirements: List[str]


class SkillGap(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    skill: str
    importance: str
    how_to_acquire: str = Field(alias="howToAcquire")


class EnhancedCareerMatch(CareerMatch):
    """A base match plus insights, pathway, and skill gaps."""
    ai_insights: AIInsights
    career_pathway: CareerPathway
    skill_gaps: List[SkillGap]
    insight_source: Literal["ai", "fallback"] = "fallback"


class JobListing(BaseModel):
    """A normalized external job record. `application_url` is never empty."""
    id: str
    title: str
    company: str
    location: str
    salary: Optional[str] = None  # human-readable like "$40,000 - $60,000"
    description: str
    requirements: List[str] = Field(default_factory=list)
    posted_date: str
    application_url: str = Field(min_length=1)
    source: str
    experience_level: Literal["entry", "mid", "senior"] = "entry"
    education_required: str = "Not specified"
    distance_miles: Optional[float] = None


class JobSearchRequest(BaseModel):
    keywords: Optional[str] = None
    career_title: Optional[str] = None
    zip_code: str
    radius_miles: int = 25
    limit: int = 10


class CareerJobs(BaseModel):
    """Job listings sourced for one recommended career."""
    career_title: str
    jobs: List[JobListing] = Field(default_factory=list)


class AssessmentResult(BaseModel):
    """Everything produced for one assessment submission."""
    validation: ValidationResult
    profile: StudentProfile
    matches: List[EnhancedCareerMatch] = Field(default_factory=list)
    jobs: List[CareerJobs] = Field(default_factory=list)
