"""
Core data models for the job hunting pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import uuid


class ApplicationStatus(Enum):
    """Status of a job application."""
    APPLIED = "Applied"
    SCREENING = "Screening"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    REJECTED = "Rejected"


def _parse_datetime(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _optional_number(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


@dataclass
class Position:
    """A prior position held by the candidate."""
    company: str = ""
    title: str = ""
    duration: str = ""
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "company": self.company,
            "title": self.title,
            "duration": self.duration,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Position":
        return cls(
            company=data.get("company") or "",
            title=data.get("title") or "",
            duration=data.get("duration") or "",
            description=data.get("description") or "",
        )


@dataclass
class Education:
    """Represents an educational credential."""
    institution: str = ""
    degree: str = ""
    field_of_study: str = ""
    year: str = ""

    def to_dict(self) -> dict:
        return {
            "institution": self.institution,
            "degree": self.degree,
            "field": self.field_of_study,
            "year": self.year,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Education":
        return cls(
            institution=data.get("institution") or "",
            degree=data.get("degree") or "",
            field_of_study=data.get("field") or data.get("field_of_study") or "",
            year=str(data.get("year") or ""),
        )


@dataclass
class Profile:
    """Candidate profile produced by the resume parser."""
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""
    skills: list[str] = field(default_factory=list)
    positions: list[Position] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "location": self.location,
            "summary": self.summary,
            "skills": list(self.skills),
            "experience": [p.to_dict() for p in self.positions],
            "education": [e.to_dict() for e in self.education],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        positions = data.get("experience")
        if positions is None:
            positions = data.get("positions") or []
        return cls(
            name=data.get("name") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            location=data.get("location") or "",
            summary=data.get("summary") or "",
            skills=[str(s) for s in data.get("skills") or [] if s],
            positions=[Position.from_dict(p) for p in positions if isinstance(p, dict)],
            education=[Education.from_dict(e) for e in data.get("education") or [] if isinstance(e, dict)],
        )


@dataclass(frozen=True)
class Preferences:
    """Search preferences supplied by the job seeker."""
    job_titles: tuple[str, ...] = ()
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    location: str = ""
    remote: bool = False
    languages: tuple[str, ...] = ()
    employment_types: tuple[str, ...] = ("Full-time",)

    def to_dict(self) -> dict:
        return {
            "job_titles": list(self.job_titles),
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
            "location": self.location,
            "remote": self.remote,
            "languages": list(self.languages),
            "employment_types": list(self.employment_types),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Preferences":
        return cls(
            job_titles=tuple(t for t in data.get("job_titles") or [] if t),
            salary_min=_optional_number(data.get("salary_min")),
            salary_max=_optional_number(data.get("salary_max")),
            location=data.get("location") or "",
            remote=bool(data.get("remote", False)),
            languages=tuple(data.get("languages") or ()),
            employment_types=tuple(data.get("employment_types") or ("Full-time",)),
        )


@dataclass(frozen=True)
class Listing:
    """Canonical job listing shared by every source."""
    id: str
    title: str
    company: str
    location: str = ""
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    salary_text: str = "Not specified"
    description: str = ""
    source: str = ""
    required_skills: tuple[str, ...] = ()
    posted_date: Optional[datetime] = None
    remote: bool = False
    url: str = ""
    employment_type: str = ""

    @property
    def dedup_key(self) -> str:
        return f"{self.title.lower()}-{self.company.lower()}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "salary_min": self.salary_min,
            "salary_max": self.salary_max,
            "salary": self.salary_text,
            "description": self.description,
            "source": self.source,
            "required_skills": list(self.required_skills),
            "posted_date": self.posted_date.isoformat() if self.posted_date else None,
            "remote": self.remote,
            "url": self.url,
            "type": self.employment_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Listing":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            company=data.get("company") or "",
            location=data.get("location") or "",
            salary_min=_optional_number(data.get("salary_min")),
            salary_max=_optional_number(data.get("salary_max")),
            salary_text=data.get("salary") or "Not specified",
            description=data.get("description") or "",
            source=data.get("source") or "",
            required_skills=tuple(data.get("required_skills") or ()),
            posted_date=_parse_datetime(data.get("posted_date")),
            remote=bool(data.get("remote", False)),
            url=data.get("url") or "",
            employment_type=data.get("type") or "",
        )


@dataclass(frozen=True)
class MatchFactor:
    """One weighted component of a match score."""
    name: str
    score: int
    detail: str

    def to_dict(self) -> dict:
        return {"name": self.name, "score": self.score, "details": self.detail}


@dataclass
class MatchResult:
    """Scoring breakdown for a listing."""
    listing: Listing
    overall_score: int = 0  # 0-100
    factors: list[MatchFactor] = field(default_factory=list)

    def factor(self, name: str) -> Optional[MatchFactor]:
        for f in self.factors:
            if f.name == name:
                return f
        return None

    def to_dict(self) -> dict:
        data = self.listing.to_dict()
        data["match_score"] = self.overall_score
        data["match_factors"] = [f.to_dict() for f in self.factors]
        return data


@dataclass
class Application:
    """A submitted application. Status is updated by the tracking process."""
    listing_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    listing: Optional[Listing] = None
    status: ApplicationStatus = ApplicationStatus.APPLIED
    applied_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cover_letter: str = ""
    auto_applied: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "job_id": self.listing_id,
            "job": self.listing.to_dict() if self.listing else None,
            "status": self.status.value,
            "applied_date": self.applied_date.isoformat(),
            "cover_letter": self.cover_letter,
            "auto_applied": self.auto_applied,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Application":
        job = data.get("job")
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            listing_id=str(data.get("job_id", "")),
            listing=Listing.from_dict(job) if isinstance(job, dict) else None,
            status=ApplicationStatus(data.get("status", ApplicationStatus.APPLIED.value)),
            applied_date=_parse_datetime(data.get("applied_date")) or datetime.now(timezone.utc),
            cover_letter=data.get("cover_letter") or "",
            auto_applied=bool(data.get("auto_applied", False)),
        )
