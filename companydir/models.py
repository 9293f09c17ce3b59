"""
Record types for the company directory and the collections attached to it.

All records are plain dataclasses. Reads always return freshly decoded
instances, so callers may mutate what they get back without touching storage.
"""

from dataclasses import dataclass, field
from typing import List, Optional


APPLICANT_STATUSES = ("not_applied", "applied", "interviewed", "hired", "rejected")
EMPLOYMENT_TYPES = ("full-time", "part-time", "contract", "internship")


@dataclass
class Statistics:
    """Counters and derived averages embedded in a Company."""

    hired: int = 0
    interviewed: int = 0
    rejected: int = 0
    total_job_posts: int = 0
    total_applications: int = 0
    average_salary: int = 0
    average_reported_salary: int = 0
    average_rating: float = 0
    total_reviews: int = 0
    follow_count: int = 0


@dataclass(frozen=True)
class ProfileColors:
    start: str
    end: str


@dataclass
class Company:
    name: str
    biography: str = ""
    addresses: List[str] = field(default_factory=list)
    logo: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    founded_year: Optional[int] = None
    company_size: Optional[str] = None
    profile_colors: Optional[ProfileColors] = None
    statistics: Statistics = field(default_factory=Statistics)
    reviews: List[str] = field(default_factory=list)  # review ids, ledger order
    job_postings: List[str] = field(default_factory=list)
    event_postings: List[str] = field(default_factory=list)
    is_blocked: bool = False
    report_count: int = 0


@dataclass
class CompanyReview:
    id: str
    company_name: str
    rating: float
    comment: str = ""
    created_at: str = ""
    user_id: str = ""
    user_name: str = ""
    applicant_status: str = "not_applied"
    job_title: Optional[str] = None


@dataclass
class SalaryReport:
    id: str
    company_name: str
    salary_amount: float
    reported_at: str = ""
    user_id: str = ""
    job_title: str = ""
    employment_type: str = "full-time"
    notes: Optional[str] = None


@dataclass
class FollowRelation:
    company_name: str
    followed_at: str = ""


@dataclass
class JobPosting:
    """A job or event posting handed over by the rest of the application."""

    id: str
    company: str
    location: str = ""
    salary_min: float = 0
    salary_max: float = 0
    is_event: bool = False

    @property
    def salary_midpoint(self) -> float:
        return (self.salary_min + self.salary_max) / 2
