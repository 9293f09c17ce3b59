from typing import Any, Dict, List, Optional

from .models import APPLICANT_STATUSES, EMPLOYMENT_TYPES, JobPosting

SALARY_MIN = 15_000
SALARY_MAX = 500_000
RATING_MIN = 1
RATING_MAX = 5


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def validate_salary_report(salary_amount: Any, employment_type: str = "full-time") -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Both salary bounds are inclusive.
    """
    errors: List[str] = []
    if not _is_number(salary_amount) or salary_amount != salary_amount:  # NaN check
        errors.append("Salary must be a number")
    elif not SALARY_MIN <= salary_amount <= SALARY_MAX:
        errors.append(f"Salary must be between ${SALARY_MIN:,} and ${SALARY_MAX:,}")

    if employment_type not in EMPLOYMENT_TYPES:
        errors.append(
            f"Employment type must be one of: {', '.join(EMPLOYMENT_TYPES)}"
        )
    return errors


def validate_review(company_name: Any, rating: Any, applicant_status: str = "not_applied") -> List[str]:
    errors: List[str] = []
    if not _is_non_empty_str(company_name):
        errors.append("Company name must be a non-empty string")
    if not _is_number(rating):
        errors.append("Rating must be a number")
    elif not RATING_MIN <= rating <= RATING_MAX:
        errors.append(f"Rating must be between {RATING_MIN} and {RATING_MAX}")
    if applicant_status not in APPLICANT_STATUSES:
        errors.append(
            f"Applicant status must be one of: {', '.join(APPLICANT_STATUSES)}"
        )
    return errors


def validate_posting(data: Dict[str, Any]) -> List[str]:
    """Check a raw posting mapping before it seeds a company."""
    errors: List[str] = []
    for f in ("id", "company"):
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif data[f] is None or str(data[f]).strip() == "":
            errors.append(f"Field '{f}' must be non-empty")

    if "location" in data and data["location"] is not None and not isinstance(data["location"], str):
        errors.append("Field 'location' must be a string if provided")

    salary = data.get("salary")
    if salary is not None:
        if not isinstance(salary, dict):
            errors.append("Field 'salary' must be an object with min and max")
        else:
            for bound in ("min", "max"):
                if not _is_number(salary.get(bound)):
                    errors.append(f"Field 'salary.{bound}' must be a number")
    return errors


def posting_from_dict(data: Dict[str, Any]) -> Optional[JobPosting]:
    """Build a JobPosting from a raw mapping; None when it is invalid."""
    if validate_posting(data):
        return None
    salary = data.get("salary") or {}
    return JobPosting(
        id=str(data["id"]),
        company=str(data["company"]),
        location=data.get("location") or "",
        salary_min=salary.get("min", 0),
        salary_max=salary.get("max", 0),
        is_event=bool(data.get("isEvent", data.get("is_event", False))),
    )
