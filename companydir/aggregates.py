"""
Statistics aggregation.

Responsibilities:
- Derive every Company aggregate from its full source collection.
- Merge recomputed values onto the stored Company and persist it.

Non-Responsibilities:
- No incremental counters.
- No reads of the source collections (callers pass what they just wrote).

Invariant:
After a mutation completes, each derived field equals a pure function of
its source collection filtered by company name.
"""

from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Tuple

from .models import CompanyReview, FollowRelation, JobPosting, SalaryReport

if TYPE_CHECKING:
    from .directory import CompanyDirectory


def round_half_away(value: Decimal, places: int = 0) -> Decimal:
    """Round to ``places`` decimals, halves away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)


def mean(values: Iterable[Any]) -> Decimal:
    # str() keeps 4.35 as 4.35 rather than its binary expansion
    items = [Decimal(str(v)) for v in values]
    if not items:
        return Decimal(0)
    return sum(items) / Decimal(len(items))


def rating_summary(reviews: List[CompanyReview], company_name: str) -> Tuple[int, float]:
    """(total_reviews, average_rating) for one company."""
    ratings = [r.rating for r in reviews if r.company_name == company_name]
    if not ratings:
        return 0, 0.0
    return len(ratings), float(round_half_away(mean(ratings), 1))


def review_ids(reviews: List[CompanyReview], company_name: str) -> List[str]:
    return [r.id for r in reviews if r.company_name == company_name]


def reported_salary_average(reports: List[SalaryReport], company_name: str) -> int:
    amounts = [r.salary_amount for r in reports if r.company_name == company_name]
    if not amounts:
        return 0
    return int(round_half_away(mean(amounts)))


def follow_count(follows: Dict[str, List[FollowRelation]], company_name: str) -> int:
    """Number of distinct users whose follow list contains the company."""
    return sum(
        1 for relations in follows.values()
        if any(r.company_name == company_name for r in relations)
    )


def posting_salary_average(postings: List[JobPosting]) -> int:
    """Rounded mean of each job posting's salary midpoint; events ignored."""
    midpoints = [p.salary_midpoint for p in postings if not p.is_event]
    if not midpoints:
        return 0
    return int(round_half_away(mean(midpoints)))


def refresh_company(
    directory: "CompanyDirectory",
    company_name: str,
    statistics: Dict[str, Any],
    **fields: Any,
) -> bool:
    """
    Overlay recomputed statistics (and any other record fields) onto the
    stored company and write the full record back.

    Returns False when the company does not exist; no record is created.
    """
    company = directory.get(company_name)
    if company is None:
        directory.logger.debug(
            "Skipping aggregate refresh for unknown company",
            company=company_name,
            fields=sorted(statistics),
        )
        return False

    company.statistics = replace(company.statistics, **statistics)
    if fields:
        company = replace(company, **fields)
    return directory.save(company)
