"""
Company directory.

Responsibilities:
- Read, merge and persist Company records keyed by exact company name.
- Seed starter records from job/event postings (backfill).

Non-Responsibilities:
- No aggregate derivation (see aggregates.py).
- No name normalization: "Acme" and "acme " are different companies.

Invariant:
A company is never deleted, and upsert never clears a field implicitly.

Every write rewrites the whole directory blob. Two processes upserting at
the same time can lose one of the updates; this is accepted.
"""

from dataclasses import asdict, fields
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .aggregates import posting_salary_average, refresh_company
from .codec import RecordCodec
from .errors import ValidationError
from .logger import StructuredLogger
from .models import Company, JobPosting, ProfileColors, Statistics
from .schema import posting_from_dict, validate_posting

BIOGRAPHY_TEMPLATE = "{name} is a leading company in the industry."

STATISTICS_FIELDS = frozenset(f.name for f in fields(Statistics))
MERGEABLE_FIELDS = frozenset(f.name for f in fields(Company)) - {"name"}


def _has_value(value: Any) -> bool:
    # None, "", [], {}, 0 and False all count as "not provided"
    return bool(value)


def _statistics_overlay(value: Union[Statistics, Mapping[str, Any]]) -> Dict[str, Any]:
    overlay = asdict(value) if isinstance(value, Statistics) else dict(value)
    unknown = sorted(set(overlay) - STATISTICS_FIELDS)
    if unknown:
        raise ValidationError([f"Unknown statistics field: {k}" for k in unknown])
    return overlay


def merge_company(existing: Company, partial: Mapping[str, Any]) -> Company:
    """Apply "later non-empty value wins, else keep existing" per field."""
    unknown = sorted(set(partial) - MERGEABLE_FIELDS)
    if unknown:
        raise ValidationError([f"Unknown company field: {k}" for k in unknown])

    values = asdict(existing)
    values["profile_colors"] = existing.profile_colors
    values["statistics"] = asdict(existing.statistics)

    for key, value in partial.items():
        if key == "statistics":
            if value:
                values["statistics"].update(_statistics_overlay(value))
            continue
        if not _has_value(value):
            continue
        if key == "profile_colors" and isinstance(value, tuple):
            value = ProfileColors(*value)
        elif isinstance(value, list):
            value = list(value)
        values[key] = value

    values["statistics"] = Statistics(**values["statistics"])
    return Company(**values)


def starter_company(name: str, postings: List[JobPosting]) -> Company:
    """Default record derived from one company's own postings."""
    jobs = [p.id for p in postings if not p.is_event]
    events = [p.id for p in postings if p.is_event]
    location = postings[0].location if postings else ""
    return Company(
        name=name,
        biography=BIOGRAPHY_TEMPLATE.format(name=name),
        addresses=[location] if location else [],
        statistics=Statistics(
            total_job_posts=len(jobs),
            average_salary=posting_salary_average(postings),
        ),
        job_postings=jobs,
        event_postings=events,
    )


class CompanyDirectory:
    def __init__(self, codec: RecordCodec, logger: Optional[StructuredLogger] = None):
        self.codec = codec
        self.logger = logger or codec.logger

    def get(self, name: str) -> Optional[Company]:
        """Snapshot of one company, or None when it does not exist."""
        return self.codec.read_companies().get(name)

    def all(self) -> Dict[str, Company]:
        return self.codec.read_companies()

    def upsert(self, name: str, partial: Mapping[str, Any]) -> None:
        """
        Merge ``partial`` onto the stored company (or a fresh default record).

        Raises:
            ValidationError: if ``partial`` names a field Company does not have
        """
        companies = self.codec.read_companies()
        existing = companies.get(name) or Company(name=name)
        companies[name] = merge_company(existing, partial)
        if self.codec.write_companies(companies):
            self.logger.debug("Company upserted", company=name, fields=sorted(partial))

    def save(self, company: Company) -> bool:
        """Write one full record as-is, without merging."""
        companies = self.codec.read_companies()
        companies[company.name] = company
        return self.codec.write_companies(companies)

    def bulk_backfill(self, postings: Iterable[Union[JobPosting, Mapping[str, Any]]]) -> List[str]:
        """
        Create starter companies for postings whose company has no record.

        Existing companies are left untouched, so feeding the same postings
        again changes nothing. Returns the names of the companies created.
        """
        by_company: Dict[str, List[JobPosting]] = {}
        seen_ids = set()
        skipped = 0
        for item in postings:
            posting = item if isinstance(item, JobPosting) else posting_from_dict(item)
            if posting is None:
                skipped += 1
                self.logger.warning(
                    "Skipping invalid posting", errors=validate_posting(item)
                )
                continue
            if posting.id in seen_ids:
                continue
            seen_ids.add(posting.id)
            by_company.setdefault(posting.company, []).append(posting)

        companies = self.codec.read_companies()
        created = []
        for name, company_postings in by_company.items():
            if name in companies:
                continue
            companies[name] = starter_company(name, company_postings)
            created.append(name)

        if created and not self.codec.write_companies(companies):
            return []
        self.logger.info(
            f"Backfill complete: {len(created)} created",
            created=len(created),
            companies_seen=len(by_company),
            skipped=skipped,
        )
        return created

    def report(self, name: str, reason: str) -> bool:
        """Count a moderation report against the company, if it exists."""
        self.logger.info("Company reported", company=name, reason=reason)
        company = self.get(name)
        if company is None:
            return False
        company.report_count += 1
        return self.save(company)

    def update_statistics(self, name: str, updates: Mapping[str, Any]) -> bool:
        """Overlay counter fields fed by application flows (hired, rejected, ...)."""
        return refresh_company(self, name, _statistics_overlay(updates))
