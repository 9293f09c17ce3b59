"""
Serialization of the five collections to and from store values.

Each collection lives under its own key as a single JSON blob using the
camelCase field names of the stored data. Decoding fills defaults for fields
that older blobs do not carry.

This module is the storage boundary: StorageAccessError never leaves it.
Unparsable blobs read as an empty collection, a single bad record is
dropped from the read, and writes report failure through their return
value. All of these are logged and counted.
"""

import json
import math
from dataclasses import asdict, fields
from functools import partial
from typing import Any, Callable, Dict, List, Optional

from .errors import StorageAccessError
from .logger import StructuredLogger, get_logger
from .models import (
    Company,
    CompanyReview,
    FollowRelation,
    ProfileColors,
    SalaryReport,
    Statistics,
)
from .storage import KeyValueStore

COMPANIES = "companies"
REVIEWS = "companyReviews"
BLOCKED = "blockedCompanies"
FOLLOWED = "followedCompanies"
SALARY_REPORTS = "salaryReports"

COLLECTIONS = (COMPANIES, REVIEWS, BLOCKED, FOLLOWED, SALARY_REPORTS)

DEFAULT_KEY_PREFIX = "rushWorking_"


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _require_list(data: Any, what: str) -> List[Any]:
    if not isinstance(data, list):
        raise TypeError(f"{what} must be an array, got {type(data).__name__}")
    return data


# --- Company ---

def _number_or_zero(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0
    return value


def statistics_from_dict(data: Optional[Dict[str, Any]]) -> Statistics:
    data = data if isinstance(data, dict) else {}
    return Statistics(**{f.name: _number_or_zero(data.get(camel(f.name))) for f in fields(Statistics)})


def statistics_to_dict(stats: Statistics) -> Dict[str, Any]:
    return {camel(k): v for k, v in asdict(stats).items()}


def _review_ids(entries: List[Any]) -> List[str]:
    # Older blobs embedded full review objects instead of their ids.
    ids = []
    for entry in entries:
        if isinstance(entry, dict):
            if entry.get("id"):
                ids.append(str(entry["id"]))
        elif entry is not None:
            ids.append(str(entry))
    return ids


def company_from_dict(name: str, data: Dict[str, Any]) -> Company:
    data = _require_mapping(data, f"company {name!r}")
    colors = data.get("profileColors")
    profile_colors = None
    if isinstance(colors, dict) and colors.get("from") and colors.get("to"):
        profile_colors = ProfileColors(start=colors["from"], end=colors["to"])
    return Company(
        name=data.get("name") or name,
        biography=data.get("biography") or "",
        addresses=list(data.get("addresses") or []),
        logo=data.get("logo"),
        website=data.get("website"),
        industry=data.get("industry"),
        founded_year=data.get("foundedYear"),
        company_size=data.get("companySize"),
        profile_colors=profile_colors,
        statistics=statistics_from_dict(data.get("statistics")),
        reviews=_review_ids(data.get("reviews") or []),
        job_postings=list(data.get("jobPostings") or []),
        event_postings=list(data.get("eventPostings") or []),
        is_blocked=bool(data.get("isBlocked", False)),
        report_count=int(_number_or_zero(data.get("reportCount"))),
    )


def company_to_dict(company: Company) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": company.name,
        "biography": company.biography,
        "addresses": list(company.addresses),
        "statistics": statistics_to_dict(company.statistics),
        "reviews": list(company.reviews),
        "jobPostings": list(company.job_postings),
        "eventPostings": list(company.event_postings),
        "isBlocked": company.is_blocked,
        "reportCount": company.report_count,
    }
    for attr in ("logo", "website", "industry", "founded_year", "company_size"):
        value = getattr(company, attr)
        if value is not None:
            data[camel(attr)] = value
    if company.profile_colors is not None:
        data["profileColors"] = {
            "from": company.profile_colors.start,
            "to": company.profile_colors.end,
        }
    return data


# --- Ledger records ---
#
# Key fields (ids and company names) must be present. Every other field falls
# back to its default so records written by older versions still load.

def _key_field(data: Dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value:
        raise TypeError(f"{what} has no {key}")
    return value


def _number_field(data: Dict[str, Any], key: str, what: str) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise TypeError(f"{what} {key} must be a number, got {value!r}")
    return value


def _text_field(data: Dict[str, Any], key: str, default: Optional[str] = "") -> Optional[str]:
    value = data.get(key)
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _record_to_dict(record) -> Dict[str, Any]:
    return {camel(k): v for k, v in asdict(record).items() if v is not None}


def review_from_dict(data: Any) -> CompanyReview:
    data = _require_mapping(data, "review")
    return CompanyReview(
        id=_key_field(data, "id", "review"),
        company_name=_key_field(data, "companyName", "review"),
        rating=_number_field(data, "rating", "review"),
        comment=_text_field(data, "comment"),
        created_at=_text_field(data, "createdAt"),
        user_id=_text_field(data, "userId"),
        user_name=_text_field(data, "userName"),
        applicant_status=_text_field(data, "applicantStatus", "not_applied"),
        job_title=_text_field(data, "jobTitle", None),
    )


def salary_report_from_dict(data: Any) -> SalaryReport:
    data = _require_mapping(data, "salary report")
    return SalaryReport(
        id=_key_field(data, "id", "salary report"),
        company_name=_key_field(data, "companyName", "salary report"),
        salary_amount=_number_field(data, "salaryAmount", "salary report"),
        reported_at=_text_field(data, "reportedAt"),
        user_id=_text_field(data, "userId"),
        job_title=_text_field(data, "jobTitle"),
        employment_type=_text_field(data, "employmentType", "full-time"),
        notes=_text_field(data, "notes", None),
    )


def follow_from_dict(data: Any) -> FollowRelation:
    data = _require_mapping(data, "follow relation")
    return FollowRelation(
        company_name=_key_field(data, "companyName", "follow relation"),
        followed_at=_text_field(data, "followedAt"),
    )


# --- Collection decoders ---
#
# With no ``skip`` callback any bad record fails the whole decode. Store reads
# pass one, so a bad record is dropped and reported while the rest of the
# collection loads.

SkipRecord = Callable[[Exception], None]


def _decode_each(items: List[Any], decode: Callable[[Any], Any], skip: Optional[SkipRecord]) -> List[Any]:
    records = []
    for item in items:
        try:
            records.append(decode(item))
        except (TypeError, ValueError) as e:
            if skip is None:
                raise
            skip(e)
    return records


def decode_companies(data: Any, skip: Optional[SkipRecord] = None) -> Dict[str, Company]:
    data = _require_mapping(data, COMPANIES)
    companies = {}
    for name, value in data.items():
        try:
            companies[name] = company_from_dict(name, value)
        except (TypeError, ValueError) as e:
            if skip is None:
                raise
            skip(e)
    return companies


def encode_companies(companies: Dict[str, Company]) -> Dict[str, Any]:
    return {name: company_to_dict(c) for name, c in companies.items()}


def decode_reviews(data: Any, skip: Optional[SkipRecord] = None) -> List[CompanyReview]:
    return _decode_each(_require_list(data, REVIEWS), review_from_dict, skip)


def decode_salary_reports(data: Any, skip: Optional[SkipRecord] = None) -> List[SalaryReport]:
    return _decode_each(_require_list(data, SALARY_REPORTS), salary_report_from_dict, skip)


def decode_blocked(data: Any) -> List[str]:
    names: List[str] = []
    for name in _require_list(data, BLOCKED):
        if isinstance(name, str) and name not in names:
            names.append(name)
    return names


def decode_follows(data: Any, skip: Optional[SkipRecord] = None) -> Dict[str, List[FollowRelation]]:
    data = _require_mapping(data, FOLLOWED)
    follows = {}
    for user_id, items in data.items():
        try:
            items = _require_list(items, f"follows of {user_id}")
        except TypeError as e:
            if skip is None:
                raise
            skip(e)
            continue
        follows[user_id] = _decode_each(items, follow_from_dict, skip)
    return follows


def encode_follows(follows: Dict[str, List[FollowRelation]]) -> Dict[str, Any]:
    return {user_id: [_record_to_dict(r) for r in items] for user_id, items in follows.items()}


class RecordCodec:
    """Reads and writes whole collections through a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        logger: Optional[StructuredLogger] = None,
    ):
        self.store = store
        self.key_prefix = key_prefix
        self.logger = logger or get_logger()

    def key_for(self, collection: str) -> str:
        return f"{self.key_prefix}{collection}"

    # Generic plumbing

    def read_raw(self, collection: str) -> Optional[str]:
        """Raw blob for a collection, or None when absent or unreadable."""
        key = self.key_for(collection)
        self.logger.record_read()
        try:
            return self.store.get_item(key)
        except StorageAccessError as e:
            self.logger.record_storage_failure("read")
            self.logger.error("Storage read failed", key=key, error=str(e))
            return None

    def _read(self, collection: str, decode: Callable[[Any], Any], empty: Callable[[], Any]):
        raw = self.read_raw(collection)
        if raw is None:
            return empty()
        try:
            return decode(json.loads(raw))
        except (ValueError, TypeError, AttributeError) as e:
            # json.JSONDecodeError is a ValueError
            self.logger.record_storage_failure("parse")
            self.logger.warning(
                "Unreadable collection, using empty default",
                key=self.key_for(collection),
                error=str(e),
            )
            return empty()

    def _skipper(self, collection: str) -> SkipRecord:
        def skip(error: Exception) -> None:
            self.logger.record_storage_failure("record")
            self.logger.warning(
                "Skipping unreadable record",
                key=self.key_for(collection),
                error=str(error),
            )
        return skip

    def write_raw(self, collection: str, raw: str) -> bool:
        key = self.key_for(collection)
        try:
            self.store.set_item(key, raw)
        except StorageAccessError as e:
            self.logger.record_storage_failure("write")
            self.logger.error("Storage write failed", key=key, error=str(e))
            return False
        self.logger.record_write(collection)
        return True

    def _write(self, collection: str, payload: Any) -> bool:
        return self.write_raw(collection, json.dumps(payload, ensure_ascii=False))

    def remove(self, collection: str) -> bool:
        key = self.key_for(collection)
        try:
            self.store.remove_item(key)
        except StorageAccessError as e:
            self.logger.record_storage_failure("remove")
            self.logger.error("Storage remove failed", key=key, error=str(e))
            return False
        return True

    # Collections

    def read_companies(self) -> Dict[str, Company]:
        return self._read(COMPANIES, partial(decode_companies, skip=self._skipper(COMPANIES)), dict)

    def write_companies(self, companies: Dict[str, Company]) -> bool:
        return self._write(COMPANIES, encode_companies(companies))

    def read_reviews(self) -> List[CompanyReview]:
        return self._read(REVIEWS, partial(decode_reviews, skip=self._skipper(REVIEWS)), list)

    def write_reviews(self, reviews: List[CompanyReview]) -> bool:
        return self._write(REVIEWS, [_record_to_dict(r) for r in reviews])

    def read_salary_reports(self) -> List[SalaryReport]:
        return self._read(SALARY_REPORTS, partial(decode_salary_reports, skip=self._skipper(SALARY_REPORTS)), list)

    def write_salary_reports(self, reports: List[SalaryReport]) -> bool:
        return self._write(SALARY_REPORTS, [_record_to_dict(r) for r in reports])

    def read_blocked(self) -> List[str]:
        return self._read(BLOCKED, decode_blocked, list)

    def write_blocked(self, names: List[str]) -> bool:
        return self._write(BLOCKED, list(names))

    def read_follows(self) -> Dict[str, List[FollowRelation]]:
        return self._read(FOLLOWED, partial(decode_follows, skip=self._skipper(FOLLOWED)), dict)

    def write_follows(self, follows: Dict[str, List[FollowRelation]]) -> bool:
        return self._write(FOLLOWED, encode_follows(follows))
