"""
Append-only ledger of company reviews.

The ledger is stored most-recent-first; that order is part of the contract
and is preserved by every read.
"""

from typing import List, Optional

from .aggregates import rating_summary, refresh_company, review_ids
from .codec import RecordCodec
from .directory import CompanyDirectory
from .errors import ValidationError
from .ids import new_record_id, utc_timestamp
from .logger import StructuredLogger
from .models import CompanyReview
from .schema import validate_review


class ReviewLedger:
    def __init__(
        self,
        codec: RecordCodec,
        directory: CompanyDirectory,
        logger: Optional[StructuredLogger] = None,
    ):
        self.codec = codec
        self.directory = directory
        self.logger = logger or codec.logger

    def add(
        self,
        company_name: str,
        rating: float,
        comment: str,
        user_id: str = "",
        user_name: str = "",
        applicant_status: str = "not_applied",
        job_title: Optional[str] = None,
    ) -> CompanyReview:
        """
        Record a review and refresh the company's rating aggregate.

        A review for a company with no record is kept in the ledger, but no
        aggregate is written.

        Raises:
            ValidationError: if the rating is outside 1..5 or the status is unknown
        """
        errors = validate_review(company_name, rating, applicant_status)
        if errors:
            self.logger.record_validation_failure()
            self.logger.warning("Rejected review", company=company_name, errors=errors)
            raise ValidationError(errors)

        review = CompanyReview(
            id=new_record_id(),
            company_name=company_name,
            rating=rating,
            comment=comment,
            created_at=utc_timestamp(),
            user_id=user_id,
            user_name=user_name,
            applicant_status=applicant_status,
            job_title=job_title or None,
        )

        reviews = self.codec.read_reviews()
        reviews.insert(0, review)
        if not self.codec.write_reviews(reviews):
            return review

        total, average = rating_summary(reviews, company_name)
        refresh_company(
            self.directory,
            company_name,
            {"total_reviews": total, "average_rating": average},
            reviews=review_ids(reviews, company_name),
        )
        return review

    def list_for(self, company_name: str) -> List[CompanyReview]:
        """Reviews for one company, most recent first. Empty when none."""
        return [r for r in self.codec.read_reviews() if r.company_name == company_name]
