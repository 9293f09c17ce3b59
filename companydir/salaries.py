"""
Append-only ledger of user-reported salaries, kept in insertion order.
"""

from typing import List, Optional

from .aggregates import refresh_company, reported_salary_average
from .codec import RecordCodec
from .directory import CompanyDirectory
from .errors import ValidationError
from .ids import new_record_id, utc_timestamp
from .logger import StructuredLogger
from .models import SalaryReport
from .schema import validate_salary_report


class SalaryLedger:
    def __init__(
        self,
        codec: RecordCodec,
        directory: CompanyDirectory,
        logger: Optional[StructuredLogger] = None,
    ):
        self.codec = codec
        self.directory = directory
        self.logger = logger or codec.logger

    def report(
        self,
        company_name: str,
        salary_amount: float,
        user_id: str = "",
        job_title: str = "",
        employment_type: str = "full-time",
        notes: Optional[str] = None,
    ) -> SalaryReport:
        """
        Append a salary report and refresh the company's reported average.

        Raises:
            ValidationError: if the amount is outside 15,000..500,000
                (inclusive) or the employment type is unknown
        """
        errors = validate_salary_report(salary_amount, employment_type)
        if errors:
            self.logger.record_validation_failure()
            self.logger.warning(
                "Rejected salary report",
                company=company_name,
                salary_amount=salary_amount,
                errors=errors,
            )
            raise ValidationError(errors)

        report = SalaryReport(
            id=new_record_id(),
            company_name=company_name,
            salary_amount=salary_amount,
            reported_at=utc_timestamp(),
            user_id=user_id,
            job_title=job_title,
            employment_type=employment_type,
            notes=notes or None,
        )

        reports = self.codec.read_salary_reports()
        reports.append(report)
        if not self.codec.write_salary_reports(reports):
            return report

        refresh_company(
            self.directory,
            company_name,
            {"average_reported_salary": reported_salary_average(reports, company_name)},
        )
        return report

    def list_for(self, company_name: str) -> List[SalaryReport]:
        return [r for r in self.codec.read_salary_reports() if r.company_name == company_name]

    def average_for(self, company_name: str) -> int:
        """Rounded mean of the company's reports; 0 when there are none."""
        return reported_salary_average(self.codec.read_salary_reports(), company_name)
