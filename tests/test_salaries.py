"""
Tests for salaries.py - the salary ledger and its reported average.
"""

import json

import pytest

from companydir.errors import ValidationError


class TestReportSalary:
    def test_lower_bound_inclusive(self, services, acme):
        services.salaries.report(acme, salary_amount=15000)
        assert len(services.salaries.list_for(acme)) == 1

    def test_upper_bound_inclusive(self, services, acme):
        services.salaries.report(acme, salary_amount=500000)
        assert len(services.salaries.list_for(acme)) == 1

    def test_below_lower_bound_raises(self, services, acme):
        with pytest.raises(ValidationError) as exc:
            services.salaries.report(acme, salary_amount=14999)
        assert "between $15,000 and $500,000" in str(exc.value)
        assert services.salaries.list_for(acme) == []

    def test_above_upper_bound_raises(self, services, acme):
        with pytest.raises(ValidationError):
            services.salaries.report(acme, salary_amount=500001)

    def test_rejected_report_leaves_aggregate(self, services, acme):
        services.salaries.report(acme, salary_amount=60000)
        with pytest.raises(ValidationError):
            services.salaries.report(acme, salary_amount=1)
        assert services.directory.get(acme).statistics.average_reported_salary == 60000

    def test_unknown_employment_type_raises(self, services, acme):
        with pytest.raises(ValidationError):
            services.salaries.report(acme, salary_amount=60000, employment_type="gig")

    def test_validation_propagates_even_when_storage_fails(self, flaky_store, flaky_services):
        flaky_store.fail_writes_for.add("*")
        with pytest.raises(ValidationError):
            flaky_services.salaries.report("Acme", salary_amount=10)

    def test_updates_reported_average(self, services, acme):
        services.salaries.report(acme, salary_amount=50000)
        services.salaries.report(acme, salary_amount=50001)
        assert services.directory.get(acme).statistics.average_reported_salary == 50001

    def test_aggregate_matches_ledger(self, services, acme):
        services.directory.upsert("Globex", {"biography": "Hank"})
        for amount in (40000, 90000, 123457):
            services.salaries.report(acme, salary_amount=amount)
        services.salaries.report("Globex", salary_amount=300000)

        stats = services.directory.get(acme).statistics
        assert stats.average_reported_salary == services.salaries.average_for(acme) == 84486

    def test_keeps_job_salary_average(self, services, sample_postings):
        services.directory.bulk_backfill(sample_postings)
        services.salaries.report("Acme", salary_amount=20000)
        stats = services.directory.get("Acme").statistics
        assert stats.average_salary == 85000
        assert stats.average_reported_salary == 20000

    def test_orphan_report_kept(self, services):
        services.salaries.report("Nobody", salary_amount=70000)
        assert services.salaries.average_for("Nobody") == 70000
        assert services.directory.get("Nobody") is None

    def test_returns_stored_report(self, services, acme):
        report = services.salaries.report(
            acme,
            salary_amount=88000,
            user_id="u1",
            job_title="Welder",
            employment_type="contract",
            notes="night shifts",
        )
        assert services.salaries.list_for(acme) == [report]
        assert report.reported_at.endswith("Z")


class TestListSalaries:
    def test_insertion_order(self, services, acme):
        s1 = services.salaries.report(acme, salary_amount=30000)
        s2 = services.salaries.report(acme, salary_amount=20000)
        assert services.salaries.list_for(acme) == [s1, s2]

    def test_average_for_no_reports(self, services):
        assert services.salaries.average_for("Nobody") == 0


class TestDamagedLedger:
    def test_string_amount_record_does_not_break_report(self, store, services, acme):
        stored = [
            {"id": "s1", "companyName": "Acme", "salaryAmount": 60000, "reportedAt": "t1"},
            {"id": "s2", "companyName": "Acme", "salaryAmount": "90000", "reportedAt": "t2"},
        ]
        store.set_item("rushWorking_salaryReports", json.dumps(stored))

        services.salaries.report(acme, salary_amount=80000)

        assert services.directory.get(acme).statistics.average_reported_salary == 70000
        assert services.salaries.average_for(acme) == 70000

    def test_legacy_report_without_timestamp_survives_report(self, store, services, acme):
        legacy = {"id": "s0", "companyName": "Acme", "salaryAmount": 40000}
        store.set_item("rushWorking_salaryReports", json.dumps([legacy]))

        services.salaries.report(acme, salary_amount=60000)

        assert [r.id for r in services.salaries.list_for(acme)][0] == "s0"
        assert len(services.salaries.list_for(acme)) == 2
        assert services.directory.get(acme).statistics.average_reported_salary == 50000
