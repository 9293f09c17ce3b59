"""
Tests for the command line interface.
"""

import json

import pytest

from companydir.app import main


@pytest.fixture
def store_args(tmp_path):
    return ["--store", str(tmp_path / "store.json")]


def run(capsys, *argv):
    main(list(argv))
    return capsys.readouterr().out


class TestCompanies:
    def test_upsert_then_show(self, capsys, store_args):
        run(capsys, "upsert", "--company", "Acme", "--biography", "Anvils", "--industry", "Hardware", *store_args)
        out = run(capsys, "show", "--company", "Acme", *store_args)

        assert "Company: Acme" in out
        assert "Biography: Anvils" in out
        assert "Industry: Hardware" in out

    def test_show_missing_company(self, capsys, store_args):
        with pytest.raises(SystemExit) as exc:
            main(["show", "--company", "Nobody", *store_args])
        assert exc.value.code == 1
        assert "Company not found" in capsys.readouterr().out

    def test_list_empty(self, capsys, store_args):
        assert "No companies in store." in run(capsys, "list", *store_args)

    def test_backfill(self, capsys, store_args, postings_file):
        out = run(capsys, "backfill", "--input", str(postings_file), *store_args)
        assert "created=2" in out

        out = run(capsys, "backfill", "--input", str(postings_file), *store_args)
        assert "created=0" in out

        out = run(capsys, "list", *store_args)
        assert "Found 2 companies" in out

    def test_backfill_missing_file(self, tmp_path, store_args):
        with pytest.raises(SystemExit, match="Input file not found"):
            main(["backfill", "--input", str(tmp_path / "nope.json"), *store_args])

    def test_backfill_invalid_json(self, tmp_path, store_args):
        bad = tmp_path / "postings.json"
        bad.write_text("[{not json")
        with pytest.raises(SystemExit, match="Postings file is not valid JSON"):
            main(["backfill", "--input", str(bad), *store_args])

    def test_report_requires_reason(self, store_args):
        with pytest.raises(SystemExit, match="reason"):
            main(["report", "--company", "Acme", "--reason", "  ", *store_args])

    def test_report_counts(self, capsys, store_args):
        run(capsys, "upsert", "--company", "Acme", "--biography", "x", *store_args)
        assert "Reported: Acme" in run(capsys, "report", "--company", "Acme", "--reason", "spam", *store_args)
        assert "Reports: 1" in run(capsys, "show", "--company", "Acme", *store_args)


class TestLedgers:
    def test_review_updates_company(self, capsys, store_args):
        run(capsys, "upsert", "--company", "Acme", "--biography", "x", *store_args)
        run(capsys, "review", "--company", "Acme", "--rating", "4", "--comment", "Good", *store_args)
        run(capsys, "review", "--company", "Acme", "--rating", "5", "--comment", "Great", *store_args)

        out = run(capsys, "show", "--company", "Acme", *store_args)
        assert "Reviews: 2  Avg rating: 4.5" in out

        out = run(capsys, "reviews", "--company", "Acme", *store_args)
        lines = out.strip().splitlines()
        assert "Great" in lines[0]
        assert "Good" in lines[1]

    def test_invalid_rating_exits_2(self, capsys, store_args):
        with pytest.raises(SystemExit) as exc:
            main(["review", "--company", "Acme", "--rating", "9", "--comment", "x", *store_args])
        assert exc.value.code == 2
        assert "Rating must be between 1 and 5" in capsys.readouterr().out

    def test_invalid_salary_exits_2(self, capsys, store_args):
        with pytest.raises(SystemExit) as exc:
            main(["salary", "--company", "Acme", "--amount", "1000", *store_args])
        assert exc.value.code == 2
        assert "between $15,000 and $500,000" in capsys.readouterr().out

    def test_salaries_average(self, capsys, store_args):
        run(capsys, "salary", "--company", "Acme", "--amount", "60000", *store_args)
        run(capsys, "salary", "--company", "Acme", "--amount", "90001", *store_args)

        out = run(capsys, "salaries", "--company", "Acme", *store_args)
        assert "Average: 75,001 over 2 reports" in out


class TestRelations:
    def test_follow_and_unfollow(self, capsys, store_args):
        assert "(1 followers)" in run(capsys, "follow", "--company", "Acme", "--user", "u1", *store_args)
        assert "(2 followers)" in run(capsys, "follow", "--company", "Acme", "--user", "u2", *store_args)
        assert "(1 followers)" in run(capsys, "unfollow", "--company", "Acme", "--user", "u1", *store_args)

        assert "Acme" in run(capsys, "following", "--user", "u2", *store_args)
        assert "Not following" in run(capsys, "following", "--user", "u1", *store_args)

    def test_block_and_unblock(self, capsys, store_args):
        run(capsys, "upsert", "--company", "Acme", "--biography", "x", *store_args)
        run(capsys, "block", "--company", "Acme", *store_args)

        assert run(capsys, "blocked", *store_args).strip() == "Acme"
        assert "Acme [blocked]" in run(capsys, "list", *store_args)

        run(capsys, "unblock", "--company", "Acme", *store_args)
        assert "No blocked companies." in run(capsys, "blocked", *store_args)
        assert "Blocked: False" in run(capsys, "show", "--company", "Acme", *store_args)


class TestTransfer:
    def test_export_import_between_stores(self, capsys, tmp_path, store_args):
        run(capsys, "block", "--company", "Acme", *store_args)
        export_path = tmp_path / "export.json"
        run(capsys, "export", "--output", str(export_path), *store_args)

        assert json.loads(export_path.read_text()) == {"blockedCompanies": ["Acme"]}

        other = ["--db", str(tmp_path / "other.db")]
        assert "Imported." in run(capsys, "import", "--input", str(export_path), *other)
        assert run(capsys, "blocked", *other).strip() == "Acme"

    def test_import_rejects_bad_payload(self, tmp_path, store_args):
        bad = tmp_path / "bad.json"
        bad.write_text("[]")
        with pytest.raises(SystemExit, match="Import failed"):
            main(["import", "--input", str(bad), *store_args])

    def test_clear_requires_yes(self, store_args):
        with pytest.raises(SystemExit, match="--yes"):
            main(["clear", *store_args])

    def test_clear(self, capsys, store_args):
        run(capsys, "block", "--company", "Acme", *store_args)
        run(capsys, "clear", "--yes", *store_args)
        assert "No blocked companies." in run(capsys, "blocked", *store_args)


def test_version(capsys):
    from companydir import __version__

    assert run(capsys, "--version").strip() == __version__
