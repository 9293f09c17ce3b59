import argparse
import json
import sys
from pathlib import Path

from . import __version__
from .env import get_settings, load_env
from .errors import StorageAccessError, ValidationError
from .models import Company
from .services import CompanyServices
from .storage import JSONFileStore, SQLStore
from .transfer import clear_all, export_data, import_data


def _services(args: argparse.Namespace) -> CompanyServices:
    settings = get_settings()
    try:
        if getattr(args, "db", None):
            store = SQLStore(Path(args.db))
        elif getattr(args, "store", None):
            store = JSONFileStore(Path(args.store))
        else:
            return CompanyServices.from_settings(settings)
    except StorageAccessError as e:
        raise SystemExit(f"Cannot open store: {e}")
    return CompanyServices.over(store, key_prefix=settings.key_prefix)


def _print_company(company: Company) -> None:
    stats = company.statistics
    print(f"Company: {company.name}")
    print(f"  Biography: {company.biography}")
    if company.addresses:
        print(f"  Addresses: {'; '.join(company.addresses)}")
    for label, value in (
        ("Website", company.website),
        ("Industry", company.industry),
        ("Founded", company.founded_year),
        ("Size", company.company_size),
    ):
        if value:
            print(f"  {label}: {value}")
    print(f"  Job posts: {stats.total_job_posts}  Avg salary: {stats.average_salary}")
    print(f"  Reviews: {stats.total_reviews}  Avg rating: {stats.average_rating}")
    print(f"  Avg reported salary: {stats.average_reported_salary}")
    print(f"  Followers: {stats.follow_count}")
    print(f"  Hired/Interviewed/Rejected: {stats.hired}/{stats.interviewed}/{stats.rejected}")
    print(f"  Blocked: {company.is_blocked}  Reports: {company.report_count}")


def _invalid(e: ValidationError) -> None:
    print("Invalid:")
    for err in e.errors:
        print(f" - {err}")
    raise SystemExit(2)


def cmd_show(args: argparse.Namespace) -> None:
    company = _services(args).directory.get(args.company)
    if company is None:
        print(f"Company not found: {args.company}")
        raise SystemExit(1)
    _print_company(company)


def cmd_list(args: argparse.Namespace) -> None:
    services = _services(args)
    companies = services.directory.all()
    if not companies:
        print("No companies in store.")
        return
    blocked = services.blocks.list_blocked()
    print(f"Found {len(companies)} companies:\n")
    for name, company in companies.items():
        marker = " [blocked]" if name in blocked else ""
        stats = company.statistics
        print(f"{name}{marker}  rating={stats.average_rating} reviews={stats.total_reviews} followers={stats.follow_count}")


def cmd_upsert(args: argparse.Namespace) -> None:
    partial = {
        "biography": args.biography,
        "addresses": args.address,
        "logo": args.logo,
        "website": args.website,
        "industry": args.industry,
        "founded_year": args.founded_year,
        "company_size": args.company_size,
    }
    _services(args).directory.upsert(args.company, {k: v for k, v in partial.items() if v})
    print(f"Saved: {args.company}")


def cmd_backfill(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    try:
        with input_path.open("r", encoding="utf-8") as f:
            postings = json.load(f)
    except json.JSONDecodeError as e:
        raise SystemExit(f"Postings file is not valid JSON: {e}")
    if not isinstance(postings, list):
        raise SystemExit("Postings file must hold a JSON array")
    created = _services(args).directory.bulk_backfill(postings)
    print(f"Done. created={len(created)}")
    for name in created:
        print(f" - {name}")


def cmd_review(args: argparse.Namespace) -> None:
    try:
        review = _services(args).reviews.add(
            args.company,
            rating=args.rating,
            comment=args.comment,
            user_id=args.user_id,
            user_name=args.user_name,
            applicant_status=args.status,
            job_title=args.job_title,
        )
    except ValidationError as e:
        _invalid(e)
        return
    print(f"Review: {review.id}")


def cmd_reviews(args: argparse.Namespace) -> None:
    reviews = _services(args).reviews.list_for(args.company)
    if not reviews:
        print("No reviews.")
        return
    for r in reviews:
        print(f"[{r.created_at}] {r.rating}/5 {r.user_name or r.user_id or 'anonymous'}: {r.comment}")


def cmd_salary(args: argparse.Namespace) -> None:
    try:
        report = _services(args).salaries.report(
            args.company,
            salary_amount=args.amount,
            user_id=args.user_id,
            job_title=args.job_title,
            employment_type=args.employment_type,
            notes=args.notes,
        )
    except ValidationError as e:
        _invalid(e)
        return
    print(f"Salary report: {report.id}")


def cmd_salaries(args: argparse.Namespace) -> None:
    ledger = _services(args).salaries
    reports = ledger.list_for(args.company)
    for r in reports:
        print(f"[{r.reported_at}] {r.job_title or '-'} ({r.employment_type}): {r.salary_amount:,.0f}")
    print(f"Average: {ledger.average_for(args.company):,} over {len(reports)} reports")


def cmd_follow(args: argparse.Namespace) -> None:
    services = _services(args)
    services.follows.follow(args.company, args.user)
    print(f"Following {args.company} ({services.follows.count_for(args.company)} followers)")


def cmd_unfollow(args: argparse.Namespace) -> None:
    services = _services(args)
    services.follows.unfollow(args.company, args.user)
    print(f"Unfollowed {args.company} ({services.follows.count_for(args.company)} followers)")


def cmd_following(args: argparse.Namespace) -> None:
    relations = _services(args).follows.list_for(args.user)
    if not relations:
        print("Not following any companies.")
        return
    for r in sorted(relations, key=lambda r: r.followed_at, reverse=True):
        print(f"{r.company_name} (since {r.followed_at})")


def cmd_block(args: argparse.Namespace) -> None:
    _services(args).blocks.block(args.company)
    print(f"Blocked: {args.company}")


def cmd_unblock(args: argparse.Namespace) -> None:
    _services(args).blocks.unblock(args.company)
    print(f"Unblocked: {args.company}")


def cmd_blocked(args: argparse.Namespace) -> None:
    blocked = sorted(_services(args).blocks.list_blocked())
    if not blocked:
        print("No blocked companies.")
        return
    for name in blocked:
        print(name)


def cmd_report(args: argparse.Namespace) -> None:
    if not args.reason.strip():
        raise SystemExit("Provide a reason for reporting")
    if _services(args).directory.report(args.company, args.reason):
        print(f"Reported: {args.company}")
    else:
        print(f"Company not found: {args.company}")


def cmd_export(args: argparse.Namespace) -> None:
    payload = export_data(_services(args).codec)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"Exported to {args.output}")
    else:
        print(payload)


def cmd_import(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    if not import_data(_services(args).codec, input_path.read_text(encoding="utf-8")):
        raise SystemExit("Import failed: payload is not a valid export")
    print("Imported.")


def cmd_clear(args: argparse.Namespace) -> None:
    if not args.yes:
        raise SystemExit("Refusing to clear without --yes")
    clear_all(_services(args).codec)
    print("Cleared all collections.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="companydir", description="Company directory store CLI")
    parser.add_argument("--version", action="store_true", help="Show version")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--store", help="Path to JSON store (overrides COMPANYDIR_STORE_PATH)")
    common.add_argument("--db", help="Path to SQLite store (overrides COMPANYDIR_DB_PATH)")

    subparsers = parser.add_subparsers(dest="command")

    def sub(name, func, help_text):
        p = subparsers.add_parser(name, parents=[common], help=help_text)
        p.set_defaults(func=func)
        return p

    p = sub("show", cmd_show, "Show one company")
    p.add_argument("--company", required=True)

    sub("list", cmd_list, "List all companies")

    p = sub("upsert", cmd_upsert, "Create a company or merge non-empty fields into it")
    p.add_argument("--company", required=True)
    p.add_argument("--biography")
    p.add_argument("--address", action="append", help="Repeat for several addresses")
    p.add_argument("--logo")
    p.add_argument("--website")
    p.add_argument("--industry")
    p.add_argument("--founded-year", type=int)
    p.add_argument("--company-size")

    p = sub("backfill", cmd_backfill, "Seed companies from a JSON array of postings")
    p.add_argument("--input", required=True, help="Path to postings JSON")

    p = sub("review", cmd_review, "Add a company review")
    p.add_argument("--company", required=True)
    p.add_argument("--rating", type=float, required=True, help="1 to 5")
    p.add_argument("--comment", required=True)
    p.add_argument("--user-id", default="")
    p.add_argument("--user-name", default="")
    p.add_argument("--status", default="not_applied", help="Applicant status")
    p.add_argument("--job-title")

    p = sub("reviews", cmd_reviews, "List reviews for a company, newest first")
    p.add_argument("--company", required=True)

    p = sub("salary", cmd_salary, "Report a salary for a company")
    p.add_argument("--company", required=True)
    p.add_argument("--amount", type=float, required=True, help="15000 to 500000")
    p.add_argument("--user-id", default="")
    p.add_argument("--job-title", default="")
    p.add_argument("--employment-type", default="full-time")
    p.add_argument("--notes")

    p = sub("salaries", cmd_salaries, "List salary reports for a company")
    p.add_argument("--company", required=True)

    for name, func, text in (
        ("follow", cmd_follow, "Follow a company"),
        ("unfollow", cmd_unfollow, "Unfollow a company"),
    ):
        p = sub(name, func, text)
        p.add_argument("--company", required=True)
        p.add_argument("--user", required=True)

    p = sub("following", cmd_following, "List companies a user follows")
    p.add_argument("--user", required=True)

    for name, func, text in (
        ("block", cmd_block, "Block a company"),
        ("unblock", cmd_unblock, "Unblock a company"),
    ):
        p = sub(name, func, text)
        p.add_argument("--company", required=True)

    sub("blocked", cmd_blocked, "List blocked companies")

    p = sub("report", cmd_report, "Report a company to moderation")
    p.add_argument("--company", required=True)
    p.add_argument("--reason", required=True)

    p = sub("export", cmd_export, "Export all collections as JSON")
    p.add_argument("--output", help="Write to file instead of stdout")

    p = sub("import", cmd_import, "Import collections from an export file")
    p.add_argument("--input", required=True)

    p = sub("clear", cmd_clear, "Remove every collection from the store")
    p.add_argument("--yes", action="store_true", help="Confirm")

    return parser


def main(argv=None):
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help(sys.stdout)


if __name__ == "__main__":
    main()
