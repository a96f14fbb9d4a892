"""Command-line reviewer for monthly consultation invoices.

Usage:
    consult-invoice serve --port 8080
    consult-invoice list --year 2025 --month 3 --status pending
    consult-invoice approve stripe_ch_123 --year 2025 --month 3
    consult-invoice approve-all
    consult-invoice summary --remote
    consult-invoice export --output invoice.csv

Approval decisions are stored locally in APPROVALS_PATH; the API never
stores them.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

from consult_invoice.approvals.store import ApprovalStore
from consult_invoice.client.api_client import ConsultationsAPIClient, ConsultationsUnavailable
from consult_invoice.client.review import ReviewSession, ReviewView
from consult_invoice.config import get_settings
from consult_invoice.logging_config import configure_logging
from consult_invoice.models import SOURCES, STATUSES, Summary
from consult_invoice.periods import InvalidPeriodError, Period

logger = logging.getLogger(__name__)

DEMO_BANNER = "*** DEMO DATA: the API could not be reached; these are NOT real consultations ***"

_STATUS_COMMANDS = {"approve": "approved", "reject": "rejected", "reset": "pending"}


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="consult-invoice", description=__doc__.split("\n")[0])
    parser.add_argument("--api-url", default=settings.api_base_url, help="consultation API base URL")
    parser.add_argument("--approvals", default=settings.approvals_path, help="local approval store file")
    parser.add_argument("-v", "--verbose", action="store_true")

    period_args = argparse.ArgumentParser(add_help=False)
    period_args.add_argument("--year", help="defaults to the current year")
    period_args.add_argument("--month", help="1-12, defaults to the current month")

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)

    listing = sub.add_parser("list", parents=[period_args], help="show consultations for a month")
    listing.add_argument("--status", choices=STATUSES)
    listing.add_argument("--source", choices=SOURCES)

    for name, status in _STATUS_COMMANDS.items():
        cmd = sub.add_parser(name, parents=[period_args], help=f"mark one consultation {status}")
        cmd.add_argument("record_id")

    sub.add_parser("approve-all", parents=[period_args], help="approve every pending consultation")
    sub.add_parser("reject-all", parents=[period_args], help="reject every pending consultation")

    summary = sub.add_parser("summary", parents=[period_args], help="invoice total by service type")
    summary.add_argument("--remote", action="store_true", help="compute the summary on the API")

    export = sub.add_parser("export", parents=[period_args], help="write the approved invoice as CSV")
    export.add_argument("--output", help="file path, '-' for stdout (default: invoice_<YYYY>_<MM>.csv)")

    return parser


def print_view(view: ReviewView) -> None:
    print(f"Consultations for {view.period}")
    if view.source_status:
        print("Sources: " + ", ".join(f"{k}={v}" for k, v in view.source_status.items()))
    print(
        f"Total {view.total_count} | approved {view.approved_count} | "
        f"pending {view.pending_count} | rejected {view.rejected_count} | "
        f"invoice {_money(view.invoice_total)}"
    )
    print()
    if not view.rows:
        print("No consultations match.")
        return
    for row in view.rows:
        r = row.record
        print(
            f"{r.date:%Y-%m-%d}  {r.id:<28} {r.patient_name:<24} {r.service_type:<24} "
            f"{r.source:<12} {_money(r.calculated_amount):>10}  {r.status}"
        )


def print_summary(summary: Summary) -> None:
    if not summary.service_breakdown:
        print("No approved consultations yet")
    for line in summary.service_breakdown:
        print(f"{line.service_type:<28} {_money(line.rate):>10} x {line.count:<4} {_money(line.subtotal):>12}")
    print(f"{'Total':<28} {'':>10}   {'':<4} {_money(summary.grand_total):>12}")
    print(
        f"approved {summary.approved_count} | pending {summary.pending_count} | "
        f"rejected {summary.rejected_count}"
    )


def period_from_args(year: str | None, month: str | None) -> Period:
    """Each missing flag defaults on its own, unlike the API's both-or-neither rule."""
    current = Period.current()
    return Period.from_query(year or str(current.year), month or str(current.month))


async def run(args: argparse.Namespace) -> int:
    period = period_from_args(args.year, args.month)
    api = ConsultationsAPIClient(args.api_url)
    session = ReviewSession(api, ApprovalStore(args.approvals), period)
    try:
        view = await session.load()
        if session.is_demo:
            print(DEMO_BANNER, file=sys.stderr)

        if args.command == "list":
            print_view(session.view(status=args.status, source=args.source))
        elif args.command in _STATUS_COMMANDS:
            try:
                record = session.set_status(args.record_id, _STATUS_COMMANDS[args.command])
            except KeyError:
                print(f"error: no consultation {args.record_id} in {period}", file=sys.stderr)
                return 1
            print(f"{record.id} -> {record.status}")
        elif args.command == "approve-all":
            print(f"Approved {session.approve_all_pending()} pending consultations")
        elif args.command == "reject-all":
            print(f"Rejected {session.reject_all_pending()} pending consultations")
        elif args.command == "summary":
            if args.remote and not session.is_demo:
                print_summary(await api.request_summary(session.records))
            else:
                print_summary(session.summary())
        elif args.command == "export":
            content = session.export_csv()
            if args.output == "-":
                sys.stdout.write(content)
            else:
                path = Path(args.output or session.export_filename)
                path.write_text(content, encoding="utf-8")
                print(f"Wrote {view.approved_count} approved consultations to {path}")
    finally:
        await api.close()
    return 0


def serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("consult_invoice.main:app", host=host, port=port)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(
        "consult-invoice-cli",
        settings.env,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
    )

    if args.command == "serve":
        serve(args.host, args.port)
        return 0

    try:
        return asyncio.run(run(args))
    except InvalidPeriodError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ConsultationsUnavailable as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
