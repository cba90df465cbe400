"""CLI entry point: snapshot, plan management, review and export."""

import argparse
import sys
from pathlib import Path
from uuid import UUID

from healx_config import get_active_config
from healx_kernel.exceptions import HealxError
from healx_modules.budget.models import PlanFormInput
from healx_services.financial_service import FinancialPlanningService
from scripts.cli.util import fmt_amount, fmt_pct, print_table, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="healx",
        description="Heal-x financial aggregation and budget planning.",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML config (default: HEALX_CONFIG_PATH or bundled)")
    parser.add_argument("--log-level", default="WARNING", help="Structured log level on stderr")
    parser.add_argument("--seed", type=int, default=None, help="Jitter seed for reproducible trend/quarters")
    parser.add_argument("--timeout", type=float, default=None, help="Refresh timeout in seconds")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("snapshot", help="Fetch all sources and print the financial snapshot")

    plan = sub.add_parser("plan", help="Manage budget plans")
    plan_sub = plan.add_subparsers(dest="plan_command", required=True)
    create = plan_sub.add_parser("create", help="Create a plan from a fresh snapshot")
    create.add_argument("--name", required=True)
    create.add_argument("--start-year", required=True)
    create.add_argument("--end-year", required=True)
    create.add_argument("--type", dest="plan_type", default="operational",
                        help="operational, rolling or strategic")
    create.add_argument("--description", default="")
    plan_sub.add_parser("list", help="List plans in creation order")
    delete = plan_sub.add_parser("delete", help="Delete a plan")
    delete.add_argument("plan_id", type=UUID)
    activate = plan_sub.add_parser("activate", help="Select the active plan")
    activate.add_argument("plan_id", type=UUID)

    review = sub.add_parser("review", help="Budget vs actual of a plan")
    review.add_argument("--plan-id", type=UUID, default=None)
    review.add_argument("--categories", action="store_true", help="Also show per-category variances")

    export = sub.add_parser("export", help="Render a report file")
    export.add_argument("--format", dest="fmt", default="html", help="html, xlsx or json")
    export.add_argument("--out", type=Path, default=Path("."), help="Target directory")
    export.add_argument("--stem", default="financial_report")
    export.add_argument("--plan-id", type=UUID, default=None)
    return parser


def _show_snapshot(snapshot, currency: str) -> None:
    rows = [
        ["Total Revenue", fmt_amount(snapshot.total_revenue, currency)],
        ["Payroll Expenses", fmt_amount(snapshot.total_payroll_expenses, currency)],
        ["Current Stock Value", fmt_amount(snapshot.current_stock_value, currency)],
        ["Auto-Restock Spending", fmt_amount(snapshot.total_auto_restock_value, currency)],
        ["Total Inventory Value", fmt_amount(snapshot.total_inventory_value, currency)],
        ["Utility Expenses", fmt_amount(snapshot.total_utility_expenses, currency)],
        ["Supplier Expenses", fmt_amount(snapshot.total_supplier_expenses, currency)],
        ["Total Expenses", fmt_amount(snapshot.total_expenses, currency)],
        ["Net Income", fmt_amount(snapshot.net_income, currency)],
        ["Profit Margin", fmt_pct(snapshot.profit_margin)],
    ]
    print_table(["Figure", "Amount"], rows)
    if snapshot.unavailable_sources:
        names = ", ".join(k.value for k in snapshot.unavailable_sources)
        print(f"\n  Unavailable sources (counted as zero): {names}")
    print(f"\n  Monthly trend is illustrative (seed {snapshot.trend_seed}).")


def run(args: argparse.Namespace, service: FinancialPlanningService) -> int:
    currency = service.config.reporting.currency

    if args.command == "snapshot":
        _show_snapshot(service.refresh(seed=args.seed, timeout=args.timeout), currency)
        return 0

    if args.command == "plan":
        store = service.store
        if args.plan_command == "create":
            form = PlanFormInput(
                name=args.name,
                start_year=args.start_year,
                end_year=args.end_year,
                plan_type=args.plan_type,
                description=args.description,
            )
            snapshot = service.refresh(seed=args.seed, timeout=args.timeout)
            plan = service.create_plan(form, snapshot, seed=args.seed)
            print(f"Created plan {plan.id} ({plan.name}, {plan.period_label}, {len(plan.quarters)} quarters)")
        elif args.plan_command == "list":
            active = store.active_plan
            rows = [
                [("* " if active and p.id == active.id else "  ") + str(p.id), p.name,
                 p.plan_type.value, p.period_label, p.status.value]
                for p in store.list()
            ]
            print_table(["Plan ID", "Name", "Type", "Period", "Status"], rows)
        elif args.plan_command == "delete":
            store.delete(args.plan_id)
            print(f"Deleted plan {args.plan_id}")
        elif args.plan_command == "activate":
            plan = store.set_active(args.plan_id)
            print(f"Active plan: {plan.id} ({plan.name})")
        return 0

    if args.command == "review":
        comparisons = service.review(args.plan_id)
        if not comparisons:
            print("No quarters with actual figures yet.")
            return 0
        print_table(
            ["Period", "Budget Rev", "Actual Rev", "Budget Exp", "Actual Exp", "Variance"],
            [[c.period, fmt_amount(c.budgeted_revenue, currency), fmt_amount(c.actual_revenue, currency),
              fmt_amount(c.budgeted_expenses, currency), fmt_amount(c.actual_expenses, currency),
              fmt_amount(c.variance, currency)] for c in comparisons],
        )
        if args.categories:
            for period, rows in service.review_categories(args.plan_id).items():
                print(f"\n{period}")
                print_table(
                    ["Category", "Budgeted", "Actual", "Delta", "Delta %"],
                    [[v.category, fmt_amount(v.budgeted, currency), fmt_amount(v.actual, currency),
                      fmt_amount(v.delta, currency), f"{v.pct}%"] for v in rows],
                )
        return 0

    if args.command == "export":
        snapshot = service.refresh(seed=args.seed, timeout=args.timeout)
        path = service.export(args.fmt, args.out, stem=args.stem, snapshot=snapshot, plan_id=args.plan_id)
        print(f"Wrote {path}")
        return 0

    return 2


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        config = get_active_config(args.config)
        service = FinancialPlanningService.from_config(config)
        return run(args, service)
    except HealxError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
