"""CLI entry point: python main.py --category residential --consumption 15"""

import argparse
import json
import sys
from datetime import date

from src.logging_config import LoggingConfig, LogLevel, configure_logging
from src.settings import get_settings
from src.tariffs import (
    CustomerCategory,
    NoActiveConfiguration,
    TariffConfigurationStore,
    TariffEngineConfig,
    TariffService,
    default_tariff_configuration,
)
from src.tariffs.engine import BillingCalculationResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="APR billing - water bill preview against the tariff schedule"
    )
    parser.add_argument(
        "--category", default=None,
        choices=[c.value for c in CustomerCategory],
        help="Customer category (default: APR_DEFAULT_CATEGORY)",
    )
    parser.add_argument(
        "--consumption", type=float, required=True,
        help="Metered consumption in m³",
    )
    parser.add_argument(
        "--month", type=int, default=None, choices=range(1, 13), metavar="1-12",
        help="Billing month for seasonal pricing (default: current month)",
    )
    parser.add_argument(
        "--days-overdue", type=int, default=0,
        help="Days past the due date, for the late-payment surcharge",
    )
    parser.add_argument(
        "--early-payment", action="store_true",
        help="Customer paid before the due date",
    )
    parser.add_argument(
        "--from-db", action="store_true",
        help="Use the Active schedule stored in APR_DATABASE_URL",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the result as JSON",
    )
    return parser


def build_store(from_db: bool) -> TariffConfigurationStore:
    if from_db:
        from src.db import get_session_factory, init_db
        from src.tariffs.repository import TariffRepository

        init_db()
        return TariffConfigurationStore.from_repository(TariffRepository(get_session_factory()))

    store = TariffConfigurationStore()
    store.create(default_tariff_configuration(), created_by="cli", activate_immediately=True)
    return store


def format_result(result: BillingCalculationResult) -> str:
    lines = [
        f"Category:          {result.category.value}",
        f"Consumption:       {result.consumption_m3:g} m³",
        "-" * 40,
        f"Fixed charge:      {result.fixed_charge:>14,.2f}",
    ]
    for tier in result.breakdown.tiers:
        upper = "∞" if tier.upper_bound is None else f"{tier.upper_bound:g}"
        band = f"{tier.lower_bound:g}-{upper}"
        lines.append(
            f"  {band:<8} {tier.consumed_m3:>6g} × {tier.unit_rate:>8,.2f} = {tier.subtotal:>12,.2f}"
        )
    if result.breakdown.seasonal_adjustment:
        season = result.breakdown.seasonal_adjustment
        lines.append(f"  Season {season.name} × {season.multiplier:g}")
    lines.append(f"Consumption cost:  {result.consumption_cost:>14,.2f}")
    lines.append(f"Subtotal:          {result.subtotal:>14,.2f}")
    for discount in result.breakdown.discounts:
        lines.append(f"  - {discount.name}: {discount.amount:,.2f}")
    lines.append(f"Discounts:         {result.discounts_total:>14,.2f}")
    if result.breakdown.surcharge:
        surcharge = result.breakdown.surcharge
        lines.append(
            f"  + {surcharge.concept}: {surcharge.days_late} days, {surcharge.penalty_percent:g}%"
        )
    lines.append(f"Surcharges:        {result.surcharges_total:>14,.2f}")
    lines.append(f"Tax:               {result.tax:>14,.2f}")
    lines.append("=" * 40)
    lines.append(f"TOTAL:             {result.total_amount:>14,.2f}")
    return "\n".join(lines)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    log_config = LoggingConfig.from_settings(settings)
    if args.json:
        # keep stdout parseable
        log_config.level = LogLevel.WARNING
    configure_logging(log_config)

    if args.consumption < 0:
        print("Consumption must be non-negative", file=sys.stderr)
        return 2
    if args.days_overdue < 0:
        print("Days overdue must be non-negative", file=sys.stderr)
        return 2

    service = TariffService(
        build_store(args.from_db),
        engine_config=TariffEngineConfig.from_settings(settings),
    )
    today = date.today()
    billing_period = today.replace(month=args.month, day=1) if args.month else today

    try:
        result = service.calculate(
            args.category or settings.default_category,
            args.consumption,
            billing_period,
            days_overdue=args.days_overdue,
            early_payment=args.early_payment,
        )
    except NoActiveConfiguration as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
