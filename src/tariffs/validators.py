"""Rate-schedule validation with issue reports."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import CustomerCategory
from .exceptions import ValidationError
from .models import TariffConfiguration

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
MAX_GRACE_DAYS = 90
MAX_DAILY_PENALTY_PERCENT = 10.0
MAX_ROUNDING_DECIMALS = 2
MAX_TAX_PERCENT = 50.0


class ValidationSeverity(str, Enum):
    """Severity of a validation issue."""

    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single problem found in a configuration."""

    field: str
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.field} - {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "issue": self.message,
            "severity": self.severity.value,
        }


@dataclass
class ValidationReport:
    """Result of validating one configuration."""

    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True if no errors found."""
        return not any(i.severity == ValidationSeverity.ERROR for i in self.issues)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def error(self, field_name: str, message: str) -> None:
        self.issues.append(ValidationIssue(field_name, message))

    def warn(self, field_name: str, message: str) -> None:
        self.issues.append(
            ValidationIssue(field_name, message, ValidationSeverity.WARNING)
        )

    def raise_for_errors(self) -> None:
        """Raise ValidationError listing every error, if any."""
        if self.is_valid:
            return
        errors = self.errors
        raise ValidationError(
            f"Tariff configuration is invalid: {errors[0].field} - {errors[0].message}",
            details=[i.to_dict() for i in errors],
        )


class TariffValidator:
    """Checks a rate schedule before it is stored.

    Covers tier contiguity, category coverage, numeric ranges and the
    effective window.
    """

    def validate(self, config: TariffConfiguration) -> ValidationReport:
        report = ValidationReport()
        self._check_identity(config, report)
        self._check_fixed_charge(config, report)
        self._check_tiers(config, report)
        self._check_seasons(config, report)
        self._check_discounts(config, report)
        self._check_late_fee_policy(config, report)
        self._check_computation_settings(config, report)
        if not report.is_valid:
            logger.debug(
                "Configuration %s failed validation with %d errors",
                config.id or config.name,
                len(report.errors),
            )
        return report

    def ensure_valid(self, config: TariffConfiguration) -> None:
        self.validate(config).raise_for_errors()

    # ── Sections ──────────────────────────────────────────────────────

    def _check_identity(self, config: TariffConfiguration, report: ValidationReport) -> None:
        name = (config.name or "").strip()
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            report.error(
                "name",
                f"must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
            )
        if config.effective_from is None:
            report.error("effective_from", "is required")
        elif config.expires_at is not None and config.effective_from > config.expires_at:
            report.error("expires_at", "must not be earlier than effective_from")

    def _check_fixed_charge(self, config: TariffConfiguration, report: ValidationReport) -> None:
        self._check_category_amounts(config.fixed_charge, "fixed_charge", report)

    def _check_category_amounts(self, amounts: Dict[CustomerCategory, float],
                                prefix: str, report: ValidationReport) -> None:
        for category in CustomerCategory:
            if category not in amounts:
                report.error(f"{prefix}.{category.value}", "missing category amount")
            elif amounts[category] < 0:
                report.error(f"{prefix}.{category.value}", "must be non-negative")

    def _check_tiers(self, config: TariffConfiguration, report: ValidationReport) -> None:
        if not config.tiers:
            report.error("tiers", "at least one tier is required")
            return

        tiers = config.sorted_tiers()
        if tiers != tuple(config.tiers):
            report.error("tiers", "must be sorted ascending by lower_bound")

        previous = None
        for index, tier in enumerate(tiers):
            prefix = f"tiers[{index}]"
            self._check_category_amounts(tier.rates, f"{prefix}.rates", report)
            if tier.lower_bound < 0:
                report.error(f"{prefix}.lower_bound", "must be non-negative")
            if tier.upper_bound is not None and tier.upper_bound < tier.lower_bound:
                report.error(f"{prefix}.upper_bound", "must not be below lower_bound")
            elif tier.upper_bound is not None and tier.upper_bound < max(tier.lower_bound, 1):
                # a 0-0 band holds no whole cubic metre
                report.error(f"{prefix}.upper_bound", "band must hold at least 1 m³")
            if tier.is_unbounded and index != len(tiers) - 1:
                report.error(f"{prefix}.upper_bound", "only the last tier may be unbounded")

            if previous is None:
                if tier.lower_bound != 0:
                    report.error(f"{prefix}.lower_bound", "first tier must start at 0")
            elif previous.upper_bound is not None:
                expected = previous.upper_bound + 1
                if tier.lower_bound < expected:
                    report.error(
                        prefix,
                        f"overlaps {_describe(previous)} and {_describe(tier)}",
                    )
                elif tier.lower_bound > expected:
                    report.error(
                        prefix,
                        f"gap between {_describe(previous)} and {_describe(tier)}",
                    )
            previous = tier

    def _check_seasons(self, config: TariffConfiguration, report: ValidationReport) -> None:
        for index, season in enumerate(config.seasonal_adjustments):
            prefix = f"seasonal_adjustments[{index}]"
            for name in ("start_month", "end_month"):
                month = getattr(season, name)
                if not 1 <= month <= 12:
                    report.error(f"{prefix}.{name}", "must be between 1 and 12")
            if season.multiplier <= 0:
                report.error(f"{prefix}.multiplier", "must be positive")

        windows = config.seasonal_adjustments
        for i, first in enumerate(windows):
            for second in windows[i + 1:]:
                if any(first.contains(m) and second.contains(m) for m in range(1, 13)):
                    report.warn(
                        "seasonal_adjustments",
                        f"windows {first.name!r} and {second.name!r} overlap; first wins",
                    )

    def _check_discounts(self, config: TariffConfiguration, report: ValidationReport) -> None:
        for index, rule in enumerate(config.discount_rules):
            prefix = f"discount_rules[{index}]"
            if not rule.name:
                report.error(f"{prefix}.name", "is required")
            if rule.value < 0:
                report.error(f"{prefix}.value", "must be non-negative")
            cond = rule.conditions
            for name in ("min_consumption", "max_consumption"):
                bound = getattr(cond, name)
                if bound is not None and bound < 0:
                    report.error(f"{prefix}.conditions.{name}", "must be non-negative")
            if (cond.min_consumption is not None and cond.max_consumption is not None
                    and cond.min_consumption > cond.max_consumption):
                report.error(
                    f"{prefix}.conditions", "min_consumption exceeds max_consumption"
                )
            if cond.consecutive_months is not None and cond.consecutive_months < 1:
                report.error(f"{prefix}.conditions.consecutive_months", "must be at least 1")

    def _check_late_fee_policy(self, config: TariffConfiguration, report: ValidationReport) -> None:
        policy = config.late_fee_policy
        if not 0 <= policy.grace_days <= MAX_GRACE_DAYS:
            report.error("late_fee_policy.grace_days", f"must be between 0 and {MAX_GRACE_DAYS}")
        if not 0 <= policy.daily_penalty_percent <= MAX_DAILY_PENALTY_PERCENT:
            report.error(
                "late_fee_policy.daily_penalty_percent",
                f"must be between 0 and {MAX_DAILY_PENALTY_PERCENT:g}",
            )
        if not 0 <= policy.max_penalty_percent <= 100:
            report.error("late_fee_policy.max_penalty_percent", "must be between 0 and 100")
        if policy.reconnection_fee < 0:
            report.error("late_fee_policy.reconnection_fee", "must be non-negative")

    def _check_computation_settings(self, config: TariffConfiguration,
                                    report: ValidationReport) -> None:
        settings = config.computation_settings
        if not 0 <= settings.rounding_decimals <= MAX_ROUNDING_DECIMALS:
            report.error(
                "computation_settings.rounding_decimals",
                f"must be between 0 and {MAX_ROUNDING_DECIMALS}",
            )
        if settings.tax_percent is not None and not 0 <= settings.tax_percent <= MAX_TAX_PERCENT:
            report.error(
                "computation_settings.tax_percent",
                f"must be between 0 and {MAX_TAX_PERCENT:g}",
            )
        subsidy = settings.state_subsidy
        if not 0 <= subsidy.percent <= 100:
            report.error("computation_settings.state_subsidy.percent", "must be between 0 and 100")
        if subsidy.max_consumption < 0:
            report.error(
                "computation_settings.state_subsidy.max_consumption", "must be non-negative"
            )


def _describe(tier: Any) -> str:
    upper = "∞" if tier.upper_bound is None else f"{tier.upper_bound:g}"
    return f"{tier.lower_bound:g}-{upper}"
