"""Rate-schedule model.

Every schedule part is a frozen dataclass so that a resolved configuration can
be handed to a calculation as an immutable snapshot. ``to_dict``/``from_dict``
convert to and from plain JSON-compatible values; ``from_dict`` also accepts
already-built parts, which lets the store merge partial patches.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .config import ConfigurationState, CustomerCategory, DiscountKind


def as_utc(value: Any) -> Optional[datetime]:
    """Normalise a date, datetime or ISO string to an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    raise TypeError(f"Expected a date or datetime, got {type(value).__name__}")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _category_amounts(raw: Mapping[Any, Any]) -> Dict[CustomerCategory, float]:
    return {CustomerCategory.parse(k): float(v) for k, v in raw.items()}


def _amounts_to_dict(amounts: Mapping[CustomerCategory, float]) -> Dict[str, float]:
    return {category.value: amount for category, amount in amounts.items()}


@dataclass(frozen=True)
class ConsumptionTier:
    """A consumption band with a per-m³ rate for each category.

    ``upper_bound`` of ``None`` means the band is unbounded.
    """

    lower_bound: float
    upper_bound: Optional[float]
    rates: Dict[CustomerCategory, float] = field(default_factory=dict)

    @property
    def is_unbounded(self) -> bool:
        return self.upper_bound is None

    def rate_for(self, category: CustomerCategory) -> float:
        return self.rates[category]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "rates": _amounts_to_dict(self.rates),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ConsumptionTier":
        if isinstance(data, cls):
            return data
        upper = data.get("upper_bound")
        # -1 marked an unbounded band in the legacy portal data.
        if upper is not None and float(upper) == -1:
            upper = None
        return cls(
            lower_bound=float(data["lower_bound"]),
            upper_bound=float(upper) if upper is not None else None,
            rates=_category_amounts(data.get("rates", {})),
        )


@dataclass(frozen=True)
class SeasonalAdjustment:
    """Month window multiplying the consumption cost.

    A window whose start month is after its end month wraps the year end.
    """

    name: str
    start_month: int
    end_month: int
    multiplier: float

    @property
    def wraps_year_end(self) -> bool:
        return self.start_month > self.end_month

    def contains(self, month: int) -> bool:
        if self.wraps_year_end:
            return month >= self.start_month or month <= self.end_month
        return self.start_month <= month <= self.end_month

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "start_month": self.start_month,
            "end_month": self.end_month,
            "multiplier": self.multiplier,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SeasonalAdjustment":
        if isinstance(data, cls):
            return data
        return cls(
            name=data["name"],
            start_month=int(data["start_month"]),
            end_month=int(data["end_month"]),
            multiplier=float(data["multiplier"]),
        )


@dataclass(frozen=True)
class DiscountConditions:
    """Eligibility conditions of a discount rule.

    ``consecutive_months`` is carried for the caller, who must confirm the
    billing history before asking for a calculation.
    """

    min_consumption: Optional[float] = None
    max_consumption: Optional[float] = None
    eligible_categories: Optional[Tuple[CustomerCategory, ...]] = None
    consecutive_months: Optional[int] = None
    requires_early_payment: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_consumption": self.min_consumption,
            "max_consumption": self.max_consumption,
            "eligible_categories": (
                [c.value for c in self.eligible_categories]
                if self.eligible_categories is not None
                else None
            ),
            "consecutive_months": self.consecutive_months,
            "requires_early_payment": self.requires_early_payment,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "DiscountConditions":
        if isinstance(data, cls):
            return data
        data = data or {}
        categories = data.get("eligible_categories")
        months = data.get("consecutive_months")
        return cls(
            min_consumption=_optional_float(data.get("min_consumption")),
            max_consumption=_optional_float(data.get("max_consumption")),
            eligible_categories=(
                tuple(CustomerCategory.parse(c) for c in categories)
                if categories is not None
                else None
            ),
            consecutive_months=int(months) if months is not None else None,
            requires_early_payment=bool(data.get("requires_early_payment", False)),
        )


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


@dataclass(frozen=True)
class DiscountRule:
    """A conditional discount."""

    kind: DiscountKind
    name: str
    value: float
    conditions: DiscountConditions = field(default_factory=DiscountConditions)
    description: str = ""
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "value": self.value,
            "conditions": self.conditions.to_dict(),
            "description": self.description,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "DiscountRule":
        if isinstance(data, cls):
            return data
        return cls(
            kind=DiscountKind(data["kind"]),
            name=data["name"],
            value=float(data["value"]),
            conditions=DiscountConditions.from_dict(data.get("conditions")),
            description=data.get("description", ""),
            enabled=bool(data.get("enabled", True)),
        )


@dataclass(frozen=True)
class LateFeePolicy:
    """Late-payment penalty policy.

    ``reconnection_fee`` is charged by the service-reconnection workflow, not
    by the bill calculation.
    """

    grace_days: int = 0
    daily_penalty_percent: float = 0.0
    max_penalty_percent: float = 0.0
    reconnection_fee: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grace_days": self.grace_days,
            "daily_penalty_percent": self.daily_penalty_percent,
            "max_penalty_percent": self.max_penalty_percent,
            "reconnection_fee": self.reconnection_fee,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "LateFeePolicy":
        if isinstance(data, cls):
            return data
        data = data or {}
        return cls(
            grace_days=int(data.get("grace_days", 0)),
            daily_penalty_percent=float(data.get("daily_penalty_percent", 0.0)),
            max_penalty_percent=float(data.get("max_penalty_percent", 0.0)),
            reconnection_fee=float(data.get("reconnection_fee", 0.0)),
        )


@dataclass(frozen=True)
class StateSubsidy:
    """Government subsidy parameters (configuration data only)."""

    enabled: bool = False
    percent: float = 0.0
    max_consumption: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "percent": self.percent,
            "max_consumption": self.max_consumption,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "StateSubsidy":
        if isinstance(data, cls):
            return data
        data = data or {}
        return cls(
            enabled=bool(data.get("enabled", False)),
            percent=float(data.get("percent", 0.0)),
            max_consumption=float(data.get("max_consumption", 0.0)),
        )


@dataclass(frozen=True)
class ComputationSettings:
    """Tax and rounding settings."""

    rounding_decimals: int = 0
    apply_tax: bool = False
    tax_percent: Optional[float] = None
    state_subsidy: StateSubsidy = field(default_factory=StateSubsidy)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rounding_decimals": self.rounding_decimals,
            "apply_tax": self.apply_tax,
            "tax_percent": self.tax_percent,
            "state_subsidy": self.state_subsidy.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ComputationSettings":
        if isinstance(data, cls):
            return data
        data = data or {}
        return cls(
            rounding_decimals=int(data.get("rounding_decimals", 0)),
            apply_tax=bool(data.get("apply_tax", False)),
            tax_percent=_optional_float(data.get("tax_percent")),
            state_subsidy=StateSubsidy.from_dict(data.get("state_subsidy")),
        )


@dataclass(frozen=True)
class TariffConfiguration:
    """One version of a rate schedule.

    ``state`` is the single source of truth for the lifecycle; the store is
    the only component that moves a configuration between states.
    """

    name: str
    effective_from: datetime
    fixed_charge: Dict[CustomerCategory, float]
    tiers: Tuple[ConsumptionTier, ...]
    late_fee_policy: LateFeePolicy = field(default_factory=LateFeePolicy)
    seasonal_adjustments: Tuple[SeasonalAdjustment, ...] = ()
    discount_rules: Tuple[DiscountRule, ...] = ()
    computation_settings: ComputationSettings = field(default_factory=ComputationSettings)
    id: str = ""
    description: str = ""
    state: ConfigurationState = ConfigurationState.DRAFT
    expires_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    created_by: str = "system"
    created_at: Optional[datetime] = None
    modified_by: Optional[str] = None
    modified_at: Optional[datetime] = None

    def fixed_charge_for(self, category: CustomerCategory) -> float:
        return self.fixed_charge[category]

    def sorted_tiers(self) -> Tuple[ConsumptionTier, ...]:
        return tuple(sorted(self.tiers, key=lambda t: t.lower_bound))

    def is_effective_at(self, moment: datetime) -> bool:
        """True when ``moment`` falls inside the effective window."""
        moment = as_utc(moment)
        if self.effective_from > moment:
            return False
        return self.expires_at is None or self.expires_at >= moment

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the configuration to JSON-compatible values."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "state": self.state.value,
            "effective_from": _iso(self.effective_from),
            "expires_at": _iso(self.expires_at),
            "paused_at": _iso(self.paused_at),
            "fixed_charge": _amounts_to_dict(self.fixed_charge),
            "tiers": [t.to_dict() for t in self.tiers],
            "seasonal_adjustments": [s.to_dict() for s in self.seasonal_adjustments],
            "discount_rules": [d.to_dict() for d in self.discount_rules],
            "late_fee_policy": self.late_fee_policy.to_dict(),
            "computation_settings": self.computation_settings.to_dict(),
            "created_by": self.created_by,
            "created_at": _iso(self.created_at),
            "modified_by": self.modified_by,
            "modified_at": _iso(self.modified_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TariffConfiguration":
        """Build a configuration from plain values or already-built parts."""
        return cls(
            id=data.get("id") or "",
            name=data["name"],
            description=data.get("description") or "",
            state=ConfigurationState(data.get("state", ConfigurationState.DRAFT)),
            effective_from=as_utc(data["effective_from"]),
            expires_at=as_utc(data.get("expires_at")),
            paused_at=as_utc(data.get("paused_at")),
            fixed_charge=_category_amounts(data["fixed_charge"]),
            tiers=_parts(ConsumptionTier, data.get("tiers", ())),
            seasonal_adjustments=_parts(
                SeasonalAdjustment, data.get("seasonal_adjustments", ())
            ),
            discount_rules=_parts(DiscountRule, data.get("discount_rules", ())),
            late_fee_policy=LateFeePolicy.from_dict(data.get("late_fee_policy")),
            computation_settings=ComputationSettings.from_dict(
                data.get("computation_settings")
            ),
            created_by=data.get("created_by") or "system",
            created_at=as_utc(data.get("created_at")),
            modified_by=data.get("modified_by"),
            modified_at=as_utc(data.get("modified_at")),
        )


def _parts(part_cls: Any, items: Optional[Iterable[Any]]) -> Tuple[Any, ...]:
    return tuple(part_cls.from_dict(item) for item in (items or ()))
