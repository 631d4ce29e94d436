"""Tariff engine configuration and enumerations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class CustomerCategory(str, Enum):
    """Socio-economic customer categories with their own rates."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    SENIOR = "senior"

    @classmethod
    def parse(cls, value: Any) -> "CustomerCategory":
        """Coerce a category name, accepting the legacy portal identifiers."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        key = _LEGACY_CATEGORY_NAMES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown customer category: {value!r}") from None


_LEGACY_CATEGORY_NAMES: Dict[str, str] = {
    "residencial": "residential",
    "comercial": "commercial",
    "tercera_edad": "senior",
    "terceraedad": "senior",
}


class ConfigurationState(str, Enum):
    """Lifecycle states of one rate-schedule version."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    FINALIZED = "finalized"

    @property
    def is_editable(self) -> bool:
        return self in (ConfigurationState.DRAFT, ConfigurationState.PAUSED)


class DiscountKind(str, Enum):
    """How a discount rule computes its amount."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    MIN_CONSUMPTION_THRESHOLD = "min_consumption_threshold"


@dataclass(frozen=True)
class TariffEngineConfig:
    """Calculation knobs passed explicitly into the pure billing path."""

    default_tax_percent: float = 19.0
    low_consumption_discount_percent: float = 10.0

    @classmethod
    def from_settings(cls, settings: Any) -> "TariffEngineConfig":
        return cls(default_tax_percent=settings.default_tax_percent)


DEFAULT_ENGINE_CONFIG = TariffEngineConfig()
