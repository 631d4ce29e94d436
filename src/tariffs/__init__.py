"""Tariff configuration lifecycle and billing calculation engine."""

from .config import (
    ConfigurationState,
    CustomerCategory,
    DiscountKind,
    TariffEngineConfig,
)
from .models import (
    ComputationSettings,
    ConsumptionTier,
    DiscountConditions,
    DiscountRule,
    LateFeePolicy,
    SeasonalAdjustment,
    StateSubsidy,
    TariffConfiguration,
)
from .exceptions import (
    ActivationConflict,
    ConfigurationNotFound,
    InvalidStateTransition,
    NoActiveConfiguration,
    TariffError,
    TariffErrorCode,
    ValidationError,
)
from .validators import TariffValidator, ValidationIssue, ValidationReport
from .store import TariffConfigurationStore
from .resolver import TariffResolver
from .tiers import ConsumptionTierCalculator, TierCharge
from .seasonal import AppliedSeasonalAdjustment, SeasonalAdjuster
from .discounts import AppliedDiscount, DiscountEngine
from .surcharges import AppliedSurcharge, SurchargeEngine
from .finalizer import TaxAndRoundingFinalizer
from .engine import (
    BillingCalculationOrchestrator,
    BillingCalculationResult,
    CalculationBreakdown,
)
from .service import TariffService
from .defaults import default_tariff_configuration

__all__ = [
    # Config
    "ConfigurationState",
    "CustomerCategory",
    "DiscountKind",
    "TariffEngineConfig",
    # Models
    "ComputationSettings",
    "ConsumptionTier",
    "DiscountConditions",
    "DiscountRule",
    "LateFeePolicy",
    "SeasonalAdjustment",
    "StateSubsidy",
    "TariffConfiguration",
    # Errors
    "ActivationConflict",
    "ConfigurationNotFound",
    "InvalidStateTransition",
    "NoActiveConfiguration",
    "TariffError",
    "TariffErrorCode",
    "ValidationError",
    # Validation
    "TariffValidator",
    "ValidationIssue",
    "ValidationReport",
    # Lifecycle
    "TariffConfigurationStore",
    "TariffResolver",
    # Calculation
    "ConsumptionTierCalculator",
    "TierCharge",
    "SeasonalAdjuster",
    "AppliedSeasonalAdjustment",
    "DiscountEngine",
    "AppliedDiscount",
    "SurchargeEngine",
    "AppliedSurcharge",
    "TaxAndRoundingFinalizer",
    "BillingCalculationOrchestrator",
    "BillingCalculationResult",
    "CalculationBreakdown",
    # Service
    "TariffService",
    "default_tariff_configuration",
]
