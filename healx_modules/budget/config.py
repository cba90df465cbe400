"""
Budget Planning Configuration Schema.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Self

from healx_kernel.domain.jitter import JitterBounds
from healx_kernel.logging_config import get_logger

logger = get_logger("modules.budget.config")

REVENUE_CATEGORIES: tuple[str, ...] = ("consultations",)
EXPENSE_CATEGORIES: tuple[str, ...] = ("payroll", "inventory", "utilities", "suppliers")


def _default_jitter() -> dict[str, JitterBounds]:
    return {
        "consultations": JitterBounds.of("0.8", "1.2"),
        "payroll": JitterBounds.of("0.9", "1.1"),
        "inventory": JitterBounds.of("0.85", "1.15"),
        "utilities": JitterBounds.of("0.8", "1.2"),
        "suppliers": JitterBounds.of("0.85", "1.15"),
    }


def _default_split() -> dict[str, Decimal]:
    return {
        "payroll": Decimal("0.70"),
        "inventory": Decimal("0.18"),
        "utilities": Decimal("0.08"),
        "suppliers": Decimal("0.04"),
    }


@dataclass
class BudgetConfig:
    """Configuration schema for budget planning."""

    category_jitter: dict[str, JitterBounds] = field(default_factory=_default_jitter)
    max_span_years: int = 10
    revenue_growth_rate: Decimal = Decimal("0.08")
    expense_growth_rate: Decimal = Decimal("0.048")
    seasonal_factors: tuple[Decimal, ...] = (
        Decimal("0.9"), Decimal("1.1"), Decimal("0.95"), Decimal("1.05"),
    )
    projection_split: dict[str, Decimal] = field(default_factory=_default_split)

    def __post_init__(self):
        known = set(REVENUE_CATEGORIES) | set(EXPENSE_CATEGORIES)
        missing = known - set(self.category_jitter)
        if missing:
            raise ValueError(f"category_jitter missing categories: {sorted(missing)}")
        unknown = set(self.category_jitter) - known
        if unknown:
            raise ValueError(f"category_jitter has unknown categories: {sorted(unknown)}")
        if self.max_span_years < 1:
            raise ValueError("max_span_years must be at least 1")
        if len(self.seasonal_factors) != 4:
            raise ValueError("seasonal_factors must have one factor per quarter")
        if set(self.projection_split) != set(EXPENSE_CATEGORIES):
            raise ValueError(
                f"projection_split must cover exactly {list(EXPENSE_CATEGORIES)}"
            )
        if sum(self.projection_split.values(), Decimal("0")) != Decimal("1"):
            raise ValueError("projection_split shares must sum to 1")
        logger.info("budget_config_initialized", extra={
            "max_span_years": self.max_span_years,
            "categories": sorted(self.category_jitter),
        })

    def jitter_for(self, category: str) -> JitterBounds:
        return self.category_jitter[category]

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build from a parsed ``planning`` config section; absent keys keep defaults."""
        kwargs: dict[str, Any] = {}
        if "category_jitter" in data:
            jitter = _default_jitter()
            for name, bounds in data["category_jitter"].items():
                jitter[name] = JitterBounds.of(bounds["low"], bounds["high"])
            kwargs["category_jitter"] = jitter
        if "max_span_years" in data:
            kwargs["max_span_years"] = int(data["max_span_years"])
        if "revenue_growth_rate" in data:
            kwargs["revenue_growth_rate"] = Decimal(str(data["revenue_growth_rate"]))
        if "expense_growth_rate" in data:
            kwargs["expense_growth_rate"] = Decimal(str(data["expense_growth_rate"]))
        if "seasonal_factors" in data:
            kwargs["seasonal_factors"] = tuple(Decimal(str(f)) for f in data["seasonal_factors"])
        if "projection_split" in data:
            kwargs["projection_split"] = {
                name: Decimal(str(share)) for name, share in data["projection_split"].items()
            }
        return cls(**kwargs)
