import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from storefront.constants.pricing import FEE_MODE_ABSORB, FEE_MODE_PASS_THROUGH
from storefront.exceptions import InvalidFeeConfig
from storefront.schemas.pricing_schemas import FeeConfig, SurchargeQuote


def _finite_or_zero(value: float) -> float:
    if value is None or math.isnan(value):
        return 0
    return value


def quote_surcharge(
    base_total: float,
    mode: str,
    fee_percent: float = 0,
    fee_fixed: float = 0,
    label: Optional[str] = None,
) -> SurchargeQuote:
    """
    Preview of the payment processor surcharge.

    In pass-through mode the shopper pays whatever keeps the merchant's net
    equal to ``base_total`` after the processor takes
    ``fee_percent`` of the charge plus ``fee_fixed``:

        charge = (base_total + fee_fixed) / (1 - fee_percent)

    The order service computes the amount actually charged; this value is
    only shown to the shopper.
    """
    if mode == FEE_MODE_ABSORB:
        return SurchargeQuote(surcharge=0, label=label)

    if mode != FEE_MODE_PASS_THROUGH:
        raise InvalidFeeConfig(f"Unknown fee mode: {mode!r}")

    rate = _finite_or_zero(fee_percent)
    fixed = _finite_or_zero(fee_fixed)

    if rate <= 0 and fixed <= 0:
        return SurchargeQuote(surcharge=0, label=label)

    if rate >= 1:
        raise InvalidFeeConfig(f"Fee percent must be below 1, got {rate}")

    base = Decimal(str(base_total))
    charge = (base + Decimal(str(fixed))) / (Decimal(1) - Decimal(str(rate)))
    surcharge = max(Decimal(0), charge - base)

    return SurchargeQuote(
        surcharge=int(surcharge.quantize(Decimal(1), rounding=ROUND_HALF_UP)),
        label=label,
    )


def quote_surcharge_for(base_total: float, fee_config: FeeConfig) -> SurchargeQuote:
    return quote_surcharge(
        base_total,
        fee_config.mode,
        fee_config.percent,
        fee_config.fixed,
        label=fee_config.label,
    )
