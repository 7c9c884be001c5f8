import math
from typing import Any, Dict, Mapping

from app.services.approval_rules import PricingInput
from app.utils.numbers import parse_decimal, parse_int

# Workflow form keys as sent by the pricing calculator
STARS_KEY = "stars"
SALE_PRICE_KEY = "averagePrice"
VOUCHER_KEY = "voucherPrice"
MARGIN_PERCENT_KEY = "marginAfterTaxPercent"
PROFIT_KEY = "profitMargin"
TOTAL_KEY = "totalPrice"
FINANCING_KEY = "projectCosts"


def margin_percent(profit: float, total: float) -> float:
    if total == 0:
        return 0.0
    margin = profit / total * 100
    return margin if math.isfinite(margin) else 0.0


def extract_pricing_input(record: Mapping[str, Any]) -> PricingInput:
    """
    Map a raw workflow record (strings, locale-formatted numbers) to a PricingInput.

    Missing or unparseable values become 0. A precomputed margin percentage
    wins over profit/total.
    """
    record = record or {}

    if record.get(MARGIN_PERCENT_KEY) not in (None, ""):
        margin = parse_decimal(record.get(MARGIN_PERCENT_KEY))
    else:
        margin = margin_percent(
            parse_decimal(record.get(PROFIT_KEY)),
            parse_decimal(record.get(TOTAL_KEY)),
        )

    return PricingInput(
        stars=parse_int(record.get(STARS_KEY)),
        realistic_hotel_sale_price=parse_decimal(record.get(SALE_PRICE_KEY)),
        voucher_value_for_hotel=parse_decimal(record.get(VOUCHER_KEY)),
        margin_after_tax_percent=margin,
        gross_project_financing_costs=parse_decimal(record.get(FINANCING_KEY)),
    )


def pricing_input_to_dict(pricing: PricingInput) -> Dict[str, Any]:
    return {
        "stars": pricing.stars,
        "realistic_hotel_sale_price": pricing.realistic_hotel_sale_price,
        "voucher_value_for_hotel": pricing.voucher_value_for_hotel,
        "margin_after_tax_percent": pricing.margin_after_tax_percent,
        "gross_project_financing_costs": pricing.gross_project_financing_costs,
    }
