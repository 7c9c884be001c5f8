from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping

from app.services.rule_summaries import RULE_SUMMARIES
from app.utils.numbers import format_de


@dataclass(frozen=True)
class StarCap:
    max_sale_price: float
    max_voucher_value: float


# Caps per star category ("Annahmen" table). Ratings without an entry need approval.
STAR_CAPS: Mapping[int, StarCap] = MappingProxyType({
    3: StarCap(max_sale_price=50.00, max_voucher_value=30.00),
    4: StarCap(max_sale_price=60.00, max_voucher_value=35.00),
    5: StarCap(max_sale_price=75.00, max_voucher_value=45.00),
})

MIN_MARGIN_PERCENT = 27.0
MAX_FINANCING_AMOUNT = 50000.0

RULE_STAR = "APR-STAR-001"
RULE_SALE_PRICE = "APR-SALE-010"
RULE_VOUCHER = "APR-VOUCHER-020"
RULE_MARGIN = "APR-MARGIN-030"
RULE_FINANCING = "APR-FIN-040"


@dataclass(frozen=True)
class PricingInput:
    stars: int
    realistic_hotel_sale_price: float
    voucher_value_for_hotel: float
    margin_after_tax_percent: float
    gross_project_financing_costs: float


@dataclass(frozen=True)
class ValidationResult:
    needs_approval: bool
    reasons: List[str] = field(default_factory=list)
    rule_ids: List[str] = field(default_factory=list)


def evaluate(pricing: PricingInput) -> ValidationResult:
    """
    Check a calculation against the approval thresholds.

    All rules run; every violation is reported, in rule order. A star rating
    without caps skips the two cap checks but not the margin/financing checks.
    """
    reasons: List[str] = []
    rule_ids: List[str] = []

    def violation(rule_id: str, message: str) -> None:
        rule_ids.append(rule_id)
        reasons.append(message)

    # 1) Star category
    cap = STAR_CAPS.get(pricing.stars)
    if cap is None:
        allowed = ", ".join(f"{s}★" for s in sorted(STAR_CAPS))
        violation(
            RULE_STAR,
            f"Star category {pricing.stars} is not valid. Only {allowed} hotels are allowed without approval.",
        )
    else:
        # 2) Sale price cap (equal to the cap is fine)
        if pricing.realistic_hotel_sale_price > cap.max_sale_price:
            violation(
                RULE_SALE_PRICE,
                f"Realistic hotel sale price {pricing.realistic_hotel_sale_price:.2f} € exceeds "
                f"the {pricing.stars}★ limit of {cap.max_sale_price:.2f} €",
            )

        # 3) Voucher cap
        if pricing.voucher_value_for_hotel > cap.max_voucher_value:
            violation(
                RULE_VOUCHER,
                f"Voucher value {pricing.voucher_value_for_hotel:.2f} € exceeds "
                f"the {pricing.stars}★ limit of {cap.max_voucher_value:.2f} €",
            )

    # 4) Minimum margin after tax
    if pricing.margin_after_tax_percent < MIN_MARGIN_PERCENT:
        violation(
            RULE_MARGIN,
            f"Margin after tax {pricing.margin_after_tax_percent:.2f}% is below "
            f"the minimum of {MIN_MARGIN_PERCENT:g}%",
        )

    # 5) Maximum financing
    if pricing.gross_project_financing_costs > MAX_FINANCING_AMOUNT:
        violation(
            RULE_FINANCING,
            f"Project financing costs {format_de(pricing.gross_project_financing_costs)} € exceed "
            f"the limit of {format_de(MAX_FINANCING_AMOUNT)} €",
        )

    return ValidationResult(needs_approval=bool(reasons), reasons=reasons, rule_ids=rule_ids)


def attach_rule_summaries(rule_ids: Iterable[str]) -> List[Dict[str, str]]:
    """
    Return unique rule summaries for triggered rule IDs (reviewer evidence).
    """
    out: List[Dict[str, str]] = []
    seen = set()
    for rid in rule_ids:
        if not rid or rid in seen:
            continue
        seen.add(rid)
        summary = RULE_SUMMARIES.get(rid)
        if summary:
            out.append({"rule_id": rid, "summary": summary})
        else:
            out.append({"rule_id": rid, "summary": "Approval rule triggered. See rule definition table."})
    return out


def thresholds() -> Dict[str, object]:
    return {
        "star_caps": {
            str(stars): {"max_sale_price": cap.max_sale_price, "max_voucher_value": cap.max_voucher_value}
            for stars, cap in STAR_CAPS.items()
        },
        "min_margin_percent": MIN_MARGIN_PERCENT,
        "max_financing_amount": MAX_FINANCING_AMOUNT,
    }
