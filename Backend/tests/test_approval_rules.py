from __future__ import annotations

import pytest

from app.services.approval_rules import (
    MAX_FINANCING_AMOUNT,
    MIN_MARGIN_PERCENT,
    RULE_FINANCING,
    RULE_MARGIN,
    RULE_SALE_PRICE,
    RULE_STAR,
    RULE_VOUCHER,
    STAR_CAPS,
    PricingInput,
    attach_rule_summaries,
    evaluate,
)


def _input(**overrides) -> PricingInput:
    values = {
        "stars": 4,
        "realistic_hotel_sale_price": 55.0,
        "voucher_value_for_hotel": 30.0,
        "margin_after_tax_percent": 30.0,
        "gross_project_financing_costs": 10000.0,
    }
    values.update(overrides)
    return PricingInput(**values)


def test_star_cap_table() -> None:
    assert sorted(STAR_CAPS) == [3, 4, 5]
    assert (STAR_CAPS[3].max_sale_price, STAR_CAPS[3].max_voucher_value) == (50.0, 30.0)
    assert (STAR_CAPS[4].max_sale_price, STAR_CAPS[4].max_voucher_value) == (60.0, 35.0)
    assert (STAR_CAPS[5].max_sale_price, STAR_CAPS[5].max_voucher_value) == (75.0, 45.0)
    assert MIN_MARGIN_PERCENT == 27.0
    assert MAX_FINANCING_AMOUNT == 50000.0

    with pytest.raises(TypeError):
        STAR_CAPS[6] = STAR_CAPS[5]  # type: ignore[index]


@pytest.mark.parametrize("stars", [3, 4, 5])
def test_sale_price_equal_to_cap_passes(stars: int) -> None:
    cap = STAR_CAPS[stars]
    result = evaluate(_input(stars=stars, realistic_hotel_sale_price=cap.max_sale_price,
                             voucher_value_for_hotel=cap.max_voucher_value))
    assert result.needs_approval is False
    assert result.reasons == []


@pytest.mark.parametrize("stars", [3, 4, 5])
def test_sale_price_above_cap_triggers(stars: int) -> None:
    cap = STAR_CAPS[stars]
    price = round(cap.max_sale_price + 0.01, 2)
    result = evaluate(_input(stars=stars, realistic_hotel_sale_price=price, voucher_value_for_hotel=0.0))

    assert result.needs_approval is True
    assert result.rule_ids == [RULE_SALE_PRICE]
    assert f"{price:.2f}" in result.reasons[0]
    assert f"{cap.max_sale_price:.2f}" in result.reasons[0]
    assert f"{stars}★" in result.reasons[0]


@pytest.mark.parametrize("stars", [3, 4, 5])
def test_voucher_above_cap_triggers(stars: int) -> None:
    cap = STAR_CAPS[stars]
    voucher = round(cap.max_voucher_value + 0.01, 2)
    result = evaluate(_input(stars=stars, realistic_hotel_sale_price=0.0, voucher_value_for_hotel=voucher))

    assert result.rule_ids == [RULE_VOUCHER]
    assert f"{voucher:.2f}" in result.reasons[0]
    assert f"{cap.max_voucher_value:.2f}" in result.reasons[0]


def test_margin_boundary() -> None:
    assert evaluate(_input(margin_after_tax_percent=27.0)).needs_approval is False

    result = evaluate(_input(margin_after_tax_percent=26.99))
    assert result.rule_ids == [RULE_MARGIN]
    assert "26.99%" in result.reasons[0]
    assert "27%" in result.reasons[0]


def test_financing_boundary() -> None:
    assert evaluate(_input(gross_project_financing_costs=50000.0)).needs_approval is False

    result = evaluate(_input(gross_project_financing_costs=50000.01))
    assert result.rule_ids == [RULE_FINANCING]
    assert "50.000,01 €" in result.reasons[0]
    assert "50.000 €" in result.reasons[0]


@pytest.mark.parametrize("stars", [2, 6, 0, -3])
def test_invalid_star_category_skips_caps(stars: int) -> None:
    result = evaluate(_input(stars=stars, realistic_hotel_sale_price=999.0, voucher_value_for_hotel=999.0))

    assert result.rule_ids == [RULE_STAR]
    assert str(stars) in result.reasons[0]
    assert "3★, 4★, 5★" in result.reasons[0]


@pytest.mark.parametrize("stars", [2, 6])
def test_invalid_star_category_still_checks_margin_and_financing(stars: int) -> None:
    result = evaluate(_input(stars=stars, margin_after_tax_percent=10.0, gross_project_financing_costs=80000.0))
    assert result.rule_ids == [RULE_STAR, RULE_MARGIN, RULE_FINANCING]
    assert len(result.reasons) == 3


def test_all_violations_reported_in_rule_order() -> None:
    result = evaluate(PricingInput(
        stars=3,
        realistic_hotel_sale_price=80.0,
        voucher_value_for_hotel=40.0,
        margin_after_tax_percent=5.0,
        gross_project_financing_costs=75000.0,
    ))
    assert result.needs_approval is True
    assert result.rule_ids == [RULE_SALE_PRICE, RULE_VOUCHER, RULE_MARGIN, RULE_FINANCING]
    assert len(result.reasons) == 4


def test_zero_and_negative_values_do_not_raise() -> None:
    result = evaluate(PricingInput(
        stars=0,
        realistic_hotel_sale_price=-1.0,
        voucher_value_for_hotel=0.0,
        margin_after_tax_percent=-12.5,
        gross_project_financing_costs=-100.0,
    ))
    assert result.rule_ids == [RULE_STAR, RULE_MARGIN]


@pytest.mark.parametrize("pricing", [
    _input(),
    _input(stars=7),
    _input(margin_after_tax_percent=0.0, gross_project_financing_costs=1e9),
    _input(stars=5, realistic_hotel_sale_price=75.0, voucher_value_for_hotel=45.01),
])
def test_needs_approval_iff_reasons_and_idempotent(pricing: PricingInput) -> None:
    first = evaluate(pricing)
    second = evaluate(pricing)

    assert first == second
    assert first.needs_approval == (len(first.reasons) > 0)
    assert len(first.reasons) == len(first.rule_ids)


def test_scenario_within_all_limits() -> None:
    result = evaluate(PricingInput(4, 55.0, 30.0, 30.0, 10000.0))
    assert result.needs_approval is False
    assert result.reasons == []


def test_scenario_three_star_sale_price_over_cap() -> None:
    result = evaluate(PricingInput(3, 52.0, 30.0, 30.0, 10000.0))
    assert result.needs_approval is True
    assert len(result.reasons) == 1
    assert "3★" in result.reasons[0]
    assert "50.00" in result.reasons[0]


def test_scenario_low_margin_and_high_financing() -> None:
    result = evaluate(PricingInput(5, 70.0, 40.0, 20.0, 60000.0))
    assert result.needs_approval is True
    assert result.rule_ids == [RULE_MARGIN, RULE_FINANCING]
    assert "27%" in result.reasons[0]
    assert "60.000 €" in result.reasons[1]


def test_scenario_unknown_star_category_only() -> None:
    result = evaluate(PricingInput(7, 10.0, 10.0, 50.0, 0.0))
    assert result.needs_approval is True
    assert result.rule_ids == [RULE_STAR]


def test_attach_rule_summaries_dedupes_and_falls_back() -> None:
    summaries = attach_rule_summaries([RULE_MARGIN, RULE_MARGIN, "", "APR-UNKNOWN-999"])
    assert [s["rule_id"] for s in summaries] == [RULE_MARGIN, "APR-UNKNOWN-999"]
    assert "27%" in summaries[0]["summary"]
    assert summaries[1]["summary"].startswith("Approval rule triggered")
