"""Calculator tests.

The calculators are pure functions; a few requests check the HTTP layer
and the empty-body defaults.
"""

from __future__ import annotations

import pytest

from src.crm.tools import calculators
from src.crm.tools.schemas import (
    AmortizationInput,
    CapRateInput,
    ClosingCostsInput,
    CommissionInput,
    MortgageInput,
    PropertyTaxInput,
    RentVsBuyInput,
    ROIInput,
)


# ── Mortgage & Amortization ──────────────────────────────────────────────────


def test_monthly_payment_known_value():
    assert round(calculators.monthly_payment(400_000, 5.5, 30), 2) == 2271.16


def test_monthly_payment_zero_rate_and_zero_principal():
    assert calculators.monthly_payment(12_000, 0, 1) == 1000
    assert calculators.monthly_payment(0, 5, 30) == 0


def test_mortgage_defaults():
    result = calculators.mortgage(MortgageInput())
    assert result.loan_amount == 400_000
    assert result.principal_and_interest == 2271.16
    assert result.tax == 250
    assert result.insurance == 100
    assert result.total == 2621.16


def test_mortgage_rejects_down_payment_above_price():
    with pytest.raises(ValueError):
        MortgageInput(property_price=100_000, down_payment=150_000)


def test_amortization_schedule_without_interest():
    result = calculators.amortization(AmortizationInput(loan_amount=12_000, interest_rate=0, loan_term_years=1))
    assert result.monthly_payment == 1000
    assert len(result.schedule) == 12
    assert result.total_interest == 0
    assert result.months_saved == 0
    assert result.schedule[-1].remaining_balance == 0


def test_extra_payment_shortens_loan():
    result = calculators.amortization(
        AmortizationInput(loan_amount=12_000, interest_rate=0, loan_term_years=1, extra_payment=1000)
    )
    assert len(result.schedule) == 6
    assert result.months_saved == 6


def test_extra_payment_saves_interest():
    base = calculators.amortization(AmortizationInput(loan_amount=200_000, interest_rate=6, loan_term_years=30))
    faster = calculators.amortization(
        AmortizationInput(loan_amount=200_000, interest_rate=6, loan_term_years=30, extra_payment=200)
    )
    assert faster.months_saved > 0
    assert faster.interest_saved > 0
    assert faster.total_interest < base.total_interest


# ── Investment ───────────────────────────────────────────────────────────────


def test_cap_rate_defaults():
    result = calculators.cap_rate(CapRateInput())
    assert result.gross_income == 36_000
    assert result.effective_gross_income == 34_200
    assert result.total_expenses == 10_800
    assert result.net_operating_income == 23_400
    assert result.cap_rate == 4.68
    assert result.monthly_cash_flow == 1950


def test_roi_all_cash_purchase():
    result = calculators.roi(
        ROIInput(
            purchase_price=100_000,
            down_payment=100_000,
            closing_costs=0,
            monthly_rent=1000,
            property_tax=100,
            insurance=0,
            maintenance=0,
            vacancy_rate=0,
            annual_appreciation=0,
            holding_period_years=1,
        )
    )
    assert result.monthly_expenses["mortgage"] == 0
    assert result.monthly_expenses["total"] == 100
    assert result.monthly_cash_flow == 900
    assert result.annual_cash_flow == 10_800
    assert result.cash_on_cash == 10.8
    assert result.cap_rate == 10.8
    assert result.total_roi == 10.8


def test_rent_vs_buy_shape():
    result = calculators.rent_vs_buy(RentVsBuyInput())
    assert result.monthly_buying.total == pytest.approx(
        result.monthly_buying.mortgage
        + result.monthly_buying.property_tax
        + result.monthly_buying.insurance
        + result.monthly_buying.maintenance,
        abs=0.02,
    )
    assert result.buying.home_value > RentVsBuyInput().home_price
    assert result.buying.equity > RentVsBuyInput().down_payment
    assert result.better_option in {"BUY", "RENT"}
    expected = "BUY" if result.buying.net_cost < result.renting.net_cost else "RENT"
    assert result.better_option == expected


# ── Commission & Costs ───────────────────────────────────────────────────────


def test_standard_commission_split():
    result = calculators.commission(CommissionInput())
    assert result.total_commission == 12_500
    assert result.effective_rate == 2.5
    assert result.agent_share == 8750
    assert result.brokerage_share == 3750
    assert result.breakdown == []


def test_tiered_commission_is_marginal():
    result = calculators.commission(CommissionInput(property_price=750_000, commission_type="tiered"))
    assert result.total_commission == 17_500
    assert [b.amount for b in result.breakdown] == [12_500, 5_000]
    assert result.effective_rate == 2.33


def test_custom_commission():
    result = calculators.commission(CommissionInput(commission_type="custom", custom_amount=9000))
    assert result.total_commission == 9000
    assert result.effective_rate == 1.8


def test_property_tax():
    result = calculators.property_tax(PropertyTaxInput(assessment_ratio=80, exemptions=50_000))
    assert result.assessed_value == 400_000
    assert result.taxable_value == 350_000
    assert result.annual_tax == 5250
    assert result.monthly_tax == 437.5
    assert result.effective_rate == 1.05


def test_closing_costs_defaults():
    result = calculators.closing_costs(ClosingCostsInput())
    assert result.lender_fees.total == 6200
    assert result.third_party_fees.total == 5600
    assert result.government_fees.total == 5700
    assert result.prepaids.items["mortgage_insurance"] == 0
    assert result.prepaids.total == 6333.33
    assert result.total == 23_833.33


def test_closing_costs_new_construction_and_pmi():
    result = calculators.closing_costs(ClosingCostsInput(down_payment=50_000, new_construction=True))
    assert result.third_party_fees.items["survey_fee"] == 0
    assert result.third_party_fees.items["inspection_fee"] == 0
    assert result.prepaids.items["mortgage_insurance"] == 375


# ── HTTP ─────────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "path",
    ["mortgage", "amortization", "cap-rate", "commission", "property-tax", "closing-costs", "rent-vs-buy", "roi"],
)
async def test_calculators_accept_empty_body(client, path):
    response = await client.post(f"/api/v1/tools/{path}")
    assert response.status_code == 200, response.text


async def test_mortgage_endpoint(client):
    response = await client.post(
        "/api/v1/tools/mortgage",
        json={"property_price": 500_000, "down_payment": 100_000, "interest_rate": 5.5},
    )
    assert response.json()["principal_and_interest"] == 2271.16


async def test_calculator_validation(client):
    response = await client.post(
        "/api/v1/tools/mortgage", json={"property_price": 100_000, "down_payment": 150_000}
    )
    assert response.status_code == 400


async def test_tools_require_session(anon_client):
    response = await anon_client.post("/api/v1/tools/mortgage")
    assert response.status_code == 401
