"""Stateless real-estate calculators.

Pure functions from an input schema to a result schema; nothing here
touches the database. Monetary results are rounded to cents.
"""

from __future__ import annotations

from src.crm.tools.schemas import (
    AmortizationInput,
    AmortizationResult,
    AmortizationRow,
    BuyingOutlook,
    CapRateInput,
    CapRateResult,
    ClosingCostsInput,
    ClosingCostsResult,
    CommissionInput,
    CommissionResult,
    CommissionType,
    FeeGroup,
    MonthlyBuying,
    MonthlyRenting,
    MortgageInput,
    MortgageResult,
    PropertyTaxInput,
    PropertyTaxResult,
    RentingOutlook,
    RentVsBuyInput,
    RentVsBuyResult,
    ROIInput,
    ROIResult,
    TierBreakdown,
)

# Flat fees used by the closing cost estimate
APPLICATION_FEE = 500.0
CREDIT_REPORT_FEE = 50.0
APPRAISAL_FEE = 500.0
UNDERWRITING_FEE = 750.0
PROCESSING_FEE = 400.0
TITLE_SEARCH_FEE = 400.0
ESCROW_FEE = 800.0
ATTORNEY_FEE = 1000.0
SURVEY_FEE = 500.0
INSPECTION_FEE = 400.0
RECORDING_FEE = 200.0


def _cents(value: float) -> float:
    return round(value, 2)


def monthly_payment(principal: float, annual_rate: float, years: int) -> float:
    """Fixed-rate payment P*r*(1+r)^n / ((1+r)^n - 1), r = rate/100/12."""
    if principal <= 0:
        return 0.0
    n = years * 12
    r = annual_rate / 100 / 12
    if r == 0:
        return principal / n
    growth = (1 + r) ** n
    return principal * r * growth / (growth - 1)


def mortgage(data: MortgageInput) -> MortgageResult:
    loan = data.property_price - data.down_payment
    principal_and_interest = monthly_payment(loan, data.interest_rate, data.loan_term_years)
    tax = data.annual_property_tax / 12
    insurance = data.annual_insurance / 12
    return MortgageResult(
        loan_amount=_cents(loan),
        principal_and_interest=_cents(principal_and_interest),
        tax=_cents(tax),
        insurance=_cents(insurance),
        total=_cents(principal_and_interest + tax + insurance),
    )


def amortization(data: AmortizationInput) -> AmortizationResult:
    """Payment schedule, with the effect of an extra monthly principal payment."""
    total_payments = data.loan_term_years * 12
    rate = data.interest_rate / 100 / 12
    payment = monthly_payment(data.loan_amount, data.interest_rate, data.loan_term_years)
    standard_interest = payment * total_payments - data.loan_amount

    balance = data.loan_amount
    total_interest = 0.0
    schedule: list[AmortizationRow] = []
    number = 1
    while balance > 0.005 and number <= total_payments:
        interest = balance * rate
        principal = min(payment + data.extra_payment - interest, balance)
        total_interest += interest
        balance -= principal
        schedule.append(
            AmortizationRow(
                payment_number=number,
                payment=_cents(principal + interest),
                principal=_cents(principal),
                interest=_cents(interest),
                remaining_balance=_cents(max(balance, 0.0)),
            )
        )
        number += 1

    return AmortizationResult(
        monthly_payment=_cents(payment),
        total_interest=_cents(total_interest),
        total_payments=_cents(payment * total_payments),
        months_saved=total_payments - len(schedule),
        interest_saved=_cents(max(standard_interest - total_interest, 0.0)),
        schedule=schedule,
    )


def cap_rate(data: CapRateInput) -> CapRateResult:
    gross = (data.monthly_rent + data.other_income) * 12
    effective = gross - gross * data.vacancy_rate / 100
    expenses = sum(data.expenses.model_dump().values()) * 12
    noi = effective - expenses
    return CapRateResult(
        gross_income=_cents(gross),
        effective_gross_income=_cents(effective),
        total_expenses=_cents(expenses),
        net_operating_income=_cents(noi),
        cap_rate=_cents(noi / data.property_value * 100),
        monthly_cash_flow=_cents(noi / 12),
    )


def commission(data: CommissionInput) -> CommissionResult:
    """Standard (flat rate), custom (fixed amount) or tiered (marginal) commission."""
    price = data.property_price
    breakdown: list[TierBreakdown] = []

    if data.commission_type == CommissionType.STANDARD:
        total = price * data.standard_rate / 100
    elif data.commission_type == CommissionType.CUSTOM:
        total = data.custom_amount
    else:
        total = 0.0
        remaining = price
        for tier in sorted(data.tiers, key=lambda t: t.start):
            if remaining <= 0:
                break
            span = tier.end - tier.start if tier.end is not None else remaining
            in_tier = min(remaining, span)
            amount = in_tier * tier.rate / 100
            total += amount
            breakdown.append(TierBreakdown(tier=tier, amount=_cents(amount)))
            remaining -= in_tier

    return CommissionResult(
        total_commission=_cents(total),
        effective_rate=_cents(total / price * 100),
        agent_share=_cents(total * data.agent_percentage / 100),
        brokerage_share=_cents(total * data.brokerage_percentage / 100),
        breakdown=breakdown,
    )


def property_tax(data: PropertyTaxInput) -> PropertyTaxResult:
    assessed = data.property_value * data.assessment_ratio / 100
    taxable = max(assessed - data.exemptions, 0.0)
    annual = taxable * data.tax_rate / 100
    return PropertyTaxResult(
        assessed_value=_cents(assessed),
        taxable_value=_cents(taxable),
        annual_tax=_cents(annual),
        monthly_tax=_cents(annual / 12),
        effective_rate=_cents(annual / data.property_value * 100),
    )


def _group(items: dict[str, float]) -> FeeGroup:
    rounded = {name: _cents(value) for name, value in items.items()}
    return FeeGroup(items=rounded, total=_cents(sum(items.values())))


def closing_costs(data: ClosingCostsInput) -> ClosingCostsResult:
    """Itemised buyer closing cost estimate."""
    price = data.purchase_price
    loan = max(price - data.down_payment, 0.0)
    monthly_tax = price * data.property_tax_rate / 100 / 12

    lender = _group(
        {
            "origination_fee": loan * 0.01,
            "application_fee": APPLICATION_FEE,
            "credit_report_fee": CREDIT_REPORT_FEE,
            "appraisal_fee": APPRAISAL_FEE,
            "underwriting_fee": UNDERWRITING_FEE,
            "processing_fee": PROCESSING_FEE,
        }
    )
    third_party = _group(
        {
            "title_insurance": price * 0.005,
            "title_search": TITLE_SEARCH_FEE,
            "escrow_fee": ESCROW_FEE,
            "attorney_fee": ATTORNEY_FEE,
            "survey_fee": 0.0 if data.new_construction else SURVEY_FEE,
            "inspection_fee": 0.0 if data.new_construction else INSPECTION_FEE,
        }
    )
    government = _group(
        {
            "recording_fees": RECORDING_FEE,
            "transfer_tax": price * 0.01,
            "property_tax": monthly_tax,
        }
    )
    # PMI applies below 20% down
    prepaids = _group(
        {
            "homeowners_insurance": price * 0.003,
            "property_taxes": monthly_tax * 6,
            "mortgage_insurance": loan * 0.01 / 12 if data.down_payment / price < 0.2 else 0.0,
            "interest_prepaid": loan * data.interest_rate / 100 / 12,
        }
    )
    total = lender.total + third_party.total + government.total + prepaids.total
    return ClosingCostsResult(
        lender_fees=lender,
        third_party_fees=third_party,
        government_fees=government,
        prepaids=prepaids,
        total=_cents(total),
    )


def rent_vs_buy(data: RentVsBuyInput) -> RentVsBuyResult:
    """Compare owning and renting over ``years``.

    The renter invests the down payment plus any monthly saving versus
    owning; the owner keeps equity and appreciation.
    """
    principal = data.home_price - data.down_payment
    mortgage_payment = monthly_payment(principal, data.interest_rate, data.loan_term_years)
    buying_total = (
        mortgage_payment
        + data.annual_property_tax / 12
        + data.annual_home_insurance / 12
        + data.annual_maintenance / 12
    )
    renting_total = data.monthly_rent + data.annual_renters_insurance / 12
    months = data.years * 12

    # Equity: down payment plus principal paid down
    rate = data.interest_rate / 100 / 12
    balance = principal
    equity = data.down_payment
    for _ in range(min(months, data.loan_term_years * 12)):
        paid = mortgage_payment - balance * rate
        balance -= paid
        equity += paid

    home_value = data.home_price * (1 + data.home_appreciation / 100) ** data.years
    buying_cost = buying_total * months
    buying_net = buying_cost + data.down_payment - (home_value - data.home_price + equity)

    rent_cost = 0.0
    rent = data.monthly_rent
    for _ in range(data.years):
        rent_cost += rent * 12
        rent *= 1 + data.rent_increase / 100
    rent_cost += data.annual_renters_insurance * data.years

    monthly_saving = max(buying_total - renting_total, 0.0)
    growth = data.investment_return / 100 / 12
    investment = data.down_payment
    for _ in range(months):
        investment = investment * (1 + growth) + monthly_saving
    renting_net = rent_cost - (investment - data.down_payment - monthly_saving * months)

    return RentVsBuyResult(
        monthly_buying=MonthlyBuying(
            mortgage=_cents(mortgage_payment),
            property_tax=_cents(data.annual_property_tax / 12),
            insurance=_cents(data.annual_home_insurance / 12),
            maintenance=_cents(data.annual_maintenance / 12),
            total=_cents(buying_total),
        ),
        monthly_renting=MonthlyRenting(
            rent=_cents(data.monthly_rent),
            insurance=_cents(data.annual_renters_insurance / 12),
            total=_cents(renting_total),
        ),
        buying=BuyingOutlook(
            total_cost=_cents(buying_cost),
            equity=_cents(equity),
            home_value=_cents(home_value),
            net_cost=_cents(buying_net),
        ),
        renting=RentingOutlook(
            total_cost=_cents(rent_cost),
            investment=_cents(investment),
            net_cost=_cents(renting_net),
        ),
        better_option="BUY" if buying_net < renting_net else "RENT",
    )


def roi(data: ROIInput) -> ROIResult:
    """Rental property returns: cash-on-cash, cap rate and total ROI with appreciation."""
    mortgage_payment = monthly_payment(
        data.purchase_price - data.down_payment, data.interest_rate, data.loan_term_years
    )
    income = data.monthly_rent + data.other_monthly_income
    expenses = {
        "mortgage": mortgage_payment,
        "property_tax": data.property_tax,
        "insurance": data.insurance,
        "utilities": data.utilities,
        "maintenance": data.maintenance,
        "property_management": data.monthly_rent * data.property_management / 100,
        "vacancy": data.monthly_rent * data.vacancy_rate / 100,
    }
    total_expenses = sum(expenses.values())
    monthly_cash_flow = income - total_expenses
    annual_cash_flow = monthly_cash_flow * 12
    investment = data.down_payment + data.closing_costs + data.rehab_costs

    noi = (income - (total_expenses - mortgage_payment)) * 12
    future_value = data.purchase_price * (1 + data.annual_appreciation / 100) ** data.holding_period_years
    profit = future_value - data.purchase_price + annual_cash_flow * data.holding_period_years

    def _pct(numerator: float) -> float:
        return _cents(numerator / investment * 100) if investment else 0.0

    return ROIResult(
        monthly_income=_cents(income),
        monthly_expenses={**{k: _cents(v) for k, v in expenses.items()}, "total": _cents(total_expenses)},
        monthly_cash_flow=_cents(monthly_cash_flow),
        annual_cash_flow=_cents(annual_cash_flow),
        total_investment=_cents(investment),
        cash_on_cash=_pct(annual_cash_flow),
        cap_rate=_cents(noi / data.purchase_price * 100),
        future_value=_cents(future_value),
        total_roi=_pct(profit),
    )
