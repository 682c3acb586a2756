"""Input and result schemas for the real-estate calculators.

Defaults mirror a typical $500k purchase so every calculator can be called
with an empty body.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

# ── Mortgage ────────────────────────────────────────────────────────────────


class MortgageInput(BaseModel):
    property_price: float = Field(default=500_000, gt=0)
    down_payment: float = Field(default=100_000, ge=0)
    interest_rate: float = Field(default=5.5, ge=0, le=100)
    loan_term_years: int = Field(default=30, ge=1, le=50)
    annual_property_tax: float = Field(default=3_000, ge=0)
    annual_insurance: float = Field(default=1_200, ge=0)

    @model_validator(mode="after")
    def _down_payment_below_price(self) -> MortgageInput:
        if self.down_payment > self.property_price:
            raise ValueError("down_payment cannot exceed property_price")
        return self


class MortgageResult(BaseModel):
    loan_amount: float
    principal_and_interest: float
    tax: float
    insurance: float
    total: float


# ── Amortization ────────────────────────────────────────────────────────────


class AmortizationInput(BaseModel):
    loan_amount: float = Field(default=500_000, gt=0)
    interest_rate: float = Field(default=5.5, ge=0, le=100)
    loan_term_years: int = Field(default=30, ge=1, le=50)
    extra_payment: float = Field(default=0, ge=0)


class AmortizationRow(BaseModel):
    payment_number: int
    payment: float
    principal: float
    interest: float
    remaining_balance: float


class AmortizationResult(BaseModel):
    monthly_payment: float
    total_interest: float
    total_payments: float
    months_saved: int
    interest_saved: float
    schedule: list[AmortizationRow]


# ── Cap Rate ────────────────────────────────────────────────────────────────


class CapRateExpenses(BaseModel):
    """Monthly operating expenses."""

    property_tax: float = Field(default=400, ge=0)
    insurance: float = Field(default=100, ge=0)
    utilities: float = Field(default=0, ge=0)
    maintenance: float = Field(default=200, ge=0)
    property_management: float = Field(default=200, ge=0)
    other: float = Field(default=0, ge=0)


class CapRateInput(BaseModel):
    property_value: float = Field(default=500_000, gt=0)
    monthly_rent: float = Field(default=3_000, ge=0)
    other_income: float = Field(default=0, ge=0)
    vacancy_rate: float = Field(default=5, ge=0, le=100)
    expenses: CapRateExpenses = Field(default_factory=CapRateExpenses)


class CapRateResult(BaseModel):
    gross_income: float
    effective_gross_income: float
    total_expenses: float
    net_operating_income: float
    cap_rate: float
    monthly_cash_flow: float


# ── Commission ──────────────────────────────────────────────────────────────


class CommissionType(str, Enum):
    STANDARD = "standard"
    TIERED = "tiered"
    CUSTOM = "custom"


class CommissionTier(BaseModel):
    start: float = Field(..., ge=0)
    end: float | None = Field(default=None, description="Open-ended when omitted")
    rate: float = Field(..., ge=0, le=100)


def _default_tiers() -> list[CommissionTier]:
    return [
        CommissionTier(start=0, end=500_000, rate=2.5),
        CommissionTier(start=500_000, end=1_000_000, rate=2.0),
        CommissionTier(start=1_000_000, end=None, rate=1.5),
    ]


class CommissionInput(BaseModel):
    property_price: float = Field(default=500_000, gt=0)
    commission_type: CommissionType = CommissionType.STANDARD
    standard_rate: float = Field(default=2.5, ge=0, le=100)
    custom_amount: float = Field(default=0, ge=0)
    tiers: list[CommissionTier] = Field(default_factory=_default_tiers)
    agent_percentage: float = Field(default=70, ge=0, le=100)
    brokerage_percentage: float = Field(default=30, ge=0, le=100)


class TierBreakdown(BaseModel):
    tier: CommissionTier
    amount: float


class CommissionResult(BaseModel):
    total_commission: float
    effective_rate: float
    agent_share: float
    brokerage_share: float
    breakdown: list[TierBreakdown] = Field(default_factory=list)


# ── Property Tax ────────────────────────────────────────────────────────────


class PropertyTaxInput(BaseModel):
    property_value: float = Field(default=500_000, gt=0)
    tax_rate: float = Field(default=1.5, ge=0, le=100)
    assessment_ratio: float = Field(default=100, ge=0, le=100)
    exemptions: float = Field(default=0, ge=0)


class PropertyTaxResult(BaseModel):
    assessed_value: float
    taxable_value: float
    annual_tax: float
    monthly_tax: float
    effective_rate: float


# ── Closing Costs ───────────────────────────────────────────────────────────


class ClosingCostsInput(BaseModel):
    purchase_price: float = Field(default=500_000, gt=0)
    down_payment: float = Field(default=100_000, ge=0)
    interest_rate: float = Field(default=5.5, ge=0, le=100)
    property_tax_rate: float = Field(default=1.2, ge=0, le=100)
    new_construction: bool = False


class FeeGroup(BaseModel):
    items: dict[str, float]
    total: float


class ClosingCostsResult(BaseModel):
    lender_fees: FeeGroup
    third_party_fees: FeeGroup
    government_fees: FeeGroup
    prepaids: FeeGroup
    total: float


# ── Rent vs Buy ─────────────────────────────────────────────────────────────


class RentVsBuyInput(BaseModel):
    home_price: float = Field(default=500_000, gt=0)
    down_payment: float = Field(default=100_000, ge=0)
    interest_rate: float = Field(default=5.5, ge=0, le=100)
    loan_term_years: int = Field(default=30, ge=1, le=50)
    annual_property_tax: float = Field(default=3_000, ge=0)
    annual_home_insurance: float = Field(default=1_200, ge=0)
    annual_maintenance: float = Field(default=2_400, ge=0)
    home_appreciation: float = Field(default=3, ge=-100, le=100)
    monthly_rent: float = Field(default=2_500, ge=0)
    annual_renters_insurance: float = Field(default=200, ge=0)
    rent_increase: float = Field(default=3, ge=-100, le=100)
    investment_return: float = Field(default=7, ge=-100, le=100)
    years: int = Field(default=5, ge=1, le=50)


class MonthlyBuying(BaseModel):
    mortgage: float
    property_tax: float
    insurance: float
    maintenance: float
    total: float


class MonthlyRenting(BaseModel):
    rent: float
    insurance: float
    total: float


class BuyingOutlook(BaseModel):
    total_cost: float
    equity: float
    home_value: float
    net_cost: float


class RentingOutlook(BaseModel):
    total_cost: float
    investment: float
    net_cost: float


class RentVsBuyResult(BaseModel):
    monthly_buying: MonthlyBuying
    monthly_renting: MonthlyRenting
    buying: BuyingOutlook
    renting: RentingOutlook
    better_option: str


# ── ROI ─────────────────────────────────────────────────────────────────────


class ROIInput(BaseModel):
    purchase_price: float = Field(default=500_000, gt=0)
    down_payment: float = Field(default=100_000, ge=0)
    closing_costs: float = Field(default=5_000, ge=0)
    rehab_costs: float = Field(default=0, ge=0)
    interest_rate: float = Field(default=5.5, ge=0, le=100)
    loan_term_years: int = Field(default=30, ge=1, le=50)
    monthly_rent: float = Field(default=3_000, ge=0)
    other_monthly_income: float = Field(default=0, ge=0)
    property_tax: float = Field(default=400, ge=0)
    insurance: float = Field(default=100, ge=0)
    utilities: float = Field(default=0, ge=0)
    maintenance: float = Field(default=200, ge=0)
    property_management: float = Field(default=0, ge=0, le=100, description="Percent of rent")
    vacancy_rate: float = Field(default=5, ge=0, le=100)
    annual_appreciation: float = Field(default=3, ge=-100, le=100)
    holding_period_years: int = Field(default=5, ge=1, le=50)


class ROIResult(BaseModel):
    monthly_income: float
    monthly_expenses: dict[str, float]
    monthly_cash_flow: float
    annual_cash_flow: float
    total_investment: float
    cash_on_cash: float
    cap_rate: float
    future_value: float
    total_roi: float
