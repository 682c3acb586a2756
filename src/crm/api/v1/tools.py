"""Calculator endpoints.

Stateless: each endpoint validates its input, runs the matching function
from ``src.crm.tools.calculators`` and returns the result. An empty body
uses the defaults of a typical $500k purchase.
"""

from __future__ import annotations

from fastapi import APIRouter

from src.crm.api.deps import require_auth
from src.crm.tools import calculators
from src.crm.tools.schemas import (
    AmortizationInput,
    AmortizationResult,
    CapRateInput,
    CapRateResult,
    ClosingCostsInput,
    ClosingCostsResult,
    CommissionInput,
    CommissionResult,
    MortgageInput,
    MortgageResult,
    PropertyTaxInput,
    PropertyTaxResult,
    RentVsBuyInput,
    RentVsBuyResult,
    ROIInput,
    ROIResult,
)

router = APIRouter(prefix="/api/v1/tools", tags=["tools"], dependencies=[require_auth])


@router.post("/mortgage", response_model=MortgageResult)
async def mortgage(body: MortgageInput | None = None):
    return calculators.mortgage(body or MortgageInput())


@router.post("/amortization", response_model=AmortizationResult)
async def amortization(body: AmortizationInput | None = None):
    return calculators.amortization(body or AmortizationInput())


@router.post("/cap-rate", response_model=CapRateResult)
async def cap_rate(body: CapRateInput | None = None):
    return calculators.cap_rate(body or CapRateInput())


@router.post("/commission", response_model=CommissionResult)
async def commission(body: CommissionInput | None = None):
    return calculators.commission(body or CommissionInput())


@router.post("/property-tax", response_model=PropertyTaxResult)
async def property_tax(body: PropertyTaxInput | None = None):
    return calculators.property_tax(body or PropertyTaxInput())


@router.post("/closing-costs", response_model=ClosingCostsResult)
async def closing_costs(body: ClosingCostsInput | None = None):
    return calculators.closing_costs(body or ClosingCostsInput())


@router.post("/rent-vs-buy", response_model=RentVsBuyResult)
async def rent_vs_buy(body: RentVsBuyInput | None = None):
    return calculators.rent_vs_buy(body or RentVsBuyInput())


@router.post("/roi", response_model=ROIResult)
async def roi(body: ROIInput | None = None):
    return calculators.roi(body or ROIInput())
