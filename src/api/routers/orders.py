from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies import get_order_service
from src.api.routers.envelope_http import envelope_response
from src.core.models import (
    InstantRedemptionEligibility,
    InstantRedemptionRequest,
    OrderValidationRequest,
    OrderValidationResult,
    PreparedRedemption,
    RedemptionCalculation,
    RedemptionRequest,
    ServiceResponse,
    SIPCalculatorInput,
    SIPCalculatorResult,
    SwitchCalculation,
    SwitchRequest,
)
from src.core.orders import OrderEconomicsService

router = APIRouter(prefix="/orders", tags=["Order Economics"])

Service = Annotated[OrderEconomicsService, Depends(get_order_service)]


@router.post(
    "/redemptions/calculate",
    response_model=ServiceResponse[RedemptionCalculation],
    summary="Calculate Redemption Proceeds",
    description=(
        "Gross amount, exit load, tax withheld, final proceeds and settlement date for "
        "a Standard, Instant or Full redemption."
    ),
    responses={
        404: {"description": "Scheme not found."},
        422: {"description": "NAV unavailable or invalid units/amount."},
    },
)
def calculate_redemption(payload: RedemptionRequest, service: Service) -> JSONResponse:
    return envelope_response(service.calculate_redemption(request=payload))


@router.post(
    "/redemptions/instant-eligibility",
    response_model=ServiceResponse[InstantRedemptionEligibility],
    summary="Check Instant Redemption Eligibility",
)
def check_instant_redemption_eligibility(
    payload: InstantRedemptionRequest, service: Service
) -> JSONResponse:
    return envelope_response(service.check_instant_redemption_eligibility(request=payload))


@router.post(
    "/redemptions/prepare",
    response_model=ServiceResponse[PreparedRedemption],
    summary="Prepare Redemption Cart Item",
    description="Calculates the redemption and returns a cart line sized at the final proceeds.",
)
def prepare_redemption(payload: RedemptionRequest, service: Service) -> JSONResponse:
    return envelope_response(service.prepare_redemption(request=payload))


@router.post(
    "/switches/calculate",
    response_model=ServiceResponse[SwitchCalculation],
    summary="Calculate Switch Economics",
)
def calculate_switch(payload: SwitchRequest, service: Service) -> JSONResponse:
    return envelope_response(service.calculate_switch(request=payload))


@router.post(
    "/sip/calculate",
    response_model=ServiceResponse[SIPCalculatorResult],
    summary="Project SIP Growth",
)
def calculate_sip(payload: SIPCalculatorInput, service: Service) -> JSONResponse:
    return envelope_response(service.calculate_sip(request=payload))


@router.post(
    "/validate",
    response_model=ServiceResponse[OrderValidationResult],
    summary="Validate Order Basket",
    description=(
        "Blocking errors must be fixed before submission; warnings are advisory. "
        "A failed validation still returns the full result in `data`."
    ),
)
def validate_order(payload: OrderValidationRequest, service: Service) -> JSONResponse:
    return envelope_response(service.validate_order(request=payload))
