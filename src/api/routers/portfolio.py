from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import get_portfolio_service
from src.api.request_models import ImpactPreviewRequest
from src.api.routers.envelope_http import envelope_response
from src.core.models import (
    AllocationGap,
    Holding,
    PortfolioAdviceItem,
    PortfolioData,
    PortfolioImpact,
    PortfolioScenarioRequest,
    PortfolioScenarioResponse,
    RebalancingSuggestion,
    ServiceResponse,
    TargetAllocation,
)
from src.core.portfolio import PortfolioAnalysisService

router = APIRouter(tags=["Portfolio Analysis"])

ClientId = Annotated[int, Path(description="Client identifier.", examples=[42])]
Service = Annotated[PortfolioAnalysisService, Depends(get_portfolio_service)]

_ENVELOPE_ERRORS = {
    404: {"description": "Client not found."},
    503: {"description": "Reference data could not be read."},
}


@router.get(
    "/clients/{client_id}/portfolio",
    response_model=ServiceResponse[PortfolioData],
    summary="Get Client Portfolio",
    description=(
        "Replays the client's transaction history into totals, bucket allocation and "
        "(optionally) per-scheme holdings."
    ),
    responses=_ENVELOPE_ERRORS,
)
def get_portfolio(
    client_id: ClientId,
    service: Service,
    include_holdings: Annotated[
        bool, Query(description="Include per-scheme holdings in the payload.")
    ] = True,
) -> JSONResponse:
    return envelope_response(
        service.get_portfolio(client_id=client_id, include_holdings=include_holdings)
    )


@router.get(
    "/clients/{client_id}/holdings",
    response_model=ServiceResponse[List[Holding]],
    summary="Get Client Holdings",
    responses=_ENVELOPE_ERRORS,
)
def get_holdings(
    client_id: ClientId,
    service: Service,
    scheme_id: Annotated[
        Optional[int], Query(description="Restrict the result to one scheme.", examples=[101])
    ] = None,
) -> JSONResponse:
    return envelope_response(service.get_holdings(client_id=client_id, scheme_id=scheme_id))


@router.post(
    "/clients/{client_id}/portfolio/impact-preview",
    response_model=ServiceResponse[PortfolioImpact],
    summary="Preview Order Basket Impact",
    description="Before/after bucket allocation for a pending order basket.",
    responses=_ENVELOPE_ERRORS,
)
def preview_impact(
    client_id: ClientId,
    payload: ImpactPreviewRequest,
    service: Service,
) -> JSONResponse:
    return envelope_response(
        service.get_impact_preview(client_id=client_id, items=payload.cart_items)
    )


@router.get(
    "/clients/{client_id}/allocation-gaps",
    response_model=ServiceResponse[List[AllocationGap]],
    summary="Get Allocation Gaps",
    description="Gaps against the default target for the client's risk profile.",
    responses=_ENVELOPE_ERRORS,
)
def get_allocation_gaps(client_id: ClientId, service: Service) -> JSONResponse:
    return envelope_response(service.get_allocation_gaps(client_id=client_id))


@router.post(
    "/clients/{client_id}/allocation-gaps",
    response_model=ServiceResponse[List[AllocationGap]],
    summary="Get Allocation Gaps Against an Explicit Target",
    responses=_ENVELOPE_ERRORS,
)
def get_allocation_gaps_for_target(
    client_id: ClientId,
    target: TargetAllocation,
    service: Service,
) -> JSONResponse:
    return envelope_response(service.get_allocation_gaps(client_id=client_id, target=target))


@router.get(
    "/clients/{client_id}/rebalancing-suggestions",
    response_model=ServiceResponse[List[RebalancingSuggestion]],
    summary="Get Rebalancing Suggestions",
    responses=_ENVELOPE_ERRORS,
)
def get_rebalancing_suggestions(client_id: ClientId, service: Service) -> JSONResponse:
    return envelope_response(service.get_rebalancing_suggestions(client_id=client_id))


@router.get(
    "/clients/{client_id}/advice",
    response_model=ServiceResponse[List[PortfolioAdviceItem]],
    summary="Get Portfolio Advice",
    description="Rebalancing advice items followed by one tax-loss harvesting item.",
    responses=_ENVELOPE_ERRORS,
)
def get_portfolio_advice(client_id: ClientId, service: Service) -> JSONResponse:
    return envelope_response(service.generate_portfolio_advice(client_id=client_id))


@router.post(
    "/portfolio/scenario-analysis",
    response_model=ServiceResponse[PortfolioScenarioResponse],
    summary="Run What-If Allocation Scenario",
)
def run_scenario_analysis(payload: PortfolioScenarioRequest, service: Service) -> JSONResponse:
    return envelope_response(service.run_scenario(request=payload))
