from typing import Optional

from src.api.routers.reference_data_config import (
    build_order_economics_options,
    build_repository,
)
from src.core.orders import OrderEconomicsService
from src.core.portfolio import PortfolioAnalysisService
from src.core.reference_data import ReferenceDataRepository

_REPOSITORY: Optional[ReferenceDataRepository] = None
_PORTFOLIO_SERVICE: Optional[PortfolioAnalysisService] = None
_ORDER_SERVICE: Optional[OrderEconomicsService] = None


def get_reference_data_repository() -> ReferenceDataRepository:
    global _REPOSITORY
    if _REPOSITORY is None:
        _REPOSITORY = build_repository()
    return _REPOSITORY


def get_portfolio_service() -> PortfolioAnalysisService:
    global _PORTFOLIO_SERVICE
    if _PORTFOLIO_SERVICE is None:
        _PORTFOLIO_SERVICE = PortfolioAnalysisService(repository=get_reference_data_repository())
    return _PORTFOLIO_SERVICE


def get_order_service() -> OrderEconomicsService:
    global _ORDER_SERVICE
    if _ORDER_SERVICE is None:
        _ORDER_SERVICE = OrderEconomicsService(
            repository=get_reference_data_repository(),
            options=build_order_economics_options(),
        )
    return _ORDER_SERVICE


def reset_services_for_tests(repository: Optional[ReferenceDataRepository] = None) -> None:
    global _REPOSITORY
    global _PORTFOLIO_SERVICE
    global _ORDER_SERVICE
    _REPOSITORY = repository
    _PORTFOLIO_SERVICE = None
    _ORDER_SERVICE = None
