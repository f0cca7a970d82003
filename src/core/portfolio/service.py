import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from src.core.common.envelope import guarded, ok
from src.core.common.errors import NotFoundError
from src.core.models import (
    AllocationGap,
    CartItem,
    ClientProfile,
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
from src.core.portfolio.advice import build_portfolio_advice
from src.core.portfolio.aggregation import aggregate_portfolio
from src.core.portfolio.gaps import analyze_gaps, target_for_risk_profile
from src.core.portfolio.impact import calculate_impact
from src.core.portfolio.rebalancing import build_rebalancing_suggestions
from src.core.portfolio.scenario import run_scenario_analysis
from src.core.reference_data import ReferenceDataRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PortfolioAnalysisService:
    """Read-side portfolio façade; every method returns a result envelope."""

    def __init__(
        self,
        *,
        repository: ReferenceDataRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._repository = repository
        self._clock = clock

    def get_portfolio(
        self, *, client_id: int, include_holdings: bool = True
    ) -> ServiceResponse[PortfolioData]:
        return guarded(
            lambda: ok(self._load_portfolio(client_id, include_holdings=include_holdings)),
            failure_message="Failed to fetch portfolio",
        )

    def get_holdings(
        self, *, client_id: int, scheme_id: Optional[int] = None
    ) -> ServiceResponse[List[Holding]]:
        def _run() -> ServiceResponse[List[Holding]]:
            holdings = self._load_portfolio(client_id).holdings
            if scheme_id is not None:
                holdings = [h for h in holdings if h.product_id == scheme_id]
            return ok(holdings)

        return guarded(_run, failure_message="Failed to fetch holdings")

    def get_impact_preview(
        self, *, client_id: int, items: Sequence[CartItem]
    ) -> ServiceResponse[PortfolioImpact]:
        def _run() -> ServiceResponse[PortfolioImpact]:
            portfolio = self._load_portfolio(client_id, include_holdings=False)
            resolved = self._with_categories(items)
            return ok(calculate_impact(portfolio.allocation, portfolio.total_value, resolved))

        return guarded(_run, failure_message="Failed to calculate portfolio impact")

    def get_allocation_gaps(
        self, *, client_id: int, target: Optional[TargetAllocation] = None
    ) -> ServiceResponse[List[AllocationGap]]:
        def _run() -> ServiceResponse[List[AllocationGap]]:
            client = self._require_client(client_id)
            portfolio = self._aggregate(client, include_holdings=False)
            effective_target = target or target_for_risk_profile(client.risk_profile)
            return ok(analyze_gaps(portfolio.allocation, effective_target))

        return guarded(_run, failure_message="Failed to calculate allocation gaps")

    def get_rebalancing_suggestions(
        self, *, client_id: int, target: Optional[TargetAllocation] = None
    ) -> ServiceResponse[List[RebalancingSuggestion]]:
        return guarded(
            lambda: ok(self._suggestions(client_id, target)[0]),
            failure_message="Failed to generate rebalancing suggestions",
        )

    def generate_portfolio_advice(
        self, *, client_id: int
    ) -> ServiceResponse[List[PortfolioAdviceItem]]:
        def _run() -> ServiceResponse[List[PortfolioAdviceItem]]:
            suggestions, portfolio = self._suggestions(client_id, None)
            return ok(
                build_portfolio_advice(
                    suggestions, portfolio.holdings, generated_at=self._clock()
                )
            )

        return guarded(_run, failure_message="Failed to generate portfolio advice")

    def run_scenario(
        self, *, request: PortfolioScenarioRequest
    ) -> ServiceResponse[PortfolioScenarioResponse]:
        return guarded(
            lambda: ok(run_scenario_analysis(request.prompt, request.base_allocation)),
            failure_message="Failed to run scenario analysis",
        )

    def _require_client(self, client_id: int) -> ClientProfile:
        client = self._repository.get_client(client_id=client_id)
        if client is None:
            raise NotFoundError("Client not found")
        return client

    def _aggregate(self, client: ClientProfile, *, include_holdings: bool = True) -> PortfolioData:
        transactions = self._repository.list_transactions(client_id=client.id)
        logger.debug(
            "Aggregating portfolio client_id=%s transactions=%s", client.id, len(transactions)
        )
        return aggregate_portfolio(
            client,
            transactions,
            include_holdings=include_holdings,
            as_of=self._clock(),
        )

    def _load_portfolio(self, client_id: int, *, include_holdings: bool = True) -> PortfolioData:
        return self._aggregate(self._require_client(client_id), include_holdings=include_holdings)

    def _suggestions(
        self, client_id: int, target: Optional[TargetAllocation]
    ) -> tuple[List[RebalancingSuggestion], PortfolioData]:
        client = self._require_client(client_id)
        portfolio = self._aggregate(client)
        gaps = analyze_gaps(
            portfolio.allocation, target or target_for_risk_profile(client.risk_profile)
        )
        suggestions = build_rebalancing_suggestions(
            gaps, portfolio.holdings, portfolio.total_value
        )
        return suggestions, portfolio

    def _with_categories(self, items: Sequence[CartItem]) -> List[CartItem]:
        missing = sorted({item.product_id for item in items if not item.category})
        if not missing:
            return list(items)
        catalog = {
            product.id: product.category
            for product in self._repository.list_products(product_ids=missing)
        }
        return [
            item
            if item.category
            else item.model_copy(update={"category": catalog.get(item.product_id)})
            for item in items
        ]
