import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from src.core.common.envelope import fail, guarded, ok
from src.core.common.errors import DomainViolationError, ErrorCode, NotFoundError
from src.core.models import (
    InstantRedemptionEligibility,
    InstantRedemptionRequest,
    OrderEconomicsOptions,
    OrderValidationRequest,
    OrderValidationResult,
    PreparedRedemption,
    Product,
    RedemptionCalculation,
    RedemptionRequest,
    RedemptionType,
    ServiceResponse,
    SIPCalculatorInput,
    SIPCalculatorResult,
    SwitchCalculation,
    SwitchRequest,
)
from src.core.orders.compliance import compliance_summary
from src.core.orders.redemption import (
    build_redemption_item,
    calculate_redemption,
    check_instant_redemption_eligibility,
)
from src.core.orders.sip import calculate_sip
from src.core.orders.switch import calculate_switch
from src.core.orders.validation import validate_order
from src.core.reference_data import ReferenceDataRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderEconomicsService:
    """Order-side façade: redemption, switch and SIP economics plus basket validation."""

    def __init__(
        self,
        *,
        repository: ReferenceDataRepository,
        options: Optional[OrderEconomicsOptions] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._repository = repository
        self._options = options or OrderEconomicsOptions()
        self._clock = clock

    @property
    def options(self) -> OrderEconomicsOptions:
        return self._options

    def calculate_redemption(
        self, *, request: RedemptionRequest
    ) -> ServiceResponse[RedemptionCalculation]:
        return guarded(
            lambda: ok(
                self._redemption(request), message="Redemption calculated successfully"
            ),
            failure_message="Failed to calculate redemption",
        )

    def check_instant_redemption_eligibility(
        self, *, request: InstantRedemptionRequest
    ) -> ServiceResponse[InstantRedemptionEligibility]:
        def _run() -> ServiceResponse[InstantRedemptionEligibility]:
            product = self._repository.get_product(product_id=request.scheme_id)
            eligibility = check_instant_redemption_eligibility(
                request.amount, product, self._options
            )
            return ok(eligibility, message="Eligibility checked")

        return guarded(_run, failure_message="Failed to check eligibility")

    def prepare_redemption(
        self, *, request: RedemptionRequest
    ) -> ServiceResponse[PreparedRedemption]:
        def _run() -> ServiceResponse[PreparedRedemption]:
            product = self._require_product(request.scheme_id, "Scheme not found")
            if request.redemption_type == RedemptionType.INSTANT:
                requested = request.amount
                if requested is None and request.units and product.nav:
                    requested = request.units * product.nav
                eligibility = check_instant_redemption_eligibility(
                    requested or Decimal("0"), product, self._options
                )
                if not eligibility.eligible:
                    raise DomainViolationError(
                        eligibility.reason or "Not eligible for instant redemption"
                    )
            calculation = self._redemption(request, product=product)
            return ok(
                build_redemption_item(product, calculation),
                message="Redemption added to cart",
            )

        return guarded(_run, failure_message="Failed to prepare redemption")

    def calculate_switch(self, *, request: SwitchRequest) -> ServiceResponse[SwitchCalculation]:
        def _run() -> ServiceResponse[SwitchCalculation]:
            source = self._require_product(request.source_scheme_id, "Source scheme not found")
            target = self._require_product(request.target_scheme_id, "Target scheme not found")
            calculation = calculate_switch(
                source,
                target,
                amount=request.amount,
                units=request.units,
                purchase_nav=request.purchase_nav,
                holding_period_months=request.holding_period_months,
                options=self._options,
            )
            return ok(calculation, message="Switch calculation completed")

        return guarded(_run, failure_message="Failed to calculate switch")

    def calculate_sip(self, *, request: SIPCalculatorInput) -> ServiceResponse[SIPCalculatorResult]:
        return guarded(
            lambda: ok(
                calculate_sip(
                    request.amount,
                    request.frequency,
                    request.duration,
                    request.expected_return,
                    start_date=request.start_date or self._clock().date(),
                )
            ),
            failure_message="Failed to calculate SIP projection",
        )

    def validate_order(
        self, *, request: OrderValidationRequest
    ) -> ServiceResponse[OrderValidationResult]:
        def _run() -> ServiceResponse[OrderValidationResult]:
            product_ids = sorted({item.product_id for item in request.cart_items})
            products = {
                product.id: product
                for product in self._repository.list_products(product_ids=product_ids)
            }
            result = validate_order(
                request, products, as_of=self._clock().date(), options=self._options
            )
            summary = compliance_summary(result.advisor_notes)
            if result.is_valid:
                return ok(result, message=summary)

            only_format_issues = all(
                issue.category == ErrorCode.INVALID_INPUT for issue in result.errors
            )
            logger.info(
                "Order validation failed errors=%s warnings=%s",
                len(result.errors),
                len(result.warnings),
            )
            return fail(
                "Order validation failed",
                code=ErrorCode.INVALID_INPUT if only_format_issues else ErrorCode.DOMAIN_VIOLATION,
                errors=[issue.message for issue in result.errors],
                data=result,
            )

        return guarded(_run, failure_message="Failed to validate order")

    def _require_product(self, product_id: int, message: str) -> Product:
        product = self._repository.get_product(product_id=product_id)
        if product is None:
            raise NotFoundError(message)
        return product

    def _redemption(
        self, request: RedemptionRequest, *, product: Optional[Product] = None
    ) -> RedemptionCalculation:
        product = product or self._require_product(request.scheme_id, "Scheme not found")
        return calculate_redemption(
            product,
            units=request.units,
            amount=request.amount,
            redemption_type=request.redemption_type,
            options=self._options,
            now=self._clock(),
        )
