"""
FILE: src/core/models.py
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, Field, field_validator

from src.core.common.errors import ErrorCode

AllocationBucket = Literal["equity", "debt", "hybrid", "others"]
ALLOCATION_BUCKETS: tuple[AllocationBucket, ...] = ("equity", "debt", "hybrid", "others")

Priority = Literal["High", "Medium", "Low"]
PRIORITY_RANK: Dict[str, int] = {"High": 3, "Medium": 2, "Low": 1}


class RedemptionType(str, Enum):
    STANDARD = "Standard"
    INSTANT = "Instant"
    FULL = "Full"


class SIPFrequency(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"


class TransactionMode(str, Enum):
    PHYSICAL = "Physical"
    EMAIL = "Email"
    TELEPHONE = "Telephone"


# Reference data supplied by external collaborators.


class Product(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 101,
                "scheme_name": "Bluechip Equity Fund - Growth",
                "category": "large_cap_equity",
                "nav": "52.40",
                "min_investment": "5000",
                "max_investment": "1000000",
            }
        }
    }

    id: int = Field(description="Product (scheme) identifier.", examples=[101])
    scheme_name: str = Field(description="Scheme display name.")
    category: Optional[str] = Field(
        default=None,
        description="Free-text product category mapped to an allocation bucket.",
        examples=["large_cap_equity"],
    )
    nav: Decimal = Field(default=Decimal("0"), description="Current NAV per unit.")
    min_investment: Decimal = Field(
        default=Decimal("0"), description="Minimum purchase amount for the scheme."
    )
    max_investment: Optional[Decimal] = Field(
        default=None, description="Optional maximum purchase amount for the scheme."
    )
    risk_level: str = Field(default="Moderate", description="Scheme risk level label.")
    is_whitelisted: bool = Field(
        default=True, description="Whether the scheme is on the approved distribution list."
    )


class ClientProfile(BaseModel):
    id: int = Field(description="Client identifier.", examples=[42])
    name: Optional[str] = Field(default=None, description="Client display name.")
    risk_profile: Optional[str] = Field(
        default=None,
        description="Risk-profile tier used to derive a default target allocation.",
        examples=["Moderately Aggressive"],
    )
    current_value: Optional[Decimal] = Field(
        default=None,
        description="Stored current portfolio value; preferred over the replayed total.",
    )


class Transaction(BaseModel):
    id: Optional[int] = Field(default=None, description="Transaction identifier.")
    client_id: int = Field(description="Owning client identifier.")
    transaction_type: str = Field(
        description="Free-text type; buy/purchase and sell/redemption are replayed.",
        examples=["Purchase"],
    )
    amount: Decimal = Field(description="Transaction amount; sign is ignored.")
    product_id: Optional[int] = Field(default=None, description="Traded product identifier.")
    product_name: Optional[str] = Field(default=None, description="Traded product name.")
    product_category: Optional[str] = Field(
        default=None, description="Category of the traded product."
    )
    nav: Optional[Decimal] = Field(default=None, description="Execution NAV.")
    quantity: Optional[Decimal] = Field(default=None, description="Executed units.")
    transaction_date: Optional[datetime] = Field(default=None, description="Trade timestamp.")


# Portfolio allocation.


class PortfolioAllocation(BaseModel):
    equity: Decimal = Field(default=Decimal("0"), description="Equity share in percent.")
    debt: Decimal = Field(default=Decimal("0"), description="Debt share in percent.")
    hybrid: Decimal = Field(default=Decimal("0"), description="Hybrid share in percent.")
    others: Decimal = Field(default=Decimal("0"), description="Other assets share in percent.")

    def get(self, bucket: str) -> Decimal:
        return getattr(self, bucket)

    def total(self) -> Decimal:
        return sum((self.get(bucket) for bucket in ALLOCATION_BUCKETS), Decimal("0"))


class TargetAllocation(PortfolioAllocation):
    """Desired bucket mix; expected to total 100 but not enforced."""


class Holding(BaseModel):
    id: int = Field(description="Holding identifier (same as product id).")
    product_id: int = Field(description="Held product identifier.")
    scheme_name: str = Field(description="Held scheme name.")
    category: AllocationBucket = Field(description="Allocation bucket of the holding.")
    units: Decimal = Field(description="Units currently held.")
    nav: Decimal = Field(description="NAV recorded on the first purchase.")
    invested_amount: Decimal = Field(description="Net invested amount.")
    current_value: Decimal = Field(
        description="Current value; modelled as invested amount, not NAV-marked."
    )
    gain_loss: Decimal = Field(default=Decimal("0"), description="Unrealised gain/loss.")
    gain_loss_percent: Decimal = Field(default=Decimal("0"), description="Gain/loss percent.")
    purchase_date: Optional[datetime] = Field(default=None, description="First purchase date.")
    last_transaction_date: Optional[datetime] = Field(
        default=None, description="Most recent transaction date."
    )


class PortfolioData(BaseModel):
    total_value: Decimal = Field(description="Portfolio value.")
    total_invested: Decimal = Field(description="Net invested amount.")
    total_gain_loss: Decimal = Field(description="total_value - total_invested.")
    total_gain_loss_percent: Decimal = Field(description="Gain/loss relative to invested.")
    allocation: PortfolioAllocation = Field(description="Bucket allocation percentages.")
    holdings: List[Holding] = Field(default_factory=list, description="Holdings with units > 0.")
    last_updated: datetime = Field(description="Computation timestamp.")


# Order basket.


class _CartItemBase(BaseModel):
    id: str = Field(description="Cart line identifier.", examples=["cart-1"])
    product_id: int = Field(description="Product identifier.", examples=[101])
    scheme_name: str = Field(default="", description="Scheme display name.")
    amount: Decimal = Field(description="Order amount.", examples=["10000"])
    units: Optional[Decimal] = Field(default=None, description="Optional unit count.")
    nav: Optional[Decimal] = Field(default=None, description="Optional indicative NAV.")
    category: Optional[str] = Field(
        default=None,
        description="Product category; resolved from the catalog when omitted.",
    )


class PurchaseItem(_CartItemBase):
    transaction_type: Literal["Purchase"] = Field(
        default="Purchase", description="Cart item discriminator."
    )
    order_type: Optional[Literal["Initial Purchase", "Additional Purchase"]] = Field(
        default=None, description="Initial or additional purchase."
    )


class RedemptionItem(_CartItemBase):
    transaction_type: Literal["Redemption"] = Field(
        default="Redemption", description="Cart item discriminator."
    )


class SwitchItem(_CartItemBase):
    transaction_type: Literal["Switch"] = Field(
        default="Switch", description="Cart item discriminator."
    )
    source_scheme_id: int = Field(description="Scheme switched out of.")
    source_scheme_name: Optional[str] = Field(default=None, description="Source scheme name.")


class FullRedemptionItem(_CartItemBase):
    transaction_type: Literal["Full Redemption"] = Field(
        default="Full Redemption", description="Cart item discriminator."
    )
    close_ac: bool = Field(default=False, description="Close the folio after redemption.")


class FullSwitchItem(_CartItemBase):
    transaction_type: Literal["Full Switch"] = Field(
        default="Full Switch", description="Cart item discriminator."
    )
    source_scheme_id: int = Field(description="Scheme switched out of.")
    source_scheme_name: Optional[str] = Field(default=None, description="Source scheme name.")
    close_ac: bool = Field(default=False, description="Close the source folio.")


CartItem = Annotated[
    Union[PurchaseItem, RedemptionItem, SwitchItem, FullRedemptionItem, FullSwitchItem],
    Field(discriminator="transaction_type"),
]


# Impact, gaps and advice.


class AllocationChange(BaseModel):
    category: AllocationBucket = Field(description="Allocation bucket.")
    change: Decimal = Field(description="after - before, in percentage points.")
    change_percent: Decimal = Field(description="Relative change against before.")
    direction: Literal["increase", "decrease"] = Field(description="Sign of the change.")


class PortfolioImpact(BaseModel):
    before_allocation: PortfolioAllocation
    after_allocation: PortfolioAllocation
    changes: List[AllocationChange]
    total_value_change: Decimal = Field(description="Net order amount.")


class AllocationGap(BaseModel):
    category: AllocationBucket = Field(description="Allocation bucket.")
    current: Decimal = Field(description="Current allocation percent.")
    target: Decimal = Field(description="Target allocation percent.")
    gap: Decimal = Field(description="target - current.")
    priority: Priority = Field(description="Deviation priority band.")
    recommendation: str = Field(description="Human-readable recommendation.")


class RebalancingSuggestion(BaseModel):
    id: str = Field(description="Deterministic suggestion identifier.")
    action: Literal["Buy", "Sell", "Switch"]
    from_scheme: Optional[str] = None
    from_scheme_id: Optional[int] = None
    to_scheme: str
    to_scheme_id: Optional[int] = None
    amount: Decimal
    reason: str
    priority: Priority
    expected_impact: str


class PortfolioAdviceAction(BaseModel):
    label: str
    description: str
    amount: Optional[Decimal] = None
    impact: Optional[str] = None


class PortfolioAdviceItem(BaseModel):
    id: str
    category: Literal["rebalance", "tax_loss"]
    title: str
    summary: str
    rationale: str
    generated_at: datetime
    actions: List[PortfolioAdviceAction]
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ScenarioAdjustments(BaseModel):
    allocation: Dict[str, Decimal]
    expected_return_delta: Decimal
    risk_shift: Literal["higher", "lower", "neutral"]
    confidence: Decimal


class PortfolioScenarioRequest(BaseModel):
    prompt: str = Field(
        description="Free-text what-if instruction.",
        examples=["Shift 10% from equity to debt"],
    )
    base_allocation: Dict[str, Decimal] = Field(
        description="Starting allocation keyed by bucket label.",
        examples=[{"equity": "60", "debt": "30", "hybrid": "10"}],
    )


class PortfolioScenarioResponse(BaseModel):
    prompt: str
    summary: str
    adjustments: ScenarioAdjustments
    insights: List[str]
    detected_intents: List[str]


# Order economics.


class OrderEconomicsOptions(BaseModel):
    exit_load_rate: Decimal = Field(
        default=Decimal("0.01"), description="Exit load charged on Standard redemptions."
    )
    tds_rate: Decimal = Field(
        default=Decimal("0.10"), description="Tax withheld on the net redemption amount."
    )
    instant_redemption_min_amount: Decimal = Field(
        default=Decimal("1000"), description="Exclusive lower bound for instant redemption."
    )
    instant_redemption_max_amount: Decimal = Field(
        default=Decimal("50000"), description="Inclusive upper bound for instant redemption."
    )
    instant_settlement_hours: int = Field(default=1, ge=0)
    standard_settlement_days: int = Field(default=4, ge=0)
    switch_exit_load_percent: Decimal = Field(default=Decimal("1.0"))
    compliance_advisors_enabled: bool = Field(default=True)


class RedemptionRequest(BaseModel):
    scheme_id: int = Field(description="Scheme to redeem.", examples=[101])
    units: Optional[Decimal] = Field(default=None, description="Units to redeem.")
    amount: Optional[Decimal] = Field(
        default=None, description="Amount to redeem when units are not given."
    )
    redemption_type: RedemptionType = Field(default=RedemptionType.STANDARD)


class RedemptionCalculation(BaseModel):
    scheme_name: str
    units: Decimal
    nav: Decimal
    gross_amount: Decimal
    exit_load: Optional[Decimal] = Field(default=None, description="Exit load in percent.")
    exit_load_amount: Optional[Decimal] = None
    net_amount: Decimal
    tds: Optional[Decimal] = None
    final_amount: Decimal
    settlement_date: datetime


class InstantRedemptionRequest(BaseModel):
    scheme_id: int
    amount: Decimal


class InstantRedemptionEligibility(BaseModel):
    eligible: bool
    max_amount: Decimal
    available_amount: Decimal
    reason: Optional[str] = None


class PreparedRedemption(BaseModel):
    cart_item: RedemptionItem
    calculation: RedemptionCalculation


class SwitchRequest(BaseModel):
    source_scheme_id: int
    target_scheme_id: int
    amount: Optional[Decimal] = None
    units: Optional[Decimal] = None
    purchase_nav: Optional[Decimal] = Field(
        default=None, description="Average purchase NAV of the source units."
    )
    holding_period_months: Optional[int] = Field(default=None, ge=0)


class SwitchTaxImplications(BaseModel):
    short_term_gain: Decimal
    long_term_gain: Decimal
    tax_amount: Decimal


class SwitchCalculation(BaseModel):
    source_scheme: str
    target_scheme: str
    source_units: Decimal
    source_nav: Decimal
    target_nav: Decimal
    switch_amount: Decimal
    target_units: Decimal
    exit_load: Optional[Decimal] = None
    exit_load_amount: Optional[Decimal] = None
    net_amount: Decimal
    tax_implications: Optional[SwitchTaxImplications] = None


class SIPCalculatorInput(BaseModel):
    amount: Decimal = Field(description="Per-installment amount.", examples=["5000"])
    frequency: SIPFrequency = Field(default=SIPFrequency.MONTHLY)
    duration: int = Field(description="Duration in months.", examples=[12])
    expected_return: Decimal = Field(description="Expected annual return in percent.")
    start_date: Optional[date] = None


class SIPMonthlyBreakdown(BaseModel):
    month: int
    installment_date: date
    invested: Decimal
    cumulative_invested: Decimal
    value: Decimal
    returns: Decimal
    return_percentage: Decimal


class SIPSummary(BaseModel):
    total_installments: int


class SIPCalculatorResult(BaseModel):
    total_invested: Decimal
    expected_value: Decimal
    estimated_returns: Decimal
    return_percentage: Decimal
    monthly_breakdown: List[SIPMonthlyBreakdown]
    summary: SIPSummary


# Order validation.


class Nominee(BaseModel):
    id: str
    name: str
    relationship: str
    date_of_birth: str = Field(description="ISO date (YYYY-MM-DD).", examples=["2012-04-01"])
    pan: str = ""
    percentage: Decimal
    guardian_name: Optional[str] = None
    guardian_pan: Optional[str] = None
    guardian_relationship: Optional[str] = None


class OrderValidationRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "cart_items": [
                    {
                        "id": "cart-1",
                        "product_id": 101,
                        "transaction_type": "Purchase",
                        "amount": "10000",
                    }
                ],
                "nominees": [
                    {
                        "id": "n1",
                        "name": "Asha",
                        "relationship": "Spouse",
                        "date_of_birth": "1985-02-11",
                        "pan": "ABCDE1234F",
                        "percentage": "100",
                    }
                ],
                "opt_out_of_nomination": False,
            }
        }
    }

    cart_items: List[CartItem] = Field(default_factory=list)
    nominees: List[Nominee] = Field(default_factory=list)
    opt_out_of_nomination: bool = False
    investor_pan: Optional[str] = None
    euin: Optional[str] = None
    transaction_mode: Optional[TransactionMode] = None
    market_values: Dict[int, Decimal] = Field(
        default_factory=dict,
        description="Caller-supplied market value per product for partial redemptions/switches.",
    )
    acknowledged_deviations: List[str] = Field(
        default_factory=list,
        description="Acknowledged deviation keys, e.g. 'amount-101'.",
    )
    current_allocation: Optional[PortfolioAllocation] = Field(
        default=None, description="Optional portfolio allocation for compliance advisors."
    )

    @field_validator("investor_pan", "euin")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class ValidationIssue(BaseModel):
    code: str = Field(description="Stable issue code.", examples=["NOMINEE_TOTAL_NOT_100"])
    severity: Literal["HARD", "SOFT"]
    category: ErrorCode = Field(description="Error taxonomy bucket for the issue.")
    message: str
    field: Optional[str] = None
    product_id: Optional[int] = None


class OrderValidationResult(BaseModel):
    is_valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)
    advisor_notes: List[str] = Field(default_factory=list)


# Result envelope.

DataT = TypeVar("DataT")


class ServiceResponse(BaseModel, Generic[DataT]):
    success: bool
    data: Optional[DataT] = None
    message: Optional[str] = None
    errors: Optional[List[str]] = None
    error_code: Optional[ErrorCode] = None
