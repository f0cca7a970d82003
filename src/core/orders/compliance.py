"""
FILE: src/core/orders/compliance.py
Distribution-policy advisors layered on top of order validation.
"""

from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel

from src.core.common.errors import ErrorCode
from src.core.common.formatting import format_inr
from src.core.models import (
    OrderValidationRequest,
    OrderValidationResult,
    Product,
    TransactionMode,
    ValidationIssue,
)
from src.core.portfolio.classification import classify_category

HIGH_RISK_AMOUNT_THRESHOLD = Decimal("500000")
BUCKET_OVERWEIGHT_THRESHOLD = Decimal("65")


class AdvisorFinding(BaseModel):
    rule_id: str
    description: str
    outcome: Literal["error", "warning", "note"]
    message: str
    note: Optional[str] = None


class ComplianceAdvisors:
    """
    Evaluates distribution policy rules against an order basket.
    Errors block submission, warnings are advisory, notes only annotate.
    """

    @staticmethod
    def evaluate(
        request: OrderValidationRequest, products: Dict[int, Product]
    ) -> List[AdvisorFinding]:
        findings: List[AdvisorFinding] = []

        # 1. WHITELIST (Error)
        flagged = []
        for item in request.cart_items:
            product = products.get(item.product_id)
            if product is not None and not product.is_whitelisted:
                flagged.append(product.scheme_name)
        if flagged:
            findings.append(
                AdvisorFinding(
                    rule_id="whitelist-enforcement",
                    description="Non-whitelisted schemes must be reviewed manually per AMC policy",
                    outcome="error",
                    message=(
                        f"Policy: {', '.join(flagged)} require compliance approval because "
                        "they are not on the approved list."
                    ),
                    note="Non-whitelisted schemes halted straight-through processing.",
                )
            )

        # 2. HIGH_RISK_ACKNOWLEDGEMENT (Warning)
        breaches = []
        for item in request.cart_items:
            product = products.get(item.product_id)
            if product is None or product.risk_level.strip().lower() != "high":
                continue
            if item.amount > HIGH_RISK_AMOUNT_THRESHOLD:
                breaches.append(f"{product.scheme_name} ({format_inr(item.amount)})")
        if breaches:
            findings.append(
                AdvisorFinding(
                    rule_id="high-risk-acknowledgement",
                    description=(
                        "High risk transactions above "
                        f"{format_inr(HIGH_RISK_AMOUNT_THRESHOLD)} require an explicit "
                        "acknowledgement"
                    ),
                    outcome="warning",
                    message=(
                        f"Policy: Capture a risk acknowledgement for {', '.join(breaches)} "
                        "before execution."
                    ),
                    note=(
                        "Large high-risk allocations were identified; document client "
                        "consent before proceeding."
                    ),
                )
            )

        # 3. BUCKET_BALANCE (Warning)
        if request.current_allocation is not None:
            overweight: List[str] = []
            for item in request.cart_items:
                product = products.get(item.product_id)
                if product is None:
                    continue
                bucket = classify_category(product.category)
                share = request.current_allocation.get(bucket)
                if share >= BUCKET_OVERWEIGHT_THRESHOLD and bucket not in overweight:
                    overweight.append(bucket)
            if overweight:
                findings.append(
                    AdvisorFinding(
                        rule_id="category-balance",
                        description=(
                            "Prevent category allocation drift beyond "
                            f"{BUCKET_OVERWEIGHT_THRESHOLD}% of the portfolio"
                        ),
                        outcome="warning",
                        message=(
                            f"Policy: {', '.join(overweight)} allocation already exceeds "
                            f"{BUCKET_OVERWEIGHT_THRESHOLD}% of the portfolio."
                        ),
                        note=(
                            "Consider rebalancing or selecting alternate categories to stay "
                            "within mandate."
                        ),
                    )
                )

        # 4. TELEPHONE_EUIN (Error / Note)
        if request.transaction_mode == TransactionMode.TELEPHONE:
            if request.euin:
                findings.append(
                    AdvisorFinding(
                        rule_id="telephonic-euin",
                        description="Telephone orders require EUIN capture",
                        outcome="note",
                        message="EUIN captured for the telephonic instruction.",
                        note="Telephone instruction meets EUIN policy.",
                    )
                )
            else:
                findings.append(
                    AdvisorFinding(
                        rule_id="telephonic-euin",
                        description="Telephone orders require EUIN capture",
                        outcome="error",
                        message=(
                            "Policy: EUIN is mandatory for telephone instructions. "
                            "Please capture the EUIN before submission."
                        ),
                        note="Order blocked until EUIN is recorded for the call-in request.",
                    )
                )

        return findings


def apply_compliance_findings(
    result: OrderValidationResult, findings: List[AdvisorFinding]
) -> OrderValidationResult:
    errors = list(result.errors)
    warnings = list(result.warnings)
    notes = list(result.advisor_notes)

    for finding in findings:
        if finding.outcome == "error":
            errors.append(
                ValidationIssue(
                    code=f"POLICY_{finding.rule_id.upper().replace('-', '_')}",
                    severity="HARD",
                    category=ErrorCode.DOMAIN_VIOLATION,
                    message=finding.message,
                )
            )
        elif finding.outcome == "warning":
            warnings.append(
                ValidationIssue(
                    code=f"POLICY_{finding.rule_id.upper().replace('-', '_')}",
                    severity="SOFT",
                    category=ErrorCode.DOMAIN_VIOLATION,
                    message=finding.message,
                )
            )
        if finding.note:
            notes.append(f"{finding.description}: {finding.note}")

    return OrderValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        advisor_notes=notes,
    )


def compliance_summary(advisor_notes: List[str]) -> str:
    if not advisor_notes:
        return "Compliance advisors found no additional considerations."
    if len(advisor_notes) == 1:
        return advisor_notes[0]
    return "\n".join(f"{index}. {note}" for index, note in enumerate(advisor_notes, start=1))
