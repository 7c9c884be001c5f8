"""
Approval workflow around the rules engine.

Functions take an open Session and only flush; the caller commits or rolls back
so a calculation and its approval request are written in one transaction.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.logging import get_logger
from app.db.models import ApprovalRequest, AuditEvent, PricingCalculation
from app.services.approval_rules import PricingInput, ValidationResult, evaluate
from app.services.normalization import extract_pricing_input, pricing_input_to_dict
from app.services import notifications

logger = get_logger(__name__)

STATUS_NONE_REQUIRED = "none_required"
STATUS_REQUIRED_NOT_SENT = "required_not_sent"
STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

ACTIONS = {"approve": STATUS_APPROVED, "reject": STATUS_REJECTED}
MANUAL_REASON = "Manual approval requested"


class ApprovalWorkflowError(Exception):
    pass


class CalculationNotFound(ApprovalWorkflowError):
    pass


class ApprovalRequestNotFound(ApprovalWorkflowError):
    pass


class InvalidApprovalAction(ApprovalWorkflowError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def input_hash(pricing: PricingInput) -> str:
    payload = json.dumps(pricing_input_to_dict(pricing), sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _admins(admin_user_ids: Optional[Iterable[int]]) -> List[int]:
    if admin_user_ids is None:
        return list(get_settings().ADMIN_USER_IDS)
    return list(admin_user_ids)


def _audit(session: Session, calculation_id: int, event_type: str, payload: Dict[str, Any]) -> None:
    session.add(AuditEvent(
        calculation_id=calculation_id,
        event_type=event_type,
        payload=payload,
        created_at=_now(),
    ))


def _open_request(session: Session, calc: PricingCalculation, user_id: int, reasons: List[str],
                  admin_user_ids: Optional[Iterable[int]]) -> ApprovalRequest:
    request = ApprovalRequest(
        calculation_id=calc.id,
        created_by_user_id=user_id,
        star_category=calc.stars,
        reasons=reasons,
        calculation_snapshot={"pricing_input": calc.pricing_input, "record": calc.record},
        input_hash=calc.input_hash,
        created_at=_now(),
    )
    session.add(request)
    session.flush()

    calc.approval_status = STATUS_PENDING
    calc.updated_at = _now()
    _audit(session, calc.id, "APPROVAL_REQUESTED", {"approval_request_id": request.id, "reasons": reasons})
    notifications.notify_admins_pending(session, request, _admins(admin_user_ids))
    return request


def create_calculation(session: Session, user_id: int, record: Mapping[str, Any],
                       admin_user_ids: Optional[Iterable[int]] = None,
                       ) -> Tuple[PricingCalculation, ValidationResult, Optional[ApprovalRequest]]:
    """
    Evaluate and store a calculation. Violations open a pending approval request
    and notify admins; otherwise the calculation is final right away.
    """
    pricing = extract_pricing_input(record)
    result = evaluate(pricing)

    calc = PricingCalculation(
        user_id=user_id,
        stars=pricing.stars,
        approval_status=STATUS_NONE_REQUIRED,
        input_hash=input_hash(pricing),
        pricing_input=pricing_input_to_dict(pricing),
        record=dict(record),
        created_at=_now(),
    )
    session.add(calc)
    session.flush()

    _audit(session, calc.id, "CALCULATION_CREATED", {
        "needs_approval": result.needs_approval,
        "reasons": result.reasons,
        "rule_ids": result.rule_ids,
    })

    request = None
    if result.needs_approval:
        logger.info("Calculation %s needs approval: %s", calc.id, "; ".join(result.reasons))
        request = _open_request(session, calc, user_id, list(result.reasons), admin_user_ids)
    else:
        logger.info("Calculation %s finalized, all approval rules satisfied", calc.id)

    return calc, result, request


def get_calculation(session: Session, calculation_id: int) -> PricingCalculation:
    calc = session.get(PricingCalculation, calculation_id)
    if calc is None:
        raise CalculationNotFound(f"Calculation {calculation_id} not found")
    return calc


def _pending_request_for(session: Session, calculation_id: int) -> Optional[ApprovalRequest]:
    stmt = select(ApprovalRequest).where(
        ApprovalRequest.calculation_id == calculation_id,
        ApprovalRequest.status == STATUS_PENDING,
    )
    return session.scalars(stmt).first()


def request_approval(session: Session, user_id: int, calculation_id: int,
                     justification: Optional[str] = None,
                     admin_user_ids: Optional[Iterable[int]] = None) -> ApprovalRequest:
    """
    Manually send an existing calculation to the admins.
    """
    calc = get_calculation(session, calculation_id)
    if _pending_request_for(session, calculation_id) is not None:
        raise InvalidApprovalAction(f"Calculation {calculation_id} already has a pending approval request")

    result = evaluate(PricingInput(**calc.pricing_input))
    reasons = list(result.reasons)
    if justification and justification.strip():
        reasons.append(justification.strip())
    if not reasons:
        reasons = [MANUAL_REASON]

    logger.info("User %s requested approval for calculation %s", user_id, calculation_id)
    return _open_request(session, calc, user_id, reasons, admin_user_ids)


def list_requests(session: Session, status: Optional[str] = None) -> List[ApprovalRequest]:
    stmt = select(ApprovalRequest)
    if status and status != "all":
        stmt = stmt.where(ApprovalRequest.status == status)
    return list(session.scalars(stmt.order_by(ApprovalRequest.id.desc())))


def list_user_requests(session: Session, user_id: int) -> List[ApprovalRequest]:
    stmt = (
        select(ApprovalRequest)
        .where(ApprovalRequest.created_by_user_id == user_id)
        .order_by(ApprovalRequest.id.desc())
    )
    return list(session.scalars(stmt))


def approval_stats(session: Session) -> Dict[str, int]:
    stmt = select(ApprovalRequest.status, func.count(ApprovalRequest.id)).group_by(ApprovalRequest.status)
    counts = {status: count for status, count in session.execute(stmt)}
    return {
        "pending": counts.get(STATUS_PENDING, 0),
        "approved": counts.get(STATUS_APPROVED, 0),
        "rejected": counts.get(STATUS_REJECTED, 0),
        "total": sum(counts.values()),
    }


def decide(session: Session, request_id: int, admin_user_id: int, action: str,
           comment: Optional[str] = None) -> ApprovalRequest:
    if action not in ACTIONS:
        raise InvalidApprovalAction("Action must be 'approve' or 'reject'")
    comment = (comment or "").strip() or None
    if action == "reject" and not comment:
        raise InvalidApprovalAction("Admin comment is required when rejecting")

    request = session.get(ApprovalRequest, request_id)
    if request is None:
        raise ApprovalRequestNotFound(f"Approval request {request_id} not found")
    if request.status != STATUS_PENDING:
        raise InvalidApprovalAction(f"Approval request {request_id} is already {request.status}")

    now = _now()
    request.status = ACTIONS[action]
    request.decision_by_user_id = admin_user_id
    request.admin_comment = comment
    request.decision_at = now
    request.updated_at = now

    calc = session.get(PricingCalculation, request.calculation_id)
    if calc is not None:
        calc.approval_status = request.status
        calc.updated_at = now

    _audit(session, request.calculation_id, f"APPROVAL_{request.status.upper()}", {
        "approval_request_id": request.id,
        "admin_user_id": admin_user_id,
        "admin_comment": comment,
    })
    notifications.notify_user_decision(session, request, admin_user_id, action)
    session.flush()

    logger.info("Admin %s %s approval request %s", admin_user_id, request.status, request.id)
    return request


def delete_request(session: Session, request_id: int) -> bool:
    request = session.get(ApprovalRequest, request_id)
    if request is None:
        return False

    if request.status == STATUS_PENDING:
        calc = session.get(PricingCalculation, request.calculation_id)
        if calc is not None:
            still_needed = evaluate(PricingInput(**calc.pricing_input)).needs_approval
            calc.approval_status = STATUS_REQUIRED_NOT_SENT if still_needed else STATUS_NONE_REQUIRED
            calc.updated_at = _now()

    _audit(session, request.calculation_id, "APPROVAL_DELETED", {"approval_request_id": request.id})
    session.delete(request)
    session.flush()
    logger.info("Deleted approval request %s", request_id)
    return True
