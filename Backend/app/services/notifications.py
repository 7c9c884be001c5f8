from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.db.models import ApprovalRequest, Notification

logger = get_logger(__name__)

COMMENT_PREVIEW_CHARS = 300


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _bullets(reasons: List[str]) -> str:
    return "\n".join(f"- {r}" for r in reasons)


def notify_admins_pending(session: Session, request: ApprovalRequest,
                          admin_user_ids: Iterable[int]) -> List[Notification]:
    """
    One unread `approval_pending` notification per admin.
    """
    title = f"Approval requested by user {request.created_by_user_id}"
    reasons = request.reasons
    reasons_text = _bullets(reasons) if reasons else "Manual approval requested"

    message = (
        f"Calculation #{request.calculation_id} (request #{request.id})\n"
        f"Star category: {request.star_category}★\n"
        f"Reasons:\n{reasons_text}"
    )

    created: List[Notification] = []
    for admin_id in admin_user_ids:
        n = Notification(
            recipient_user_id=admin_id,
            type="approval_pending",
            title=title,
            message=message,
            approval_request_id=request.id,
            calculation_id=request.calculation_id,
            created_at=_now(),
        )
        session.add(n)
        created.append(n)

    if not created:
        logger.warning("No admin users configured; approval request %s has no recipients", request.id)
    return created


def notify_user_decision(session: Session, request: ApprovalRequest,
                         admin_user_id: int, action: str) -> Notification:
    approved = action == "approve"
    label = f"Calculation #{request.calculation_id}"
    title = f"Approval granted: {label}" if approved else f"Approval declined: {label}"

    lines = [
        f"Decision: {'Approved' if approved else 'Rejected'}",
        f"Decided by: user {admin_user_id}",
        f"Date: {request.decision_at or _now()}",
    ]
    if request.admin_comment:
        comment = request.admin_comment
        if len(comment) > COMMENT_PREVIEW_CHARS:
            comment = comment[:COMMENT_PREVIEW_CHARS] + "..."
        lines.append(f"Admin feedback: {comment}")

    n = Notification(
        recipient_user_id=request.created_by_user_id,
        type="approval_approved" if approved else "approval_rejected",
        title=title,
        message="\n".join(lines),
        approval_request_id=request.id,
        calculation_id=request.calculation_id,
        created_at=_now(),
    )
    session.add(n)
    return n


def list_notifications(session: Session, user_id: int, status: Optional[str] = None,
                       limit: int = 50) -> List[Notification]:
    stmt = select(Notification).where(Notification.recipient_user_id == user_id)
    if status:
        stmt = stmt.where(Notification.status == status)
    stmt = stmt.order_by(Notification.id.desc()).limit(limit)
    return list(session.scalars(stmt))


def unread_count(session: Session, user_id: int) -> int:
    stmt = select(func.count(Notification.id)).where(
        Notification.recipient_user_id == user_id,
        Notification.status == "unread",
    )
    return session.scalar(stmt) or 0


def mark_read(session: Session, notification_id: int, user_id: int) -> bool:
    n = session.get(Notification, notification_id)
    if n is None or n.recipient_user_id != user_id:
        return False
    n.status = "read"
    return True
