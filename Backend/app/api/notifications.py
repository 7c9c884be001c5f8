from fastapi import APIRouter, HTTPException
from typing import Optional

from app.db.database import get_session
from app.services import notifications as notification_service

router = APIRouter()

@router.get("/notifications")
def list_notifications(user_id: int, status: Optional[str] = None, limit: int = 50):
    session = get_session()
    try:
        items = notification_service.list_notifications(session, user_id, status=status, limit=limit)
        return {"success": True, "data": [n.to_dict() for n in items]}
    finally:
        session.close()

@router.get("/notifications/unread-count")
def unread_count(user_id: int):
    session = get_session()
    try:
        return {"success": True, "data": {"count": notification_service.unread_count(session, user_id)}}
    finally:
        session.close()

@router.post("/notifications/{notification_id}/read")
def mark_read(notification_id: int, user_id: int):
    session = get_session()
    try:
        if not notification_service.mark_read(session, notification_id, user_id):
            raise HTTPException(status_code=404, detail="Notification not found")
        session.commit()
        return {"success": True}
    finally:
        session.close()
