from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional

from app.api.errors import to_http
from app.db.database import get_session
from app.services import approval_workflow as workflow

router = APIRouter()

class ApprovalCreateRequest(BaseModel):
    user_id: int
    calculation_id: int
    business_justification: Optional[str] = None

class ApprovalDecisionRequest(BaseModel):
    admin_user_id: int
    action: str  # approve / reject
    admin_comment: Optional[str] = None

@router.post("/approvals")
def create_approval(req: ApprovalCreateRequest):
    session = get_session()
    try:
        request = workflow.request_approval(
            session, req.user_id, req.calculation_id, req.business_justification
        )
        session.commit()
        return {"success": True, "data": request.to_dict(), "message": "Approval request created successfully"}
    except workflow.ApprovalWorkflowError as e:
        session.rollback()
        raise to_http(e) from e
    finally:
        session.close()

@router.get("/approvals")
def list_approvals(status: Optional[str] = None):
    session = get_session()
    try:
        return {"success": True, "data": [r.to_dict() for r in workflow.list_requests(session, status)]}
    finally:
        session.close()

@router.get("/approvals/stats")
def approval_stats():
    session = get_session()
    try:
        return {"success": True, "data": workflow.approval_stats(session)}
    finally:
        session.close()

@router.get("/approvals/my-requests")
def my_requests(user_id: int):
    session = get_session()
    try:
        return {"success": True, "data": [r.to_dict() for r in workflow.list_user_requests(session, user_id)]}
    finally:
        session.close()

@router.patch("/approvals/{request_id}")
def decide(request_id: int, req: ApprovalDecisionRequest):
    session = get_session()
    try:
        request = workflow.decide(session, request_id, req.admin_user_id, req.action, req.admin_comment)
        session.commit()
        return {"success": True, "data": request.to_dict(), "message": f"Request {request.status} successfully"}
    except workflow.ApprovalWorkflowError as e:
        session.rollback()
        raise to_http(e) from e
    finally:
        session.close()

@router.delete("/approvals/{request_id}")
def delete_approval(request_id: int):
    session = get_session()
    try:
        if not workflow.delete_request(session, request_id):
            raise HTTPException(status_code=404, detail="Approval request not found")
        session.commit()
        return {"success": True, "message": "Approval request deleted successfully"}
    finally:
        session.close()
