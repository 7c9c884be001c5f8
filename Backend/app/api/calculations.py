from fastapi import APIRouter
from pydantic import BaseModel
from typing import Dict, Any

from app.api.errors import to_http
from app.db.database import get_session
from app.services import approval_workflow as workflow

router = APIRouter()

class CalculationRequest(BaseModel):
    user_id: int
    calculation: Dict[str, Any]

@router.post("/pricing-calculations")
def create_calculation(req: CalculationRequest):
    session = get_session()
    try:
        calc, result, approval = workflow.create_calculation(session, req.user_id, req.calculation)
        session.commit()
        return {
            "success": True,
            "data": calc.to_dict(),
            "approval": {
                "needs_approval": result.needs_approval,
                "reasons": result.reasons,
                "approval_request_id": approval.id if approval else None,
            },
            "message": "Pricing calculation saved successfully",
        }
    finally:
        session.close()

@router.get("/pricing-calculations/{calculation_id}")
def get_calculation(calculation_id: int):
    session = get_session()
    try:
        calc = workflow.get_calculation(session, calculation_id)
        return {"success": True, "data": calc.to_dict()}
    except workflow.ApprovalWorkflowError as e:
        raise to_http(e) from e
    finally:
        session.close()
