from fastapi import HTTPException

from app.services.approval_workflow import (
    ApprovalRequestNotFound,
    ApprovalWorkflowError,
    CalculationNotFound,
)


def to_http(exc: ApprovalWorkflowError) -> HTTPException:
    if isinstance(exc, (CalculationNotFound, ApprovalRequestNotFound)):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
