from fastapi import APIRouter
from pydantic import BaseModel
from typing import Dict, Any

from app.services.approval_rules import evaluate, attach_rule_summaries, thresholds
from app.services.normalization import extract_pricing_input, pricing_input_to_dict

router = APIRouter()

class ValidateRequest(BaseModel):
    record: Dict[str, Any]

@router.post("/approvals/validate")
def validate(req: ValidateRequest):
    pricing = extract_pricing_input(req.record)
    result = evaluate(pricing)
    rule_summaries = attach_rule_summaries(result.rule_ids)
    return {
        "needs_approval": result.needs_approval,
        "reasons": result.reasons,
        "pricing_input": pricing_input_to_dict(pricing),
        "rule_summaries": rule_summaries,
        "metadata": {
            "thresholds": thresholds(),
            "rules_triggered": [r["rule_id"] for r in rule_summaries],
        },
    }
