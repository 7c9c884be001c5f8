from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import Integer, String, Text
from typing import Optional
import json

class Base(DeclarativeBase):
    pass

class PricingCalculation(Base):
    __tablename__ = "pricing_calculations"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    stars: Mapped[int] = mapped_column(Integer)
    # none_required / pending / approved / rejected
    approval_status: Mapped[str] = mapped_column(String, index=True)
    input_hash: Mapped[str] = mapped_column(String(64))
    pricing_input_json: Mapped[str] = mapped_column(Text)
    record_json: Mapped[str] = mapped_column(Text)
    created_at: Mapped[str] = mapped_column(String)
    updated_at: Mapped[str] = mapped_column(String)

    def __init__(self, user_id, stars, approval_status, input_hash, pricing_input, record, created_at):
        self.user_id = user_id
        self.stars = stars
        self.approval_status = approval_status
        self.input_hash = input_hash
        self.pricing_input_json = json.dumps(pricing_input)
        self.record_json = json.dumps(record, default=str)
        self.created_at = created_at
        self.updated_at = created_at

    @property
    def pricing_input(self):
        return json.loads(self.pricing_input_json)

    @property
    def record(self):
        return json.loads(self.record_json)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "stars": self.stars,
            "approval_status": self.approval_status,
            "input_hash": self.input_hash,
            "pricing_input": self.pricing_input,
            "record": self.record,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

class ApprovalRequest(Base):
    __tablename__ = "approval_requests"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    calculation_id: Mapped[int] = mapped_column(Integer, index=True)
    created_by_user_id: Mapped[int] = mapped_column(Integer, index=True)
    # pending / approved / rejected
    status: Mapped[str] = mapped_column(String, index=True)
    star_category: Mapped[int] = mapped_column(Integer)
    reasons_json: Mapped[str] = mapped_column(Text)
    calculation_snapshot_json: Mapped[str] = mapped_column(Text)
    input_hash: Mapped[str] = mapped_column(String(64))
    decision_by_user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    admin_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    decision_at: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[str] = mapped_column(String)
    updated_at: Mapped[str] = mapped_column(String)

    def __init__(self, calculation_id, created_by_user_id, star_category, reasons,
                 calculation_snapshot, input_hash, created_at, status="pending"):
        self.calculation_id = calculation_id
        self.created_by_user_id = created_by_user_id
        self.status = status
        self.star_category = star_category
        self.reasons_json = json.dumps(reasons)
        self.calculation_snapshot_json = json.dumps(calculation_snapshot, default=str)
        self.input_hash = input_hash
        self.created_at = created_at
        self.updated_at = created_at

    @property
    def reasons(self):
        return json.loads(self.reasons_json)

    @property
    def calculation_snapshot(self):
        return json.loads(self.calculation_snapshot_json)

    def to_dict(self):
        return {
            "id": self.id,
            "calculation_id": self.calculation_id,
            "created_by_user_id": self.created_by_user_id,
            "status": self.status,
            "star_category": self.star_category,
            "reasons": self.reasons,
            "calculation_snapshot": self.calculation_snapshot,
            "input_hash": self.input_hash,
            "decision_by_user_id": self.decision_by_user_id,
            "admin_comment": self.admin_comment,
            "decision_at": self.decision_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

class Notification(Base):
    __tablename__ = "notifications"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipient_user_id: Mapped[int] = mapped_column(Integer, index=True)
    # approval_pending / approval_approved / approval_rejected
    type: Mapped[str] = mapped_column(String)
    title: Mapped[str] = mapped_column(String)
    message: Mapped[str] = mapped_column(Text)
    approval_request_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    calculation_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # unread / read
    status: Mapped[str] = mapped_column(String, index=True)
    created_at: Mapped[str] = mapped_column(String)

    def __init__(self, recipient_user_id, type, title, message, approval_request_id,
                 calculation_id, created_at, status="unread"):
        self.recipient_user_id = recipient_user_id
        self.type = type
        self.title = title
        self.message = message
        self.approval_request_id = approval_request_id
        self.calculation_id = calculation_id
        self.status = status
        self.created_at = created_at

    def to_dict(self):
        return {
            "id": self.id,
            "recipient_user_id": self.recipient_user_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "approval_request_id": self.approval_request_id,
            "calculation_id": self.calculation_id,
            "status": self.status,
            "created_at": self.created_at,
        }

class AuditEvent(Base):
    __tablename__ = "audit_events"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    calculation_id: Mapped[int] = mapped_column(Integer, index=True)
    event_type: Mapped[str] = mapped_column(String)
    payload_json: Mapped[str] = mapped_column(Text)
    created_at: Mapped[str] = mapped_column(String)

    def __init__(self, calculation_id, event_type, payload, created_at):
        self.calculation_id = calculation_id
        self.event_type = event_type
        self.payload_json = json.dumps(payload)
        self.created_at = created_at

    @property
    def payload(self):
        return json.loads(self.payload_json)
