# skillbridge/models/audit.py
from sqlalchemy import Column, ForeignKey, Index, Integer, JSON, String, TIMESTAMP, event

from skillbridge.database import Base
from skillbridge.models.mentorship import _forbid_mutation
from skillbridge.utils.temporal import utcnow


class AdminAuditLog(Base):
    __tablename__ = "admin_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    action_type = Column(String(50), nullable=False)
    target_type = Column(String(20), nullable=False)
    target_id = Column(Integer, nullable=False)
    reason = Column(String(500), nullable=False)
    details = Column("metadata", JSON, default=dict)
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_admin_audit_target", "target_type", "target_id", "created_at"),
        Index("ix_admin_audit_admin", "admin_id", "created_at"),
    )


event.listen(AdminAuditLog, "before_update", _forbid_mutation)
event.listen(AdminAuditLog, "before_delete", _forbid_mutation)
