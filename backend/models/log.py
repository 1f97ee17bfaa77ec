from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from database import Base

# Audit trail of catalog and proposal changes
class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # What was touched: e.g. action PROPOSAL_CREATE on resource "proposals", row 12
    action = Column(String(50), index=True, nullable=False)
    resource = Column(String(50), index=True, nullable=False)
    resource_id = Column(Integer, index=True, nullable=True)

    status = Column(String(20), index=True, default="SUCCESS")
    ip = Column(String(64), nullable=True)

    # Changed fields, numbers, totals...
    meta = Column(JSON, nullable=True)
