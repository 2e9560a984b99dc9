# backend/models/audit_log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base

# One row per business event (who did what to which resource, and whether it succeeded)
class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime, server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String(50), index=True) # e.g. ORDER_CREATE, CART_ADD
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True) # SUCCESS / FAIL
    ip = Column(String(64), nullable=True)

    meta = Column(JSON, nullable=True)

    user = relationship("User")
