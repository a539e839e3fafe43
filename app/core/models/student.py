"""Student profile as seen by transport: nominal monthly fee and current bus."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.db.session import Base


class Student(Base):
    """A student rides at most one bus; reassignment overwrites bus_id. Soft delete via is_deleted."""

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    fullname = Column(String(255), nullable=False)
    district = Column(String(100), nullable=True)
    class_id = Column(Integer, nullable=True)
    # Nominal monthly fee; used when no monthly fee row carries student_fee
    fee = Column(Numeric(12, 2), nullable=True)
    bus_id = Column(Integer, ForeignKey("buses.id", ondelete="SET NULL"), nullable=True, index=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    bus = relationship("Bus", back_populates="students")
    monthly_fees = relationship(
        "StudentFee",
        back_populates="student",
        cascade="all, delete-orphan",
        order_by="StudentFee.id.desc()",
    )
