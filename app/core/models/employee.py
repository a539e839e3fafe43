"""Employee master. Bus drivers are employees with job_title "Bus"."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.db.session import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(255), nullable=False, index=True)
    salary = Column(Numeric(12, 2), nullable=True)
    job_title = Column(String(100), nullable=True, index=True)  # "Bus" for drivers
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    buses = relationship("Bus", back_populates="driver")
