"""School bus. Holds the FK to its driver; students point back via students.bus_id."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.session import Base


class Bus(Base):
    __tablename__ = "buses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    route = Column(String(255), nullable=True)
    plate = Column(String(50), nullable=True)
    type = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    seats = Column(Integer, nullable=True)
    capacity = Column(Integer, nullable=True)
    driver_id = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    driver = relationship("Employee", back_populates="buses")
    students = relationship("Student", back_populates="bus", order_by="Student.id")
