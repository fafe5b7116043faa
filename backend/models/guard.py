# backend/models/guard.py
from sqlalchemy import Column, Integer, String, Boolean, Float, DateTime, JSON, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Represents a security guard profile with credentials, approval state and work record
class Guard(Base):
    __tablename__ = "guards"
    __table_args__ = (
        CheckConstraint("work_percent >= 0 AND work_percent <= 100", name="ck_guards_work_percent_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_name = Column(String, unique=True, nullable=False, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    avatar = Column(String, nullable=True)

    residence = Column(String, nullable=False)
    description = Column(String, nullable=False)
    age = Column(Integer, nullable=False)

    is_approved = Column(Boolean, nullable=False, default=False)
    work_percent = Column(Float, nullable=False, default=0)
    work_history = Column(JSON, nullable=False, default=list)

    refresh_token = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    locations = relationship("Location", back_populates="guard")
    live_location = relationship("LiveLocation", back_populates="guard", uselist=False)
