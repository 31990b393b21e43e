import uuid

from sqlalchemy import Column, String, Text, Integer, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Report(Base):
    __tablename__ = "reports"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    goal_id = Column(String, nullable=False, index=True)
    employee_id = Column(String, nullable=False, index=True)
    report_text = Column(Text, nullable=True)
    submission_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    evaluation_score = Column(Float, nullable=False, default=0.0)  # 0-10, AI assigned
    evaluation_reasoning = Column(Text, nullable=True)

    # Manager override: both set or both null
    manager_overall_score = Column(Float, nullable=True)
    manager_override_reasoning = Column(Text, nullable=True)

    criterion_scores = relationship(
        "ReportCriterionScore",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="ReportCriterionScore.position",
    )


class ReportCriterionScore(Base):
    __tablename__ = "report_criterion_scores"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(String, ForeignKey("reports.id"), nullable=False, index=True)
    criterion_name = Column(String, nullable=False)
    score = Column(Float, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    report = relationship("Report", back_populates="criterion_scores")
