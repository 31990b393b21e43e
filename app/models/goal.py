import uuid

from sqlalchemy import Column, String, Text, Integer, DateTime, Date, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Goal(Base):
    __tablename__ = "goals"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    project_id = Column(String, nullable=False, index=True)  # may dangle, see dataset loader
    instructions = Column(Text, nullable=True)
    deadline = Column(Date, nullable=True)

    # Either field may indicate authorship
    created_by = Column(String, nullable=True)
    manager_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    criteria = relationship(
        "GoalCriterion",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="GoalCriterion.position",
    )


class GoalCriterion(Base):
    __tablename__ = "goal_criteria"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    goal_id = Column(String, ForeignKey("goals.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    weight = Column(Integer, nullable=False)  # Percentage, sums to 100 per goal
    position = Column(Integer, nullable=False, default=0)

    goal = relationship("Goal", back_populates="criteria")
