from enum import Enum

from sqlalchemy import Column, String, ForeignKey, DateTime, Text, Index, case
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import BaseModel, Base


class TodoStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TodoPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Todo(BaseModel, Base):
    __tablename__ = "todos"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(
        SAEnum(TodoStatus, name="todo_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=TodoStatus.PENDING,
    )
    priority = Column(
        SAEnum(TodoPriority, name="todo_priority", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=TodoPriority.MEDIUM,
    )

    user = relationship("User", back_populates="todos")

    __table_args__ = (
        Index("ix_todos_user_created", "user_id", "created_at"),
    )


# low < medium < high, independent of the string collation
priority_rank = case(
    {TodoPriority.LOW: 0, TodoPriority.MEDIUM: 1, TodoPriority.HIGH: 2},
    value=Todo.priority,
    else_=1,
)
