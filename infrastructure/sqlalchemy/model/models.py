from sqlalchemy import Column, DateTime, Integer, Text, func

from infrastructure.sqlalchemy.session.db import Base


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


tasks_table = TaskModel.__table__
