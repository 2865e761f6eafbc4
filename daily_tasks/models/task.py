"""Task model"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Date, Float, Text, text
from datetime import datetime
from daily_tasks.core.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class Task(Base):
    __tablename__ = "tasks"
    # pas de RETURNING sur les server_default : la colonne peut ne pas exister
    __mapper_args__ = {"eager_defaults": False}

    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String, nullable=False, index=True)
    member = Column(String, nullable=False, default="")

    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    planned_hours = Column(Float, default=0)
    actual_hours = Column(Float, default=0)
    status = Column(String, default="not_started")
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Colonnes ajoutées après coup. Avec un server_default, un INSERT ORM
    # les omet quand elles ne sont pas renseignées (base pas encore migrée).
    retrospective = Column(Text, nullable=True, server_default="")
    start_time = Column(String(5), nullable=True, server_default=text("NULL"))
    end_time = Column(String(5), nullable=True, server_default=text("NULL"))
    completion_criteria = Column(Text, nullable=True, server_default="")
    sort_order = Column(Integer, nullable=True, server_default=text("NULL"))
