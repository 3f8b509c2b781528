"""
Goal database model.
"""

import uuid
from sqlalchemy import Column, String, Date, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from gestor_financeiro.database import Base


class Goal(Base):
    """Monthly spending target for a category."""

    __tablename__ = "metas"

    id = Column("id_meta", String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    category_id = Column("id_categoria", String(36), ForeignKey("categoria.id_categoria"), nullable=False)
    target_amount = Column("valor_meta", Numeric(10, 2), nullable=False)
    period = Column("periodo", String(20), nullable=True)  # e.g. "mensal"
    start_date = Column("data_inicio", Date, nullable=False, index=True)

    # Relationships
    category = relationship("Category", back_populates="goals")
