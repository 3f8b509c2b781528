"""
Expense database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Numeric, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from gestor_financeiro.database import Base


class Expense(Base):
    """One financial transaction, stored in the ``despesas`` table."""

    __tablename__ = "despesas"

    id = Column("id_despesa", String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    amount = Column("valor", Numeric(10, 2), nullable=False)
    date = Column("data_despesa", Date, nullable=False, index=True)
    subcategory_id = Column("id_subcategoria", String(36), ForeignKey("subcategoria.id_subcategoria"), nullable=False)
    location = Column("local", Text, nullable=True)  # Merchant / establishment
    detail = Column("detalhe", Text, nullable=True)
    time = Column("hora", String(5), nullable=True)  # HH:MM
    card = Column("cartao", String(100), nullable=True)
    card_last_digits = Column("final_cartao", Integer, nullable=True)
    status = Column("status_transacao", String(30), nullable=True)
    due_date = Column("vencimento", Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    subcategory = relationship("Subcategory", back_populates="expenses")

    __table_args__ = (
        Index("idx_despesas_subcategoria", "id_subcategoria"),
    )
