"""
Category and subcategory database models.
"""

import uuid
from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from gestor_financeiro.database import Base


class Category(Base):
    """Top-level spending classification."""

    __tablename__ = "categoria"

    id = Column("id_categoria", String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column("nome_categoria", String(100), nullable=False)

    # Relationships
    subcategories = relationship("Subcategory", back_populates="category")
    goals = relationship("Goal", back_populates="category")


class Subcategory(Base):
    """Subcategory; an expense's authoritative classification."""

    __tablename__ = "subcategoria"

    id = Column("id_subcategoria", String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    category_id = Column("id_categoria", String(36), ForeignKey("categoria.id_categoria"), nullable=False, index=True)
    name = Column("nome_subcategoria", String(100), nullable=False)

    # Relationships
    category = relationship("Category", back_populates="subcategories")
    expenses = relationship("Expense", back_populates="subcategory")
