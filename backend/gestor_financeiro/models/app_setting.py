"""Key-value settings persisted alongside the domain tables."""

from sqlalchemy import Column, String, Text

from gestor_financeiro.database import Base


class AppSetting(Base):
    """
    Local configuration entry.
    One row per key; a missing row means "not configured".
    """
    __tablename__ = "configuracoes"

    key = Column("chave", String(100), primary_key=True)
    value = Column("valor", Text, nullable=False)
