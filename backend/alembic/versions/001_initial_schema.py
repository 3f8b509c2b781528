"""initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-17 10:00:00
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "categoria",
        sa.Column("id_categoria", sa.String(36), primary_key=True),
        sa.Column("nome_categoria", sa.String(100), nullable=False),
    )
    op.create_table(
        "subcategoria",
        sa.Column("id_subcategoria", sa.String(36), primary_key=True),
        sa.Column("id_categoria", sa.String(36), sa.ForeignKey("categoria.id_categoria"), nullable=False),
        sa.Column("nome_subcategoria", sa.String(100), nullable=False),
    )
    op.create_index("ix_subcategoria_id_categoria", "subcategoria", ["id_categoria"])

    op.create_table(
        "despesas",
        sa.Column("id_despesa", sa.String(36), primary_key=True),
        sa.Column("valor", sa.Numeric(10, 2), nullable=False),
        sa.Column("data_despesa", sa.Date, nullable=False),
        sa.Column("id_subcategoria", sa.String(36), sa.ForeignKey("subcategoria.id_subcategoria"), nullable=False),
        sa.Column("local", sa.Text, nullable=True),
        sa.Column("detalhe", sa.Text, nullable=True),
        sa.Column("hora", sa.String(5), nullable=True),
        sa.Column("cartao", sa.String(100), nullable=True),
        sa.Column("final_cartao", sa.Integer, nullable=True),
        sa.Column("status_transacao", sa.String(30), nullable=True),
        sa.Column("vencimento", sa.Date, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_despesas_data_despesa", "despesas", ["data_despesa"])
    op.create_index("idx_despesas_subcategoria", "despesas", ["id_subcategoria"])

    op.create_table(
        "metas",
        sa.Column("id_meta", sa.String(36), primary_key=True),
        sa.Column("id_categoria", sa.String(36), sa.ForeignKey("categoria.id_categoria"), nullable=False),
        sa.Column("valor_meta", sa.Numeric(10, 2), nullable=False),
        sa.Column("periodo", sa.String(20), nullable=True),
        sa.Column("data_inicio", sa.Date, nullable=False),
    )
    op.create_index("ix_metas_data_inicio", "metas", ["data_inicio"])

    op.create_table(
        "configuracoes",
        sa.Column("chave", sa.String(100), primary_key=True),
        sa.Column("valor", sa.Text, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("configuracoes")
    op.drop_index("ix_metas_data_inicio", table_name="metas")
    op.drop_table("metas")
    op.drop_index("idx_despesas_subcategoria", table_name="despesas")
    op.drop_index("ix_despesas_data_despesa", table_name="despesas")
    op.drop_table("despesas")
    op.drop_index("ix_subcategoria_id_categoria", table_name="subcategoria")
    op.drop_table("subcategoria")
    op.drop_table("categoria")
