"""
Seed script for the default category taxonomy.
"""

import logging

from gestor_financeiro.database import SessionLocal, init_db
from gestor_financeiro.models import Category, Subcategory
from gestor_financeiro.text import normalize

logger = logging.getLogger(__name__)

# Category -> subcategories
DEFAULT_TAXONOMY = {
    "Alimentação": ["Supermercado", "Restaurante", "Padaria", "Delivery"],
    "Transporte": ["Combustível", "Aplicativo", "Estacionamento", "Manutenção"],
    "Moradia": ["Aluguel", "Energia", "Água", "Internet"],
    "Saúde": ["Farmácia", "Consultas", "Plano de Saúde"],
    "Lazer": ["Cinema", "Viagens", "Assinaturas"],
    "Compras": ["Vestuário", "Eletrônicos", "Casa"],
    "Outros": ["Diversos"],
}


def seed_categories(db) -> int:
    """Insert the default taxonomy into an empty store. Returns the number of subcategories created."""
    existing_count = db.query(Category).count()
    if existing_count > 0:
        logger.info(f"Categories already seeded ({existing_count} categories exist)")
        return 0

    created = 0
    for category_name, subcategory_names in DEFAULT_TAXONOMY.items():
        category = Category(name=normalize(category_name))
        db.add(category)
        db.flush()
        for subcategory_name in subcategory_names:
            db.add(Subcategory(name=normalize(subcategory_name), category_id=category.id))
            created += 1

    db.commit()
    logger.info(f"Seeded {len(DEFAULT_TAXONOMY)} categories and {created} subcategories")
    return created


def main():
    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        seed_categories(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
