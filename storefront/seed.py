from sqlalchemy.orm import Session

from . import config, crud
from .logger import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    {
        "name": "Ketchup",
        "description": "Fresh tomato ketchup, perfect for fries.",
        "price": 250,
        "category": "Sauces",
        "image_url": "https://images.unsplash.com/photo-1606132863925-544439169493?auto=format&fit=crop&q=80&w=800",
        "available": True,
    },
    {
        "name": "Mayonnaise",
        "description": "Creamy rich mayonnaise.",
        "price": 300,
        "category": "Sauces",
        "image_url": "https://images.unsplash.com/photo-1595356262451-9e7f84266e74?auto=format&fit=crop&q=80&w=800",
        "available": True,
    },
    {
        "name": "Chicken Kabab",
        "description": "Spicy and delicious chicken kababs.",
        "price": 150,
        "category": "Frozen",
        "image_url": "https://images.unsplash.com/photo-1603360946369-dc9bb6f54262?auto=format&fit=crop&q=80&w=800",
        "available": True,
    },
]


def ensure_admin_user(db: Session, username: str = None, password: str = None):
    username = username or config.ADMIN_USERNAME
    password = password or config.ADMIN_PASSWORD
    if not username or not password:
        return None
    existing = crud.get_user_by_username(db, username)
    if existing:
        return existing
    user = crud.create_user(db, username, password)
    logger.info(f"Seeded admin user '{username}'")
    return user


def seed_products(db: Session):
    if crud.count_products(db) > 0:
        return
    for product in SAMPLE_PRODUCTS:
        crud.create_product(db, product)
    logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} products")
