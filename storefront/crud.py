from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from . import auth, models
from .errors import StorageError
from .logger import get_logger

logger = get_logger(__name__)


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Failed to {action}: {exc}")
        raise StorageError(f"Failed to {action}") from exc


def get_user_by_username(db: Session, username: str):
    return db.query(models.User).filter(models.User.username == username).first()


def create_user(db: Session, username: str, password: str):
    user = models.User(username=username, password_hash=auth.get_password_hash(password))
    db.add(user)
    _commit(db, "create user")
    db.refresh(user)
    return user


def authenticate_user(db: Session, username: str, password: str):
    user = get_user_by_username(db, username)
    if not user:
        return None
    if not auth.verify_password(password, user.password_hash):
        return None
    return user


def list_products(db: Session, search: str = None, category: str = None):
    query = db.query(models.Product)
    if search:
        query = query.filter(models.Product.name.icontains(search, autoescape=True))
    if category:
        query = query.filter(models.Product.category == category)
    return query.order_by(models.Product.id.desc()).all()


def get_product(db: Session, product_id: int):
    return db.query(models.Product).filter(models.Product.id == product_id).first()


def create_product(db: Session, product_data):
    product = models.Product(**product_data)
    db.add(product)
    _commit(db, "create product")
    db.refresh(product)
    return product


def update_product(db: Session, product_id: int, product_data):
    product = get_product(db, product_id)
    if not product:
        return None
    for key, value in product_data.items():
        setattr(product, key, value)
    _commit(db, f"update product {product_id}")
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int) -> bool:
    product = get_product(db, product_id)
    if not product:
        return False
    db.delete(product)
    _commit(db, f"delete product {product_id}")
    return True


def count_products(db: Session) -> int:
    return db.query(models.Product).count()


def create_order_with_items(db: Session, order: models.Order, items):
    """Write the order row and all of its item rows in one transaction."""
    try:
        order.items.extend(items)
        db.add(order)
        db.flush()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Failed to create order: {exc}")
        raise StorageError("Failed to create order") from exc
    db.refresh(order)
    return order


def list_orders(db: Session):
    return (
        db.query(models.Order)
        .order_by(models.Order.created_at.desc(), models.Order.id.desc())
        .all()
    )


def get_order_with_items(db: Session, order_id: int):
    return (
        db.query(models.Order)
        .options(joinedload(models.Order.items).joinedload(models.OrderItem.product))
        .filter(models.Order.id == order_id)
        .first()
    )


def update_order_status(db: Session, order_id: int, status: str):
    order = db.query(models.Order).filter(models.Order.id == order_id).first()
    if not order:
        return None
    order.status = status
    _commit(db, f"update order {order_id}")
    db.refresh(order)
    return order
