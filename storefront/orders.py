"""Order placement: re-price a submitted cart from the catalog and persist it."""

from sqlalchemy.orm import Session

from . import crud, models, schemas
from .errors import ProductReferenceError, ValidationError
from .logger import get_logger

logger = get_logger(__name__)


def price_order_items(db: Session, items_in):
    """
    Build order items priced from the catalog, never from the request.

    Returns the unsaved ``OrderItem`` rows and the order total in cents.
    Raises ``ProductReferenceError`` for the first unknown product id and
    ``ValidationError`` when the total does not fit the order amount column.
    """
    items = []
    total = 0
    for item_in in items_in:
        product = crud.get_product(db, item_in.product_id)
        if not product:
            raise ProductReferenceError(item_in.product_id)
        total += product.price * item_in.quantity
        items.append(
            models.OrderItem(
                product_id=product.id,
                quantity=item_in.quantity,
                price=product.price,
            )
        )
    if total > schemas.MAX_INT:
        raise ValidationError("Order total is too large", field="items")
    return items, total


def place_order(db: Session, order_in: schemas.OrderCreate) -> models.Order:
    items, total = price_order_items(db, order_in.items)
    order = models.Order(
        customer_name=order_in.customer_name,
        customer_address=order_in.customer_address,
        customer_phone=order_in.customer_phone,
        customer_email=order_in.customer_email,
        total_amount=total,
        status="pending",
        created_at=models.utcnow(),
    )
    order = crud.create_order_with_items(db, order, items)
    logger.info(
        f"Order {order.id} placed: {len(order.items)} item(s), total={order.total_amount}"
    )
    return order
