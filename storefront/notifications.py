import smtplib
from email.message import EmailMessage

from . import config, schemas
from .logger import get_logger

logger = get_logger(__name__)


def format_amount(cents: int) -> str:
    return f"{cents / 100:.2f}"


def format_order_email(order: schemas.OrderWithItemsOut):
    subject = f"New Order #{order.id}"
    lines = [
        f"Customer: {order.customer_name} ({order.customer_phone})",
        f"Address: {order.customer_address}",
    ]
    if order.customer_email:
        lines.append(f"Email: {order.customer_email}")
    lines.append("Items:")
    for item in order.items:
        lines.append(
            f"- Product ID {item.product_id} x {item.quantity} @ {format_amount(item.price)}"
        )
    lines.append(f"Total: {format_amount(order.total_amount)}")
    return subject, "\n".join(lines)


def _send_email(subject: str, body: str):
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = config.MAIL_FROM
    message["To"] = config.ORDER_NOTIFY_EMAIL
    message.set_content(body)

    with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=10) as smtp:
        smtp.starttls()
        if config.SMTP_USER and config.SMTP_PASSWORD:
            smtp.login(config.SMTP_USER, config.SMTP_PASSWORD)
        smtp.send_message(message)


def notify_order_placed(order: schemas.OrderWithItemsOut):
    """
    Announce a new order to the shop owner.

    Runs as a background task after the order is committed. Every failure is
    logged here and never propagates, so the order itself is unaffected.
    """
    try:
        subject, body = format_order_email(order)
        logger.info(f"{subject}\n{body}")
        if not (config.SMTP_HOST and config.ORDER_NOTIFY_EMAIL):
            logger.debug("SMTP not configured, order email only logged")
            return
        _send_email(subject, body)
        logger.info(f"Order email for #{order.id} sent to {config.ORDER_NOTIFY_EMAIL}")
    except Exception:
        logger.exception(f"Failed to send notification for order #{order.id}")
