"""
QR code generator for the manual QR payment screen.

The code carries amount, order id and merchant. The customer pays with
their banking app and then self-reports; nothing here verifies a transfer.
"""
from __future__ import annotations

import io
import logging
from decimal import Decimal

import qrcode
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.moduledrawers import RoundedModuleDrawer

from .constants import MERCHANT_NAME
from .order_math import to_money

logger = logging.getLogger(__name__)


def payment_qr_payload(order_id: str, amount: Decimal, merchant: str = MERCHANT_NAME) -> str:
    """Build ``Amount:<total>|OrderID:<id>|Merchant:<name>``."""
    return f"Amount:{to_money(amount):.2f}|OrderID:{order_id}|Merchant:{merchant}"


def generate_payment_qr(
    order_id: str, amount: Decimal, merchant: str = MERCHANT_NAME
) -> io.BytesIO | None:
    """
    Render the payment QR as PNG.

    Args:
        order_id: Store id of the order being paid
        amount: Grand total to pay
        merchant: Merchant name shown to the payer's bank app

    Returns:
        BytesIO with PNG image data, or None if rendering fails
    """
    payload = payment_qr_payload(order_id, amount, merchant)
    logger.info(f"QR generating for order {order_id}")

    try:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=2,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        try:
            img = qr.make_image(
                image_factory=StyledPilImage,
                module_drawer=RoundedModuleDrawer(),
            )
        except Exception:
            logger.debug("Styled QR rendering unavailable, using plain image")
            img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer
    except Exception as e:
        logger.error(f"QR generation failed for order {order_id}: {e}")
        return None
