"""
Barcode utilities.

Provides functions for:
- Decoding scale (weight-embedded) barcodes
- Generating barcode and QR code images
- Generating printable product labels
"""

import io
import logging
from decimal import Decimal

import barcode
import qrcode
from barcode.writer import ImageWriter
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

# Scale barcodes: 2 + product code (6) + weight in grams (5) + check digit
SCALE_PREFIX = "2"
SCALE_PRODUCT_CODE_LENGTH = 7
SCALE_WEIGHT_SLICE = slice(7, 12)

FONT_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"


def is_scale_barcode(code: str) -> bool:
    return (
        len(code) >= SCALE_WEIGHT_SLICE.stop
        and code.startswith(SCALE_PREFIX)
        and code[SCALE_WEIGHT_SLICE].isdigit()
    )


def scale_product_code(code: str) -> str:
    """The part of a scale barcode that identifies the product."""
    return code[:SCALE_PRODUCT_CODE_LENGTH]


def scale_weight_kg(code: str) -> Decimal:
    """
    Extract the weight embedded in a scale barcode.

    Args:
        code: Scanned scale barcode (e.g. "2123456012345")

    Returns:
        Weight in kilograms (grams / 1000)
    """
    return Decimal(int(code[SCALE_WEIGHT_SLICE])) / Decimal("1000")


def _error_image(message: str, size: tuple) -> bytes:
    img = Image.new("RGB", size, color="white")
    draw = ImageDraw.Draw(img)
    draw.text((10, size[1] // 2 - 10), f"Error: {message}", fill="red")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    buffer.seek(0)
    return buffer.getvalue()


def _load_fonts(title_size: int, text_size: int):
    try:
        return ImageFont.truetype(FONT_BOLD, title_size), ImageFont.truetype(FONT_REGULAR, text_size)
    except OSError:
        return ImageFont.load_default(), ImageFont.load_default()


def generate_barcode_image(code: str, barcode_type: str = "code128") -> bytes:
    """
    Generate barcode image.

    Args:
        code: The code to encode
        barcode_type: Type of barcode (code128, ean13, etc.)

    Returns:
        PNG image as bytes. An error image is returned when rendering fails.
    """
    try:
        barcode_class = barcode.get_barcode_class(barcode_type)
        barcode_instance = barcode_class(code, writer=ImageWriter())

        buffer = io.BytesIO()
        barcode_instance.write(
            buffer,
            options={
                "module_width": 0.3,
                "module_height": 15.0,
                "quiet_zone": 6.5,
                "font_size": 10,
                "text_distance": 5.0,
                "background": "white",
                "foreground": "black",
            },
        )

        buffer.seek(0)
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"Barcode rendering failed for {code!r}: {e}", exc_info=True)
        return _error_image(str(e), (300, 100))


def generate_qr_code_image(data: str, size: int = 10) -> bytes:
    """
    Generate QR code image.

    Args:
        data: Data to encode in QR code
        size: Box size in pixels

    Returns:
        PNG image as bytes
    """
    try:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=size,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"QR code rendering failed: {e}", exc_info=True)
        return _error_image(str(e), (200, 200))


def generate_product_label(
    name: str,
    price: str,
    barcode_data: str,
    currency: str = "EGP",
    offer_price: str = None,
    size: tuple = (400, 220),
) -> bytes:
    """
    Generate a printable shelf label with the product barcode.

    When ``offer_price`` is given the regular price is printed struck through
    next to the offer price.
    """
    try:
        img = Image.new("RGB", size, color="white")
        draw = ImageDraw.Draw(img)
        title_font, text_font = _load_fonts(16, 12)

        draw.text((10, 10), name[:32], fill="black", font=title_font)

        if offer_price is not None:
            regular = f"{price} {currency}"
            draw.text((10, 38), regular, fill="gray", font=text_font)
            width = draw.textlength(regular, font=text_font)
            draw.line((10, 45, 10 + width, 45), fill="gray", width=1)
            draw.text((20 + width, 35), f"{offer_price} {currency}", fill="black", font=title_font)
        else:
            draw.text((10, 35), f"{price} {currency}", fill="black", font=title_font)

        barcode_img = Image.open(io.BytesIO(generate_barcode_image(barcode_data)))
        barcode_img.thumbnail((size[0] - 20, size[1] - 75))
        img.paste(barcode_img, (10, 65))

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer.getvalue()

    except Exception as e:
        logger.error(f"Label rendering failed for {name!r}: {e}", exc_info=True)
        return _error_image(str(e), size)
