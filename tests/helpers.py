import io

from PIL import Image


def make_image_bytes(size=(1200, 800), fmt="PNG", color=(52, 152, 219)) -> bytes:
    """Encode a solid-color image in memory."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def make_oversized_png(size=(15000, 15000)) -> bytes:
    """A 1-bit PNG that compresses small but decodes past Pillow's pixel limit."""
    buf = io.BytesIO()
    Image.new("1", size).save(buf, format="PNG")
    return buf.getvalue()
