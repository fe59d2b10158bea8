import io
import re
import warnings

from PIL import Image, UnidentifiedImageError

from .errors import ValidationError

ALLOWED_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)
AVATAR_MEDIA_TYPE = "image/png"
# Small files can still declare huge canvases; refuse them before decoding.
MAX_AVATAR_PIXELS = 25_000_000


def check_upload(filename: str, size: int, max_bytes: int) -> None:
    if not filename or not ALLOWED_EXTENSIONS.search(filename):
        raise ValidationError("File must be a jpg, jpeg, or png.")
    if size > max_bytes:
        raise ValidationError(f"File too large (limit is {max_bytes} bytes).")


def normalize_avatar(data: bytes, size: int = 250, max_pixels: int = MAX_AVATAR_PIXELS) -> bytes:
    """Resize an uploaded image to a ``size`` x ``size`` PNG."""
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(data)) as image:
                width, height = image.size
                if width * height > max_pixels:
                    raise ValidationError("Image dimensions are too large.")
                image.load()
                if image.mode not in ("RGB", "RGBA"):
                    image = image.convert("RGBA")
                resized = image.resize((size, size))
    except (Image.DecompressionBombError, Image.DecompressionBombWarning) as exc:
        raise ValidationError("Image dimensions are too large.") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("File is not a readable image.") from exc

    out = io.BytesIO()
    resized.save(out, format="PNG")
    return out.getvalue()
