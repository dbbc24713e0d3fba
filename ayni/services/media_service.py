"""
Media adapter: stores product images and deletes them by reference.

`LocalMediaStore` keeps files under MEDIA_DIR and hands out references under
MEDIA_BASE_URL; the app serves that prefix as static files.
"""

from __future__ import annotations

import io
import logging
import os
import uuid
from pathlib import Path
from typing import Protocol, runtime_checkable

from PIL import Image, ImageOps, UnidentifiedImageError

from ayni.core.errors import NotFound, UpstreamFailure, ValidationError

logger = logging.getLogger(__name__)

# Pillow format name -> file extension
ALLOWED_FORMATS = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "WEBP": "webp",
}


class MediaNotFound(NotFound):
    default_message = "Imagen no encontrada"


@runtime_checkable
class MediaStore(Protocol):
    def upload(self, data: bytes, filename: str = "", content_type: str = "") -> str:
        ...

    def delete(self, reference: str) -> None:
        ...

    def describe(self) -> str:
        ...


def _open_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise ValidationError("Archivo de imagen inválido") from exc
    # verify() leaves the image unusable; reopen for processing
    image = Image.open(io.BytesIO(data))
    if image.format not in ALLOWED_FORMATS:
        raise ValidationError("Formato de imagen no permitido (jpg, jpeg, png, gif, webp)")
    return image


def _downscale(image: Image.Image, data: bytes, max_dimension: int) -> bytes:
    """Return the stored payload: original bytes unless the image exceeds the limit."""
    if max(image.size) <= max_dimension:
        return data
    fmt = image.format
    try:
        image = ImageOps.exif_transpose(image)
    except Exception:
        pass
    if fmt == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.thumbnail((max_dimension, max_dimension), Image.LANCZOS)
    buffer = io.BytesIO()
    if fmt == "JPEG":
        image.save(buffer, format=fmt, quality=85, optimize=True)
    else:
        image.save(buffer, format=fmt)
    return buffer.getvalue()


class LocalMediaStore:
    """Writes images to disk and serves them from a URL prefix."""

    def __init__(self, root_dir: str | os.PathLike, base_url: str = "/media", folder: str = "", max_dimension: int = 1000) -> None:
        self.root_dir = Path(root_dir)
        self.base_url = base_url.rstrip("/")
        self.folder = folder.strip("/")
        self.max_dimension = max(1, int(max_dimension))
        os.makedirs(self.root_dir / self.folder, exist_ok=True)

    def describe(self) -> str:
        return f"local:{self.base_url}"

    def _path_for(self, reference: str) -> Path:
        prefix = f"{self.base_url}/"
        ref = (reference or "").split("?", 1)[0]
        if not ref.startswith(prefix):
            raise MediaNotFound()
        relative = ref[len(prefix) :]
        try:
            path = (self.root_dir / relative).resolve()
        except (OSError, ValueError):
            raise MediaNotFound() from None
        if self.root_dir.resolve() not in path.parents:
            raise MediaNotFound()
        return path

    def upload(self, data: bytes, filename: str = "", content_type: str = "") -> str:
        if not data:
            raise ValidationError("Archivo de imagen vacío")
        image = _open_image(data)
        ext = ALLOWED_FORMATS[image.format]
        payload = _downscale(image, data, self.max_dimension)
        name = f"{uuid.uuid4().hex}.{ext}"
        relative = f"{self.folder}/{name}" if self.folder else name
        dest_path = self.root_dir / relative
        try:
            os.makedirs(dest_path.parent, exist_ok=True)
            with open(dest_path, "wb") as f:
                f.write(payload)
        except OSError as exc:
            logger.error("Cannot store image %s: %s", dest_path, exc)
            raise UpstreamFailure() from exc
        logger.info("Image stored: %s (%s, %d bytes)", relative, filename or "sin nombre", len(payload))
        return f"{self.base_url}/{relative}"

    def delete(self, reference: str) -> None:
        path = self._path_for(reference)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise MediaNotFound() from exc
        except OSError as exc:
            raise UpstreamFailure() from exc
        logger.info("Image deleted: %s", reference)
