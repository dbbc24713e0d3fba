"""
Product use cases: validation, image lifecycle and persistence.

Images are uploaded before the record is written, so a failed upload never
leaves a product without the image it was created with. Replacing the image
on update keeps the previous media object; only deleting the product cleans
up its media.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ayni.core.errors import NotFound, ServiceError, ValidationError
from ayni.repositories.base import Repository
from ayni.services.media_service import MediaStore

logger = logging.getLogger(__name__)

COLLECTION = "productos"
TEXT_FIELDS = ("nombre", "categoria", "descripcion")
_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ImageUpload:
    data: bytes
    filename: str = ""
    content_type: str = ""


def parse_price(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError("El precio debe ser un número no negativo")
    try:
        price = float(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("El precio debe ser un número no negativo") from None
    if not math.isfinite(price) or price < 0:
        raise ValidationError("El precio debe ser un número no negativo")
    return price


def parse_colors(value: Any) -> list[dict]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValidationError("Colores con formato inválido") from None
    if not isinstance(value, list):
        raise ValidationError("Colores debe ser una lista")
    for color in value:
        if not isinstance(color, dict) or not str(color.get("nombre") or "").strip():
            raise ValidationError("Cada color necesita un nombre")
    return value


def parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUE_VALUES


def media_references(product: Mapping[str, Any]) -> list[str]:
    """Every media reference a product points at (main image and color variants)."""
    refs = []
    if product.get("imagen"):
        refs.append(product["imagen"])
    for color in product.get("colores") or []:
        if isinstance(color, dict) and color.get("imagen"):
            refs.append(color["imagen"])
    return refs


class ProductService:
    def __init__(self, repository: Repository, media: MediaStore) -> None:
        self.repository = repository
        self.media = media

    def list(self) -> list[dict]:
        return self.repository.list_all(COLLECTION, newest_first=True)

    def get(self, product_id: int) -> dict:
        product = self.repository.get_by_id(COLLECTION, product_id)
        if not product:
            raise NotFound("Producto no encontrado")
        return product

    def _changes(self, fields: Mapping[str, Any]) -> dict:
        changes: dict[str, Any] = {}
        for name in TEXT_FIELDS:
            if fields.get(name) is not None:
                changes[name] = str(fields[name]).strip()
        if fields.get("precio") is not None:
            changes["precio"] = parse_price(fields["precio"])
        if fields.get("colores") is not None:
            changes["colores"] = parse_colors(fields["colores"])
        if fields.get("novedad") is not None:
            changes["novedad"] = parse_flag(fields["novedad"])
        return changes

    def _upload(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None or not image.data:
            return None
        return self.media.upload(image.data, image.filename, image.content_type)

    def create(self, fields: Mapping[str, Any], image: Optional[ImageUpload] = None) -> dict:
        if not str(fields.get("nombre") or "").strip():
            raise ValidationError("El nombre es obligatorio")
        if fields.get("precio") is None:
            raise ValidationError("El precio debe ser un número no negativo")
        changes = self._changes(fields)
        record = {
            "nombre": changes["nombre"],
            "categoria": changes.get("categoria"),
            "precio": changes["precio"],
            "descripcion": changes.get("descripcion"),
            "imagen": None,
            "colores": changes.get("colores", []),
            "novedad": changes.get("novedad", False),
        }
        record["imagen"] = self._upload(image)
        try:
            product = self.repository.insert(COLLECTION, record)
        except ServiceError:
            if record["imagen"]:
                logger.error("Product insert failed; image left orphaned: %s", record["imagen"])
            raise
        logger.info("Producto agregado: %s (id=%s)", product["nombre"], product["id"])
        return product

    def update(self, product_id: int, fields: Mapping[str, Any], image: Optional[ImageUpload] = None) -> dict:
        self.get(product_id)
        changes = self._changes(fields)
        if "nombre" in changes and not changes["nombre"]:
            raise ValidationError("El nombre es obligatorio")
        new_image = self._upload(image)
        if new_image:
            changes["imagen"] = new_image
        product = self.repository.update(COLLECTION, product_id, changes)
        if not product:
            raise NotFound("Producto no encontrado")
        logger.info("Producto actualizado: %s (id=%s)", product["nombre"], product_id)
        return product

    def delete(self, product_id: int) -> dict:
        removed = self.repository.delete(COLLECTION, product_id)
        if not removed:
            raise NotFound("Producto no encontrado")
        for reference in media_references(removed):
            try:
                self.media.delete(reference)
            except ServiceError as exc:
                logger.warning("Could not delete image %s of product %s: %s", reference, product_id, exc.message)
            except Exception:
                logger.warning("Could not delete image %s of product %s", reference, product_id, exc_info=True)
        logger.info("Producto eliminado (id=%s)", product_id)
        return removed
