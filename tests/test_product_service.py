from __future__ import annotations

import pytest

from ayni.core.errors import NotFound, UpstreamFailure, ValidationError
from ayni.services.product_service import ImageUpload, ProductService, parse_colors, parse_price


@pytest.fixture()
def products(repository, fake_media):
    return ProductService(repository, fake_media)


BASE = {"nombre": "Vaso", "categoria": "ceramica", "precio": "25.5", "colores": "[]", "novedad": "true"}


def test_create_without_image(products):
    producto = products.create(BASE)

    assert producto["precio"] == 25.5
    assert producto["imagen"] is None
    assert producto["colores"] == []
    assert producto["novedad"] is True
    assert products.get(producto["id"]) == producto


def test_create_with_image_uploads_first(products, fake_media):
    producto = products.create(BASE, ImageUpload(b"img-bytes", "vaso.png", "image/png"))

    assert producto["imagen"] in fake_media.objects
    assert fake_media.objects[producto["imagen"]] == b"img-bytes"


def test_failed_upload_prevents_record(products, fake_media, repository):
    fake_media.fail_upload = True

    with pytest.raises(UpstreamFailure):
        products.create(BASE, ImageUpload(b"img-bytes", "vaso.png"))

    assert repository.list_all("productos") == []


@pytest.mark.parametrize("precio", ["abc", "-1", "nan", "inf", "", None])
def test_invalid_price_is_rejected(products, precio):
    with pytest.raises(ValidationError):
        products.create({**BASE, "precio": precio})


def test_name_is_required(products):
    with pytest.raises(ValidationError):
        products.create({**BASE, "nombre": "  "})


def test_colors_parsing():
    assert parse_colors(None) == []
    assert parse_colors("") == []
    assert parse_colors('[{"nombre": "rojo", "imagen": "/media/r.png"}]') == [{"nombre": "rojo", "imagen": "/media/r.png"}]
    for bad in ("{oops", '{"nombre": "rojo"}', '["rojo"]', '[{"imagen": "x"}]'):
        with pytest.raises(ValidationError):
            parse_colors(bad)


def test_parse_price_accepts_numbers_and_strings():
    assert parse_price("0") == 0.0
    assert parse_price(" 12.50 ") == 12.5
    assert parse_price(3) == 3.0


def test_update_merges_only_provided_fields(products):
    producto = products.create({**BASE, "descripcion": "Hecho a mano", "colores": '[{"nombre": "azul"}]'})

    updated = products.update(producto["id"], {"precio": "30"})

    assert updated["precio"] == 30.0
    assert updated["nombre"] == "Vaso"
    assert updated["descripcion"] == "Hecho a mano"
    assert updated["colores"] == [{"nombre": "azul"}]
    assert updated["novedad"] is True
    assert updated["updated_at"]


def test_update_replaces_image_without_deleting_old_one(products, fake_media):
    producto = products.create(BASE, ImageUpload(b"old"))
    old_ref = producto["imagen"]

    updated = products.update(producto["id"], {}, ImageUpload(b"new"))

    assert updated["imagen"] != old_ref
    assert fake_media.objects[updated["imagen"]] == b"new"
    assert old_ref in fake_media.objects
    assert fake_media.deleted == []


def test_update_missing_product_is_not_found_and_uploads_nothing(products, fake_media, repository):
    with pytest.raises(NotFound) as excinfo:
        products.update(999999, {"precio": "1"}, ImageUpload(b"img"))

    assert excinfo.value.message == "Producto no encontrado"
    assert fake_media.objects == {}
    assert repository.list_all("productos") == []


def test_delete_cascades_media(products, fake_media):
    colores = '[{"nombre": "rojo", "imagen": "https://media.test/studio-ayni/rojo.png"}, {"nombre": "azul"}]'
    producto = products.create({**BASE, "colores": colores}, ImageUpload(b"img"))

    products.delete(producto["id"])

    assert fake_media.deleted == [producto["imagen"], "https://media.test/studio-ayni/rojo.png"]
    assert products.list() == []


def test_delete_succeeds_when_media_delete_fails(products, fake_media):
    producto = products.create(BASE, ImageUpload(b"img"))
    fake_media.fail_delete = True

    products.delete(producto["id"])

    assert fake_media.deleted == [producto["imagen"]]
    with pytest.raises(NotFound):
        products.get(producto["id"])


def test_delete_succeeds_when_media_store_raises_unexpectedly(products, fake_media):
    colores = '[{"nombre": "rojo", "imagen": "https://media.test/studio-ayni/rojo.png"}]'
    producto = products.create({**BASE, "colores": colores}, ImageUpload(b"img"))
    fake_media.delete_error = RuntimeError("connection reset")

    removed = products.delete(producto["id"])

    assert removed["id"] == producto["id"]
    assert fake_media.deleted == [producto["imagen"], "https://media.test/studio-ayni/rojo.png"]
    assert products.list() == []


def test_delete_missing_product(products, fake_media):
    with pytest.raises(NotFound):
        products.delete(424242)
    assert fake_media.deleted == []


def test_list_is_newest_first(products):
    first = products.create({**BASE, "nombre": "Primero"})
    second = products.create({**BASE, "nombre": "Segundo"})

    assert [p["id"] for p in products.list()] == [second["id"], first["id"]]
