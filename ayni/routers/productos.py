from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ayni.routers.deps import get_product_service
from ayni.services.product_service import ImageUpload, ProductService
from ayni.services.session_service import require_user

router = APIRouter(prefix="/api/productos", tags=["productos"])


def _image(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    if upload is None or not upload.filename:
        return None
    data = upload.file.read()
    if not data:
        return None
    return ImageUpload(data=data, filename=upload.filename, content_type=upload.content_type or "")


@router.get("")
def list_productos(products: ProductService = Depends(get_product_service)):
    return products.list()


@router.get("/{product_id}")
def get_producto(product_id: int, products: ProductService = Depends(get_product_service)):
    return products.get(product_id)


@router.post("", dependencies=[Depends(require_user)])
def create_producto(
    nombre: Optional[str] = Form(None),
    categoria: Optional[str] = Form(None),
    precio: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    colores: Optional[str] = Form(None),
    novedad: Optional[str] = Form(None),
    imagen: Optional[UploadFile] = File(None),
    products: ProductService = Depends(get_product_service),
):
    fields = {
        "nombre": nombre,
        "categoria": categoria,
        "precio": precio,
        "descripcion": descripcion,
        "colores": colores,
        "novedad": novedad,
    }
    producto = products.create(fields, _image(imagen))
    return {"success": True, "producto": producto}


@router.put("/{product_id}", dependencies=[Depends(require_user)])
def update_producto(
    product_id: int,
    nombre: Optional[str] = Form(None),
    categoria: Optional[str] = Form(None),
    precio: Optional[str] = Form(None),
    descripcion: Optional[str] = Form(None),
    colores: Optional[str] = Form(None),
    novedad: Optional[str] = Form(None),
    imagen: Optional[UploadFile] = File(None),
    products: ProductService = Depends(get_product_service),
):
    fields = {
        "nombre": nombre,
        "categoria": categoria,
        "precio": precio,
        "descripcion": descripcion,
        "colores": colores,
        "novedad": novedad,
    }
    producto = products.update(product_id, fields, _image(imagen))
    return {"success": True, "producto": producto}


@router.delete("/{product_id}", dependencies=[Depends(require_user)])
def delete_producto(product_id: int, products: ProductService = Depends(get_product_service)):
    products.delete(product_id)
    return {"success": True, "message": "Producto eliminado"}
