"""SQLAlchemy models for users, products and orders."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    JSON,
    func,
)

from .session import Base


class User(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(64), unique=True, nullable=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class Product(Base):
    __tablename__ = "productos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(255), nullable=False)
    categoria = Column(String(128), nullable=True)
    precio = Column(Float, nullable=False, default=0)
    descripcion = Column(Text, nullable=True)
    imagen = Column(Text, nullable=True)
    colores = Column(JSON, nullable=False, default=list)
    novedad = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class Order(Base):
    __tablename__ = "pedidos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cliente = Column(JSON, nullable=False)
    productos = Column(JSON, nullable=False, default=list)
    total = Column(Float, nullable=False, default=0)
    metodo_pago = Column(String(64), nullable=False)
    estado = Column(String(32), nullable=False, default="pendiente")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
