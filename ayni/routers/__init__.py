"""
FastAPI routers grouped by resource (auth, productos, pedidos, usuarios, health).

Each module exposes an APIRouter included by `ayni.app.create_app`. Routers
translate HTTP to service calls and nothing more.
"""
