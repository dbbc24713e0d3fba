"""
High-level use cases for the AYNI API.

Each service module orchestrates repositories/adapters to implement business
rules (create a product with its image, place an order, log a user in).

Routers (FastAPI endpoints) call these services instead of touching the
database, the JSON files or the media directory directly.
"""
