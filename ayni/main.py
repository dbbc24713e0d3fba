"""ASGI entry point: `uvicorn ayni.main:app`."""

from ayni.app import create_app

app = create_app()
