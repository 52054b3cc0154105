import httpx
from fastapi import FastAPI

from src.main import app as default_app


def get_async_client(app: FastAPI | None = None) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app or default_app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")
