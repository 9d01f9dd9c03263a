"""FastAPI dependencies resolving per-app collaborators from app.state."""

from fastapi import Request

from shortener.config import Settings
from shortener.services.base import ShortenerService


def get_shortener_service(request: Request) -> ShortenerService:
    return request.app.state.shortener_service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
