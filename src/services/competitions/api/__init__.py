"""HTTP surface of the competition mentor."""

from src.services.competitions.api.app import create_app
from src.services.competitions.api.router import get_services

__all__ = [
    "create_app",
    "get_services",
]
