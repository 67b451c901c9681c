"""Personal tracker for calories, shopping, exercise, weight, bank accounts and bills."""

from .routes import create_app

__version__ = "0.1.0"

__all__ = ["create_app"]
