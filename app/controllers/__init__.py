"""FastAPI routers acting as controllers in the MVC architecture."""

from . import asr, health

__all__ = ["asr", "health"]
