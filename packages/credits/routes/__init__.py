"""Credit API routes."""

from packages.credits.routes import credits

__all__ = ["credits"]
