"""
API route modules.
"""

from .scenarios_routes import router as scenarios_router
from .simulations_routes import router as simulations_router

__all__ = ["scenarios_router", "simulations_router"]
