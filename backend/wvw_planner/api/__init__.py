"""
API module.
"""

from .routes import scenarios_router, simulations_router

__all__ = [
    "scenarios_router",
    "simulations_router",
]
