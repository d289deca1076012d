"""
WvW Victory Point Scenario Planner - FastAPI Application

Main entry point for the web API.
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import scenarios_router, simulations_router
from .core.config import CORS_ORIGINS


logging.getLogger("wvw_planner").addHandler(logging.NullHandler())

# Create FastAPI app
app = FastAPI(
    title="WvW Victory Point Scenario Planner",
    description="Scenario solving and Monte Carlo outcome simulation for three-world WvW matches.",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# CORS configuration
# In production, replace with specific frontend URL
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(scenarios_router, prefix="/api")
app.include_router(simulations_router, prefix="/api")


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "WvW Victory Point Scenario Planner API",
        "version": "1.0.0",
        "docs": "/api/docs",
        "health": "/api/health"
    }
