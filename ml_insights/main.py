"""
FastAPI application entry point for the ML Insights API.

Configures logging and CORS, builds the external clients, gateways and the
insights panel at startup, and registers the API routers.

Clients are selected by Settings.client_backend ('gcp' or 'fake') and
passed to the gateways explicitly; route handlers reach them through the
dependencies in ml_insights.core.dependencies.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ml_insights import __version__
from ml_insights.api.insights import router as insights_router
from ml_insights.core.clients import create_model_client, create_warehouse_client
from ml_insights.core.config import Settings, get_settings
from ml_insights.core.dependencies import SettingsDep
from ml_insights.services.metrics_gateway import MetricsGateway
from ml_insights.services.prediction_gateway import PredictionGateway
from ml_insights.views.insights_panel import InsightsPanel

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_services(app: FastAPI, app_settings: Settings) -> None:
    """
    Construct clients, gateways and the panel and attach them to app.state.

    Raises:
        ValueError: If the gcp backend is selected without a project ID.
    """
    warehouse = create_warehouse_client(app_settings)
    model_client = create_model_client(app_settings)

    app.state.metrics_gateway = MetricsGateway.from_settings(warehouse, app_settings)
    app.state.prediction_gateway = PredictionGateway(
        model_client,
        model=app_settings.vertex_endpoint_id,
    )
    app.state.insights_panel = InsightsPanel(app.state.metrics_gateway)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Build clients, gateways and the insights panel
        - Mount the panel (first metrics load; failures leave it in error state)

    On shutdown:
        - Unmount the panel so in-flight refreshes are discarded
    """
    # Startup
    logger.info("ML Insights API starting")
    build_services(app, settings)
    await app.state.insights_panel.mount()
    logger.info(f"Insights panel mounted ({app.state.insights_panel.state.status.value})")

    yield

    # Shutdown
    logger.info("ML Insights API shutting down")
    app.state.insights_panel.unmount()


# Create FastAPI application
app = FastAPI(
    title="ML Insights API",
    version=__version__,
    description=(
        "FastAPI backend for the dashboard's ML Analytics Insights panel. "
        "Provides realtime analytics metrics from the warehouse and lead "
        "scores from the hosted model."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(insights_router)


@app.get("/health")
async def health_check(app_settings: SettingsDep):
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy' and the active client backend
    """
    return {"status": "healthy", "clientBackend": app_settings.client_backend.value}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "ML Insights API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ml_insights.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
