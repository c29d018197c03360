"""
FastAPI dependency injection module for the ML Insights backend.

The gateways and the insights panel are constructed once in the
application lifespan (see ml_insights.main) and stored on app.state. The
dependencies below hand them to route handlers, so tests can substitute
fakes through app.dependency_overrides without patching module internals.

Dependencies Provided:
- get_settings_dependency / SettingsDep: cached Settings
- get_metrics_gateway / MetricsGatewayDep: MetricsGateway
- get_prediction_gateway / PredictionGatewayDep: PredictionGateway
- get_insights_panel / InsightsPanelDep: app-scoped InsightsPanel

Usage:
    @router.get("/metrics")
    async def read_metrics(gateway: MetricsGatewayDep) -> AnalyticsMetrics:
        return await gateway.get_analytics_metrics()
"""

from typing import Annotated

from fastapi import Depends, Request

from ml_insights.core.config import Settings, get_settings
from ml_insights.services.metrics_gateway import MetricsGateway
from ml_insights.services.prediction_gateway import PredictionGateway
from ml_insights.views.insights_panel import InsightsPanel


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


# =============================================================================
# Gateway Dependencies
# =============================================================================

def get_metrics_gateway(request: Request) -> MetricsGateway:
    """Return the MetricsGateway built at startup."""
    return request.app.state.metrics_gateway


def get_prediction_gateway(request: Request) -> PredictionGateway:
    """Return the PredictionGateway built at startup."""
    return request.app.state.prediction_gateway


def get_insights_panel(request: Request) -> InsightsPanel:
    """Return the app-scoped InsightsPanel mounted at startup."""
    return request.app.state.insights_panel


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

MetricsGatewayDep = Annotated[MetricsGateway, Depends(get_metrics_gateway)]

PredictionGatewayDep = Annotated[PredictionGateway, Depends(get_prediction_gateway)]

InsightsPanelDep = Annotated[InsightsPanel, Depends(get_insights_panel)]
