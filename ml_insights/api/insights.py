"""
FastAPI router module for the ML Analytics Insights endpoints.

Endpoints:
- GET  /ml-insights/metrics: Headline analytics snapshot
- POST /ml-insights/predictions: Lead score for one feature bag
- GET  /ml-insights/panel: Current insights panel view-model
- POST /ml-insights/panel/refresh: Refresh the panel and return its view-model

Error mapping:
- MetricsUnavailableError -> 503 (warehouse query failed)
- MalformedDataError -> 502 (stored or returned data could not be mapped)
- Any other error from the hosted model -> 502
"""

import logging

from fastapi import APIRouter, HTTPException

from ml_insights.core.dependencies import (
    InsightsPanelDep,
    MetricsGatewayDep,
    PredictionGatewayDep,
)
from ml_insights.models import (
    AnalyticsMetrics,
    ErrorResponse,
    MLPrediction,
    PanelView,
    UserFeatureInput,
)
from ml_insights.services.errors import MalformedDataError, MetricsUnavailableError

# Configure logging
logger = logging.getLogger(__name__)

# Create router with prefix and tags for OpenAPI documentation
router = APIRouter(prefix="/ml-insights", tags=["ml-insights"])

_ERROR_RESPONSES = {
    502: {"model": ErrorResponse, "description": "Upstream data could not be mapped"},
    503: {"model": ErrorResponse, "description": "Warehouse unavailable"},
}


def _error_detail(error: str, exc: Exception) -> dict:
    return ErrorResponse(error=error, detail=str(exc)).model_dump()


# =============================================================================
# Metrics Endpoints
# =============================================================================


@router.get("/metrics", response_model=AnalyticsMetrics, responses=_ERROR_RESPONSES)
async def read_analytics_metrics(gateway: MetricsGatewayDep) -> AnalyticsMetrics:
    """
    Fetch a fresh analytics snapshot.

    Returns:
        AnalyticsMetrics with realtime users, conversion rate, average
        engagement and the most recent stored predictions.

    Raises:
        HTTPException 503: If a warehouse query fails
        HTTPException 502: If a stored prediction row is malformed
    """
    try:
        return await gateway.get_analytics_metrics()
    except MetricsUnavailableError as e:
        raise HTTPException(status_code=503, detail=_error_detail("metrics_unavailable", e))
    except MalformedDataError as e:
        raise HTTPException(status_code=502, detail=_error_detail("malformed_data", e))


# =============================================================================
# Prediction Endpoints
# =============================================================================


@router.post("/predictions", response_model=MLPrediction, responses=_ERROR_RESPONSES)
async def create_prediction(
    features: UserFeatureInput,
    gateway: PredictionGatewayDep,
) -> MLPrediction:
    """
    Score one user's features with the hosted lead-scoring model.

    Args:
        features: Optional recentActivity / demographics / interactions groups

    Returns:
        MLPrediction with lead score, confidence and heuristic factors

    Raises:
        HTTPException 502: If the model call fails or returns an unusable response
    """
    try:
        return await gateway.get_predictions(features)
    except MalformedDataError as e:
        raise HTTPException(status_code=502, detail=_error_detail("malformed_data", e))
    except Exception as e:
        logger.error(f"Error scoring features: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail=_error_detail("model_failure", e))


# =============================================================================
# Panel Endpoints
# =============================================================================


@router.get("/panel", response_model=PanelView)
async def read_panel(panel: InsightsPanelDep) -> PanelView:
    """Return the panel view-model for its current state."""
    return panel.render()


@router.post("/panel/refresh", response_model=PanelView)
async def refresh_panel(panel: InsightsPanelDep) -> PanelView:
    """Re-fetch metrics for the panel and return the updated view-model."""
    await panel.refresh()
    return panel.render()
