"""
Services package for the ML Insights backend.

Modules:
- metrics_gateway: Headline analytics snapshot from the warehouse
- prediction_gateway: Lead scoring via the hosted model
- mapping: Numeric coercion, stored-factor decoding, heuristic factor rules
- fakes: In-memory warehouse and model clients
- errors: Gateway error taxonomy

Usage:
    from ml_insights.services import MetricsGateway, PredictionGateway

    metrics = await MetricsGateway.from_settings(warehouse, settings).get_analytics_metrics()
"""

from ml_insights.services.errors import (
    InsightsServiceError,
    MetricsUnavailableError,
    MalformedDataError,
)
from ml_insights.services.mapping import (
    FACTOR_RULES,
    FEATURE_GROUPS,
    coerce_number,
    coerce_metric,
    decode_factors,
    derive_factors,
)
from ml_insights.services.fakes import (
    InMemoryWarehouseClient,
    StaticModelClient,
)
from ml_insights.services.metrics_gateway import MetricsGateway
from ml_insights.services.prediction_gateway import PredictionGateway, build_instance

__all__ = [
    # Errors
    'InsightsServiceError',
    'MetricsUnavailableError',
    'MalformedDataError',
    # Mapping rules
    'FACTOR_RULES',
    'FEATURE_GROUPS',
    'coerce_number',
    'coerce_metric',
    'decode_factors',
    'derive_factors',
    # Fakes
    'InMemoryWarehouseClient',
    'StaticModelClient',
    # Gateways
    'MetricsGateway',
    'PredictionGateway',
    'build_instance',
]
