"""
Metrics Gateway for the ML Analytics Insights panel.

Assembles the headline analytics snapshot from two warehouse queries:

1. Session aggregate over the trailing realtime window (default 15 minutes):
   distinct sessions, mean conversion rate, mean engagement score.
2. Prediction log over the trailing window (default 1 hour): the most
   recent rows (default 5), newest first, each with lead score, confidence
   and JSON-encoded factors.

The queries have no ordering dependency and are issued concurrently; the
snapshot is built only after both complete.

Failure policy:
- Any query failure fails the whole call with MetricsUnavailableError.
  No partially-filled snapshot is ever returned.
- An undecodable factors value, or a stored score outside [0, 1], fails
  the call with MalformedDataError.
- A missing or unparseable headline value (a single field, not a whole
  query) falls back to 0 and is listed in AnalyticsMetrics.defaultedFields.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Tuple

from pydantic import ValidationError

from ml_insights.core.clients import WarehouseClient
from ml_insights.core.config import Settings
from ml_insights.models import AnalyticsMetrics, MLPrediction
from ml_insights.services.errors import MalformedDataError, MetricsUnavailableError
from ml_insights.services.mapping import coerce_metric, decode_factors
from ml_insights.sql.metrics_queries import (
    PREDICTION_LOG_QUERY_NAME,
    SESSION_AGGREGATE_QUERY_NAME,
    get_prediction_log_query,
    get_session_aggregate_query,
    table_reference,
)

# Configure module logger
logger = logging.getLogger(__name__)

# Warehouse column -> AnalyticsMetrics field for the headline values
HEADLINE_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ('realtime_users', 'realtimeUsers'),
    ('conversion_rate', 'conversionRate'),
    ('avg_engagement', 'averageEngagement'),
)


class MetricsGateway:
    """
    Builds AnalyticsMetrics snapshots from the warehouse.

    Usage:
        gateway = MetricsGateway.from_settings(warehouse_client, settings)
        metrics = await gateway.get_analytics_metrics()
    """

    def __init__(
        self,
        warehouse: WarehouseClient,
        session_table: str,
        prediction_table: str,
        realtime_window_minutes: int = 15,
        prediction_window_hours: int = 1,
        prediction_log_limit: int = 5,
    ) -> None:
        self.warehouse = warehouse
        self.session_table = session_table
        self.prediction_table = prediction_table
        self.realtime_window_minutes = realtime_window_minutes
        self.prediction_window_hours = prediction_window_hours
        self.prediction_log_limit = prediction_log_limit

    @classmethod
    def from_settings(cls, warehouse: WarehouseClient, settings: Settings) -> "MetricsGateway":
        """Create a gateway for the tables and windows named in settings."""
        return cls(
            warehouse=warehouse,
            session_table=table_reference(
                settings.session_table, settings.bigquery_dataset, settings.gcp_project_id
            ),
            prediction_table=table_reference(
                settings.prediction_table, settings.bigquery_dataset, settings.gcp_project_id
            ),
            realtime_window_minutes=settings.realtime_window_minutes,
            prediction_window_hours=settings.prediction_window_hours,
            prediction_log_limit=settings.prediction_log_limit,
        )

    async def get_analytics_metrics(self) -> AnalyticsMetrics:
        """
        Fetch a fresh analytics snapshot.

        Returns:
            AnalyticsMetrics with headline values and up to
            prediction_log_limit stored predictions, newest first.

        Raises:
            MetricsUnavailableError: If either warehouse query fails.
            MalformedDataError: If a stored prediction row cannot be mapped.
        """
        aggregate_sql, aggregate_params = get_session_aggregate_query(
            self.session_table,
            window_minutes=self.realtime_window_minutes,
        )
        log_sql, log_params = get_prediction_log_query(
            self.prediction_table,
            window_hours=self.prediction_window_hours,
            row_limit=self.prediction_log_limit,
        )

        aggregate_rows, prediction_rows = await asyncio.gather(
            self._run_query(SESSION_AGGREGATE_QUERY_NAME, aggregate_sql, aggregate_params),
            self._run_query(PREDICTION_LOG_QUERY_NAME, log_sql, log_params),
        )

        headline, defaulted = _map_session_aggregate(aggregate_rows)
        predictions = [
            _map_prediction_row(row)
            for row in prediction_rows[:self.prediction_log_limit]
        ]

        return AnalyticsMetrics(
            realtimeUsers=int(headline['realtimeUsers']),
            conversionRate=headline['conversionRate'],
            averageEngagement=headline['averageEngagement'],
            predictions=predictions,
            defaultedFields=defaulted,
        )

    async def _run_query(
        self,
        query_name: str,
        sql: str,
        params: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        try:
            return await self.warehouse.query(sql, params=params, labels={'query_name': query_name})
        except Exception as e:
            logger.error(f"Warehouse query '{query_name}' failed: {e}", exc_info=True)
            raise MetricsUnavailableError(
                f"Analytics metrics unavailable: {query_name} query failed: {e}",
                query_name=query_name,
            ) from e


# =============================================================================
# Row Mapping
# =============================================================================

def _map_session_aggregate(rows: List[Mapping[str, Any]]) -> Tuple[Dict[str, float], List[str]]:
    """
    Map the aggregate row to headline values.

    An empty result is treated as a row of missing values.
    """
    row: Mapping[str, Any] = rows[0] if rows else {}

    headline: Dict[str, float] = {}
    defaulted: List[str] = []
    for column, field_name in HEADLINE_COLUMNS:
        value, was_defaulted = coerce_metric(row.get(column))
        headline[field_name] = value
        if was_defaulted:
            defaulted.append(field_name)

    if defaulted:
        logger.warning(f"Session aggregate defaulted to 0 for: {', '.join(defaulted)}")

    return headline, defaulted


def _map_prediction_row(row: Mapping[str, Any]) -> MLPrediction:
    """
    Map a prediction log row to an MLPrediction.

    Raises:
        MalformedDataError: If factors cannot be decoded or a score is out of range.
    """
    lead_score, _ = coerce_metric(row.get('lead_score'))
    confidence, _ = coerce_metric(row.get('confidence'))

    try:
        factors = decode_factors(row.get('factors'))
    except MalformedDataError as e:
        logger.error(f"Prediction log row has malformed factors: {e}")
        raise

    try:
        return MLPrediction(leadScore=lead_score, confidence=confidence, factors=factors)
    except ValidationError as e:
        logger.error(f"Prediction log row out of range: {dict(row)!r}")
        raise MalformedDataError(f"Stored prediction out of range: {e}") from e
