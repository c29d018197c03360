"""
In-memory implementations of the warehouse and model clients.

Wired when Settings.client_backend is 'fake' (the development default) and
used as test doubles. They satisfy the same WarehouseClient / ModelClient
interfaces as the BigQuery and Vertex AI clients, so the gateways run
identical code against either.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional

from ml_insights.sql.metrics_queries import (
    PREDICTION_LOG_QUERY_NAME,
    SESSION_AGGREGATE_QUERY_NAME,
)

# Configure module logger
logger = logging.getLogger(__name__)

# Values the dashboard showed before it was wired to live services.
SAMPLE_SESSION_AGGREGATE: Dict[str, Any] = {
    'realtime_users': 150,
    'conversion_rate': 2.8,
    'avg_engagement': 4.2,
}
SAMPLE_MODEL_SCORE: float = 0.85
SAMPLE_MODEL_CONFIDENCE: float = 0.92


class InMemoryWarehouseClient:
    """
    Warehouse client that answers queries from canned result sets.

    Result sets are keyed by the 'query_name' job label the gateways attach
    to every query. Each call returns deep copies so callers cannot mutate
    the stored rows. Executed queries are recorded in `calls`.
    """

    def __init__(
        self,
        results: Optional[Mapping[str, List[Dict[str, Any]]]] = None,
        errors: Optional[Mapping[str, Exception]] = None,
    ) -> None:
        self.results: Dict[str, List[Dict[str, Any]]] = dict(results or {})
        self.errors: Dict[str, Exception] = dict(errors or {})
        self.calls: List[Dict[str, Any]] = []

    @classmethod
    def with_sample_data(cls) -> "InMemoryWarehouseClient":
        """Client seeded with the sample headline metrics and an empty prediction log."""
        return cls(results={
            SESSION_AGGREGATE_QUERY_NAME: [dict(SAMPLE_SESSION_AGGREGATE)],
            PREDICTION_LOG_QUERY_NAME: [],
        })

    async def query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        labels: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        query_name = (labels or {}).get('query_name', '')
        self.calls.append({'query_name': query_name, 'sql': sql, 'params': dict(params or {})})

        if query_name in self.errors:
            raise self.errors[query_name]
        if query_name not in self.results:
            raise KeyError(f"No canned result for query '{query_name}'")

        return copy.deepcopy(self.results[query_name])


class StaticModelClient:
    """
    Model client that returns one fixed score per instance.

    Requests are recorded in `requests` as (model, instances) tuples.
    """

    def __init__(
        self,
        score: float = SAMPLE_MODEL_SCORE,
        confidence: float = SAMPLE_MODEL_CONFIDENCE,
        error: Optional[Exception] = None,
    ) -> None:
        self.score = score
        self.confidence = confidence
        self.error = error
        self.requests: List[tuple] = []

    async def predict(
        self,
        model: str,
        instances: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        self.requests.append((model, copy.deepcopy(instances)))
        if self.error is not None:
            raise self.error

        return {
            'predictions': [
                {'score': self.score, 'confidence': self.confidence}
                for _ in instances
            ],
            'deployedModelId': 'static',
        }
