"""
Pytest Configuration and Shared Fixtures for ML Insights Backend Tests.

This module provides fixtures for all backend tests, supporting:
- Async test execution with pytest-asyncio
- In-memory warehouse and model clients seeded with representative rows
- Mock Google Cloud clients (BigQuery, Vertex AI) for adapter tests
- Sample feature bags for the prediction gateway
"""

import json
from typing import Any, Dict, Generator, List
from unittest.mock import AsyncMock, Mock, patch

import pytest

from ml_insights.core.config import Settings
from ml_insights.models import ClientBackend
from ml_insights.services.fakes import InMemoryWarehouseClient, StaticModelClient
from ml_insights.services.metrics_gateway import MetricsGateway
from ml_insights.services.prediction_gateway import PredictionGateway
from ml_insights.sql.metrics_queries import (
    PREDICTION_LOG_QUERY_NAME,
    SESSION_AGGREGATE_QUERY_NAME,
)


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - integration: tests that talk to real Google Cloud services
    """
    config.addinivalue_line(
        'markers',
        'integration: marks tests requiring external service connectivity'
    )


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture
def test_settings() -> Settings:
    """
    Settings isolated from the process environment and any .env file.

    Uses the in-memory client backend and the default query windows.
    """
    return Settings(
        _env_file=None,
        gcp_project_id='test-project',
        client_backend=ClientBackend.FAKE,
    )


# ============================================================
# WAREHOUSE FIXTURES
# ============================================================

@pytest.fixture
def session_aggregate_row() -> Dict[str, Any]:
    """Aggregate row as BigQuery returns it for the realtime window."""
    return {
        'realtime_users': 150,
        'conversion_rate': 2.8,
        'avg_engagement': 4.2,
    }


@pytest.fixture
def prediction_log_rows() -> List[Dict[str, Any]]:
    """Prediction log rows, newest first, with JSON-encoded factors."""
    return [
        {
            'lead_score': 0.91,
            'confidence': 0.88,
            'factors': json.dumps(['High page engagement', 'Enterprise prospect']),
            'timestamp': '2026-10-19T09:55:00Z',
        },
        {
            'lead_score': 0.42,
            'confidence': 0.75,
            'factors': '["Active email engagement"]',
            'timestamp': '2026-10-19T09:40:00Z',
        },
        {
            'lead_score': 0.12,
            'confidence': 0.6,
            'factors': '[]',
            'timestamp': '2026-10-19T09:10:00Z',
        },
    ]


@pytest.fixture
def warehouse_client(
    session_aggregate_row: Dict[str, Any],
    prediction_log_rows: List[Dict[str, Any]],
) -> InMemoryWarehouseClient:
    """In-memory warehouse answering both insights queries."""
    return InMemoryWarehouseClient(results={
        SESSION_AGGREGATE_QUERY_NAME: [session_aggregate_row],
        PREDICTION_LOG_QUERY_NAME: prediction_log_rows,
    })


@pytest.fixture
def metrics_gateway(warehouse_client: InMemoryWarehouseClient) -> MetricsGateway:
    """MetricsGateway over the in-memory warehouse with default windows."""
    return MetricsGateway(
        warehouse=warehouse_client,
        session_table='`analytics.user_sessions`',
        prediction_table='`analytics.ml_predictions`',
    )


# ============================================================
# MODEL FIXTURES
# ============================================================

@pytest.fixture
def model_client() -> StaticModelClient:
    """Static model returning score 0.85 / confidence 0.92."""
    return StaticModelClient()


@pytest.fixture
def mock_model_client() -> AsyncMock:
    """
    AsyncMock model client.

    Usage:
        mock_model_client.predict.return_value = {'predictions': [...]}
        mock_model_client.predict.side_effect = RuntimeError('boom')
    """
    client = AsyncMock()
    client.predict = AsyncMock(return_value={
        'predictions': [{'score': 0.85, 'confidence': 0.92}],
        'deployedModelId': '1234567890',
    })
    return client


@pytest.fixture
def prediction_gateway(model_client: StaticModelClient) -> PredictionGateway:
    """PredictionGateway over the static model."""
    return PredictionGateway(model_client, model='lead-scoring')


@pytest.fixture
def sample_features() -> Dict[str, Any]:
    """Feature bag that crosses every heuristic threshold."""
    return {
        'recentActivity': {'pageViews': 10},
        'demographics': {'companySize': 200},
        'interactions': {'emailClicks': 5},
    }


# ============================================================
# GOOGLE CLOUD MOCK FIXTURES
# ============================================================

@pytest.fixture
def mock_bigquery_client() -> Mock:
    """
    Mock google.cloud.bigquery.Client.

    Mocked Methods:
        - client.query(sql, job_config=...): Returns QueryJob mock
        - query_job.result(): Returns an iterable of rows (dicts expose items())

    Usage:
        mock_bigquery_client.query.return_value.result.return_value = [
            {'realtime_users': 150}
        ]
    """
    client = Mock()
    query_job = Mock()
    query_job.job_id = 'job-123'
    query_job.result = Mock(return_value=[])
    client.query = Mock(return_value=query_job)
    return client


@pytest.fixture
def mock_vertex_endpoint() -> Generator[Mock, None, None]:
    """
    Patch aiplatform.Endpoint with a mock endpoint.

    endpoint.predict(instances=...) returns an object with `predictions`
    and `deployed_model_id`, like aiplatform.models.Prediction.
    """
    endpoint = Mock()
    response = Mock()
    response.predictions = [{'score': 0.77, 'confidence': 0.81}]
    response.deployed_model_id = '42'
    endpoint.predict = Mock(return_value=response)

    with patch('ml_insights.core.clients.aiplatform.Endpoint', return_value=endpoint) as endpoint_cls:
        endpoint.endpoint_cls = endpoint_cls
        yield endpoint
