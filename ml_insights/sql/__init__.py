"""
SQL Query Module for the ML Insights backend.

Provides parameterized warehouse queries for the insights panel.

Example usage:
    from ml_insights.sql import table_reference, get_session_aggregate_query

    table = table_reference('user_sessions', 'analytics', project='my-project')
    sql, params = get_session_aggregate_query(table, window_minutes=15)
"""

from ml_insights.sql.metrics_queries import (
    table_reference,
    get_session_aggregate_query,
    get_prediction_log_query,
    SESSION_AGGREGATE_QUERY_NAME,
    PREDICTION_LOG_QUERY_NAME,
)

__all__ = [
    'table_reference',
    'get_session_aggregate_query',
    'get_prediction_log_query',
    'SESSION_AGGREGATE_QUERY_NAME',
    'PREDICTION_LOG_QUERY_NAME',
]
