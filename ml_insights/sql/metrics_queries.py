"""
Metrics Queries Module for the ML Insights backend.

Provides parameterized BigQuery Standard SQL for the insights panel:
- Realtime session aggregate over a trailing window of minutes
- Recent prediction log rows over a trailing window of hours

Window sizes and row limits are bound as named query parameters
(@window_minutes, @window_hours, @row_limit). Table references are
interpolated, so every identifier is validated first.
"""

import re
from typing import Any, Dict, Optional, Tuple


# =============================================================================
# CONSTANTS
# =============================================================================

SESSION_AGGREGATE_QUERY_NAME: str = 'session_aggregate'
PREDICTION_LOG_QUERY_NAME: str = 'prediction_log'

# BigQuery project IDs allow hyphens, and legacy ones carry a "domain:" prefix;
# dataset and table names allow neither.
_PROJECT_PATTERN = re.compile(r'^(?:[a-z0-9][a-z0-9.\-]*[a-z0-9]:)?[a-z][a-z0-9\-]{4,28}[a-z0-9]$')
_IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]{0,1023}$')


# =============================================================================
# TABLE REFERENCES
# =============================================================================

def table_reference(table: str, dataset: str, project: Optional[str] = None) -> str:
    """
    Build a backtick-quoted table reference.

    Args:
        table: Table name.
        dataset: Dataset name.
        project: Optional project ID, plain or domain-scoped
            (example.com:my-project); omitted references resolve against
            the client's default project.

    Returns:
        Reference such as `my-project.analytics.user_sessions`.

    Raises:
        ValueError: If any identifier contains characters BigQuery does
            not allow.
    """
    for label, value in (('dataset', dataset), ('table', table)):
        if not _IDENTIFIER_PATTERN.match(value):
            raise ValueError(f"Invalid {label} name: {value!r}")

    if project is None:
        return f"`{dataset}.{table}`"

    if not _PROJECT_PATTERN.match(project):
        raise ValueError(f"Invalid project ID: {project!r}")
    return f"`{project}.{dataset}.{table}`"


# =============================================================================
# SESSION AGGREGATE QUERY
# =============================================================================

def get_session_aggregate_query(
    session_table: str,
    window_minutes: int = 15,
) -> Tuple[str, Dict[str, Any]]:
    """
    Generate the realtime session aggregate query.

    Returns one row with:
    - realtime_users: COUNT(DISTINCT session_id)
    - conversion_rate: AVG(conversion_rate)
    - avg_engagement: AVG(engagement_score)

    AVG over an empty window is NULL; the gateway maps NULL to 0.

    Args:
        session_table: Table reference from table_reference().
        window_minutes: Trailing window size.

    Returns:
        Tuple of (SQL string, named query parameters).
    """
    sql = f"""
    -- Realtime Session Aggregate
    SELECT
        COUNT(DISTINCT session_id) AS realtime_users,
        AVG(conversion_rate) AS conversion_rate,
        AVG(engagement_score) AS avg_engagement
    FROM {session_table}
    WHERE timestamp >= TIMESTAMP_SUB(CURRENT_TIMESTAMP(), INTERVAL @window_minutes MINUTE)
    """
    return sql, {'window_minutes': window_minutes}


# =============================================================================
# PREDICTION LOG QUERY
# =============================================================================

def get_prediction_log_query(
    prediction_table: str,
    window_hours: int = 1,
    row_limit: int = 5,
) -> Tuple[str, Dict[str, Any]]:
    """
    Generate the recent prediction log query.

    Rows are ordered newest first. The factors column holds JSON-encoded
    text, decoded by the gateway.

    Args:
        prediction_table: Table reference from table_reference().
        window_hours: Trailing window size.
        row_limit: Maximum number of rows.

    Returns:
        Tuple of (SQL string, named query parameters).
    """
    sql = f"""
    -- Recent Prediction Log
    SELECT
        lead_score,
        confidence,
        factors,
        timestamp
    FROM {prediction_table}
    WHERE timestamp >= TIMESTAMP_SUB(CURRENT_TIMESTAMP(), INTERVAL @window_hours HOUR)
    ORDER BY timestamp DESC
    LIMIT @row_limit
    """
    return sql, {'window_hours': window_hours, 'row_limit': row_limit}
