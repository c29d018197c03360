"""
Tests for the insights SQL builders and table references.
"""

import pytest

from ml_insights.sql.metrics_queries import (
    get_prediction_log_query,
    get_session_aggregate_query,
    table_reference,
)


class TestTableReference:
    """Backtick-quoted table references."""

    def test_without_project(self):
        assert table_reference('user_sessions', 'analytics') == '`analytics.user_sessions`'

    def test_with_project(self):
        assert (
            table_reference('user_sessions', 'analytics', 'my-project')
            == '`my-project.analytics.user_sessions`'
        )

    def test_with_domain_scoped_project(self):
        assert (
            table_reference('ml_predictions', 'analytics', 'example.com:my-project')
            == '`example.com:my-project.analytics.ml_predictions`'
        )

    @pytest.mark.parametrize('project', [
        'My-Project',
        'proj',
        'my-project`; DROP TABLE x; --',
        ':my-project',
        'example.com:',
    ])
    def test_invalid_project_is_rejected(self, project):
        with pytest.raises(ValueError, match='project'):
            table_reference('user_sessions', 'analytics', project)

    @pytest.mark.parametrize('dataset, table', [
        ('analytics-prod', 'user_sessions'),
        ('analytics', 'user.sessions'),
        ('analytics', ''),
    ])
    def test_invalid_dataset_or_table_is_rejected(self, dataset, table):
        with pytest.raises(ValueError):
            table_reference(table, dataset)


class TestQueryBuilders:
    """Parameterized SQL."""

    def test_session_aggregate_binds_window(self):
        sql, params = get_session_aggregate_query('`analytics.user_sessions`', window_minutes=30)

        assert params == {'window_minutes': 30}
        assert '@window_minutes' in sql
        assert 'FROM `analytics.user_sessions`' in sql

    def test_prediction_log_binds_window_and_limit(self):
        sql, params = get_prediction_log_query('`analytics.ml_predictions`', window_hours=2, row_limit=3)

        assert params == {'window_hours': 2, 'row_limit': 3}
        assert 'LIMIT @row_limit' in sql
        assert 'ORDER BY timestamp DESC' in sql
