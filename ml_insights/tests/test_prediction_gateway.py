"""
Tests for the Prediction Gateway.

Verifies:
- Single-instance request shaping from a feature bag
- Score and confidence taken from the first response entry
- Heuristic factors derived from the input, not from the model
- Model errors propagate unchanged (no retry, no fallback score)
- Unusable model responses are reported as MalformedDataError
"""

import pytest

from ml_insights.models import MLPrediction, UserFeatureInput
from ml_insights.services.errors import MalformedDataError
from ml_insights.services.fakes import StaticModelClient
from ml_insights.services.prediction_gateway import PredictionGateway, build_instance


@pytest.mark.asyncio
class TestScoring:
    """Successful scoring."""

    async def test_returns_model_score_and_confidence(self, prediction_gateway, sample_features):
        prediction = await prediction_gateway.get_predictions(sample_features)

        assert prediction == MLPrediction(
            leadScore=0.85,
            confidence=0.92,
            factors=[
                'High page engagement',
                'Active email engagement',
                'Enterprise prospect',
            ],
        )

    async def test_accepts_validated_input_model(self, prediction_gateway, sample_features):
        features = UserFeatureInput.model_validate(sample_features)

        prediction = await prediction_gateway.get_predictions(features)

        assert prediction.leadScore == pytest.approx(0.85)
        assert len(prediction.factors) == 3

    async def test_empty_features_score_without_factors(self, model_client: StaticModelClient):
        gateway = PredictionGateway(model_client, model='lead-scoring')

        prediction = await gateway.get_predictions({})

        assert prediction.factors == []
        assert prediction.leadScore == pytest.approx(0.85)
        assert model_client.requests == [('lead-scoring', [{}])]

    async def test_sends_one_instance_to_configured_model(self, mock_model_client, sample_features):
        gateway = PredictionGateway(mock_model_client, model='projects/p/locations/l/endpoints/123')

        await gateway.get_predictions(sample_features)

        mock_model_client.predict.assert_awaited_once_with(
            'projects/p/locations/l/endpoints/123',
            [sample_features],
        )

    async def test_uses_first_entry_only(self, mock_model_client):
        mock_model_client.predict.return_value = {
            'predictions': [
                {'score': 0.3, 'confidence': 0.4},
                {'score': 0.9, 'confidence': 0.9},
            ],
        }
        gateway = PredictionGateway(mock_model_client, model='lead-scoring')

        prediction = await gateway.get_predictions({})

        assert (prediction.leadScore, prediction.confidence) == (0.3, 0.4)

    async def test_factors_ignore_model_response(self, mock_model_client):
        mock_model_client.predict.return_value = {
            'predictions': [{'score': 0.5, 'confidence': 0.5, 'factors': ['From model']}],
        }
        gateway = PredictionGateway(mock_model_client, model='lead-scoring')

        prediction = await gateway.get_predictions({'demographics': {'companySize': 250}})

        assert prediction.factors == ['Enterprise prospect']

    async def test_boundary_scores_are_valid(self, mock_model_client):
        mock_model_client.predict.return_value = {'predictions': [{'score': 0, 'confidence': 1}]}
        gateway = PredictionGateway(mock_model_client, model='lead-scoring')

        prediction = await gateway.get_predictions({})

        assert (prediction.leadScore, prediction.confidence) == (0.0, 1.0)


@pytest.mark.asyncio
class TestModelFailures:
    """Error propagation and unusable responses."""

    async def test_model_error_propagates_unchanged(self):
        error = TimeoutError('endpoint timed out')
        gateway = PredictionGateway(StaticModelClient(error=error), model='lead-scoring')

        with pytest.raises(TimeoutError) as exc_info:
            await gateway.get_predictions({})

        assert exc_info.value is error

    async def test_model_is_called_once_on_failure(self, mock_model_client):
        mock_model_client.predict.side_effect = RuntimeError('503 Service Unavailable')
        gateway = PredictionGateway(mock_model_client, model='lead-scoring')

        with pytest.raises(RuntimeError):
            await gateway.get_predictions({})

        assert mock_model_client.predict.await_count == 1

    async def test_empty_predictions_are_malformed(self, mock_model_client):
        mock_model_client.predict.return_value = {'predictions': []}
        gateway = PredictionGateway(mock_model_client, model='lead-scoring')

        with pytest.raises(MalformedDataError):
            await gateway.get_predictions({})

    async def test_missing_predictions_are_malformed(self, mock_model_client):
        mock_model_client.predict.return_value = {'deployedModelId': '1'}
        gateway = PredictionGateway(mock_model_client, model='lead-scoring')

        with pytest.raises(MalformedDataError):
            await gateway.get_predictions({})

    @pytest.mark.parametrize('entry', [
        {'score': 1.5, 'confidence': 0.5},
        {'score': 0.5, 'confidence': -0.1},
        {'score': 'high', 'confidence': 0.5},
        {'confidence': 0.5},
    ])
    async def test_unusable_entries_are_malformed(self, mock_model_client, entry):
        mock_model_client.predict.return_value = {'predictions': [entry]}
        gateway = PredictionGateway(mock_model_client, model='lead-scoring')

        with pytest.raises(MalformedDataError):
            await gateway.get_predictions({})


class TestBuildInstance:
    """Request shaping."""

    def test_copies_feature_groups(self, sample_features):
        assert build_instance(sample_features) == sample_features

    def test_drops_absent_groups_and_top_level_extras(self):
        instance = build_instance({
            'recentActivity': {'pageViews': 3},
            'demographics': None,
            'sessionId': 'abc',
        })

        assert instance == {'recentActivity': {'pageViews': 3}}

    def test_keeps_extra_counters_inside_groups(self):
        features = UserFeatureInput.model_validate({
            'interactions': {'emailClicks': 1, 'webinarSignups': 2},
        })

        assert build_instance(features) == {
            'interactions': {'emailClicks': 1, 'webinarSignups': 2},
        }

    def test_validated_input_omits_unset_fields(self):
        features = UserFeatureInput.model_validate({'recentActivity': {}})

        assert build_instance(features) == {'recentActivity': {}}
