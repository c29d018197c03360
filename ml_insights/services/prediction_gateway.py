"""
Prediction Gateway for lead scoring.

Sends one user's feature bag to the hosted scoring model and maps the
first returned entry to an MLPrediction. Contributing factors come from
the fixed heuristic rules in ml_insights.services.mapping, applied to the
raw input, regardless of what the model returns.

Errors raised by the model client are logged and re-raised unchanged; there
is no retry and no fallback score.
"""

import logging
from typing import Any, Dict, Mapping, Union

from pydantic import ValidationError

from ml_insights.core.clients import ModelClient
from ml_insights.models import MLPrediction, ModelPredictionEnvelope, UserFeatureInput
from ml_insights.services.errors import MalformedDataError
from ml_insights.services.mapping import FEATURE_GROUPS, derive_factors

# Configure module logger
logger = logging.getLogger(__name__)


def build_instance(features: Union[UserFeatureInput, Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Build the single inference instance for a feature bag.

    Only the three feature groups are copied; absent groups are omitted and
    nothing is validated or defaulted.
    """
    if isinstance(features, UserFeatureInput):
        features = features.model_dump(exclude_none=True)

    return {
        group: features[group]
        for group in FEATURE_GROUPS
        if features.get(group) is not None
    }


class PredictionGateway:
    """
    Scores feature bags with the hosted model.

    Usage:
        gateway = PredictionGateway(model_client, model='lead-scoring')
        prediction = await gateway.get_predictions(features)
    """

    def __init__(self, model_client: ModelClient, model: str) -> None:
        self.model_client = model_client
        self.model = model

    async def get_predictions(
        self,
        features: Union[UserFeatureInput, Mapping[str, Any]],
    ) -> MLPrediction:
        """
        Score one feature bag.

        Args:
            features: UserFeatureInput or a raw mapping with optional
                recentActivity / demographics / interactions groups.

        Returns:
            MLPrediction with the model's score and confidence and the
            heuristic factors.

        Raises:
            Exception: Whatever the model client raises, unchanged.
            MalformedDataError: If the response has no entries or a score
                or confidence outside [0, 1].
        """
        instance = build_instance(features)

        try:
            response = await self.model_client.predict(self.model, [instance])
        except Exception as e:
            logger.error(f"Prediction request to model '{self.model}' failed: {e}", exc_info=True)
            raise

        try:
            envelope = ModelPredictionEnvelope.model_validate(response)
        except ValidationError as e:
            logger.error(f"Model '{self.model}' returned an unusable response: {response!r}")
            raise MalformedDataError(f"Unusable response from model '{self.model}': {e}") from e

        first = envelope.predictions[0]
        return MLPrediction(
            leadScore=first.score,
            confidence=first.confidence,
            factors=derive_factors(instance),
        )
