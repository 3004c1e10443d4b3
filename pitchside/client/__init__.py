"""
Client Package for the Pitchside backend.

Async helpers for consumers of the HTTP API:
- PredictionPoller: polls a job until it reaches a final state
- PitchsideClient: typed HTTP client with an end-to-end predict_match()
"""

from pitchside.client.poller import PredictionPoller
from pitchside.client.api_client import PitchsideClient

__all__ = ["PredictionPoller", "PitchsideClient"]
