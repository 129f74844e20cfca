"""Client side: API access, durable state and the polling loop."""

from ebook_analyzer.client.api_client import AnalyzerApiClient, FinalResult
from ebook_analyzer.client.estimator import EstimatorState, LocalProgressEstimator
from ebook_analyzer.client.poller import ClientPoller, PollOutcome, PollState
from ebook_analyzer.client.progress import ProgressTracker
from ebook_analyzer.client.state import ClientStateStore

__all__ = [
    "AnalyzerApiClient",
    "ClientPoller",
    "ClientStateStore",
    "EstimatorState",
    "FinalResult",
    "LocalProgressEstimator",
    "PollOutcome",
    "PollState",
    "ProgressTracker",
]
