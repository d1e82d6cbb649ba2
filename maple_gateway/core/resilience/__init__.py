"""
Resilience Module

Error classification, backoff policy and the retry controller.
"""

from .backoff import KIND_MULTIPLIERS, BackoffPolicy
from .error_classifier import ErrorClassifier, extract_upstream_error
from .retry_controller import RetryController, RetryDecision, RetryState

__all__ = [
    "KIND_MULTIPLIERS",
    "BackoffPolicy",
    "ErrorClassifier",
    "extract_upstream_error",
    "RetryController",
    "RetryDecision",
    "RetryState",
]
