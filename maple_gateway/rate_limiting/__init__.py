"""
Rate Limiting Module

Client-side admission control for outbound NEXON API calls.
"""

from .admission_controller import AdmissionController
from .admission_queue import AdmissionQueue, RatePolicy, Ticket

__all__ = [
    "AdmissionController",
    "AdmissionQueue",
    "RatePolicy",
    "Ticket",
]
