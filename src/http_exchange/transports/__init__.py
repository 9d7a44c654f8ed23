"""
Transports performing the byte-level exchange of requests.
"""

from .base import BatchRequests, BatchResponses, Transport
from .mock import MockTransport
from .stream import StreamTransport

__all__ = [
    "Transport",
    "BatchRequests",
    "BatchResponses",
    "MockTransport",
    "StreamTransport",
]
