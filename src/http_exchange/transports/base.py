"""
Transport interface.

A transport performs the actual exchange of a prepared Request for a
Response. It is responsible for calling ``request.before_send()``,
``request.prepare()`` and ``request.after_send()`` around the I/O.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Sequence, Union

if TYPE_CHECKING:
    from ..request import Request
    from ..response import Response

logger = logging.getLogger(__name__)

BatchRequests = Union[Mapping[Any, "Request"], Sequence["Request"]]
BatchResponses = Union[Dict[Any, "Response"], List["Response"]]


class Transport(ABC):
    """Interface for request transports."""

    @abstractmethod
    async def send(self, request: "Request") -> "Response":
        """
        Perform the exchange of the given request.

        Raises:
            TransportError: If the exchange cannot be completed
        """
        pass

    async def batch_send(self, requests: BatchRequests) -> BatchResponses:
        """
        Perform several exchanges.

        Requests are sent one after another and the first failure aborts
        the batch. A mapping yields a dict with the same keys, a sequence
        yields a list in the same order.
        """
        if isinstance(requests, Mapping):
            logger.debug(f"Sending batch of {len(requests)} requests")
            responses: Dict[Any, "Response"] = {}
            for key, request in requests.items():
                responses[key] = await self.send(request)
            return responses

        logger.debug(f"Sending batch of {len(requests)} requests")
        return [await self.send(request) for request in requests]
