"""
In-memory transport for tests.

Responses queued with ``append_response`` are handed out in order and
every sent request is recorded for later inspection.
"""

import logging
from collections import deque
from typing import TYPE_CHECKING, Deque, List

from ..exceptions import NoResponseAvailableError
from .base import Transport

if TYPE_CHECKING:
    from ..request import Request
    from ..response import Response

logger = logging.getLogger(__name__)


class MockTransport(Transport):
    """
    Transport replaying canned responses.

    Example:
        transport = MockTransport()
        transport.append_response(Response(content="ok").set_headers({"http-code": 200}))
        client = Client(transport=transport)
        response = await client.get("ping").send()
        sent = transport.flush_requests()
    """

    def __init__(self) -> None:
        self._responses: Deque["Response"] = deque()
        self._requests: List["Request"] = []

    def append_response(self, response: "Response") -> None:
        """Queue a response for a future send."""
        self._responses.append(response)

    def flush_requests(self) -> List["Request"]:
        """Return the requests sent so far and forget them."""
        requests = self._requests
        self._requests = []
        return requests

    async def send(self, request: "Request") -> "Response":
        """
        Hand out the next queued response.

        Raises:
            NoResponseAvailableError: If the queue is empty
        """
        if not self._responses:
            raise NoResponseAvailableError()

        request.before_send()
        request.prepare()

        response = self._responses.popleft()
        if response.client is None:
            response.client = request.client
        self._requests.append(request)
        logger.debug(f"Mock exchange: {request.method.upper()} {request.full_url}")

        request.after_send(response)
        return response
