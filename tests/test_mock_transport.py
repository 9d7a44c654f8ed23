"""
Tests for MockTransport and the sequential batch policy.
"""

import pytest

from http_exchange import Client, MockTransport, Response
from http_exchange.exceptions import NoResponseAvailableError


class TestMockTransport:
    """Test MockTransport."""

    @pytest.mark.asyncio
    async def test_responses_are_fifo(self, client: Client, mock_transport: MockTransport) -> None:
        first, second = Response(content="1"), Response(content="2")
        mock_transport.append_response(first)
        mock_transport.append_response(second)
        assert await client.get("a").send() is first
        assert await client.get("b").send() is second

    @pytest.mark.asyncio
    async def test_exhausted_queue(self, client: Client) -> None:
        with pytest.raises(NoResponseAvailableError, match="No Response available"):
            await client.get("a").send()

    @pytest.mark.asyncio
    async def test_flush_requests(self, client: Client, mock_transport: MockTransport) -> None:
        mock_transport.append_response(Response())
        mock_transport.append_response(Response())
        first, second = client.get("a"), client.post("b", {"x": 1})
        await first.send()
        await second.send()

        assert mock_transport.flush_requests() == [first, second]
        assert mock_transport.flush_requests() == []

    @pytest.mark.asyncio
    async def test_requests_are_prepared(self, client: Client, mock_transport: MockTransport) -> None:
        mock_transport.append_response(Response())
        request = client.post("b", {"x": 1})
        await request.send()
        assert request.prepared
        assert request.content == "x=1"

    @pytest.mark.asyncio
    async def test_response_inherits_client(
        self, client: Client, mock_transport: MockTransport
    ) -> None:
        orphan = Response()
        mock_transport.append_response(orphan)
        await client.get("a").send()
        assert orphan.client is client

    @pytest.mark.asyncio
    async def test_response_keeps_own_client(
        self, client: Client, mock_transport: MockTransport
    ) -> None:
        other = Client()
        response = Response(client=other)
        mock_transport.append_response(response)
        await client.get("a").send()
        assert response.client is other


class TestBatchSend:
    """Test the sequential fail-fast batch policy."""

    @pytest.mark.asyncio
    async def test_key_association(self, client: Client, mock_transport: MockTransport) -> None:
        responses = [Response(content=str(i)) for i in range(3)]
        for response in responses:
            mock_transport.append_response(response)

        result = await client.batch_send(
            {5: client.get("five"), "b": client.get("b"), ("t",): client.get("t")}
        )
        assert result == {5: responses[0], "b": responses[1], ("t",): responses[2]}

    @pytest.mark.asyncio
    async def test_first_failure_aborts(self, client: Client, mock_transport: MockTransport) -> None:
        mock_transport.append_response(Response())
        with pytest.raises(NoResponseAvailableError):
            await client.batch_send({"a": client.get("a"), "b": client.get("b"), "c": client.get("c")})
        assert len(mock_transport.flush_requests()) == 1

    @pytest.mark.asyncio
    async def test_empty_batch(self, client: Client) -> None:
        assert await client.batch_send({}) == {}
        assert await client.batch_send([]) == []
