"""
High level HTTP client.

The Client owns the transport and the formatter/parser registries,
creates requests and responses, and notifies listeners before and
after every exchange.
"""

from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Type,
    Union,
)

from .encoding import decode_content, truncate
from .events import EVENT_AFTER_SEND, EVENT_BEFORE_SEND, EventEmitter, RequestEvent
from .exceptions import UnrecognizedFormatError
from .formatters import DEFAULT_FORMATTERS, Formatter
from .http_primitives import (
    FORMAT_CURL,
    FORMAT_JSON,
    FORMAT_RAW_URLENCODED,
    FORMAT_URLENCODED,
    FORMAT_XML,
)
from .parsers import DEFAULT_PARSERS, Parser
from .request import URL, Request
from .response import Response
from .transports.base import BatchRequests, BatchResponses, Transport
from .transports.stream import StreamTransport

TransportSpec = Union[Transport, Type[Transport], Callable[[], Transport]]
FormatterSpec = Union[Formatter, Callable[[], Formatter]]
ParserSpec = Union[Parser, Callable[[], Parser]]


class Client(EventEmitter):
    """
    HTTP client.

    Example:
        client = Client(base_url="https://api.example.com")
        response = await client.get("users", {"page": 2}).send()
        if response.is_ok:
            print(response.data)
    """

    FORMAT_JSON = FORMAT_JSON
    FORMAT_URLENCODED = FORMAT_URLENCODED
    FORMAT_RAW_URLENCODED = FORMAT_RAW_URLENCODED
    FORMAT_XML = FORMAT_XML
    FORMAT_CURL = FORMAT_CURL

    EVENT_BEFORE_SEND = EVENT_BEFORE_SEND
    EVENT_AFTER_SEND = EVENT_AFTER_SEND

    DEFAULT_CONTENT_LOGGING_MAX_SIZE = 2000

    request_class: Type[Request] = Request
    response_class: Type[Response] = Response

    def __init__(
        self,
        base_url: str = "",
        transport: Optional[TransportSpec] = None,
        formatters: Optional[Mapping[str, FormatterSpec]] = None,
        parsers: Optional[Mapping[str, ParserSpec]] = None,
        request_config: Optional[Mapping[str, Any]] = None,
        response_config: Optional[Mapping[str, Any]] = None,
        content_logging_max_size: Optional[int] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: URL prepended to relative request URLs
            transport: Transport instance, class or factory; StreamTransport by default
            formatters: Format tag to formatter (instance, class or factory) overrides
            parsers: Format tag to parser (instance, class or factory) overrides
            request_config: Attributes applied to every created request
            response_config: Attributes applied to every created response
            content_logging_max_size: Content length kept in log tokens
        """
        super().__init__()
        self.base_url = base_url
        self.formatters: Dict[str, FormatterSpec] = dict(formatters or {})
        self.parsers: Dict[str, ParserSpec] = dict(parsers or {})
        self._formatter_instances: Dict[str, Formatter] = {}
        self._parser_instances: Dict[str, Parser] = {}
        self.request_config: Dict[str, Any] = dict(request_config or {})
        self.response_config: Dict[str, Any] = dict(response_config or {})
        self.content_logging_max_size = (
            content_logging_max_size
            if content_logging_max_size is not None
            else self.DEFAULT_CONTENT_LOGGING_MAX_SIZE
        )
        self._transport: TransportSpec = transport if transport is not None else StreamTransport

    @property
    def transport(self) -> Transport:
        """Transport instance, created on first access."""
        if not isinstance(self._transport, Transport):
            self._transport = self._transport()
        return self._transport

    @transport.setter
    def transport(self, transport: TransportSpec) -> None:
        self._transport = transport

    def get_formatter(self, format: str) -> Formatter:
        """
        Get the formatter for a format tag.

        Overrides take precedence over the default table; the resolved
        instance is cached for reuse.

        Raises:
            UnrecognizedFormatError: If the tag is unknown
        """
        if format not in self._formatter_instances:
            formatter = self.formatters.get(format) or DEFAULT_FORMATTERS.get(format)
            if formatter is None:
                raise UnrecognizedFormatError(format)
            if not isinstance(formatter, Formatter):
                formatter = formatter()
            self._formatter_instances[format] = formatter
        return self._formatter_instances[format]

    def get_parser(self, format: str) -> Parser:
        """
        Get the parser for a format tag.

        Raises:
            UnrecognizedFormatError: If the tag is unknown
        """
        if format not in self._parser_instances:
            parser = self.parsers.get(format) or DEFAULT_PARSERS.get(format)
            if parser is None:
                raise UnrecognizedFormatError(format)
            if not isinstance(parser, Parser):
                parser = parser()
            self._parser_instances[format] = parser
        return self._parser_instances[format]

    def create_request(self, **config: Any) -> Request:
        """Create a request bound to this client."""
        config = {**self.request_config, **config}
        request_class = config.pop("class", self.request_class)
        return request_class(client=self, **config)

    def create_response(
        self,
        content: Any = None,
        headers: Optional[Union[Mapping[Any, Any], Sequence[str]]] = None,
    ) -> Response:
        """
        Create a response bound to this client.

        Args:
            content: Raw response content
            headers: Header mapping or raw header lines (status line included)
        """
        config = dict(self.response_config)
        response_class = config.pop("class", self.response_class)
        response = response_class(client=self, **config)
        response.set_content(content)
        response.set_headers(headers or [])
        return response

    async def send(self, request: Request) -> Response:
        """
        Send a request.

        Raises:
            TransportError: If the exchange cannot be completed
        """
        return await self.transport.send(request)

    async def batch_send(self, requests: BatchRequests) -> BatchResponses:
        """
        Send several requests.

        Responses keep the keys of the given requests:

            responses = await client.batch_send({
                "news": client.get("news"),
                "friends": client.get("user/friends", {"userId": 12}),
            })
            responses["news"].is_ok
        """
        return await self.transport.batch_send(requests)

    def create_request_log_token(
        self,
        method: str,
        url: str,
        headers: List[str],
        content: Any,
    ) -> str:
        """
        Compose the log token of a request.

        Transports log this token when sending; content is truncated to
        ``content_logging_max_size`` characters.
        """
        token = f"{method.upper()} {url}"
        if headers:
            token += "\n" + "\n".join(headers)
        if content is not None:
            text = decode_content(content) if not isinstance(content, dict) else repr(content)
            token += "\n\n" + truncate(text, self.content_logging_max_size)
        return token

    # Request shortcuts

    def get(self, url: URL, data: Any = None, headers: Any = None, options: Any = None) -> Request:
        """Create a GET request; mapping data becomes the query string."""
        return self._create_request_shortcut("GET", url, data, headers, options)

    def post(self, url: URL, data: Any = None, headers: Any = None, options: Any = None) -> Request:
        return self._create_request_shortcut("POST", url, data, headers, options)

    def put(self, url: URL, data: Any = None, headers: Any = None, options: Any = None) -> Request:
        return self._create_request_shortcut("PUT", url, data, headers, options)

    def patch(self, url: URL, data: Any = None, headers: Any = None, options: Any = None) -> Request:
        return self._create_request_shortcut("PATCH", url, data, headers, options)

    def delete(self, url: URL, data: Any = None, headers: Any = None, options: Any = None) -> Request:
        return self._create_request_shortcut("DELETE", url, data, headers, options)

    def head(self, url: URL, headers: Any = None, options: Any = None) -> Request:
        return self._create_request_shortcut("HEAD", url, None, headers, options)

    def options(self, url: URL, options: Any = None) -> Request:
        return self._create_request_shortcut("OPTIONS", url, None, None, options)

    def _create_request_shortcut(
        self,
        method: str,
        url: URL,
        data: Any,
        headers: Any,
        options: Any,
    ) -> Request:
        request = (
            self.create_request()
            .set_method(method)
            .set_url(url)
            .add_headers(headers)
            .add_options(options or {})
        )
        if isinstance(data, (Mapping, list, tuple)):
            request.set_data(data)
        else:
            request.set_content(data)
        return request

    # Lifecycle notifications

    def before_send(self, request: Request) -> None:
        """Notify ``before_send`` listeners; called by Request.before_send()."""
        self.trigger(self.EVENT_BEFORE_SEND, RequestEvent(request=request))

    def after_send(self, request: Request, response: Response) -> None:
        """Notify ``after_send`` listeners; called by Request.after_send()."""
        self.trigger(self.EVENT_AFTER_SEND, RequestEvent(request=request, response=response))
