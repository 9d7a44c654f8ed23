"""
HTTP request message.

A Request accumulates a method, a target URL, headers, transport
options and either raw content, structured data or staged multipart
parts. Transports call ``prepare()`` to turn data into content right
before the exchange; the request never performs I/O itself.
"""

import mimetypes
import os
import re
import secrets
import time
import uuid
from typing import (
    IO,
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from typing_extensions import Self

from .encoding import build_query, flatten_form_data, scalar_to_str
from .events import EVENT_AFTER_SEND, EVENT_BEFORE_SEND, EventEmitter, RequestEvent
from .exceptions import HTTPClientError
from .formatters import Formatter, create_formatter
from .message import Message

if TYPE_CHECKING:
    from .client import Client
    from .response import Response

URL = Union[str, Sequence[Any], Mapping[Any, Any], None]

_ABSOLUTE_URL = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_DISALLOWED_CHARS = str.maketrans({"\0": "_", '"': "_", "\r": "_", "\n": "_"})
_PART_OPTION_ALIASES = {
    "contentType": "content_type",
    "fileName": "file_name",
    "mimeType": "mime_type",
}


def _deep_merge(old: Mapping[Any, Any], new: Mapping[Any, Any]) -> Dict[Any, Any]:
    result = dict(old)
    for key, value in new.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            value = _deep_merge(result[key], value)
        result[key] = value
    return result


class Request(Message, EventEmitter):
    """
    HTTP request.

    The target URL is either a literal string or a structured form whose
    first positional element is the path and whose remaining entries are
    query parameters, e.g. ``["item/list", {"page": 2}]`` or
    ``{0: "item/list", "page": 2}``.
    """

    EVENT_BEFORE_SEND = EVENT_BEFORE_SEND
    EVENT_AFTER_SEND = EVENT_AFTER_SEND

    def __init__(self, client: Optional["Client"] = None, **config: Any) -> None:
        EventEmitter.__init__(self)
        self._url: URL = None
        self._full_url: Optional[str] = None
        self._method = "GET"
        self._options: Dict[Any, Any] = {}
        self._prepared = False
        self._output_file: Optional[IO[bytes]] = None
        self._content_map: Dict[str, str] = {}
        self._start_time: Optional[float] = None
        self._elapsed_time: Optional[float] = None
        super().__init__(client, **config)

    # URL

    @property
    def url(self) -> URL:
        return self._url

    @url.setter
    def url(self, value: URL) -> None:
        self.set_url(value)

    def set_url(self, url: URL) -> Self:
        """Set the target URL, dropping the cached full URL."""
        self._url = url
        self._full_url = None
        self._prepared = False
        return self

    @property
    def full_url(self) -> str:
        """Target URL including the client base URL and query parameters."""
        if self._full_url is None:
            self._full_url = self._create_full_url(self._url)
        return self._full_url

    def set_full_url(self, full_url: Optional[str]) -> Self:
        """
        Override the computed full URL.

        Meant for formatters; use ``set_url()`` to choose the target.
        """
        self._full_url = full_url
        return self

    def _create_full_url(self, url: URL) -> str:
        params: Dict[Any, Any] = {}
        if isinstance(url, Mapping):
            params = dict(url)
            path = params.pop(0, None)
        elif isinstance(url, (list, tuple)):
            path = url[0] if url else None
            for extra in url[1:]:
                params.update(extra)
        else:
            path = url
        path = "" if path is None else str(path)

        base_url = getattr(self.client, "base_url", "") or ""
        if base_url:
            if not path:
                path = base_url
            elif not _ABSOLUTE_URL.match(path):
                path = base_url.rstrip("/") + "/" + path.lstrip("/")

        if params:
            path += "&" if "?" in path else "?"
            path += build_query(params)

        return path

    # Method and options

    @property
    def method(self) -> str:
        return self._method

    @method.setter
    def method(self, value: str) -> None:
        self.set_method(value)

    def set_method(self, method: str) -> Self:
        self._method = method
        self._invalidate_content()
        return self

    @property
    def options(self) -> Dict[Any, Any]:
        """
        Transport options.

        Generic keys: ``timeout``, ``proxy``, ``userAgent``,
        ``followLocation``, ``maxRedirects``, ``protocolVersion``,
        ``sslVerifyPeer``, ``sslCafile``, ``sslCapath``. Transport
        specific keys are passed through untouched.
        """
        return self._options

    def set_options(self, options: Mapping[Any, Any]) -> Self:
        self._options = dict(options)
        return self

    def add_options(self, options: Mapping[Any, Any]) -> Self:
        """Merge options; nested mappings are merged instead of replaced."""
        for key, value in options.items():
            if isinstance(value, Mapping) and isinstance(self._options.get(key), Mapping):
                value = _deep_merge(self._options[key], value)
            self._options[key] = value
        return self

    @property
    def output_file(self) -> Optional[IO[bytes]]:
        """Binary file receiving the response body, if any."""
        return self._output_file

    def set_output_file(self, file: Optional[IO[bytes]]) -> Self:
        self._output_file = file
        return self

    @property
    def prepared(self) -> bool:
        return self._prepared

    # Data

    def set_format(self, format: Optional[str]) -> Self:
        self._invalidate_content()
        return super().set_format(format)

    def set_data(self, data: Any) -> Self:
        self._invalidate_content()
        return super().set_data(data)

    def add_data(self, data: Mapping[Any, Any]) -> Self:
        self._invalidate_content()
        return super().add_data(data)

    def _invalidate_content(self) -> None:
        if self._prepared:
            self.set_content(None)
            self._full_url = None
            self._prepared = False

    # Multipart content

    def add_content(self, name: str, content: Union[str, bytes], **options: Any) -> Self:
        """
        Stage a part of a multipart/form-data body.

        Args:
            name: Part (form input) name; may repeat
            content: Part body
            **options: ``content_type``, ``file_name`` and ``mime_type``

        Returns:
            Self
        """
        parts = self._content if isinstance(self._content, dict) else {}
        part = {_PART_OPTION_ALIASES.get(key, key): value for key, value in options.items()}
        part["content"] = content

        alias = name
        while alias in parts:
            alias = f"{name}_{uuid.uuid4().hex[:13]}"
        self._content_map[alias] = name

        parts[alias] = part
        self._prepared = False
        return self.set_content(parts)

    def add_file(self, name: str, file_path: Union[str, "os.PathLike[str]"], **options: Any) -> Self:
        """
        Stage a file upload read from disk.

        ``mime_type`` is guessed from the file name when not given and
        ``file_name`` defaults to the base name of ``file_path``.
        """
        options = {_PART_OPTION_ALIASES.get(key, key): value for key, value in options.items()}
        with open(file_path, "rb") as f:
            content = f.read()
        if options.get("mime_type") is None:
            mime_type, _ = mimetypes.guess_type(os.fspath(file_path))
            options["mime_type"] = mime_type or "application/octet-stream"
        if options.get("file_name") is None:
            options["file_name"] = os.path.basename(os.fspath(file_path))
        return self.add_content(name, content, **options)

    def add_file_content(self, name: str, content: Union[str, bytes], **options: Any) -> Self:
        """Stage in-memory content as a file upload."""
        options = {_PART_OPTION_ALIASES.get(key, key): value for key, value in options.items()}
        if options.get("mime_type") is None:
            options["mime_type"] = "application/octet-stream"
        if options.get("file_name") is None:
            options["file_name"] = f"{name}.dat"
        return self.add_content(name, content, **options)

    # Preparation

    def prepare(self) -> Self:
        """
        Prepare this request for sending.

        Called by transports right before the exchange. Without content
        the formatter of the current format builds it from data; staged
        multipart parts are assembled into the final body.
        """
        if self._prepared:
            return self

        content = self._content
        if content is None:
            self._get_formatter().format(self)
        elif isinstance(content, dict):
            self._prepare_multipart_content(content)

        self._prepared = True
        return self

    def _get_formatter(self) -> Formatter:
        format = self.format
        if self.client is not None:
            return self.client.get_formatter(format)
        return create_formatter(format)

    def _prepare_multipart_content(self, content: Dict[str, Dict[str, Any]]) -> None:
        """
        Assemble staged parts and form data into a multipart/form-data body.

        See RFC 7578 for the framing and RFC 6266 for Content-Disposition.
        """
        parts: List[bytes] = []

        data = self.data
        if data and isinstance(data, (Mapping, list, tuple)):
            for name, value in flatten_form_data(data):
                name = name.translate(_DISALLOWED_CHARS)
                parts.append(
                    self._compose_part([f'Content-Disposition: form-data; name="{name}"'], value)
                )

        for alias, params in content.items():
            name = str(self._content_map.get(alias, alias)).translate(_DISALLOWED_CHARS)
            disposition = f'Content-Disposition: form-data; name="{name}"'
            if params.get("file_name") is not None:
                file_name = str(params["file_name"]).translate(_DISALLOWED_CHARS)
                disposition += f'; filename="{file_name}"'
            headers = [disposition]
            content_type = params.get("content_type") or params.get("mime_type")
            if content_type:
                headers.append(f"Content-Type: {content_type}")
            parts.append(self._compose_part(headers, params.get("content")))

        boundary = self._generate_boundary()
        while any(boundary.encode() in part for part in parts):
            boundary = self._generate_boundary()

        delimiter = f"--{boundary}\r\n".encode()
        framed = [delimiter + part for part in parts]
        framed.append(f"--{boundary}--".encode())
        framed.append(b"")

        self.headers.set("Content-Type", f"multipart/form-data; boundary={boundary}")
        self.set_content(b"\r\n".join(framed))

    @staticmethod
    def _compose_part(headers: List[str], body: Any) -> bytes:
        if not isinstance(body, (bytes, bytearray)):
            body = scalar_to_str(body).encode("utf-8")
        head = "\r\n".join(headers).encode("utf-8")
        return head + b"\r\n\r\n" + bytes(body)

    @staticmethod
    def _generate_boundary() -> str:
        return "-" * 21 + secrets.token_hex(16)

    # Rendering

    def compose_header_lines(self) -> List[str]:
        lines = super().compose_header_lines()
        if self.has_cookies():
            cookies = ";".join(f"{cookie.name}={cookie.value}" for cookie in self.cookies)
            lines.append(f"Cookie: {cookies}")
        return lines

    def to_string(self) -> str:
        if not self._prepared:
            self.prepare()

        result = f"{self.method.upper()} {self.full_url}"
        message = super().to_string()
        if message:
            result += "\n" + message
        return result

    # Sending

    async def send(self) -> "Response":
        """Send this request through the owning client."""
        if self.client is None:
            raise HTTPClientError("Unable to send request: no client is attached")
        return await self.client.send(self)

    def before_send(self) -> None:
        """Invoked by transports right before the exchange starts."""
        if self.client is not None:
            self.client.before_send(self)
        self.trigger(self.EVENT_BEFORE_SEND, RequestEvent(request=self))
        self._start_time = time.perf_counter()

    def after_send(self, response: "Response") -> None:
        """Invoked by transports right after a response has been received."""
        if self._start_time is not None:
            self._elapsed_time = time.perf_counter() - self._start_time
        if self.client is not None:
            self.client.after_send(self, response)
        self.trigger(self.EVENT_AFTER_SEND, RequestEvent(request=self, response=response))

    @property
    def start_time(self) -> Optional[float]:
        """``time.perf_counter()`` reading taken by ``before_send()``."""
        return self._start_time

    @property
    def elapsed_time(self) -> Optional[float]:
        return self._elapsed_time

    def response_time(self) -> Optional[float]:
        """Seconds between sending and receiving; None before a send completes."""
        return self._elapsed_time
