"""HTTP response representation for forge_functional applications."""

from http import HTTPStatus
from typing import Any, Dict, Optional

import orjson

from forge_functional.errors import ResponseError
from forge_functional.headers import Headers


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


class Response:
    """Represents an HTTP response.

    The status is kept both as ``status_code`` and as a combined status
    line in the ``Status`` header (``"404 Not Found"``).
    """

    def __init__(
        self,
        content: str = "",
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Initialize a new response.

        Args:
            content: Response body
            status_code: HTTP status code
            headers: HTTP headers

        Raises:
            ResponseError: If the status code is invalid
        """
        self._headers = Headers(headers)
        self._content = ""
        self._sent = False
        self.status_code = 200
        self.set_status_code(status_code)
        self.set_content(content)

    def set_status_code(self, status_code: int, message: Optional[str] = None) -> "Response":
        """Change the status code and the ``Status`` header.

        Raises:
            ResponseError: If the status code is invalid
        """
        if not isinstance(status_code, int) or status_code < 100 or status_code > 599:
            raise ResponseError(f"Invalid status code: {status_code}")

        self.status_code = status_code
        if message is None:
            message = _reason_phrase(status_code)
        self._headers.set("Status", f"{status_code} {message}".strip())
        return self

    def get_status_code(self) -> int:
        return self.status_code

    def get_reason_phrase(self) -> str:
        status = self._headers.get("Status") or ""
        return status.partition(" ")[2]

    def set_content(self, content: Any) -> "Response":
        if isinstance(content, bytes):
            content = content.decode("utf-8")
        self._content = content if content is not None else ""
        return self

    def append_content(self, content: str) -> "Response":
        self._content += content
        return self

    def get_content(self) -> str:
        return self._content

    def set_json_content(self, data: Any) -> "Response":
        """Serialize ``data`` as the JSON body.

        Raises:
            ResponseError: If data cannot be serialized to JSON
        """
        try:
            self._content = orjson.dumps(data).decode("utf-8")
        except TypeError as e:
            raise ResponseError(f"Failed to serialize data to JSON: {str(e)}") from e
        self.set_content_type("application/json", "UTF-8")
        return self

    def set_content_type(self, content_type: str, charset: Optional[str] = None) -> "Response":
        if charset:
            content_type = f"{content_type}; charset={charset}"
        self._headers.set("Content-Type", content_type)
        return self

    def set_header(self, name: str, value: str) -> "Response":
        self._headers.set(name, value)
        return self

    def get_headers(self) -> Headers:
        return self._headers

    @property
    def headers(self) -> Headers:
        return self._headers

    @property
    def content(self) -> str:
        return self._content

    def redirect(self, location: str, status_code: int = 302) -> "Response":
        """Turn this response into a redirect.

        Args:
            location: URL to redirect to
            status_code: Redirect status code, 302 by default
        """
        self.set_status_code(status_code)
        self._headers.set("Location", location)
        return self

    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400 and self._headers.has("Location")

    def send(self) -> "Response":
        """Mark the response as sent.

        Raises:
            ResponseError: If the response was already sent
        """
        if self._sent:
            raise ResponseError("Response was already sent")
        self._sent = True
        return self

    def is_sent(self) -> bool:
        return self._sent

    @classmethod
    def text(cls, content: str, status_code: int = 200) -> "Response":
        """Create a plain text response."""
        return cls(content=content, status_code=status_code).set_content_type("text/plain", "utf-8")

    @classmethod
    def html(cls, content: str, status_code: int = 200) -> "Response":
        """Create an HTML response."""
        return cls(content=content, status_code=status_code).set_content_type("text/html", "utf-8")

    @classmethod
    def json(cls, data: Any, status_code: int = 200) -> "Response":
        """Create a JSON response."""
        return cls(status_code=status_code).set_json_content(data)

    @classmethod
    def redirect_to(cls, location: str, permanent: bool = False) -> "Response":
        """Create a redirect response."""
        return cls().redirect(location, 301 if permanent else 302)

    @classmethod
    def not_found(cls, message: str = "Not Found") -> "Response":
        """Create a 404 Not Found response."""
        return cls.text(message, status_code=404)

    @classmethod
    def server_error(cls, message: str = "Internal Server Error") -> "Response":
        """Create a 500 Internal Server Error response."""
        return cls.text(message, status_code=500)

    def __repr__(self) -> str:
        return f"Response({self._headers.get('Status')!r})"
