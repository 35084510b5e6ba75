"""HTTP request handling for forge_functional.

This module provides the Request class the application hands to
controllers, and the RequestContext that carries the ambient state of one
simulated inbound request (session, query, post data, cookies, files).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs, urlsplit

import orjson

from forge_functional.errors import RequestParsingError
from forge_functional.headers import Headers


@dataclass
class RequestContext:
    """Ambient state for one simulated request.

    Tests populate it before dispatching; the harness builds a fresh one
    for every test so nothing leaks between them.
    """

    method: str = "GET"
    session: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    post: Dict[str, Any] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, Any] = field(default_factory=dict)
    server: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def clear(self) -> None:
        """Empty every ambient map and restore the default method."""
        self.method = "GET"
        self.session.clear()
        self.query.clear()
        self.post.clear()
        self.cookies.clear()
        self.files.clear()
        self.server.clear()
        self.headers.clear()
        self.body = b""

    @property
    def request(self) -> Dict[str, Any]:
        """Merged query and post data, post values winning."""
        merged = dict(self.query)
        merged.update(self.post)
        return merged


def _parse_query(query_string: str) -> Dict[str, Any]:
    parsed = parse_qs(query_string, keep_blank_values=True)
    # Single values are unwrapped for simple lookups
    return {k: v[0] if len(v) == 1 else v for k, v in parsed.items()}


class Request:
    """HTTP request seen by controllers.

    Built from a URI and the ambient RequestContext for each handled
    request.
    """

    def __init__(
        self,
        method: str,
        uri: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
        query_params: Optional[Dict[str, Any]] = None,
        post: Optional[Dict[str, Any]] = None,
        cookies: Optional[Dict[str, str]] = None,
        files: Optional[Dict[str, Any]] = None,
        session: Optional[Dict[str, Any]] = None,
        server: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize a new HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.).
            uri: Request URI, optionally with a query string.
            headers: HTTP headers.
            body: Raw request body.
            query_params: Query parameters, merged under those of the URI.
            post: Form data.
            cookies: Request cookies.
            files: Uploaded files keyed by field name.
            session: Session data shared with the context.
            server: Server variables.
        """
        parts = urlsplit(uri)
        self.method = method.upper()
        self.uri = uri
        self.path = parts.path or "/"
        self.query_params: Dict[str, Any] = dict(query_params or {})
        self.query_params.update(_parse_query(parts.query))
        self.headers = Headers(headers)
        self.body = body or b""
        self.post = post if post is not None else {}
        self.cookies = cookies if cookies is not None else {}
        self.files = files if files is not None else {}
        self.session = session if session is not None else {}
        self.server = server if server is not None else {}
        self.attributes: Dict[str, Any] = {}

    @classmethod
    def from_uri(cls, uri: str, context: Optional[RequestContext] = None, method: Optional[str] = None) -> "Request":
        """Build a request for ``uri`` from the ambient context.

        The method comes from ``method`` when given, then from the context;
        a GET context carrying post data is promoted to POST.
        """
        context = context or RequestContext()
        if method is None:
            method = context.method
            if method.upper() == "GET" and context.post:
                method = "POST"
        return cls(
            method=method,
            uri=uri,
            headers=context.headers,
            body=context.body,
            query_params=context.query,
            post=context.post,
            cookies=context.cookies,
            files=context.files,
            session=context.session,
            server=context.server,
        )

    @property
    def content_type(self) -> str:
        """Get the content type of the request."""
        content_type = self.headers.get("Content-Type", "") or ""
        if ";" in content_type:
            return content_type.split(";")[0].strip()
        return content_type

    def is_post(self) -> bool:
        return self.method == "POST"

    def is_get(self) -> bool:
        return self.method == "GET"

    def has_files(self) -> bool:
        return bool(self.files)

    def json(self) -> Any:
        """Parse the request body as JSON.

        Raises:
            RequestParsingError: If the body is not valid JSON
        """
        if not self.body:
            return {}
        try:
            return orjson.loads(self.body)
        except orjson.JSONDecodeError as e:
            raise RequestParsingError(f"Failed to parse JSON body: {str(e)}") from e

    def get(self, name: str, default: Any = None) -> Any:
        """Get a value from post data, falling back to the query string."""
        if name in self.post:
            return self.post[name]
        return self.query_params.get(name, default)

    def get_query(self, name: str, default: Any = None) -> Any:
        """Get a query parameter value."""
        return self.query_params.get(name, default)

    def get_post(self, name: str, default: Any = None) -> Any:
        """Get a form value."""
        return self.post.get(name, default)

    def get_cookie(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a cookie value."""
        return self.cookies.get(name, default)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a header value."""
        return self.headers.get(name, default)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        """Get an attribute value set by middleware."""
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: Any) -> None:
        """Set an attribute value."""
        self.attributes[name] = value

    def __repr__(self) -> str:
        return f"Request({self.method} {self.uri})"
