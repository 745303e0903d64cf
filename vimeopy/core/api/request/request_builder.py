"""Request builder for API requests."""
import base64
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode, urlsplit

from ..config import APIConfig
from ...exceptions import VimeoRequestError


@dataclass
class RequestOptions:
    """
    Options for a single API call.

    Only `path` is required; everything else falls back to the
    configured defaults.
    """
    path: Optional[str] = None
    method: str = 'GET'
    query: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    hostname: Optional[str] = None
    port: Optional[int] = None
    protocol: Optional[str] = None

    @classmethod
    def from_url(cls, url: str) -> 'RequestOptions':
        """Build GET options from a URL or a bare path."""
        parts = urlsplit(url)
        path = parts.path
        if parts.query:
            path = f"{path}?{parts.query}"
        return cls(
            path=path,
            method='GET',
            hostname=parts.hostname,
            port=parts.port,
            protocol=parts.scheme or None
        )

    @classmethod
    def coerce(cls, options: Union[str, Mapping[str, Any], 'RequestOptions']) -> 'RequestOptions':
        """
        Normalize the accepted option shapes.

        Args:
            options: URL string, mapping of option names, or RequestOptions

        Raises:
            VimeoRequestError: If the options are of an unsupported type
        """
        if isinstance(options, RequestOptions):
            return options
        if isinstance(options, str):
            return cls.from_url(options)
        if isinstance(options, Mapping):
            query = options.get('query', options.get('params'))
            return cls(
                path=options.get('path'),
                method=options.get('method') or 'GET',
                query=dict(query) if query is not None else None,
                headers=dict(options.get('headers') or {}),
                body=options.get('body'),
                hostname=options.get('hostname'),
                port=options.get('port'),
                protocol=options.get('protocol')
            )
        raise VimeoRequestError("You must provide an API path.")


@dataclass(frozen=True)
class PreparedRequest:
    """Request ready to be handed to the transport."""
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[str] = None


class RequestBuilder:
    """Builds API requests."""

    BODY_METHODS = ('POST', 'PATCH', 'PUT', 'DELETE')
    JSON = 'application/json'
    FORM = 'application/x-www-form-urlencoded'

    def __init__(self, config: APIConfig):
        """Initializes request builder."""
        self._config = config

    def build(
        self,
        options: RequestOptions,
        access_token: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None
    ) -> PreparedRequest:
        """
        Build a request from options and credentials.

        Raises:
            VimeoRequestError: If no path was provided
        """
        if not isinstance(options.path, str):
            raise VimeoRequestError("You must provide an API path.")

        path = options.path if options.path.startswith('/') else '/' + options.path
        method = options.method.upper()
        headers = self.build_headers(options.headers, access_token, client_id, client_secret)
        body = None

        if method in self.BODY_METHODS:
            headers.setdefault('Content-Type', self.JSON)
            body = self.build_body(headers['Content-Type'], options)
            headers['Content-Length'] = str(len(body.encode('utf-8'))) if body else '0'
        elif method == 'GET':
            path = self.apply_querystring(path, options.query)

        return PreparedRequest(
            method=method,
            url=self.build_base_url(options) + path,
            headers=headers,
            body=body or None
        )

    def build_base_url(self, options: RequestOptions) -> str:
        """Builds scheme://host[:port] for the request."""
        protocol = (options.protocol or self._config.protocol).rstrip(':')
        if protocol not in ('http', 'https'):
            protocol = 'http'
        hostname = options.hostname or self._config.hostname
        port = options.port or self._config.port
        default_port = 443 if protocol == 'https' else 80
        if port and int(port) != default_port:
            return f"{protocol}://{hostname}:{port}"
        return f"{protocol}://{hostname}"

    def build_headers(
        self,
        headers: Mapping[str, str],
        access_token: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None
    ) -> Dict[str, str]:
        """Builds request headers: caller headers win over defaults."""
        result = dict(headers)
        for key, value in self._config.get_default_headers().items():
            result.setdefault(key, value)

        if access_token:
            result['Authorization'] = f"Bearer {access_token}"
        elif client_id and client_secret:
            token = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
            result['Authorization'] = f"Basic {token}"

        return result

    def build_body(self, content_type: str, options: RequestOptions) -> str:
        """Encodes the body according to the content type."""
        if content_type.startswith(self.JSON):
            return json.dumps(options.query, separators=(',', ':')) if options.query is not None else ''
        if content_type.startswith(self.FORM):
            return urlencode(options.query or {})
        return options.body or ''

    @staticmethod
    def apply_querystring(path: str, query: Optional[Dict[str, Any]]) -> str:
        """Appends query parameters to the path, keeping any existing ones."""
        if not query:
            return path
        separator = '&' if '?' in path else '?'
        return f"{path}{separator}{urlencode(query)}"
