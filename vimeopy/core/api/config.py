"""
API configuration module.

Provides configuration for the Vimeo API client and the upload strategies.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, Tuple, Union
import json
import ssl


@dataclass
class ProxyConfig:
    """
    Proxy configuration.

    Supports HTTP and HTTPS proxies.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_aiohttp_proxy(self) -> Optional[str]:
        """Convert to aiohttp proxy format."""
        if not self.url:
            return None

        if self.username and self.password:
            if '://' in self.url:
                protocol, rest = self.url.split('://', 1)
                return f"{protocol}://{self.username}:{self.password}@{rest}"

        return self.url


@dataclass
class SSLConfig:
    """SSL/TLS configuration."""
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """Create SSL context from configuration."""
        if not self.verify:
            return False

        context = ssl.create_default_context()

        if self.ca_file:
            context.load_verify_locations(self.ca_file)

        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )

        context.check_hostname = self.check_hostname

        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Uploads can run for a long time, so there is no total timeout by
    default; only connection and socket timeouts apply.
    """
    total: Optional[float] = None
    connect: float = 30.0
    sock_read: float = 300.0
    sock_connect: float = 30.0

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class UploadConfig:
    """
    Upload configuration.

    Attributes:
        strategy: 'tus' (default) or 'streaming'
        chunk_size: Bytes read from disk per chunk
        retry_delays: Seconds to wait before each tus retry
        max_resume_attempts: Interruptions tolerated by the streaming
            strategy without the server confirming new bytes
        content_type: Content-Type of streaming data PUTs
    """
    strategy: str = 'tus'
    chunk_size: int = 1024 * 1024
    retry_delays: Tuple[float, ...] = (0, 1, 3, 5)
    max_resume_attempts: int = 5
    content_type: str = 'video/mp4'

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        if self.strategy not in ('tus', 'streaming'):
            raise ValueError(f"Unknown upload strategy: {self.strategy}")
        self.retry_delays = tuple(self.retry_delays)


@dataclass
class APIConfig:
    """
    Complete API configuration.

    Centralizes all configuration options for the Vimeo API client.
    """
    protocol: str = 'https'
    hostname: str = 'api.vimeo.com'
    port: int = 443

    accept: str = 'application/vnd.vimeo.*+json;version=3.4'
    user_agent: str = 'vimeopy/1.0.0'

    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)

    extra_headers: Dict[str, str] = field(default_factory=dict)

    log_level: int = 20  # logging.INFO

    limit_per_host: int = 10
    limit: int = 100

    @property
    def base_url(self) -> str:
        """Scheme, host and (non-default) port of the API."""
        default_port = 443 if self.protocol == 'https' else 80
        if self.port and self.port != default_port:
            return f"{self.protocol}://{self.hostname}:{self.port}"
        return f"{self.protocol}://{self.hostname}"

    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Create configuration with proxy."""
        return cls(
            proxy=ProxyConfig(url=proxy_url),
            **kwargs
        )

    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )

    def get_default_headers(self) -> Dict[str, str]:
        """Headers added to every API request unless the caller sets them."""
        return {
            'Accept': self.accept,
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        return {
            'timeout': self.timeout.to_aiohttp_timeout(),
        }


@dataclass
class Credentials:
    """OAuth credentials, usually loaded from a JSON config file."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    access_token: Optional[str] = None

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'Credentials':
        """
        Load credentials from a JSON file.

        Args:
            path: File with 'client_id', 'client_secret' and 'access_token' keys

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a JSON object
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a JSON object: {path}")

        return cls(
            client_id=data.get('client_id'),
            client_secret=data.get('client_secret'),
            access_token=data.get('access_token')
        )
