"""
Async authentication service.

OAuth 2 helpers: authorization URL, code exchange and client credentials.
"""
from typing import Iterable, Optional, Union
from urllib.parse import urlencode

from .async_client import AsyncAPIClient
from .request import ApiResponse, RequestOptions


class AuthEndpoints:
    """OAuth endpoint paths."""
    AUTHORIZATION = '/oauth/authorize'
    ACCESS_TOKEN = '/oauth/access_token'
    CLIENT_CREDENTIALS = '/oauth/authorize/client'


Scope = Union[str, Iterable[str], None]


def _format_scope(scope: Scope) -> str:
    if not scope:
        return 'public'
    if isinstance(scope, str):
        return scope
    return ' '.join(scope)


class AsyncAuthService:
    """
    Handles OAuth flows against the API.

    Example:
        >>> auth = AsyncAuthService(api)
        >>> url = auth.build_authorization_endpoint('https://app/callback', ['public', 'upload'])
        >>> token = await auth.exchange_code(code, 'https://app/callback')
    """

    FORM_HEADERS = {'Content-Type': 'application/x-www-form-urlencoded'}

    def __init__(self, api: AsyncAPIClient):
        self._api = api

    def build_authorization_endpoint(
        self,
        redirect_uri: str,
        scope: Scope = None,
        state: Optional[str] = None
    ) -> str:
        """
        Build the URL the user should be sent to for authorization.

        Args:
            redirect_uri: URI that exchanges the code for an access token
            scope: Scope string or list of scopes ('public' by default)
            state: Optional unique state echoed back on the redirect

        Returns:
            Authorization URL
        """
        query = {
            'response_type': 'code',
            'client_id': self._api.credentials.client_id,
            'redirect_uri': redirect_uri,
            'scope': _format_scope(scope),
        }
        if state:
            query['state'] = state

        config = self._api.config
        return f"{config.protocol}://{config.hostname}{AuthEndpoints.AUTHORIZATION}?{urlencode(query)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> ApiResponse:
        """
        Exchange an authorization code for an access token.

        Args:
            code: Code received on the redirect URI
            redirect_uri: The exact redirect URI used to build the authorization URL

        Returns:
            ApiResponse whose body holds the access token
        """
        return await self._api.request(RequestOptions(
            path=AuthEndpoints.ACCESS_TOKEN,
            method='POST',
            query={
                'grant_type': 'authorization_code',
                'code': code,
                'redirect_uri': redirect_uri,
            },
            headers=dict(self.FORM_HEADERS)
        ))

    async def generate_client_credentials(self, scope: Scope = None) -> ApiResponse:
        """
        Generate an unauthenticated access token.

        Args:
            scope: Scope string or list of scopes ('public' by default)
        """
        return await self._api.request(RequestOptions(
            path=AuthEndpoints.CLIENT_CREDENTIALS,
            method='POST',
            query={
                'grant_type': 'client_credentials',
                'scope': _format_scope(scope),
            },
            headers=dict(self.FORM_HEADERS)
        ))
