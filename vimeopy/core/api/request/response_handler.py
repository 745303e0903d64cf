"""Response handler for API responses."""
import json
from dataclasses import dataclass, field
from typing import Any, Dict

from ..transport import HttpResponse
from ...exceptions import VimeoRequestError


@dataclass(frozen=True)
class ApiResponse:
    """
    Parsed API response.

    Attributes:
        status_code: HTTP status code
        body: Parsed JSON body ({} for an empty body)
        headers: Response headers
    """
    status_code: int
    body: Any = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)


class ResponseHandler:
    """Handles API responses."""

    @staticmethod
    def parse_response(response: HttpResponse) -> ApiResponse:
        """
        Parses a successful response.

        Raises:
            VimeoRequestError: If the body is not valid JSON
        """
        text = response.body or ''
        try:
            body = json.loads(text) if text else {}
        except ValueError as e:
            raise VimeoRequestError(text, body=text, error_code=response.status) from e

        return ApiResponse(
            status_code=response.status,
            body=body,
            headers=dict(response.headers)
        )
