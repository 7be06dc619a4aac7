"""
RTE OAuth client-credentials token request.

POSTs to the RTE token endpoint with HTTP Basic authentication built from
the client id and secret, and parses the JSON token response.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

AUTH_ENDPOINT = "https://digital.iservices.rte-france.com/token/oauth/"

REQUEST_TIMEOUT_S = 30.0


class TokenError(Exception):
    """Base class for token request errors."""


class TokenRequestError(TokenError):
    """The token endpoint could not be reached or rejected the request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthResponse(BaseModel):
    access_token: str
    token_type: str
    expires_in: int


def fetch_token(
    client_id: str,
    client_secret: str,
    *,
    url: str = AUTH_ENDPOINT,
    timeout_s: float = REQUEST_TIMEOUT_S,
) -> AuthResponse:
    """Request an access token from the RTE portal.

    Args:
        client_id: Application client id from the RTE portal.
        client_secret: Application client secret from the RTE portal.
        url: Token endpoint.
        timeout_s: Request timeout.

    Returns:
        The parsed token response.

    Raises:
        TokenRequestError: On transport failure, non-2xx status, or an
            unexpected response body.
    """
    try:
        with httpx.Client(timeout=timeout_s, verify=True) as client:
            response = client.post(url, auth=httpx.BasicAuth(client_id, client_secret))
    except httpx.HTTPError as exc:
        raise TokenRequestError(f"token request failed: {exc}") from exc

    if not response.is_success:
        raise TokenRequestError(
            f"token request returned HTTP {response.status_code}: {response.text}",
            status_code=response.status_code,
        )

    try:
        auth = AuthResponse.model_validate_json(response.content)
    except ValidationError as exc:
        raise TokenRequestError(f"invalid token response: {exc}") from exc

    logger.info(
        "Obtained %s token expiring in %ds", auth.token_type, auth.expires_in
    )
    return auth
