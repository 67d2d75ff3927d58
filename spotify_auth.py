from __future__ import annotations

import base64
import time
from typing import Callable, Optional

import requests

from errors import AuthError
from json_fields import extract_field
from token_cache import Credential

# Client Credentials flow:
# https://developer.spotify.com/documentation/web-api/tutorials/client-credentials-flow
TOKEN_URL = "https://accounts.spotify.com/api/token"


def _basic_auth_header(client_id: str, client_secret: str) -> str:
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def request_token(
    client_id: str,
    client_secret: str,
    session: Optional[requests.Session] = None,
    timeout: float = 20,
    clock: Callable[[], float] = time.time,
) -> Credential:
    """
    Exchange the app's client id/secret for a fresh access token.

    Args:
        client_id: Spotify app client id
        client_secret: Spotify app client secret
        session: Optional requests session (module-level requests is used otherwise)
        timeout: Seconds to wait for the token endpoint
        clock: Source of the current Unix time

    Returns:
        Credential with an absolute expiry timestamp

    Raises:
        AuthError: On network failure, a non-2xx response, or a response
            without access_token / expires_in. Not retried.
    """
    headers = {
        "Authorization": _basic_auth_header(client_id, client_secret),
        "Content-Type": "application/x-www-form-urlencoded",
    }

    print("Querying for new auth token")
    http = session or requests
    try:
        r = http.post(TOKEN_URL, headers=headers, data={"grant_type": "client_credentials"}, timeout=timeout)
        r.raise_for_status()
    except requests.HTTPError as e:
        raise AuthError(f"Token request failed: HTTP {r.status_code} {r.text[:200]}") from e
    except requests.RequestException as e:
        raise AuthError(f"Token request failed: {e}") from e

    access_token = extract_field(r.text, "access_token")
    expires_in = extract_field(r.text, "expires_in")
    if not access_token or expires_in is None:
        raise AuthError(f"Token response missing access_token/expires_in: {r.text[:200]}")

    try:
        lifetime = int(expires_in)
    except ValueError as e:
        raise AuthError(f"Token response has a non-integer expires_in: {expires_in!r}") from e

    return Credential(access_token=access_token, expires_at=int(clock()) + lifetime)
