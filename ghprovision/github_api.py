"""Repository-creation call against the GitHub REST API."""

import json
import logging
from typing import Any, Dict, Optional

import requests

from . import __version__
from .config import Config
from .errors import RemoteAPIError, TransportError
from .models import Credentials, ProvisionRequest, ProvisionResult

logger = logging.getLogger('ghprovision.github_api')

USER_AGENT = f"ghprovision/{__version__}"


def build_headers(credentials: Optional[Credentials]) -> Dict[str, str]:
    """Request headers, with Basic authorization only when a secret is known."""
    headers = {
        "Accept": "application/vnd.github+json",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }
    if credentials is not None:
        authorization = credentials.authorization_header()
        if authorization:
            headers["Authorization"] = authorization
    return headers


def extract_error_message(response: requests.Response) -> str:
    """
    Pull the service's error message out of a failed response.

    GitHub reports ``{"message": ..., "errors": [{"message": ...}]}``; the
    nested messages are appended when present. Without a structured body the
    status line is used.
    """
    status_line = f"{response.status_code} {response.reason or ''}".strip()
    try:
        body = response.json()
    except ValueError:
        return status_line

    if not isinstance(body, dict) or not body.get("message"):
        return status_line

    message = str(body["message"])
    details = []
    for item in body.get("errors") or []:
        if isinstance(item, dict) and item.get("message"):
            details.append(str(item["message"]))
    if details:
        message = f"{message} ({'; '.join(details)})"
    return message


def create_repository(
    request: ProvisionRequest,
    credentials: Optional[Credentials],
    config: Config,
    session: Optional[requests.Session] = None
) -> ProvisionResult:
    """
    Create the remote repository with a single POST to ``/user/repos``.

    No retries are made; one failed attempt ends the run.

    Args:
        request: Repository parameters
        credentials: Login and secret, or None for an unauthenticated call
        config: Provisioner configuration (endpoint, timeout)
        session: Optional requests session, mainly for tests

    Returns:
        ProvisionResult parsed from the 2xx response

    Raises:
        RemoteAPIError: If GitHub answers with a non-2xx status
        TransportError: If the request fails or the response is unusable
    """
    url = config.repos_endpoint
    payload = request.to_payload()
    http = session or requests.Session()

    logger.debug(f"POST {url} (authenticated={'yes' if credentials and credentials.secret else 'no'})")

    try:
        response = http.post(
            url,
            data=json.dumps(payload),
            headers=build_headers(credentials),
            timeout=config.timeout
        )
    except requests.Timeout:
        raise TransportError(
            f"Timed out after {config.timeout}s waiting for {url}",
            error_code="TRANSPORT_TIMEOUT"
        )
    except requests.RequestException as e:
        raise TransportError(f"Request to {url} failed: {e}")
    finally:
        if session is None:
            http.close()

    if not 200 <= response.status_code < 300:
        raise RemoteAPIError(extract_error_message(response), status_code=response.status_code)

    try:
        body: Any = response.json()
    except ValueError:
        raise TransportError(
            "Malformed response from GitHub: body is not JSON",
            error_code="MALFORMED_RESPONSE"
        )

    result = ProvisionResult.from_response(body)
    logger.debug(f"GitHub created {result.full_name or request.repository_name}: {result.ssh_clone_url}")
    return result
