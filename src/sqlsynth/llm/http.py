"""JSON-over-HTTPS helper shared by the provider adapters."""

from __future__ import annotations

import http.client
import json
from typing import Any
from urllib import error, request

from sqlsynth.llm.base import ProviderRequestError


def post_json(
    provider: str,
    endpoint: str,
    body: dict[str, Any],
    headers: dict[str, str],
    timeout_seconds: float,
) -> dict[str, Any]:
    """POST `body` as JSON and return the decoded JSON object."""
    req = request.Request(
        endpoint,
        method="POST",
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json", **headers},
    )

    try:
        with request.urlopen(req, timeout=timeout_seconds) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except error.HTTPError as exc:
        details = exc.read().decode("utf-8", errors="replace")
        raise ProviderRequestError(provider, f"HTTP {exc.code}: {details}") from exc
    except error.URLError as exc:
        raise ProviderRequestError(provider, str(exc.reason)) from exc
    except TimeoutError as exc:
        raise ProviderRequestError(provider, "request timed out.") from exc
    # Dropped connections surface from getresponse()/read() without a URLError wrapper.
    except (OSError, http.client.HTTPException) as exc:
        raise ProviderRequestError(provider, str(exc) or type(exc).__name__) from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProviderRequestError(provider, "response was not valid JSON/UTF-8.") from exc

    if not isinstance(payload, dict):
        raise ProviderRequestError(provider, "response root is not a JSON object.")
    return payload
