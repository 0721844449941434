from __future__ import annotations

import requests

from connchk.config import settings
from connchk.errors import StatusMismatchError, TransportError
from connchk.models import FormBody, HttpOptions


def _body_snippet(resp: requests.Response) -> str:
    text = resp.text
    if not isinstance(text, str):
        return ""
    return text[: settings.HTTP_DETAIL_CHARS].replace("\n", "\\n")


def run_http(
    url: str,
    options: HttpOptions | None,
    timeout_s: float,
    connect_timeout_s: float | None = None,
) -> int:
    """
    Probe an HTTP(S) endpoint once and return the observed status code.

    Without options this is a GET that must answer 200. With options the
    configured form or JSON body is POSTed and the answer must match
    ``options.expected_status``. Redirects are followed and certificates
    verified.
    """
    connect_timeout = timeout_s if connect_timeout_s is None else connect_timeout_s
    timeout = (connect_timeout, timeout_s)
    try:
        if options is None:
            expected = 200
            r = requests.get(url, timeout=timeout)
        else:
            expected = options.expected_status
            if isinstance(options.body, FormBody):
                r = requests.post(url, data=options.body.params, timeout=timeout)
            else:
                r = requests.post(url, json=options.body.document, timeout=timeout)
    except requests.Timeout as exc:
        raise TransportError(f"request timed out: {exc}") from exc
    except requests.RequestException as exc:
        raise TransportError(f"{exc.__class__.__name__}: {exc}") from exc

    if r.status_code != expected:
        raise StatusMismatchError(r.status_code, expected, _body_snippet(r))
    return r.status_code
