"""Client for the hosted short-URL service."""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import requests

from .errors import ShortUrlError


class ShortUrlClient:
    def __init__(
        self,
        endpoint: str,
        *,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def shorten(self, url: str) -> str:
        try:
            resp = self.session.post(self.endpoint, json={"url": url}, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise ShortUrlError(f"Short URL request failed: {exc}") from exc
        except ValueError as exc:
            raise ShortUrlError("Short URL service returned invalid JSON") from exc

        short = (data.get("shortUrl") or data.get("url")) if isinstance(data, dict) else None
        if not short:
            raise ShortUrlError("Short URL service returned no URL")
        return short


def stack_console_url(region: str, stack_id: str) -> str:
    """Link to the stack's events tab in the CloudFormation console."""
    quoted = quote(stack_id, safe="")
    return (
        f"https://{region}.console.aws.amazon.com/cloudformation/home"
        f"?region={region}#/stacks/events?stackId={quoted}"
    )
