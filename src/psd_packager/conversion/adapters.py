import logging
from typing import Any

import requests

from .errors import ConversionError, FontFetchError
from .interfaces import ConversionOutcome, ConversionResult, Document, FontBinary, ImageAsset

logger = logging.getLogger(__name__)

GENERIC_UPLOAD_ERROR = "Failed to upload file"


def _error_message(resp: requests.Response, fallback: str) -> str:
    """Pull the service's `error` string out of a failure body, if there is one."""
    try:
        body = resp.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        msg = body.get("error")
        if isinstance(msg, str) and msg:
            return msg
    return fallback


def _asset_fields(item: Any, payload_key: str) -> tuple[str, str]:
    """Return (name, payload) for one asset entry of a response body.

    Malformed entries are kept with an empty payload so they fail to decode
    and end up in the errors log instead of disappearing.
    """
    if not isinstance(item, dict):
        return str(item), ""
    name = item.get("name")
    payload = item.get(payload_key)
    return (
        name if isinstance(name, str) else "",
        payload if isinstance(payload, str) else "",
    )


def parse_conversion_body(body: Any) -> ConversionOutcome:
    if not isinstance(body, dict):
        raise ValueError("conversion response is not a JSON object")
    data = body.get("json")
    if not isinstance(data, dict) or "name" not in data:
        raise ValueError("conversion response lacks a document description")
    images = tuple(ImageAsset(*_asset_fields(item, "base64")) for item in body.get("images") or [])
    fonts = tuple(str(f) for f in body.get("fonts") or [])
    return ConversionOutcome(result=ConversionResult(data), images=images, fonts=fonts)


class HttpConverter:
    """Talks to the conversion service's `/upload` endpoint."""

    def __init__(self, api_base: str, *, timeout: float = 120, session: requests.Session | None = None) -> None:
        self._url = f"{api_base.rstrip('/')}/upload"
        self._timeout = timeout
        self._session = session or requests.Session()

    def convert(self, document: Document) -> ConversionOutcome:
        files = {"psd": (document.filename, document.content, document.content_type)}
        try:
            resp = self._session.post(self._url, files=files, timeout=self._timeout)
        except requests.RequestException as e:
            raise ConversionError(str(e)) from e
        if not resp.ok:
            msg = _error_message(resp, GENERIC_UPLOAD_ERROR)
            logger.warning("Upload of %s rejected: %s %s", document.filename, resp.status_code, msg)
            raise ConversionError(msg)
        return parse_conversion_body(resp.json())


class HttpFontFetcher:
    """Talks to the font lookup endpoint (`/fonts`)."""

    def __init__(self, api_base: str, *, timeout: float = 60, session: requests.Session | None = None) -> None:
        self._url = f"{api_base.rstrip('/')}/fonts"
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch_fonts(self, names: list[str]) -> list[FontBinary]:
        try:
            resp = self._session.post(self._url, json={"fonts": list(names)}, timeout=self._timeout)
        except requests.RequestException as e:
            raise FontFetchError(str(e)) from e
        if not resp.ok:
            raise FontFetchError(f"font service responded with status {resp.status_code}")
        try:
            body = resp.json()
        except ValueError as e:
            raise FontFetchError(f"font service returned invalid JSON: {e}") from e
        if not isinstance(body, list):
            raise FontFetchError("font service response is not a list")
        return [FontBinary(*_asset_fields(item, "data")) for item in body]
