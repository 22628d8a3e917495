"""Download runtime metadata from a node over HTTP or WebSocket JSON-RPC."""

from __future__ import annotations

import binascii
import json
from urllib.parse import urlsplit

import requests
import websocket

_METHOD = "state_getMetadata"
_TIMEOUT = 180
_REQUEST_ID = 1


class FetchMetadataError(Exception):
    """Metadata could not be obtained from the node."""


class DecodeError(FetchMetadataError):
    def __init__(self, cause: object) -> None:
        super().__init__(f"Cannot decode hex value: {cause}")
        self.cause = cause


class RequestError(FetchMetadataError):
    def __init__(self, cause: object) -> None:
        super().__init__(f"Request error: {cause}")
        self.cause = cause


class InvalidSchemeError(FetchMetadataError):
    def __init__(self, scheme: str) -> None:
        super().__init__(
            f"'{scheme}' not supported, supported URI schemes are http, https, ws or wss."
        )
        self.scheme = scheme


def _request_payload() -> dict:
    return {"jsonrpc": "2.0", "id": _REQUEST_ID, "method": _METHOD, "params": []}


def _result_of(response: object) -> str:
    if not isinstance(response, dict):
        raise RequestError(f"invalid response {response!r}")
    if "error" in response:
        error = response["error"]
        if isinstance(error, dict):
            raise RequestError(f"{error.get('code')}: {error.get('message')}")
        raise RequestError(error)
    result = response.get("result")
    if not isinstance(result, str):
        raise RequestError(f"expected a string result, got {result!r}")
    return result


def _fetch_http(url: str) -> str:
    try:
        reply = requests.post(url, json=_request_payload(), timeout=_TIMEOUT)
        reply.raise_for_status()
        body = reply.json()
    except (requests.RequestException, ValueError) as exc:
        raise RequestError(exc) from exc
    return _result_of(body)


def _fetch_ws(url: str) -> str:
    try:
        connection = websocket.create_connection(url, timeout=_TIMEOUT)
    except (websocket.WebSocketException, OSError) as exc:
        raise RequestError(exc) from exc
    try:
        connection.send(json.dumps(_request_payload()))
        while True:
            try:
                message = json.loads(connection.recv())
            except ValueError as exc:
                raise RequestError(exc) from exc
            # Notifications and unrelated replies carry no matching id.
            if isinstance(message, dict) and message.get("id") == _REQUEST_ID:
                return _result_of(message)
    except (websocket.WebSocketException, OSError) as exc:
        raise RequestError(exc) from exc
    finally:
        connection.close()


def fetch_metadata_hex(url: str) -> str:
    """The raw, ``0x``-prefixed metadata hex served by the node at ``url``."""
    scheme = urlsplit(url).scheme
    if scheme in ("http", "https"):
        return _fetch_http(url)
    if scheme in ("ws", "wss"):
        return _fetch_ws(url)
    raise InvalidSchemeError(scheme or "no scheme")


def fetch_metadata_bytes(url: str) -> bytes:
    """The metadata bytes served by the node at ``url``."""
    hex_data = fetch_metadata_hex(url)
    while hex_data.startswith("0x"):
        hex_data = hex_data[2:]
    try:
        return binascii.unhexlify(hex_data)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(exc) from exc