import json
from unittest.mock import patch

import pytest
import responses

from runtimegen.fetch_metadata import (
    DecodeError,
    FetchMetadataError,
    InvalidSchemeError,
    RequestError,
    fetch_metadata_bytes,
    fetch_metadata_hex,
)

URL = "http://localhost:9933"
METADATA = bytes(range(0, 40)) + b"meta"


def _rpc_reply(result):
    return {"jsonrpc": "2.0", "id": 1, "result": result}


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def test_http_hex_returned_as_is(rsps):
    hex_data = "0x" + METADATA.hex()
    rsps.add(responses.POST, URL, json=_rpc_reply(hex_data))
    assert fetch_metadata_hex(URL) == hex_data
    sent = json.loads(rsps.calls[0].request.body)
    assert sent["method"] == "state_getMetadata"
    assert sent["params"] == []


def test_http_bytes_round_trip(rsps):
    rsps.add(responses.POST, URL, json=_rpc_reply("0x" + METADATA.hex()))
    assert fetch_metadata_bytes(URL) == METADATA


def test_bytes_without_prefix(rsps):
    rsps.add(responses.POST, URL, json=_rpc_reply(METADATA.hex()))
    assert fetch_metadata_bytes(URL) == METADATA


def test_invalid_hex_raises_decode_error(rsps):
    rsps.add(responses.POST, URL, json=_rpc_reply("0xzz"))
    with pytest.raises(DecodeError, match="Cannot decode hex value"):
        fetch_metadata_bytes(URL)


def test_rpc_error_raises_request_error(rsps):
    rsps.add(
        responses.POST,
        URL,
        json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}},
    )
    with pytest.raises(RequestError, match="Request error"):
        fetch_metadata_hex(URL)


def test_http_failure_raises_request_error(rsps):
    rsps.add(responses.POST, URL, status=500)
    with pytest.raises(RequestError):
        fetch_metadata_hex(URL)


def test_connection_failure_raises_request_error(rsps):
    with pytest.raises(RequestError):
        fetch_metadata_hex("https://node.example.com:443")


def test_invalid_scheme():
    with pytest.raises(InvalidSchemeError) as info:
        fetch_metadata_hex("ftp://localhost:9933")
    assert info.value.scheme == "ftp"
    assert str(info.value) == (
        "'ftp' not supported, supported URI schemes are http, https, ws or wss."
    )


def test_missing_scheme():
    with pytest.raises(InvalidSchemeError) as info:
        fetch_metadata_bytes("/just/a/path")
    assert info.value.scheme == "no scheme"
    assert isinstance(info.value, FetchMetadataError)


class _FakeSocket:
    def __init__(self, result):
        self.result = result
        self.sent = []
        self.closed = False
        self._queue = []

    def send(self, message):
        self.sent.append(json.loads(message))
        request_id = self.sent[-1]["id"]
        self._queue = [
            json.dumps({"jsonrpc": "2.0", "method": "notice", "params": {}}),
            json.dumps({"jsonrpc": "2.0", "id": request_id, "result": self.result}),
        ]

    def recv(self):
        return self._queue.pop(0)

    def close(self):
        self.closed = True


def test_ws_fetch_round_trip():
    fake = _FakeSocket("0x" + METADATA.hex())
    with patch("websocket.create_connection", return_value=fake) as create:
        assert fetch_metadata_bytes("ws://localhost:9944") == METADATA
    assert create.call_args.args[0] == "ws://localhost:9944"
    assert fake.sent[0]["method"] == "state_getMetadata"
    assert fake.closed


def test_ws_connection_failure():
    with patch("websocket.create_connection", side_effect=OSError("refused")):
        with pytest.raises(RequestError, match="refused"):
            fetch_metadata_hex("wss://localhost:9944")