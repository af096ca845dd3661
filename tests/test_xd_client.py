"""Tests for the SpringXD REST client."""

from __future__ import annotations

import io
import json
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs

import pytest

from nbinterp.engine.xd_client import ResourceKind, XdClient, XdResourceOperations
from nbinterp.errors import (
    ConnectError,
    ResourceCreateError,
    ResourceDestroyError,
    XdClientError,
    root_cause,
)


def _response(body: bytes = b"") -> MagicMock:
    resp = MagicMock()
    resp.read.return_value = body
    resp.__enter__.return_value = resp
    return resp


def _http_error(code: int, body: bytes) -> HTTPError:
    return HTTPError("http://xd:9393/x", code, "error", {}, io.BytesIO(body))


@pytest.mark.parametrize("url", ["", "not a url", "ftp://xd:9393", "http://"])
def test_invalid_url(url):
    with pytest.raises(ConnectError):
        XdClient(url)


def test_create_stream_posts_form():
    client = XdClient("http://xd:9393/")
    with patch("nbinterp.engine.xd_client.urlopen", return_value=_response(b'{"name": "ticks"}')) as mock_open:
        client.create(ResourceKind.STREAM, "ticks", "time | log")

    req = mock_open.call_args[0][0]
    assert req.get_method() == "POST"
    assert req.full_url == "http://xd:9393/streams/definitions"
    form = parse_qs(req.data.decode())
    assert form == {"name": ["ticks"], "definition": ["time | log"], "deploy": ["true"]}


def test_destroy_job_sends_delete():
    client = XdClient("http://xd:9393")
    with patch("nbinterp.engine.xd_client.urlopen", return_value=_response()) as mock_open:
        client.destroy(ResourceKind.JOB, "nightly")

    req = mock_open.call_args[0][0]
    assert req.get_method() == "DELETE"
    assert req.full_url == "http://xd:9393/jobs/definitions/nightly"


def test_completions_query():
    client = XdClient("http://xd:9393")
    body = json.dumps(["http | transform --expression"]).encode()
    with patch("nbinterp.engine.xd_client.urlopen", return_value=_response(body)) as mock_open:
        result = client.completions(ResourceKind.STREAM, "http | transform --")

    assert result == ["http | transform --expression"]
    req = mock_open.call_args[0][0]
    assert req.full_url.startswith("http://xd:9393/completions/stream?")
    query = parse_qs(req.full_url.split("?", 1)[1])
    assert query == {"start": ["http | transform --"], "detailLevel": ["1"]}


def test_http_error_message_from_body():
    client = XdClient("http://xd:9393")
    body = json.dumps([{"logref": "StreamAlreadyDeployedException", "message": "There is already a stream named 'ticks'"}]).encode()
    with patch("nbinterp.engine.xd_client.urlopen", side_effect=_http_error(409, body)):
        with pytest.raises(XdClientError) as excinfo:
            client.create(ResourceKind.STREAM, "ticks", "time | log")

    assert excinfo.value.status == 409
    assert str(excinfo.value) == "There is already a stream named 'ticks'"


def test_unreachable_server():
    client = XdClient("http://xd:9393")
    with patch("nbinterp.engine.xd_client.urlopen", side_effect=URLError("Connection refused")):
        with pytest.raises(XdClientError) as excinfo:
            client.destroy(ResourceKind.STREAM, "ticks")

    assert excinfo.value.status == 0
    assert "Connection refused" in str(excinfo.value)


def test_operations_wrap_errors_keeping_root_cause():
    client = XdClient("http://xd:9393")
    ops = XdResourceOperations(client, ResourceKind.STREAM)
    body = json.dumps([{"logref": "x", "message": "bad module 'foo'"}]).encode()

    with patch("nbinterp.engine.xd_client.urlopen", side_effect=_http_error(400, body)):
        with pytest.raises(ResourceCreateError) as create_err:
            ops.create("s", "foo | log")
        with pytest.raises(ResourceDestroyError) as destroy_err:
            ops.destroy("s")

    assert create_err.value.name == "s"
    assert str(root_cause(create_err.value)) == "bad module 'foo'"
    assert isinstance(root_cause(destroy_err.value), XdClientError)


def test_completions_without_answer():
    client = XdClient("http://xd:9393")
    with patch("nbinterp.engine.xd_client.urlopen", return_value=_response(b"")):
        assert client.completions(ResourceKind.JOB, "timestamp") is None
    with patch("nbinterp.engine.xd_client.urlopen", return_value=_response(b"[]")):
        assert client.completions(ResourceKind.JOB, "timestamp") == []
