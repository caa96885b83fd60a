"""Tests for remote function invocation and the short-URL client."""

import base64
import io
import json

import pytest
import requests
from botocore.exceptions import ClientError

from bref_cli.errors import ApiError, InvocationError, ShortUrlError
from bref_cli.invoke import FunctionInvoker
from bref_cli.shorturl import ShortUrlClient, stack_console_url


class FakeLambda:
    def __init__(self, payload=b'{"ok": true}', function_error=None, logs=None, error=None):
        self.payload = payload
        self.function_error = function_error
        self.logs = logs
        self.error = error
        self.calls = []

    def invoke(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        response = {"StatusCode": 200, "Payload": io.BytesIO(self.payload)}
        if self.function_error:
            response["FunctionError"] = self.function_error
        if self.logs:
            response["LogResult"] = base64.b64encode(self.logs.encode()).decode()
        return response


class TestFunctionInvoker:
    def test_returns_decoded_payload(self):
        client = FakeLambda()
        result = FunctionInvoker(client).invoke("app-dev-function", {"name": "Bref"})

        assert result.payload == {"ok": True}
        assert result.status_code == 200
        assert json.loads(client.calls[0]["Payload"]) == {"name": "Bref"}
        assert "LogType" not in client.calls[0]

    def test_includes_logs(self):
        client = FakeLambda(logs="START RequestId: 1\nEND")
        result = FunctionInvoker(client).invoke("fn", include_logs=True)
        assert client.calls[0]["LogType"] == "Tail"
        assert result.logs.startswith("START")

    def test_function_error(self):
        client = FakeLambda(payload=b'{"errorMessage": "Undefined index: name"}', function_error="Unhandled")
        with pytest.raises(InvocationError) as exc_info:
            FunctionInvoker(client).invoke("fn")
        assert "Undefined index: name" in str(exc_info.value)

    def test_invalid_json_response(self):
        with pytest.raises(InvocationError):
            FunctionInvoker(FakeLambda(payload=b"<html>")).invoke("fn")

    def test_empty_response(self):
        with pytest.raises(InvocationError):
            FunctionInvoker(FakeLambda(payload=b"")).invoke("fn")

    def test_api_error(self):
        error = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "Function not found: fn"}},
            "Invoke",
        )
        with pytest.raises(ApiError) as exc_info:
            FunctionInvoker(FakeLambda(error=error), region="eu-west-1").invoke("fn")
        assert "Function not found" in str(exc_info.value)


class FakeResponse:
    def __init__(self, data, status=200):
        self.data = data
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        if isinstance(self.data, Exception):
            raise self.data
        return self.data


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        return self.response


class TestShortUrlClient:
    def test_shorten(self):
        session = FakeSession(FakeResponse({"shortUrl": "https://s.example/x1"}))
        client = ShortUrlClient("https://s.example/api", timeout=3, session=session)

        assert client.shorten("https://long.example/path") == "https://s.example/x1"
        assert session.posts == [("https://s.example/api", {"url": "https://long.example/path"}, 3)]

    def test_http_error(self):
        client = ShortUrlClient("https://s.example/api", session=FakeSession(FakeResponse({}, 500)))
        with pytest.raises(ShortUrlError):
            client.shorten("https://long.example")

    def test_missing_url_in_response(self):
        client = ShortUrlClient("https://s.example/api", session=FakeSession(FakeResponse({"id": 3})))
        with pytest.raises(ShortUrlError):
            client.shorten("https://long.example")

    def test_invalid_json(self):
        response = FakeResponse(ValueError("no json"))
        client = ShortUrlClient("https://s.example/api", session=FakeSession(response))
        with pytest.raises(ShortUrlError):
            client.shorten("https://long.example")


def test_stack_console_url_quotes_stack_id():
    url = stack_console_url("us-east-1", "arn:aws:cloudformation:us-east-1:123:stack/app/abc")
    assert url.startswith("https://us-east-1.console.aws.amazon.com/cloudformation/home?region=us-east-1")
    assert "stackId=arn%3Aaws%3Acloudformation%3Aus-east-1%3A123%3Astack%2Fapp%2Fabc" in url
