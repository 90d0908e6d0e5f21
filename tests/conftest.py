# Copyright (c) Microsoft. All rights reserved.
import base64
import io
import json
from typing import Any
from unittest.mock import MagicMock

from botocore.exceptions import ClientError
from pytest import fixture

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"


@fixture
def exclude_list(request: Any) -> list[str]:
    """Fixture that returns a list of environment variables to exclude."""
    return request.param if hasattr(request, "param") else []


@fixture
def override_env_param_dict(request: Any) -> dict[str, str]:
    """Fixture that returns a dict of environment variables to override."""
    return request.param if hasattr(request, "param") else {}


@fixture
def bedrock_unit_test_env(monkeypatch, exclude_list, override_env_param_dict):  # type: ignore
    """Fixture to set environment variables for BedrockSettings."""
    if exclude_list is None:
        exclude_list = []

    if override_env_param_dict is None:
        override_env_param_dict = {}

    env_vars = {
        "AWS_REGION_NAME": "eu-west-1",
        "AWS_CHAT_MODEL_ID": "amazon.nova-lite-v1:0",
    }

    env_vars.update(override_env_param_dict)  # type: ignore

    for key, value in env_vars.items():
        if key in exclude_list:
            monkeypatch.delenv(key, raising=False)  # type: ignore
            continue
        monkeypatch.setenv(key, value)  # type: ignore

    return env_vars


@fixture
def png_base64() -> str:
    return base64.b64encode(PNG_BYTES).decode("ascii")


@fixture
def pdf_base64() -> str:
    return base64.b64encode(PDF_BYTES).decode("ascii")


@fixture
def mock_bedrock_client() -> MagicMock:
    """Fixture that provides a mock boto3 bedrock-runtime client."""
    mock_client = MagicMock()
    mock_client.converse = MagicMock()
    mock_client.invoke_model = MagicMock()
    return mock_client


def _converse_reply(
    *blocks: dict[str, Any], usage: dict[str, int] | None = None, stop_reason: str | None = None
) -> dict[str, Any]:
    """Builds a Converse reply holding an assistant message with the given content blocks."""
    reply: dict[str, Any] = {
        "ResponseMetadata": {"RequestId": "req-nova-lite", "HTTPStatusCode": 200},
        "output": {"message": {"role": "assistant", "content": list(blocks)}},
    }
    if usage is not None:
        reply["usage"] = usage
    if stop_reason is not None:
        reply["stopReason"] = stop_reason
    return reply


@fixture
def converse_text_reply() -> dict[str, Any]:
    """A reply with two text blocks; only the first one is the answer."""
    return _converse_reply(
        {"text": "Bedrock hosts foundation models."},
        {"text": "Ask me anything else about AWS."},
        usage={"inputTokens": 12, "outputTokens": 9, "totalTokens": 21},
        stop_reason="end_turn",
    )


@fixture
def converse_tool_reply() -> dict[str, Any]:
    """A reply where the model thinks aloud, then requests two tools in order."""
    return _converse_reply(
        {"text": "I will look up the weather and the local time."},
        {"toolUse": {"toolUseId": "call-weather", "name": "get_weather", "input": {"city": "Seattle", "days": 2}}},
        {"toolUse": {"toolUseId": "call-time", "name": "get_time", "input": {"tz": "America/Los_Angeles"}}},
        usage={"inputTokens": 40, "outputTokens": 31, "totalTokens": 71},
        stop_reason="tool_use",
    )


@fixture
def converse_reply_without_usage() -> dict[str, Any]:
    """A minimal reply as some models return it: no usage and no stop reason."""
    return _converse_reply({"text": "ok"})


def _invoke_model_response(embedding: list[float], token_count: int = 3) -> dict[str, Any]:
    """Builds an InvokeModel reply whose body is a readable stream, as boto3 returns it."""
    body = json.dumps({"embedding": embedding, "inputTextTokenCount": token_count}).encode("utf-8")
    return {"contentType": "application/json", "body": io.BytesIO(body)}


def _client_error(code: str, message: str | None = None, operation: str = "Converse") -> ClientError:
    error: dict[str, str] = {"Code": code}
    if message is not None:
        error["Message"] = message
    return ClientError({"Error": error}, operation)


@fixture
def make_invoke_model_response() -> Any:
    """Fixture that provides a factory for InvokeModel embedding replies."""
    return _invoke_model_response


@fixture
def make_client_error() -> Any:
    """Fixture that provides a factory for botocore ClientErrors."""
    return _client_error
