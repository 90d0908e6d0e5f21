# Copyright (c) Microsoft. All rights reserved.
import io
import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ReadTimeoutError

from agentic_bedrock import BedrockEmbeddingModel, EmbeddingModel, EmbeddingRequest
from agentic_bedrock.exceptions import EmbeddingProviderError, EmbeddingResponseError


@pytest.fixture
def model(mock_bedrock_client) -> EmbeddingModel:  # type: ignore
    return EmbeddingModel(mock_bedrock_client, BedrockEmbeddingModel.titan_text_embeddings_v2(256))


class TestEmbeddingModelCatalogue:
    """Tests for the embedding model catalogue."""

    def test_titan_v2(self):
        titan = BedrockEmbeddingModel.titan_text_embeddings_v2()

        assert titan.model_id == "amazon.titan-embed-text-v2:0"
        assert titan.ndims == 1024

    def test_custom(self, mock_bedrock_client):  # type: ignore
        model = EmbeddingModel(mock_bedrock_client, BedrockEmbeddingModel.custom("cohere.embed-english-v3", 1024))

        assert model.model_id == "cohere.embed-english-v3"
        assert model.ndims == 1024
        assert EmbeddingModel.MAX_DOCUMENTS == 1024


class TestDocumentToEmbeddings:
    """Tests for a single InvokeModel embedding call."""

    def test_request_body_uses_camel_case(self):
        body = json.loads(EmbeddingRequest(input_text="hi", dimensions=256).model_dump_json(by_alias=True))

        assert body == {"inputText": "hi", "dimensions": 256, "normalize": True}

    @pytest.mark.asyncio
    async def test_invoke_model_call(self, model, mock_bedrock_client, make_invoke_model_response):  # type: ignore
        mock_bedrock_client.invoke_model.return_value = make_invoke_model_response([0.1, 0.2], token_count=2)

        response = await model.document_to_embeddings(EmbeddingRequest(input_text="hello", dimensions=256))

        assert response.embedding == [0.1, 0.2]
        assert response.input_text_token_count == 2
        kwargs = mock_bedrock_client.invoke_model.call_args.kwargs
        assert kwargs["modelId"] == "amazon.titan-embed-text-v2:0"
        assert kwargs["contentType"] == "application/json"
        assert kwargs["accept"] == "application/json"
        assert json.loads(kwargs["body"]) == {"inputText": "hello", "dimensions": 256, "normalize": True}

    @pytest.mark.asyncio
    async def test_invalid_utf8_body(self, model, mock_bedrock_client):  # type: ignore
        mock_bedrock_client.invoke_model.return_value = {"body": io.BytesIO(b"\xff\xfe\xfa")}

        with pytest.raises(EmbeddingResponseError):
            await model.document_to_embeddings(EmbeddingRequest(input_text="hello", dimensions=256))

    @pytest.mark.asyncio
    async def test_malformed_body(self, model, mock_bedrock_client):  # type: ignore
        mock_bedrock_client.invoke_model.return_value = {"body": io.BytesIO(b'{"vector": [1, 2]}')}

        with pytest.raises(EmbeddingResponseError):
            await model.document_to_embeddings(EmbeddingRequest(input_text="hello", dimensions=256))

    @pytest.mark.asyncio
    async def test_service_error(self, model, mock_bedrock_client, make_client_error):  # type: ignore
        mock_bedrock_client.invoke_model.side_effect = make_client_error(
            "ServiceQuotaExceededException", operation="InvokeModel"
        )

        with pytest.raises(EmbeddingProviderError) as exc_info:
            await model.document_to_embeddings(EmbeddingRequest(input_text="hello", dimensions=256))

        assert exc_info.value.error_code == "ServiceQuotaExceededException"
        assert "service quota" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_body_read_timeout(self, model, mock_bedrock_client):  # type: ignore
        body = MagicMock()
        body.read.side_effect = ReadTimeoutError(endpoint_url="https://bedrock.invalid")
        mock_bedrock_client.invoke_model.return_value = {"body": body}

        with pytest.raises(EmbeddingProviderError) as exc_info:
            await model.document_to_embeddings(EmbeddingRequest(input_text="hello", dimensions=256))

        assert exc_info.value.error_code is None
        assert isinstance(exc_info.value.inner_exception, ReadTimeoutError)


class TestEmbedTexts:
    """Tests for embedding batches of documents."""

    @pytest.mark.asyncio
    async def test_batch_keeps_input_order(self, model, mock_bedrock_client, make_invoke_model_response):  # type: ignore
        mock_bedrock_client.invoke_model.side_effect = [
            make_invoke_model_response([1.0]),
            make_invoke_model_response([2.0]),
            make_invoke_model_response([3.0]),
        ]

        embeddings = await model.embed_texts(["one", "two", "three"])

        assert [e.document for e in embeddings] == ["one", "two", "three"]
        assert [e.vec for e in embeddings] == [[1.0], [2.0], [3.0]]
        sent = [json.loads(c.kwargs["body"]) for c in mock_bedrock_client.invoke_model.call_args_list]
        assert [b["inputText"] for b in sent] == ["one", "two", "three"]
        assert all(b["dimensions"] == 256 and b["normalize"] is True for b in sent)

    @pytest.mark.asyncio
    async def test_batch_fails_fast(self, model, mock_bedrock_client, make_invoke_model_response, make_client_error):  # type: ignore
        mock_bedrock_client.invoke_model.side_effect = [
            make_invoke_model_response([1.0]),
            make_client_error("ThrottlingException", "Too many requests", operation="InvokeModel"),
            make_invoke_model_response([3.0]),
        ]

        with pytest.raises(EmbeddingResponseError) as exc_info:
            await model.embed_texts(["one", "two", "three"])

        assert "Too many requests" in str(exc_info.value)
        assert isinstance(exc_info.value.inner_exception, EmbeddingProviderError)
        assert mock_bedrock_client.invoke_model.call_count == 2

    @pytest.mark.asyncio
    async def test_batch_fails_on_body_read_error(self, model, mock_bedrock_client, make_invoke_model_response):  # type: ignore
        body = MagicMock()
        body.read.side_effect = ReadTimeoutError(endpoint_url="https://bedrock.invalid")
        mock_bedrock_client.invoke_model.side_effect = [make_invoke_model_response([1.0]), {"body": body}]

        with pytest.raises(EmbeddingResponseError) as exc_info:
            await model.embed_texts(["one", "two"])

        assert isinstance(exc_info.value.inner_exception, EmbeddingProviderError)
        assert mock_bedrock_client.invoke_model.call_count == 2

    @pytest.mark.asyncio
    async def test_empty_batch(self, model, mock_bedrock_client):  # type: ignore
        assert await model.embed_texts([]) == []
        mock_bedrock_client.invoke_model.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_text(self, model, mock_bedrock_client, make_invoke_model_response):  # type: ignore
        mock_bedrock_client.invoke_model.return_value = make_invoke_model_response([0.5, 0.5])

        embedding = await model.embed_text("hello")

        assert embedding.document == "hello"
        assert embedding.vec == [0.5, 0.5]
