# Copyright (c) Microsoft. All rights reserved.

import asyncio
from collections.abc import Iterable
from typing import Any, ClassVar

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ._logging import get_logger
from ._pydantic import AFBaseModel
from ._shared import classify_client_error
from ._types import Embedding
from .exceptions import EmbeddingError, EmbeddingProviderError, EmbeddingResponseError

__all__ = ["BedrockEmbeddingModel", "EmbeddingModel", "EmbeddingRequest", "EmbeddingResponse"]

logger = get_logger("agentic_bedrock.embedding")

TITAN_TEXT_EMBEDDINGS_V2 = "amazon.titan-embed-text-v2:0"


class _CamelModel(AFBaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmbeddingRequest(_CamelModel):
    """The InvokeModel body of a text embedding request."""

    input_text: str
    dimensions: int
    normalize: bool = True


class EmbeddingResponse(_CamelModel):
    """The InvokeModel body of a text embedding reply."""

    embedding: list[float]
    input_text_token_count: int = 0


class BedrockEmbeddingModel(AFBaseModel):
    """An embedding model available on Bedrock and the size of the vectors it produces."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    ndims: int

    @classmethod
    def titan_text_embeddings_v2(cls, ndims: int = 1024) -> "BedrockEmbeddingModel":
        """Amazon Titan Text Embeddings V2, which supports 256, 512 or 1024 dimensions."""
        return cls(model_id=TITAN_TEXT_EMBEDDINGS_V2, ndims=ndims)

    @classmethod
    def custom(cls, model_id: str, ndims: int) -> "BedrockEmbeddingModel":
        return cls(model_id=model_id, ndims=ndims)


class EmbeddingModel:
    """A Bedrock model producing text embeddings through the InvokeModel API.

    Each document is sent as its own request; batches are processed in order and
    stop at the first failure.
    """

    MAX_DOCUMENTS: ClassVar[int] = 1024

    def __init__(self, bedrock_client: Any, model: BedrockEmbeddingModel) -> None:
        self.bedrock_client = bedrock_client
        self.model = model

    @property
    def model_id(self) -> str:
        return self.model.model_id

    @property
    def ndims(self) -> int:
        return self.model.ndims

    async def document_to_embeddings(self, request: EmbeddingRequest) -> EmbeddingResponse:
        """Embed a single document.

        Raises:
            EmbeddingProviderError: If the InvokeModel call failed.
            EmbeddingResponseError: If the reply body could not be read.
        """
        try:
            response = await asyncio.to_thread(
                self.bedrock_client.invoke_model,
                modelId=self.model_id,
                contentType="application/json",
                accept="application/json",
                body=request.model_dump_json(by_alias=True),
            )
        except ClientError as e:
            error_code, error_message = classify_client_error(e)
            logger.error(f"Bedrock InvokeModel API error [{error_code}]: {error_message}")
            raise EmbeddingProviderError(error_message, e, error_code=error_code) from e
        except BotoCoreError as e:
            logger.error(f"Unexpected error calling Bedrock InvokeModel API: {e}")
            raise EmbeddingProviderError(str(e), e) from e

        try:
            body = response["body"].read().decode("utf-8")
            return EmbeddingResponse.model_validate_json(body)
        except BotoCoreError as ex:
            logger.error(f"Failed to read Bedrock InvokeModel response body: {ex}")
            raise EmbeddingProviderError(str(ex), ex) from ex
        except UnicodeDecodeError as ex:
            raise EmbeddingResponseError(f"Embedding response is not valid UTF-8: {ex}", ex) from ex
        except ValidationError as ex:
            raise EmbeddingResponseError(f"Embedding response is malformed: {ex}", ex) from ex

    async def embed_text(self, text: str) -> Embedding:
        embeddings = await self.embed_texts([text])
        return embeddings[0]

    async def embed_texts(self, documents: Iterable[str]) -> list[Embedding]:
        """Embed a batch of documents, returning one embedding per document in input order.

        Raises:
            EmbeddingResponseError: If any document failed; no partial results are returned.
        """
        embeddings: list[Embedding] = []
        for document in documents:
            request = EmbeddingRequest(input_text=document, dimensions=self.ndims, normalize=True)
            try:
                response = await self.document_to_embeddings(request)
            except EmbeddingError as ex:
                raise EmbeddingResponseError(str(ex), ex) from ex
            embeddings.append(Embedding(document=document, vec=response.embedding))
        logger.debug(f"Embedded {len(embeddings)} documents with '{self.model_id}'")
        return embeddings
