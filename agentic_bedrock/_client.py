# Copyright (c) Microsoft. All rights reserved.

from enum import Enum
from typing import Any, ClassVar

import boto3
from pydantic import BaseModel, ValidationError

from ._agents import AgentBuilder, EmbeddingsBuilder, ExtractorBuilder, TOutput
from ._completion import CompletionModel
from ._embedding import BedrockEmbeddingModel, EmbeddingModel
from ._logging import get_logger
from ._pydantic import AFBaseSettings
from ._shared import BEDROCK_DEFAULT_REGION
from .exceptions import ServiceInitializationError

__all__ = ["BedrockClient", "BedrockModel", "BedrockSettings"]

logger = get_logger("agentic_bedrock.client")


class BedrockModel(str, Enum):
    """Well known Bedrock completion models. Any other model ID can be passed as a plain string."""

    NOVA_LITE = "amazon.nova-lite-v1:0"
    NOVA_PRO = "amazon.nova-pro-v1:0"
    MISTRAL_8X7B_INSTRUCT = "mistral.mixtral-8x7b-instruct-v0:1"
    CLAUDE_3_5_SONNET = "anthropic.claude-3-5-sonnet-20241022-v2:0"


class BedrockSettings(AFBaseSettings):
    """AWS Bedrock settings.

    The settings are first loaded from environment variables with the prefix 'AWS_'.
    If the environment variables are not found, the settings can be loaded from a .env file
    with the encoding 'utf-8'.

    Keyword Args:
        region_name: AWS region name (default: us-east-1).
        chat_model_id: The Bedrock model ID used when no model is passed to a factory method.
        env_file_path: If provided, the .env settings are read from this file path location.
        env_file_encoding: The encoding of the .env file, defaults to 'utf-8'.

    Examples:
        .. code-block:: python

            # Using environment variables
            # AWS_REGION_NAME=us-west-2
            # AWS_CHAT_MODEL_ID=amazon.nova-lite-v1:0
            settings = BedrockSettings()

            # Or loading from a .env file
            settings = BedrockSettings(env_file_path="path/to/.env")
    """

    env_prefix: ClassVar[str] = "AWS_"

    region_name: str = BEDROCK_DEFAULT_REGION
    chat_model_id: str | None = None


class BedrockClient:
    """Entry point for building Bedrock backed models, agents, extractors and embeddings.

    Credentials are resolved by boto3's default chain (environment, shared config, instance profile).
    """

    def __init__(
        self,
        *,
        region_name: str | None = None,
        bedrock_client: Any | None = None,
        env_file_path: str | None = None,
        env_file_encoding: str | None = None,
    ) -> None:
        """Initialize an AWS Bedrock client.

        Keyword Args:
            region_name: AWS region name (default: us-east-1).
            bedrock_client: An existing boto3 bedrock-runtime client to use. If not provided, one will be created.
            env_file_path: Path to environment file for loading settings.
            env_file_encoding: Encoding of the environment file.

        Examples:
            .. code-block:: python

                from agentic_bedrock import BedrockClient

                # Using environment variables
                client = BedrockClient()

                # Passing in an existing boto3 client
                import boto3

                bedrock = boto3.client("bedrock-runtime", region_name="us-west-2")
                client = BedrockClient(bedrock_client=bedrock)
        """
        try:
            self.settings = BedrockSettings(
                region_name=region_name,
                env_file_path=env_file_path,
                env_file_encoding=env_file_encoding,
            )
        except ValidationError as ex:
            raise ServiceInitializationError("Failed to create Bedrock settings.", ex) from ex

        if bedrock_client is None:
            bedrock_client = self._create_bedrock_client(self.settings)
        self.bedrock_client = bedrock_client

    @property
    def region_name(self) -> str:
        return self.settings.region_name

    def _create_bedrock_client(self, settings: BedrockSettings) -> Any:
        try:
            logger.info(f"Creating Bedrock runtime client in region '{settings.region_name}'")
            return boto3.client(service_name="bedrock-runtime", region_name=settings.region_name)
        except Exception as ex:
            raise ServiceInitializationError(f"Failed to create Bedrock client: {ex}", ex) from ex

    def _resolve_model_id(self, model: BedrockModel | str | None) -> str:
        if isinstance(model, BedrockModel):
            return model.value
        if model:
            return model
        if self.settings.chat_model_id:
            return self.settings.chat_model_id
        raise ServiceInitializationError("Model ID is required. Pass a model or set AWS_CHAT_MODEL_ID.")

    def completion_model(self, model: BedrockModel | str | None = None) -> CompletionModel:
        return CompletionModel(self.bedrock_client, self._resolve_model_id(model))

    def embedding_model(self, model: BedrockEmbeddingModel | None = None) -> EmbeddingModel:
        """Create an embedding model, defaulting to Titan Text Embeddings V2 with 1024 dimensions."""
        return EmbeddingModel(self.bedrock_client, model or BedrockEmbeddingModel.titan_text_embeddings_v2())

    def agent(self, model: BedrockModel | str | None = None) -> AgentBuilder:
        return AgentBuilder(self.completion_model(model))

    def extractor(self, model: BedrockModel | str | None, output_type: type[TOutput]) -> ExtractorBuilder[TOutput]:
        if not (isinstance(output_type, type) and issubclass(output_type, BaseModel)):
            raise TypeError(f"output_type must be a pydantic model class, got {output_type!r}")
        return ExtractorBuilder(self.completion_model(model), output_type)

    def embeddings(self, model: BedrockEmbeddingModel | None = None) -> EmbeddingsBuilder[Any]:
        return EmbeddingsBuilder(self.embedding_model(model))
