# Copyright (c) Microsoft. All rights reserved.

import asyncio
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from ._content import from_message
from ._document import document_to_json, json_to_document
from ._logging import get_logger
from ._shared import classify_client_error
from ._types import (
    CompletionRequest,
    CompletionResponse,
    Message,
    MessageChoice,
    ModelChoice,
    ToolCallChoice,
    ToolDefinition,
    UsageDetails,
)
from .exceptions import BuildError, IntegrationError, ProviderError, RequestError, ResponseError

__all__ = ["CompletionModel"]

logger = get_logger("agentic_bedrock.completion")


class CompletionModel:
    """A Bedrock model answering completion requests through the Converse API."""

    def __init__(self, bedrock_client: Any, model_id: str) -> None:
        """Initialize the completion model.

        Args:
            bedrock_client: A boto3 bedrock-runtime client.
            model_id: The ID of the Bedrock model to call, e.g. 'amazon.nova-lite-v1:0'.
        """
        self.bedrock_client = bedrock_client
        self.model_id = model_id

    async def completion(self, request: CompletionRequest) -> CompletionResponse:
        """Send a completion request to Bedrock.

        Args:
            request: The prompt, history, tools and inference settings.

        Returns:
            The model's choice, either a message or a tool call, with usage details.

        Raises:
            RequestError: If the request could not be converted to the Converse format.
            ProviderError: If the Converse call failed or returned no message.
            ResponseError: If the reply held neither text nor a tool call.
        """
        request_params = self._create_converse_request(request)
        logger.debug(f"Sending Converse request to '{self.model_id}' with {len(request_params['messages'])} messages")

        try:
            # Use asyncio.to_thread since boto3 is synchronous
            response = await asyncio.to_thread(self.bedrock_client.converse, **request_params)
        except ClientError as e:
            error_code, error_message = classify_client_error(e)
            logger.error(f"Bedrock Converse API error [{error_code}]: {error_message}")
            raise ProviderError(error_message, e, error_code=error_code) from e
        except BotoCoreError as e:
            logger.error(f"Unexpected error calling Bedrock Converse API: {e}")
            raise ProviderError(str(e), e) from e

        return self._process_converse_response(response)

    def _create_converse_request(self, request: CompletionRequest) -> dict[str, Any]:
        """Create Converse API request parameters.

        History messages are converted leniently so a single unsupported item does not
        lose the conversation; the new user turn must convert completely.
        """
        messages: list[dict[str, Any]] = []
        for message in request.chat_history:
            try:
                messages.append(from_message(message, lenient=True))
            except IntegrationError as ex:
                logger.warning(f"Dropping history message with role '{message.role}': {ex}")

        try:
            messages.append(from_message(Message.user(request.prompt_with_context())))
            tool_config = self._convert_tools(request.tools)
            additional_fields = (
                json_to_document(request.additional_params) if request.additional_params is not None else None
            )
        except IntegrationError as ex:
            raise RequestError(f"Failed to build the Converse request: {ex}", ex) from ex
        except TypeError as ex:
            raise RequestError(f"Additional parameters are not valid JSON: {ex}", ex) from ex

        params: dict[str, Any] = {
            "modelId": self.model_id,
            "messages": messages,
        }

        if request.preamble is not None:
            params["system"] = [{"text": request.preamble}]

        inference_config: dict[str, Any] = {}
        if request.temperature is not None:
            inference_config["temperature"] = request.temperature
        if request.max_tokens is not None:
            inference_config["maxTokens"] = request.max_tokens
        if inference_config:
            params["inferenceConfig"] = inference_config

        if tool_config:
            params["toolConfig"] = tool_config

        if additional_fields is not None:
            params["additionalModelRequestFields"] = additional_fields

        return params

    def _convert_tools(self, tools: list[ToolDefinition]) -> dict[str, Any] | None:
        """Convert tool definitions to a Bedrock toolConfig, or None if there are no tools."""
        if not tools:
            return None

        tool_specs: list[dict[str, Any]] = []
        for tool in tools:
            if not tool.name:
                raise BuildError("tool name is required")
            tool_specs.append({
                "toolSpec": {
                    "name": tool.name,
                    "description": tool.description or "",
                    "inputSchema": {"json": json_to_document(tool.parameters or {})},
                }
            })
        return {"tools": tool_specs}

    def _process_converse_response(self, response: dict[str, Any]) -> CompletionResponse:
        output = response.get("output")
        if output is None:
            raise ProviderError("Model didn't return any output")
        message = output.get("message")
        if message is None:
            raise ProviderError("Model didn't return a message")

        return CompletionResponse(
            choice=self._select_choice(message.get("content") or []),
            raw_response=response,
            usage=self._parse_usage(response.get("usage")),
            stop_reason=response.get("stopReason"),
        )

    @staticmethod
    def _select_choice(blocks: list[dict[str, Any]]) -> ModelChoice:
        """Pick the first tool call, else the first text block."""
        for block in blocks:
            if tool_use := block.get("toolUse"):
                return ToolCallChoice(
                    name=tool_use.get("name", ""),
                    call_id=tool_use.get("toolUseId", ""),
                    arguments=document_to_json(tool_use.get("input", {})),
                )
        for block in blocks:
            if (text := block.get("text")) is not None:
                return MessageChoice(text)
        raise ResponseError("Response did not contain a message or tool call")

    def _parse_usage(self, usage: dict[str, Any] | None) -> UsageDetails:
        """Parse usage information from Bedrock response.

        Args:
            usage: Usage dictionary from Bedrock.

        Returns:
            UsageDetails object.
        """
        if not usage:
            return UsageDetails()

        input_tokens = usage.get("inputTokens", 0)
        output_tokens = usage.get("outputTokens", 0)
        total_tokens = usage.get("totalTokens", input_tokens + output_tokens)

        return UsageDetails(
            input_token_count=input_tokens, output_token_count=output_tokens, total_token_count=total_tokens
        )
