# Copyright (c) Microsoft. All rights reserved.

import logging
from typing import Any

logger = logging.getLogger("agentic_bedrock")


class AgentFrameworkException(Exception):
    """Base class for exceptions raised by agentic_bedrock.

    Args:
        message: The error message.
        inner_exception: The exception that caused this one, if any.
        log_level: The level the error is logged at on creation, None disables logging.
    """

    def __init__(
        self,
        message: str,
        inner_exception: Exception | None = None,
        log_level: int | None = logging.DEBUG,
        *args: Any,
    ) -> None:
        if log_level is not None:
            logger.log(log_level, message, exc_info=inner_exception)
        self.message = message
        self.inner_exception = inner_exception
        super().__init__(message, *args)

    def __str__(self) -> str:
        return self.message


# region Content mapping


class IntegrationError(AgentFrameworkException):
    """Base class for failures while mapping content to or from Bedrock."""

    prefix: str = "Integration error"

    def __init__(self, detail: str, inner_exception: Exception | None = None) -> None:
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}", inner_exception)


class UnsupportedFeatureError(IntegrationError):
    """A content or role variant that has no Bedrock mapping."""

    prefix = "Unsupported feature"

    @property
    def feature(self) -> str:
        return self.detail


class UnsupportedFormatError(IntegrationError):
    """A supported content kind carrying a media type Bedrock does not accept."""

    prefix = "Unsupported format"

    @property
    def format(self) -> str:
        return self.detail


class BuildError(IntegrationError):
    """A Bedrock wire shape could not be assembled, typically a missing mandatory field."""

    prefix = "Failed to build"


class ConversionError(IntegrationError):
    """A payload could not be encoded or decoded, e.g. malformed base64."""

    prefix = "Failed to convert"


class ModelError(IntegrationError):
    """The model returned a block that is missing data it must carry."""

    prefix = "Model error"


# region Service


class ServiceException(AgentFrameworkException):
    """Base class for all service exceptions."""

    pass


class ServiceInitializationError(ServiceException):
    """An error occurred while initializing the service client."""

    pass


class CompletionError(ServiceException):
    """Base class for completion failures."""

    pass


class RequestError(CompletionError):
    """The Converse request could not be assembled."""

    pass


class ProviderError(CompletionError):
    """The remote call failed.

    Args:
        message: Human readable description of the failure.
        inner_exception: The underlying boto3/botocore exception.
        error_code: The Bedrock error code, when the service returned one.
    """

    def __init__(
        self,
        message: str,
        inner_exception: Exception | None = None,
        *,
        error_code: str | None = None,
    ) -> None:
        self.error_code = error_code
        super().__init__(message, inner_exception)


class ResponseError(CompletionError):
    """The reply did not contain an interpretable message or tool call."""

    pass


class EmbeddingError(ServiceException):
    """Base class for embedding failures."""

    pass


class EmbeddingProviderError(EmbeddingError):
    """The remote embedding call failed."""

    def __init__(
        self,
        message: str,
        inner_exception: Exception | None = None,
        *,
        error_code: str | None = None,
    ) -> None:
        self.error_code = error_code
        super().__init__(message, inner_exception)


class EmbeddingResponseError(EmbeddingError):
    """The embedding reply could not be read, or a batch member failed."""

    pass


# region Agents


class AgentException(AgentFrameworkException):
    """Base class for all agent exceptions."""

    pass


class ToolCallError(AgentException):
    """The model asked for a tool that is unknown or could not be invoked."""

    pass


class ExtractionError(AgentException):
    """The model did not submit data matching the requested structure."""

    pass


__all__ = [
    "AgentException",
    "AgentFrameworkException",
    "BuildError",
    "CompletionError",
    "ConversionError",
    "EmbeddingError",
    "EmbeddingProviderError",
    "EmbeddingResponseError",
    "ExtractionError",
    "IntegrationError",
    "ModelError",
    "ProviderError",
    "RequestError",
    "ResponseError",
    "ServiceException",
    "ServiceInitializationError",
    "ToolCallError",
    "UnsupportedFeatureError",
    "UnsupportedFormatError",
]
