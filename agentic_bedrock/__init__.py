# Copyright (c) Microsoft. All rights reserved.
import importlib.metadata

from ._agents import Agent, AgentBuilder, Embeddable, EmbeddingsBuilder, Extractor, ExtractorBuilder
from ._client import BedrockClient, BedrockModel, BedrockSettings
from ._completion import CompletionModel
from ._content import (
    DEFAULT_ROLE,
    from_assistant_content,
    from_document,
    from_image,
    from_message,
    from_tool_result,
    from_user_content,
    into_assistant_content,
    into_document,
    into_image,
    into_message,
    into_tool_result,
    into_user_content,
    resolve_role,
)
from ._document import Float, NegInt, PosInt, document_to_json, json_to_document
from ._embedding import BedrockEmbeddingModel, EmbeddingModel, EmbeddingRequest, EmbeddingResponse
from ._logging import get_logger
from ._shared import BEDROCK_DEFAULT_REGION
from ._tools import Tool, tool
from ._types import (
    Audio,
    AudioMediaType,
    CompletionModelProtocol,
    CompletionRequest,
    CompletionResponse,
    ContentFormat,
    ContextDocument,
    Document,
    DocumentMediaType,
    Embedding,
    EmbeddingModelProtocol,
    Image,
    ImageMediaType,
    Message,
    MessageChoice,
    Role,
    Text,
    ToolCall,
    ToolCallChoice,
    ToolDefinition,
    ToolFunction,
    ToolResult,
    UsageDetails,
)
from ._version import VERSION

try:
    __version__ = importlib.metadata.version(__name__)
except importlib.metadata.PackageNotFoundError:
    __version__ = VERSION  # Fallback for development mode

__all__ = [
    "BEDROCK_DEFAULT_REGION",
    "DEFAULT_ROLE",
    "Agent",
    "AgentBuilder",
    "Audio",
    "AudioMediaType",
    "BedrockClient",
    "BedrockEmbeddingModel",
    "BedrockModel",
    "BedrockSettings",
    "CompletionModel",
    "CompletionModelProtocol",
    "CompletionRequest",
    "CompletionResponse",
    "ContentFormat",
    "ContextDocument",
    "Document",
    "DocumentMediaType",
    "Embeddable",
    "Embedding",
    "EmbeddingModel",
    "EmbeddingModelProtocol",
    "EmbeddingRequest",
    "EmbeddingResponse",
    "EmbeddingsBuilder",
    "Extractor",
    "ExtractorBuilder",
    "Float",
    "Image",
    "ImageMediaType",
    "Message",
    "MessageChoice",
    "NegInt",
    "PosInt",
    "Role",
    "Text",
    "Tool",
    "ToolCall",
    "ToolCallChoice",
    "ToolDefinition",
    "ToolFunction",
    "ToolResult",
    "UsageDetails",
    "__version__",
    "document_to_json",
    "from_assistant_content",
    "from_document",
    "from_image",
    "from_message",
    "from_tool_result",
    "from_user_content",
    "get_logger",
    "into_assistant_content",
    "into_document",
    "into_image",
    "into_message",
    "into_tool_result",
    "into_user_content",
    "json_to_document",
    "resolve_role",
    "tool",
]
