# Copyright (c) Microsoft. All rights reserved.

import sys
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, Protocol, runtime_checkable

from pydantic import Field

from ._pydantic import AFBaseModel

if sys.version_info >= (3, 11):
    from typing import Self  # pragma: no cover
else:
    from typing_extensions import Self  # pragma: no cover

__all__ = [
    "AssistantContent",
    "Audio",
    "AudioMediaType",
    "CompletionModelProtocol",
    "CompletionRequest",
    "CompletionResponse",
    "Content",
    "ContentFormat",
    "ContextDocument",
    "Document",
    "DocumentMediaType",
    "Embedding",
    "EmbeddingModelProtocol",
    "Image",
    "ImageMediaType",
    "Message",
    "MessageChoice",
    "ModelChoice",
    "Role",
    "Text",
    "ToolCall",
    "ToolCallChoice",
    "ToolDefinition",
    "ToolFunction",
    "ToolResult",
    "ToolResultContent",
    "UsageDetails",
    "UserContent",
]


class Role(str, Enum):
    """Conversational roles understood by Bedrock."""

    USER = "user"
    ASSISTANT = "assistant"


class ContentFormat(str, Enum):
    """How the ``data`` of a binary content item is encoded."""

    BASE64 = "base64"
    STRING = "string"


class ImageMediaType(str, Enum):
    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    WEBP = "image/webp"
    HEIC = "image/heic"
    HEIF = "image/heif"
    SVG = "image/svg+xml"


class DocumentMediaType(str, Enum):
    PDF = "application/pdf"
    TXT = "text/plain"
    RTF = "text/rtf"
    HTML = "text/html"
    CSS = "text/css"
    MARKDOWN = "text/markdown"
    CSV = "text/csv"
    XML = "text/xml"
    JAVASCRIPT = "application/x-javascript"
    PYTHON = "application/x-python"


class AudioMediaType(str, Enum):
    WAV = "audio/wav"
    MP3 = "audio/mp3"
    AIFF = "audio/aiff"
    AAC = "audio/aac"
    OGG = "audio/ogg"
    FLAC = "audio/flac"


# region Content


class Text(AFBaseModel):
    """Plain text content."""

    type: Literal["text"] = "text"
    text: str

    def __init__(self, text: str, **kwargs: Any) -> None:
        super().__init__(text=text, **kwargs)


class Image(AFBaseModel):
    """Image content.

    Attributes:
        data: The image payload, base64 encoded unless ``format`` says otherwise.
        format: How ``data`` is encoded.
        media_type: The image media type, required by Bedrock.
    """

    type: Literal["image"] = "image"
    data: str
    format: ContentFormat | None = ContentFormat.BASE64
    media_type: ImageMediaType | None = None


class Document(AFBaseModel):
    """Document attachment content.

    Attributes:
        data: The document payload, base64 encoded unless ``format`` is ``STRING``.
        format: How ``data`` is encoded.
        media_type: The document media type, required by Bedrock.
        name: The name shown to the model; derived from the payload when omitted.
    """

    type: Literal["document"] = "document"
    data: str
    format: ContentFormat | None = ContentFormat.BASE64
    media_type: DocumentMediaType | None = None
    name: str | None = None


class Audio(AFBaseModel):
    """Audio content. Bedrock's Converse API has no mapping for it."""

    type: Literal["audio"] = "audio"
    data: str
    format: ContentFormat | None = ContentFormat.BASE64
    media_type: AudioMediaType | None = None


class ToolFunction(AFBaseModel):
    """The function a tool call invokes."""

    name: str
    arguments: Any = Field(default_factory=dict)


class ToolCall(AFBaseModel):
    """A request from the model to call a tool."""

    type: Literal["tool_call"] = "tool_call"
    id: str
    function: ToolFunction


ToolResultContent = Annotated[Text | Image, Field(discriminator="type")]


class ToolResult(AFBaseModel):
    """The result of a tool call, sent back on a user turn."""

    type: Literal["tool_result"] = "tool_result"
    id: str
    content: list[ToolResultContent]


UserContent = Annotated[Text | Image | Document | Audio | ToolResult, Field(discriminator="type")]
AssistantContent = Annotated[Text | ToolCall, Field(discriminator="type")]
Content = Annotated[Text | Image | Document | Audio | ToolCall | ToolResult, Field(discriminator="type")]


class Message(AFBaseModel):
    """A single conversation turn.

    The role is kept as a plain string so that history produced elsewhere round-trips
    untouched; only "user" and "assistant" have a Bedrock mapping. Which content
    variants a role may carry is enforced when the message is mapped, not here.
    """

    role: str
    content: Annotated[list[Content], Field(min_length=1)]

    def __init__(self, role: Role | str, content: str | Sequence[Any], **kwargs: Any) -> None:
        if isinstance(content, str):
            content = [Text(content)]
        if isinstance(role, Role):
            role = role.value
        super().__init__(role=role, content=list(content), **kwargs)

    @classmethod
    def user(cls, content: str | Sequence[Any]) -> Self:
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str | Sequence[Any]) -> Self:
        return cls(Role.ASSISTANT, content)

    @property
    def text(self) -> str:
        """Returns the text of all Text items, joined by newlines."""
        return "\n".join(item.text for item in self.content if isinstance(item, Text))


# region Completion


class ToolDefinition(AFBaseModel):
    """A tool the model may call instead of answering with text."""

    name: str
    description: str = ""
    parameters: Any = Field(default_factory=dict)
    """JSON schema of the tool's arguments."""


class ContextDocument(AFBaseModel):
    """A piece of retrieved or static context rendered into the prompt."""

    id: str
    text: str
    additional_props: dict[str, str] = Field(default_factory=dict)

    def __str__(self) -> str:
        body = self.text
        if self.additional_props:
            metadata = " ".join(f'{key}: "{value}"' for key, value in sorted(self.additional_props.items()))
            body = f"<metadata {metadata} />\n{self.text}"
        return f"<file id: {self.id}>\n{body}\n</file>\n"


class CompletionRequest(AFBaseModel):
    """Everything needed for one completion call."""

    prompt: str
    preamble: str | None = None
    chat_history: list[Message] = Field(default_factory=list)
    documents: list[ContextDocument] = Field(default_factory=list)
    tools: list[ToolDefinition] = Field(default_factory=list)
    temperature: float | None = None
    max_tokens: int | None = None
    additional_params: Any | None = None

    def prompt_with_context(self) -> str:
        """Returns the prompt, preceded by an <attachments> block when documents are attached."""
        if not self.documents:
            return self.prompt
        attachments = "".join(str(document) for document in self.documents)
        return f"<attachments>\n{attachments}</attachments>\n\n{self.prompt}"


class MessageChoice(AFBaseModel):
    type: Literal["message"] = "message"
    text: str

    def __init__(self, text: str, **kwargs: Any) -> None:
        super().__init__(text=text, **kwargs)


class ToolCallChoice(AFBaseModel):
    type: Literal["tool_call"] = "tool_call"
    name: str
    call_id: str
    arguments: Any = Field(default_factory=dict)


ModelChoice = Annotated[MessageChoice | ToolCallChoice, Field(discriminator="type")]


class UsageDetails(AFBaseModel):
    """Token usage reported for a request/response."""

    input_token_count: int = 0
    output_token_count: int = 0
    total_token_count: int = 0


class CompletionResponse(AFBaseModel):
    """The outcome of a completion call."""

    choice: ModelChoice
    raw_response: Any | None = Field(default=None, repr=False)
    """The raw Converse reply, kept for diagnostics."""
    usage: UsageDetails | None = None
    stop_reason: str | None = None


@runtime_checkable
class CompletionModelProtocol(Protocol):
    """A model that can answer a completion request."""

    async def completion(self, request: CompletionRequest) -> CompletionResponse: ...


# region Embeddings


class Embedding(AFBaseModel):
    """An embedding vector together with the text it was computed from."""

    document: str
    vec: list[float]


@runtime_checkable
class EmbeddingModelProtocol(Protocol):
    """A model that can embed batches of text."""

    MAX_DOCUMENTS: ClassVar[int]

    @property
    def ndims(self) -> int: ...

    async def embed_texts(self, documents: Iterable[str]) -> list[Embedding]: ...
