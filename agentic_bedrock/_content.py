# Copyright (c) Microsoft. All rights reserved.

"""Mapping between framework content and Bedrock Converse content blocks.

Bedrock content blocks are dicts with a single key naming the variant:

- text: {'text': '...'}
- image: {'image': {'format': 'png', 'source': {'bytes': b'...'}}}
- document: {'document': {'format': 'pdf', 'name': '...', 'source': {'bytes': b'...'}}}
- toolUse: {'toolUse': {'toolUseId': '...', 'name': '...', 'input': {...}}}
- toolResult: {'toolResult': {'toolUseId': '...', 'content': [...]}}

Every ``from_*`` function maps towards Bedrock, every ``into_*`` function maps back.
"""

import base64
import binascii
import hashlib
import json
from collections.abc import Callable, Iterable
from typing import Any, Final, TypeVar

from ._document import document_to_json, json_to_document
from ._logging import get_logger
from ._types import (
    Audio,
    ContentFormat,
    Document,
    DocumentMediaType,
    Image,
    ImageMediaType,
    Message,
    Role,
    Text,
    ToolCall,
    ToolFunction,
    ToolResult,
)
from .exceptions import (
    BuildError,
    ConversionError,
    IntegrationError,
    ModelError,
    UnsupportedFeatureError,
    UnsupportedFormatError,
)

__all__ = [
    "DEFAULT_ROLE",
    "from_assistant_content",
    "from_document",
    "from_image",
    "from_message",
    "from_tool_result",
    "from_user_content",
    "into_assistant_content",
    "into_document",
    "into_image",
    "into_message",
    "into_tool_result",
    "into_user_content",
    "resolve_role",
]

logger = get_logger("agentic_bedrock.content")

DEFAULT_ROLE: Final[Role] = Role.USER
"""Role used for history messages whose role string Bedrock does not know."""

IMAGE_FORMATS: dict[ImageMediaType, str] = {
    ImageMediaType.GIF: "gif",
    ImageMediaType.JPEG: "jpeg",
    ImageMediaType.PNG: "png",
    ImageMediaType.WEBP: "webp",
}
IMAGE_MEDIA_TYPES: dict[str, ImageMediaType] = {value: key for key, value in IMAGE_FORMATS.items()}

DOCUMENT_FORMATS: dict[DocumentMediaType, str] = {
    DocumentMediaType.CSV: "csv",
    DocumentMediaType.HTML: "html",
    DocumentMediaType.MARKDOWN: "md",
    DocumentMediaType.PDF: "pdf",
    DocumentMediaType.TXT: "txt",
}
DOCUMENT_MEDIA_TYPES: dict[str, DocumentMediaType] = {value: key for key, value in DOCUMENT_FORMATS.items()}

TItem = TypeVar("TItem")


def resolve_role(role: str) -> Role:
    """Resolve a role string, falling back to DEFAULT_ROLE for roles Bedrock does not know."""
    try:
        return Role(role)
    except ValueError:
        logger.warning(f"Unrecognized conversation role '{role}', sending it as '{DEFAULT_ROLE.value}'.")
        return DEFAULT_ROLE


def _convert_all(
    items: Iterable[TItem],
    convert: Callable[[TItem], dict[str, Any]],
    *,
    lenient: bool,
) -> list[dict[str, Any]]:
    """Convert every item; in lenient mode items that fail to convert are dropped."""
    converted: list[dict[str, Any]] = []
    for item in items:
        try:
            converted.append(convert(item))
        except IntegrationError as ex:
            if not lenient:
                raise
            logger.warning(f"Dropping {getattr(item, 'type', type(item).__name__)} content: {ex}")
    return converted


def _decode_base64(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as ex:
        raise ConversionError(str(ex), ex) from ex


def _encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _source_bytes(block: dict[str, Any], kind: str) -> bytes:
    source = block.get("source") or {}
    data = source.get("bytes")
    if data is None:
        raise ModelError(f"{kind} source is missing")
    return data


# region Images


def from_image(image: Image) -> dict[str, Any]:
    """Map an Image to a Bedrock image block (without the outer 'image' key)."""
    if image.media_type is None:
        raise BuildError("image format is required")
    image_format = IMAGE_FORMATS.get(image.media_type)
    if image_format is None:
        raise UnsupportedFormatError(image.media_type.value)
    if image.format not in (None, ContentFormat.BASE64):
        raise UnsupportedFeatureError("Image content in string format")
    return {"format": image_format, "source": {"bytes": _decode_base64(image.data)}}


def into_image(block: dict[str, Any]) -> Image:
    """Map a Bedrock image block back to an Image with a base64 payload."""
    image_format = block.get("format")
    media_type = IMAGE_MEDIA_TYPES.get(image_format)  # type: ignore[arg-type]
    if media_type is None:
        raise UnsupportedFormatError(str(image_format))
    data = _source_bytes(block, "Image")
    return Image(data=_encode_base64(data), format=ContentFormat.BASE64, media_type=media_type)


# region Documents


def _document_name(document: Document, payload: bytes) -> str:
    if document.name:
        return document.name
    return f"document-{hashlib.sha256(payload).hexdigest()[:12]}"


def from_document(document: Document) -> dict[str, Any]:
    """Map a Document to a Bedrock document block (without the outer 'document' key).

    ``STRING`` payloads are sent as their UTF-8 bytes, anything else is base64 decoded.
    """
    if document.media_type is None:
        raise BuildError("document format is required")
    document_format = DOCUMENT_FORMATS.get(document.media_type)
    if document_format is None:
        raise UnsupportedFormatError(document.media_type.value)
    if document.format == ContentFormat.STRING:
        payload = document.data.encode("utf-8")
    else:
        payload = _decode_base64(document.data)
    return {
        "format": document_format,
        "name": _document_name(document, payload),
        "source": {"bytes": payload},
    }


def into_document(block: dict[str, Any]) -> Document:
    """Map a Bedrock document block back to a Document with a base64 payload."""
    document_format = block.get("format")
    media_type = DOCUMENT_MEDIA_TYPES.get(document_format)  # type: ignore[arg-type]
    if media_type is None:
        raise UnsupportedFormatError(str(document_format))
    data = _source_bytes(block, "Document")
    return Document(
        data=_encode_base64(data),
        format=ContentFormat.BASE64,
        media_type=media_type,
        name=block.get("name"),
    )


# region Tool results


def from_tool_result(content: Text | Image) -> dict[str, Any]:
    """Map one item of a ToolResult to a Bedrock tool result content block."""
    match content:
        case Text():
            return {"text": content.text}
        case Image():
            return {"image": from_image(content)}
        case _:
            raise UnsupportedFeatureError(f"{type(content).__name__} inside a tool result")


def into_tool_result(block: dict[str, Any]) -> Text | Image:
    """Map a Bedrock tool result content block back to Text or Image.

    JSON results are flattened to Text holding their compact, key-sorted JSON rendering.
    """
    match block:
        case {"text": str() as text}:
            return Text(text)
        case {"json": document}:
            return Text(json.dumps(document_to_json(document), separators=(",", ":"), sort_keys=True))
        case {"image": dict() as image}:
            return into_image(image)
        case _:
            raise UnsupportedFeatureError("ToolResultContentBlock contains unsupported variant")


# region Content


def from_user_content(content: Any, *, lenient: bool = False) -> dict[str, Any]:
    """Map a user content item to a Bedrock content block.

    Args:
        content: The content item.
        lenient: Drop tool result items that cannot be mapped instead of failing.
    """
    match content:
        case Text():
            return {"text": content.text}
        case ToolResult():
            if not content.id:
                raise BuildError("toolUseId is required")
            results = _convert_all(content.content, from_tool_result, lenient=lenient)
            if not results:
                raise BuildError("tool result content must not be empty")
            return {"toolResult": {"toolUseId": content.id, "content": results}}
        case Image():
            return {"image": from_image(content)}
        case Document():
            return {"document": from_document(content)}
        case Audio():
            raise UnsupportedFeatureError("Audio")
        case _:
            raise UnsupportedFeatureError(f"{type(content).__name__} in a user message")


def from_assistant_content(content: Any) -> dict[str, Any]:
    """Map an assistant content item to a Bedrock content block."""
    match content:
        case Text():
            return {"text": content.text}
        case ToolCall():
            if not content.id:
                raise BuildError("toolUseId is required")
            if not content.function.name:
                raise BuildError("tool name is required")
            return {
                "toolUse": {
                    "toolUseId": content.id,
                    "name": content.function.name,
                    "input": json_to_document(content.function.arguments),
                }
            }
        case _:
            raise UnsupportedFeatureError(f"{type(content).__name__} in an assistant message")


def into_user_content(block: dict[str, Any]) -> Text | Image | Document | ToolResult:
    """Map a Bedrock content block to a user content item."""
    match block:
        case {"text": str() as text}:
            return Text(text)
        case {"toolResult": dict() as tool_result}:
            results = _try_each(tool_result.get("content") or [], into_tool_result)
            if not results:
                raise UnsupportedFeatureError("ToolResult returned invalid response")
            return ToolResult(id=tool_result.get("toolUseId", ""), content=results)
        case {"document": dict() as document}:
            return into_document(document)
        case {"image": dict() as image}:
            return into_image(image)
        case _:
            raise UnsupportedFeatureError("AWS Bedrock returned unsupported ContentBlock")


def into_assistant_content(block: dict[str, Any]) -> Text | ToolCall:
    """Map a Bedrock content block to an assistant content item."""
    match block:
        case {"text": str() as text}:
            return Text(text)
        case {"toolUse": dict() as tool_use}:
            return ToolCall(
                id=tool_use.get("toolUseId", ""),
                function=ToolFunction(
                    name=tool_use.get("name", ""),
                    arguments=document_to_json(tool_use.get("input", {})),
                ),
            )
        case _:
            raise UnsupportedFeatureError("AWS Bedrock returned unsupported ContentBlock")


def _try_each(blocks: Iterable[dict[str, Any]], convert: Callable[[dict[str, Any]], TItem]) -> list[TItem]:
    """Convert blocks coming back from Bedrock, skipping the ones with no mapping."""
    converted: list[TItem] = []
    for block in blocks:
        try:
            converted.append(convert(block))
        except IntegrationError as ex:
            logger.debug(f"Skipping Bedrock content block: {ex}")
    return converted


# region Messages


def from_message(message: Message, *, lenient: bool = False) -> dict[str, Any]:
    """Map a Message to a Bedrock message.

    In strict mode the first content item without a mapping fails the whole message.
    In lenient mode, used when replaying history, such items are dropped and logged;
    a message left without any content still fails since Bedrock rejects it.

    Raises:
        UnsupportedFeatureError: A content variant the role cannot carry (strict mode).
        UnsupportedFormatError: An image or document media type Bedrock does not accept.
        ConversionError: A payload that is not valid base64.
        BuildError: A mandatory field is missing, or no content is left.
    """
    role = resolve_role(message.role)
    if role == Role.USER:
        content = _convert_all(
            message.content, lambda item: from_user_content(item, lenient=lenient), lenient=lenient
        )
    else:
        content = _convert_all(message.content, from_assistant_content, lenient=lenient)
    if not content:
        raise BuildError("message content must not be empty")
    return {"role": role.value, "content": content}


def into_message(message: dict[str, Any]) -> Message:
    """Map a Bedrock message back to a Message, skipping content blocks without a mapping.

    Raises:
        UnsupportedFeatureError: If the role is neither user nor assistant, or no content is left.
    """
    role = message.get("role")
    blocks = message.get("content") or []
    if role == Role.ASSISTANT.value:
        content: list[Any] = _try_each(blocks, into_assistant_content)
    elif role == Role.USER.value:
        content = _try_each(blocks, into_user_content)
    else:
        raise UnsupportedFeatureError("AWS Bedrock returned unsupported ConversationRole")
    if not content:
        raise UnsupportedFeatureError("Message returned invalid response")
    return Message(role, content)
