# Copyright (c) Microsoft. All rights reserved.
import base64

import pytest

from agentic_bedrock import (
    Audio,
    AudioMediaType,
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
from agentic_bedrock.exceptions import (
    BuildError,
    ConversionError,
    ModelError,
    UnsupportedFeatureError,
    UnsupportedFormatError,
)

SUPPORTED_IMAGE_TYPES = [ImageMediaType.GIF, ImageMediaType.JPEG, ImageMediaType.PNG, ImageMediaType.WEBP]
SUPPORTED_DOCUMENT_TYPES = [
    DocumentMediaType.CSV,
    DocumentMediaType.HTML,
    DocumentMediaType.MARKDOWN,
    DocumentMediaType.PDF,
    DocumentMediaType.TXT,
]


class TestImages:
    """Tests for image content mapping."""

    def test_from_image(self, png_base64):
        block = from_image(Image(data=png_base64, media_type=ImageMediaType.PNG))

        assert block["format"] == "png"
        assert block["source"]["bytes"] == base64.b64decode(png_base64)

    @pytest.mark.parametrize("media_type", SUPPORTED_IMAGE_TYPES)
    def test_round_trip(self, png_base64, media_type):
        image = Image(data=png_base64, media_type=media_type)

        result = into_image(from_image(image))

        assert result.data == png_base64
        assert result.media_type == media_type
        assert result.format == ContentFormat.BASE64

    @pytest.mark.parametrize("media_type", [ImageMediaType.HEIC, ImageMediaType.HEIF, ImageMediaType.SVG])
    def test_unsupported_media_type(self, png_base64, media_type):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            from_image(Image(data=png_base64, media_type=media_type))

        assert exc_info.value.format == media_type.value
        assert media_type.value in str(exc_info.value)

    def test_missing_media_type(self, png_base64):
        with pytest.raises(BuildError):
            from_image(Image(data=png_base64))

    def test_string_payload_is_unsupported(self):
        with pytest.raises(UnsupportedFeatureError):
            from_image(Image(data="https://example.com/cat.png", format=ContentFormat.STRING, media_type=ImageMediaType.PNG))

    def test_invalid_base64(self):
        with pytest.raises(ConversionError):
            from_image(Image(data="not base64!!", media_type=ImageMediaType.PNG))

    def test_into_image_unknown_format(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            into_image({"format": "tiff", "source": {"bytes": b"abc"}})

        assert exc_info.value.format == "tiff"

    def test_into_image_without_source(self):
        with pytest.raises(ModelError):
            into_image({"format": "png", "source": {}})


class TestDocuments:
    """Tests for document content mapping."""

    @pytest.mark.parametrize("media_type", SUPPORTED_DOCUMENT_TYPES)
    def test_round_trip(self, pdf_base64, media_type):
        document = Document(data=pdf_base64, media_type=media_type, name="report")

        result = into_document(from_document(document))

        assert result.data == pdf_base64
        assert result.media_type == media_type
        assert result.name == "report"

    def test_string_payload_is_utf8_encoded(self):
        block = from_document(Document(data="# Title", format=ContentFormat.STRING, media_type=DocumentMediaType.MARKDOWN))

        assert block["format"] == "md"
        assert block["source"]["bytes"] == b"# Title"

    def test_derived_name_is_stable(self, pdf_base64):
        document = Document(data=pdf_base64, media_type=DocumentMediaType.PDF)

        first = from_document(document)["name"]
        second = from_document(document)["name"]

        assert first == second
        assert first.startswith("document-")

    @pytest.mark.parametrize("media_type", [DocumentMediaType.RTF, DocumentMediaType.XML, DocumentMediaType.PYTHON])
    def test_unsupported_media_type(self, pdf_base64, media_type):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            from_document(Document(data=pdf_base64, media_type=media_type))

        assert exc_info.value.format == media_type.value

    def test_missing_media_type(self, pdf_base64):
        with pytest.raises(BuildError):
            from_document(Document(data=pdf_base64))

    def test_into_document_unknown_format(self):
        with pytest.raises(UnsupportedFormatError):
            into_document({"format": "docx", "name": "x", "source": {"bytes": b"abc"}})


class TestToolResults:
    """Tests for tool result content mapping."""

    def test_text(self):
        assert from_tool_result(Text("42")) == {"text": "42"}
        assert into_tool_result({"text": "42"}) == Text("42")

    def test_image(self, png_base64):
        block = from_tool_result(Image(data=png_base64, media_type=ImageMediaType.PNG))

        assert block["image"]["format"] == "png"

    def test_json_becomes_canonical_text(self):
        result = into_tool_result({"json": {"b": [1, 2], "a": 1}})

        assert result == Text('{"a":1,"b":[1,2]}')

    def test_document_is_unsupported(self):
        with pytest.raises(UnsupportedFeatureError):
            into_tool_result({"document": {"format": "pdf", "name": "x", "source": {"bytes": b""}}})

    def test_tool_result_block(self):
        block = from_user_content(ToolResult(id="tool-1", content=[Text("sunny")]))

        assert block == {"toolResult": {"toolUseId": "tool-1", "content": [{"text": "sunny"}]}}

    def test_tool_result_without_id(self):
        with pytest.raises(BuildError):
            from_user_content(ToolResult(id="", content=[Text("sunny")]))

    def test_empty_tool_result(self):
        with pytest.raises(BuildError):
            from_user_content(ToolResult(id="tool-1", content=[]))

    def test_lenient_tool_result_with_nothing_left(self):
        result = ToolResult(id="tool-1", content=[Image(data="not base64!!", media_type=ImageMediaType.PNG)])

        with pytest.raises(BuildError):
            from_user_content(result, lenient=True)

    def test_into_user_content_tool_result(self):
        result = into_user_content({"toolResult": {"toolUseId": "tool-1", "content": [{"json": {"ok": True}}]}})

        assert isinstance(result, ToolResult)
        assert result.id == "tool-1"
        assert result.content == [Text('{"ok":true}')]


class TestToolCalls:
    """Tests for tool call content mapping."""

    def test_from_tool_call(self):
        call = ToolCall(id="tool-1", function=ToolFunction(name="get_weather", arguments={"days": 3, "delta": -1}))

        block = from_assistant_content(call)

        assert block["toolUse"]["toolUseId"] == "tool-1"
        assert block["toolUse"]["name"] == "get_weather"
        assert block["toolUse"]["input"] == {"days": 3, "delta": -1}

    @pytest.mark.parametrize(
        "call",
        [
            ToolCall(id="", function=ToolFunction(name="get_weather")),
            ToolCall(id="tool-1", function=ToolFunction(name="")),
        ],
    )
    def test_missing_id_or_name(self, call):
        with pytest.raises(BuildError):
            from_assistant_content(call)

    def test_into_tool_call(self):
        result = into_assistant_content(
            {"toolUse": {"toolUseId": "tool-1", "name": "get_weather", "input": {"location": "Paris"}}}
        )

        assert isinstance(result, ToolCall)
        assert result.id == "tool-1"
        assert result.function.name == "get_weather"
        assert result.function.arguments == {"location": "Paris"}


class TestUnsupportedContent:
    """Tests for content that has no Bedrock mapping."""

    def test_audio(self):
        with pytest.raises(UnsupportedFeatureError) as exc_info:
            from_user_content(Audio(data="AAAA", media_type=AudioMediaType.MP3))

        assert exc_info.value.feature == "Audio"

    def test_assistant_image(self, png_base64):
        with pytest.raises(UnsupportedFeatureError):
            from_assistant_content(Image(data=png_base64, media_type=ImageMediaType.PNG))

    def test_assistant_message_with_image(self, png_base64):
        message = Message.assistant([Text("look"), Image(data=png_base64, media_type=ImageMediaType.PNG)])

        with pytest.raises(UnsupportedFeatureError):
            from_message(message)

    def test_unknown_block(self):
        with pytest.raises(UnsupportedFeatureError):
            into_user_content({"video": {}})
        with pytest.raises(UnsupportedFeatureError):
            into_assistant_content({"reasoningContent": {}})


class TestMessages:
    """Tests for whole message mapping."""

    def test_user_message(self, png_base64):
        message = Message.user([Text("what is this?"), Image(data=png_base64, media_type=ImageMediaType.PNG)])

        result = from_message(message)

        assert result["role"] == "user"
        assert result["content"][0] == {"text": "what is this?"}
        assert result["content"][1]["image"]["format"] == "png"

    def test_strict_fails_on_first_bad_item(self):
        message = Message.user([Text("hi"), Audio(data="AAAA", media_type=AudioMediaType.WAV)])

        with pytest.raises(UnsupportedFeatureError):
            from_message(message)

    def test_lenient_drops_bad_items(self):
        message = Message.user([Text("hi"), Audio(data="AAAA", media_type=AudioMediaType.WAV)])

        result = from_message(message, lenient=True)

        assert result == {"role": "user", "content": [{"text": "hi"}]}

    def test_lenient_drops_tool_result_without_valid_items(self):
        bad_result = ToolResult(id="tool-1", content=[Image(data="not base64!!", media_type=ImageMediaType.PNG)])
        message = Message.user([Text("hi"), bad_result])

        result = from_message(message, lenient=True)

        assert result == {"role": "user", "content": [{"text": "hi"}]}

    def test_lenient_with_nothing_left(self):
        message = Message.user([Audio(data="AAAA", media_type=AudioMediaType.WAV)])

        with pytest.raises(BuildError):
            from_message(message, lenient=True)

    def test_unknown_role_defaults_to_user(self):
        assert resolve_role("system") == Role.USER
        assert resolve_role("assistant") == Role.ASSISTANT

        result = from_message(Message("system", "be nice"))

        assert result == {"role": "user", "content": [{"text": "be nice"}]}

    def test_into_message(self):
        result = into_message(
            {
                "role": "assistant",
                "content": [
                    {"reasoningContent": {"reasoningText": {"text": "hmm"}}},
                    {"text": "Hello"},
                    {"toolUse": {"toolUseId": "t1", "name": "lookup", "input": {}}},
                ],
            }
        )

        assert result.role == "assistant"
        assert result.content[0] == Text("Hello")
        assert isinstance(result.content[1], ToolCall)

    def test_into_message_unknown_role(self):
        with pytest.raises(UnsupportedFeatureError):
            into_message({"role": "system", "content": [{"text": "hi"}]})

    def test_into_message_without_content(self):
        with pytest.raises(UnsupportedFeatureError):
            into_message({"role": "user", "content": [{"video": {}}]})
