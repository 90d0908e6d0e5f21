# Copyright (c) Microsoft. All rights reserved.

"""Conversion between JSON values and Bedrock document values.

Bedrock documents distinguish three kinds of numbers: non-negative integers, negative
integers and floating point values. The tagged number types below subclass ``int`` and
``float`` so a converted document can be passed to boto3 as is.
"""

import math
from typing import Any, TypeAlias

from ._logging import get_logger

__all__ = ["BedrockDocument", "Float", "JsonValue", "NegInt", "PosInt", "document_to_json", "json_to_document"]

logger = get_logger("agentic_bedrock.document")

U64_MAX = 2**64 - 1
I64_MIN = -(2**63)

JsonValue: TypeAlias = "None | bool | int | float | str | list[JsonValue] | dict[str, JsonValue]"
BedrockDocument: TypeAlias = Any


class PosInt(int):
    """A document number holding an integer in [0, 2**64 - 1]."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"PosInt({int(self)})"


class NegInt(int):
    """A document number holding an integer in [-2**63, -1]."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"NegInt({int(self)})"


class Float(float):
    """A document number holding a double."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Float({float(self)!r})"


def json_to_document(value: JsonValue) -> BedrockDocument:
    """Convert a JSON value into a Bedrock document.

    Integers are classified by sign, zero counting as non-negative. Integers that fit
    neither 64-bit range cannot be carried by a document and become None.

    Raises:
        TypeError: If the value is not a JSON value.
    """
    match value:
        case None:
            return None
        case bool():
            return value
        case int():
            if 0 <= value <= U64_MAX:
                return PosInt(value)
            if I64_MIN <= value < 0:
                return NegInt(value)
            logger.warning(f"Integer {value} does not fit in a 64-bit document number, converting it to null.")
            return None
        case float():
            return Float(value)
        case str():
            return value
        case list() | tuple():
            return [json_to_document(item) for item in value]
        case dict():
            return {str(key): json_to_document(item) for key, item in value.items()}
        case _:
            raise TypeError(f"Object of type {type(value).__name__} is not a JSON value")


def document_to_json(doc: BedrockDocument) -> JsonValue:
    """Convert a Bedrock document into a JSON value.

    Accepts both tagged documents and the plain values boto3 returns. NaN and infinite
    floats have no JSON representation and become None. Object key order is not preserved
    by Bedrock, so callers must not depend on it.
    """
    match doc:
        case None:
            return None
        case bool():
            return doc
        case int():
            return int(doc)
        case float():
            return float(doc) if math.isfinite(doc) else None
        case str():
            return str(doc)
        case list() | tuple():
            return [document_to_json(item) for item in doc]
        case dict():
            return {str(key): document_to_json(item) for key, item in doc.items()}
        case _:
            raise TypeError(f"Object of type {type(doc).__name__} is not a document value")
