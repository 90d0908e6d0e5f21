# Copyright (c) Microsoft. All rights reserved.

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Annotated, Any, get_args, get_origin

from pydantic import BaseModel, Field, create_model

from ._logging import get_logger
from ._pydantic import AFBaseModel
from ._types import ToolDefinition

__all__ = ["Tool", "tool"]

logger = get_logger("agentic_bedrock.tools")


class Tool(AFBaseModel):
    """A function the model can call.

    Args:
        name: The name of the tool, as shown to the model.
        description: A description of what the tool does.
        input_model: The Pydantic model that defines and validates the tool's arguments.
        func: The function to call, sync or async.
    """

    name: str
    description: str = ""
    input_model: type[BaseModel]
    func: Callable[..., Any]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        """Call the wrapped function with the provided arguments."""
        return self.func(*args, **kwargs)

    def parameters(self) -> dict[str, Any]:
        """Create the json schema of the parameters."""
        return self.input_model.model_json_schema()

    def definition(self) -> ToolDefinition:
        return ToolDefinition(name=self.name, description=self.description, parameters=self.parameters())

    async def invoke(self, arguments: Any) -> Any:
        """Validate the model supplied arguments and run the tool.

        Args:
            arguments: The JSON arguments of the tool call.

        Raises:
            pydantic.ValidationError: If the arguments do not match the input model.
        """
        parsed = self.input_model.model_validate(arguments or {})
        kwargs = {field: getattr(parsed, field) for field in type(parsed).model_fields}
        logger.info(f"Function name: {self.name}")
        logger.debug(f"Function arguments: {kwargs}")
        res = self.__call__(**kwargs)
        result = await res if inspect.isawaitable(res) else res
        logger.info(f"Function {self.name} succeeded.")
        return result


def _parse_annotation(annotation: Any) -> Any:
    """Turn ``Annotated[type, "description"]`` into a pydantic Field description."""
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        if len(args) == 2 and isinstance(args[1], str):
            return Annotated[args[0], Field(description=args[1])]
    return annotation


def tool(
    func: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
) -> Any:
    """Decorate a function to turn it into a Tool.

    The tool's input model is created from the function's signature. Parameters
    without an annotation are treated as strings. Use ``Annotated[int, "description"]``
    or ``Annotated[int, Field(description=...)]`` to describe a parameter.

    Args:
        func: The function to wrap. If None, returns a decorator.
        name: The name of the tool. Defaults to the function's name.
        description: A description of the tool. Defaults to the function's docstring.

    Examples:
        .. code-block:: python

            @tool
            def add(x: int, y: int) -> int:
                \"\"\"Add two numbers.\"\"\"
                return x + y
    """

    def decorator(func: Callable[..., Awaitable[Any] | Any]) -> Tool:
        @wraps(func)
        def wrapper(f: Callable[..., Awaitable[Any] | Any]) -> Tool:
            tool_name: str = name or getattr(f, "__name__", "unknown_function")
            tool_desc: str = description or inspect.cleandoc(f.__doc__ or "")
            sig = inspect.signature(f)
            fields = {
                pname: (
                    _parse_annotation(param.annotation) if param.annotation is not inspect.Parameter.empty else str,
                    param.default if param.default is not inspect.Parameter.empty else ...,
                )
                for pname, param in sig.parameters.items()
                if pname not in {"self", "cls"}
            }
            input_model: Any = create_model(f"{tool_name}_input", **fields)  # type: ignore[call-overload]
            return Tool(name=tool_name, description=tool_desc, input_model=input_model, func=f)

        return wrapper(func)

    return decorator(func) if func else decorator
