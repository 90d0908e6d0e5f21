# Copyright (c) Microsoft. All rights reserved.

import json
import sys
from collections.abc import Iterable, Sequence
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from ._logging import get_logger
from ._tools import Tool
from ._types import (
    CompletionModelProtocol,
    CompletionRequest,
    CompletionResponse,
    ContextDocument,
    Embedding,
    EmbeddingModelProtocol,
    Message,
    MessageChoice,
    ToolCallChoice,
)
from .exceptions import EmbeddingError, ExtractionError, ToolCallError

if sys.version_info >= (3, 11):
    from typing import Self  # pragma: no cover
else:
    from typing_extensions import Self  # pragma: no cover

__all__ = [
    "Agent",
    "AgentBuilder",
    "Embeddable",
    "EmbeddingsBuilder",
    "Extractor",
    "ExtractorBuilder",
]

logger = get_logger("agentic_bedrock.agents")

TOutput = TypeVar("TOutput", bound=BaseModel)
TDocument = TypeVar("TDocument")

SUBMIT_TOOL_NAME = "submit"
EXTRACTION_PREAMBLE = (
    "You are an AI assistant whose purpose is to extract structured data from the provided text.\n"
    f"You will have access to a `{SUBMIT_TOOL_NAME}` function that defines the structure of the data to extract "
    "from the provided text.\n"
    f"Use the `{SUBMIT_TOOL_NAME}` function to submit the structured data.\n"
    f"Be sure to fill out every field and ALWAYS CALL THE `{SUBMIT_TOOL_NAME}` function, "
    "even with default values!!!."
)


# region Agent


class Agent:
    """A completion model combined with a preamble, static context and tools.

    Agents are created with an AgentBuilder and are stateless between calls;
    conversation history is passed in by the caller.
    """

    def __init__(
        self,
        model: CompletionModelProtocol,
        *,
        preamble: str | None = None,
        static_context: Sequence[ContextDocument] = (),
        tools: Sequence[Tool] = (),
        temperature: float | None = None,
        max_tokens: int | None = None,
        additional_params: Any | None = None,
    ) -> None:
        self.model = model
        self.preamble = preamble
        self.static_context = list(static_context)
        self.tools = {t.name: t for t in tools}
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.additional_params = additional_params

    def _create_request(self, prompt: str, chat_history: Sequence[Message]) -> CompletionRequest:
        return CompletionRequest(
            prompt=prompt,
            preamble=self.preamble,
            chat_history=list(chat_history),
            documents=self.static_context,
            tools=[t.definition() for t in self.tools.values()],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            additional_params=self.additional_params,
        )

    async def completion(self, prompt: str, chat_history: Sequence[Message] = ()) -> CompletionResponse:
        """Send the prompt to the model and return its raw choice, without invoking tools."""
        return await self.model.completion(self._create_request(prompt, chat_history))

    async def prompt(self, prompt: str) -> str:
        """Send a single prompt, returning the model's text or the output of the tool it called."""
        return await self.chat(prompt, [])

    async def chat(self, prompt: str, chat_history: Sequence[Message]) -> str:
        """Send a prompt on top of an existing conversation.

        Returns:
            The model's text, or the output of the tool it called rendered as text.

        Raises:
            ToolCallError: If the model called a tool the agent does not have, or the tool failed.
        """
        response = await self.completion(prompt, chat_history)
        match response.choice:
            case MessageChoice(text=text):
                return text
            case ToolCallChoice(name=name, arguments=arguments):
                return await self.call_tool(name, arguments)
        raise ToolCallError(f"Unexpected model choice: {response.choice!r}")

    async def call_tool(self, name: str, arguments: Any) -> str:
        selected = self.tools.get(name)
        if selected is None:
            raise ToolCallError(f"No tool named '{name}'")
        try:
            result = await selected.invoke(arguments)
        except ValidationError as ex:
            raise ToolCallError(f"Invalid arguments for tool '{name}': {ex}", ex) from ex
        except Exception as ex:
            logger.error(f"Function failed. Error: {ex}")
            raise ToolCallError(f"Tool '{name}' failed: {ex}", ex) from ex
        if isinstance(result, str):
            return result
        if isinstance(result, BaseModel):
            return result.model_dump_json()
        return json.dumps(result, default=str)


class AgentBuilder:
    """Fluent builder for an Agent.

    Examples:
        .. code-block:: python

            agent = (
                client.agent(BedrockModel.NOVA_LITE)
                .preamble("You are a comedian.")
                .temperature(0.5)
                .build()
            )
            print(await agent.prompt("Tell me a joke"))
    """

    def __init__(self, model: CompletionModelProtocol) -> None:
        self._model = model
        self._preamble: str | None = None
        self._static_context: list[ContextDocument] = []
        self._tools: list[Tool] = []
        self._temperature: float | None = None
        self._max_tokens: int | None = None
        self._additional_params: Any | None = None

    def preamble(self, preamble: str) -> Self:
        """Set the system prompt, replacing any earlier one."""
        self._preamble = preamble
        return self

    def append_preamble(self, text: str) -> Self:
        self._preamble = f"{self._preamble}\n{text}" if self._preamble else text
        return self

    def context(self, text: str) -> Self:
        """Attach a static context document to every prompt."""
        self._static_context.append(ContextDocument(id=f"static_doc_{len(self._static_context)}", text=text))
        return self

    def tool(self, tool: Tool) -> Self:
        self._tools.append(tool)
        return self

    def temperature(self, temperature: float) -> Self:
        self._temperature = temperature
        return self

    def max_tokens(self, max_tokens: int) -> Self:
        self._max_tokens = max_tokens
        return self

    def additional_params(self, params: Any) -> Self:
        """Set model specific request fields, sent as Bedrock's additionalModelRequestFields."""
        self._additional_params = params
        return self

    def build(self) -> Agent:
        return Agent(
            self._model,
            preamble=self._preamble,
            static_context=self._static_context,
            tools=self._tools,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            additional_params=self._additional_params,
        )


# region Extractor


class Extractor(Generic[TOutput]):
    """Extracts structured data of a given Pydantic type from text."""

    def __init__(self, agent: Agent, output_type: type[TOutput]) -> None:
        self.agent = agent
        self.output_type = output_type

    async def extract(self, text: str) -> TOutput:
        """Extract an instance of the output type from the text.

        Raises:
            ExtractionError: If the model did not call the submit tool, or the submitted
                data does not validate against the output type.
        """
        response = await self.agent.completion(text)
        choice = response.choice
        if not isinstance(choice, ToolCallChoice) or choice.name != SUBMIT_TOOL_NAME:
            raise ExtractionError("No data extracted")
        try:
            return self.output_type.model_validate(choice.arguments)
        except ValidationError as ex:
            raise ExtractionError(f"Extracted data does not match {self.output_type.__name__}: {ex}", ex) from ex


class ExtractorBuilder(Generic[TOutput]):
    """Fluent builder for an Extractor."""

    def __init__(self, model: CompletionModelProtocol, output_type: type[TOutput]) -> None:
        self._output_type = output_type
        submit = Tool(
            name=SUBMIT_TOOL_NAME,
            description="Submit the structured data you extracted from the provided text.",
            input_model=output_type,
            func=lambda **kwargs: output_type.model_validate(kwargs),
        )
        self._agent_builder = AgentBuilder(model).preamble(EXTRACTION_PREAMBLE).tool(submit)

    def preamble(self, preamble: str) -> Self:
        """Add instructions to the extraction preamble."""
        self._agent_builder.append_preamble(f"\n=============== ADDITIONAL INSTRUCTIONS ===============\n{preamble}")
        return self

    def context(self, text: str) -> Self:
        self._agent_builder.context(text)
        return self

    def build(self) -> Extractor[TOutput]:
        return Extractor(self._agent_builder.build(), self._output_type)


# region Embeddings


@runtime_checkable
class Embeddable(Protocol):
    """A document that knows which of its texts should be embedded."""

    def embedding_texts(self) -> list[str]: ...


class EmbeddingsBuilder(Generic[TDocument]):
    """Collects documents and embeds all of their texts in batches.

    Examples:
        .. code-block:: python

            embeddings = await (
                client.embeddings(BedrockEmbeddingModel.titan_text_embeddings_v2(256))
                .document("Hello world")
                .document("Goodbye world")
                .build()
            )
    """

    def __init__(self, model: EmbeddingModelProtocol) -> None:
        self._model = model
        self._documents: list[tuple[TDocument, list[str]]] = []

    def document(self, document: TDocument) -> Self:
        """Add a document, either a string or an Embeddable.

        Raises:
            EmbeddingError: If the document has no text to embed.
        """
        if isinstance(document, str):
            texts = [document]
        elif isinstance(document, Embeddable):
            texts = list(document.embedding_texts())
        else:
            raise TypeError(f"Cannot embed a document of type {type(document).__name__}")
        if not texts:
            raise EmbeddingError("Document has no text to embed")
        self._documents.append((document, texts))
        return self

    def documents(self, documents: Iterable[TDocument]) -> Self:
        for document in documents:
            self.document(document)
        return self

    async def build(self) -> list[tuple[TDocument, list[Embedding]]]:
        """Embed every collected text, returning each document with its embeddings in insertion order."""
        pending = [(index, text) for index, (_, texts) in enumerate(self._documents) for text in texts]
        grouped: list[list[Embedding]] = [[] for _ in self._documents]

        batch_size = self._model.MAX_DOCUMENTS
        for start in range(0, len(pending), batch_size):
            batch = pending[start : start + batch_size]
            embeddings = await self._model.embed_texts(text for _, text in batch)
            for (index, _), embedding in zip(batch, embeddings, strict=True):
                grouped[index].append(embedding)

        return [(document, grouped[index]) for index, (document, _) in enumerate(self._documents)]
