# Copyright (c) Microsoft. All rights reserved.

import asyncio

from agentic_bedrock import BedrockClient, BedrockEmbeddingModel

"""
Bedrock Embeddings Example

This sample embeds a few words with Amazon Titan Text Embeddings V2 through the
InvokeModel API, first one by one and then in a batch through the embeddings builder.
"""


class Definition:
    """A dictionary entry whose word and definitions are all embedded."""

    def __init__(self, word: str, definitions: list[str]) -> None:
        self.word = word
        self.definitions = definitions

    def embedding_texts(self) -> list[str]:
        return [self.word, *self.definitions]


async def main() -> None:
    client = BedrockClient()
    model = client.embedding_model(BedrockEmbeddingModel.titan_text_embeddings_v2(256))

    embedding = await model.embed_text("Hello, world!")
    print(f"'{embedding.document}' -> {len(embedding.vec)} dimensions")

    results = await (
        client.embeddings(BedrockEmbeddingModel.titan_text_embeddings_v2(256))
        .document(Definition("flurbo", ["A green alien that lives on cold planets."]))
        .document(Definition("glarb-glarb", ["An ancient tool used by the ancestors of the inhabitants of Jupiter."]))
        .document("A plain sentence is embedded as is.")
        .build()
    )
    for document, embeddings in results:
        print(f"{document!r}: {len(embeddings)} embeddings")


if __name__ == "__main__":
    asyncio.run(main())
