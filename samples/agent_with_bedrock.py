# Copyright (c) Microsoft. All rights reserved.

import asyncio
from random import randint
from typing import Annotated

from pydantic import BaseModel, Field

from agentic_bedrock import BedrockClient, BedrockModel, Message, tool

"""
Bedrock Agent Example

This sample demonstrates agents and extractors backed by Amazon Bedrock's Converse API:

- An agent with a preamble and static context
- An agent that calls a Python function as a tool
- Continuing a conversation with chat history
- Extracting a Pydantic model from free text

AWS credentials are resolved by boto3's default chain. Set AWS_REGION_NAME to pick a region.
"""


@tool
def get_weather(
    location: Annotated[str, Field(description="The location to get the weather for.")],
) -> str:
    """Get the weather for a given location."""
    conditions = ["sunny", "cloudy", "rainy", "stormy"]
    return f"The weather in {location} is {conditions[randint(0, 3)]} with a high of {randint(10, 30)}°C."


class Contact(BaseModel):
    """A person mentioned in a text."""

    name: str
    email: str | None = None


async def main() -> None:
    client = BedrockClient()

    comedian = (
        client.agent(BedrockModel.NOVA_LITE)
        .preamble("You are a comedian here to entertain the user using humour and jokes.")
        .context("The user's name is Ada.")
        .temperature(0.7)
        .build()
    )
    print(f"Comedian: {await comedian.prompt('Entertain me!')}")

    weather_agent = client.agent(BedrockModel.NOVA_LITE).tool(get_weather).build()
    print(f"Weather: {await weather_agent.prompt('What is the weather in Amsterdam?')}")

    history = [Message.user("My favourite colour is green."), Message.assistant("Noted, green it is!")]
    print(f"Chat: {await comedian.chat('What is my favourite colour?', history)}")

    extractor = client.extractor(BedrockModel.NOVA_LITE, Contact).build()
    contact = await extractor.extract("Please reach out to Grace Hopper at grace@example.com.")
    print(f"Extracted: {contact}")


if __name__ == "__main__":
    asyncio.run(main())
