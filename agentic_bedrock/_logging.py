# Copyright (c) Microsoft. All rights reserved.

import logging

__all__ = ["get_logger"]

ROOT_LOGGER_NAME = "agentic_bedrock"

logging.basicConfig(
    format="[%(asctime)s - %(pathname)s:%(lineno)d - %(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger with the specified name, defaulting to 'agentic_bedrock'.

    Args:
        name: The name of the logger. Must live under the 'agentic_bedrock' namespace.

    Returns:
        The configured logger instance.

    Raises:
        ValueError: If the name is outside the package namespace.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        raise ValueError(f"Logger name must start with '{ROOT_LOGGER_NAME}', got '{name}'.")
    return logging.getLogger(name)
