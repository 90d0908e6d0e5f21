# Copyright (c) Microsoft. All rights reserved.

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["AFBaseModel", "AFBaseSettings"]


class AFBaseModel(BaseModel):
    """Base class for all pydantic models in agentic_bedrock."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True, validate_assignment=True)


class AFBaseSettings(BaseSettings):
    """Base class for settings loaded from the environment.

    Values are resolved in this order: constructor arguments, environment variables
    (prefixed with the subclass's ``env_prefix``), the optional .env file, then field defaults.
    Constructor arguments that are None are treated as unset.

    Keyword Args:
        env_file_path: If provided, the .env settings are read from this file path location.
        env_file_encoding: The encoding of the .env file, defaults to 'utf-8'.
    """

    env_prefix: ClassVar[str] = ""

    model_config = SettingsConfigDict(extra="ignore", case_sensitive=False)

    def __init__(
        self,
        env_file_path: str | None = None,
        env_file_encoding: str | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs = {k: v for k, v in kwargs.items() if v is not None}
        super().__init__(
            _env_prefix=type(self).env_prefix,
            _env_file=env_file_path,
            _env_file_encoding=env_file_encoding or "utf-8",
            **kwargs,
        )
