"""Marker metadata and script descriptors."""

import hashlib
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LuaScriptSpec(BaseModel):
    """Metadata attached to a method by ``@lua``.

    ``keys_count`` leading call arguments become the script's KEYS, the next
    ``args_count`` become ARGV.
    """

    model_config = ConfigDict(frozen=True)

    script: str
    keys_count: int = Field(default=0, ge=0)
    args_count: int = Field(default=0, ge=0)

    @field_validator("script")
    @classmethod
    def script_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("script body must not be empty")
        return value


@dataclass(frozen=True)
class RedisScript:
    """A script body paired with the type its reply is coerced to."""

    script: str
    result_type: Any = None
    sha1: str = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        digest = hashlib.sha1(self.script.encode("utf-8")).hexdigest()
        object.__setattr__(self, "sha1", digest)
