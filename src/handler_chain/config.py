# config.py
# Runtime settings, read from the environment (and a local .env if present).

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


class Settings(BaseModel):
    """Knobs for chain assembly and trace emission."""

    flow: str = Field(default="", description="Comma-separated handler names to assemble.")
    emitter: Literal["console", "memory", "null"] = "console"
    background_emit: bool = Field(default=False, description="Emit traces off the caller's thread.")
    queue_size: int = Field(default=100, ge=1)
    warn_out_of_range: bool = Field(
        default=False,
        description="Report out-of-range chain mutations instead of ignoring them silently.",
    )

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            flow=os.getenv("HANDLER_CHAIN_FLOW", ""),
            emitter=os.getenv("HANDLER_CHAIN_EMITTER", "console").strip().lower(),
            background_emit=_flag(os.getenv("HANDLER_CHAIN_BACKGROUND_EMIT")),
            queue_size=int(os.getenv("HANDLER_CHAIN_QUEUE_SIZE", "100")),
            warn_out_of_range=_flag(os.getenv("HANDLER_CHAIN_WARN_OUT_OF_RANGE")),
        )
