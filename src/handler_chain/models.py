# models.py
# Data contracts for the handler chain: context carrier and execution trace.
# No business logic lives here: pure schema and validation.

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Phase(str, Enum):
    """Which half of the onion a step belongs to."""

    PRE = "pre"
    POST = "post"


class Context(BaseModel):
    """
    Immutable request-scoped carrier threaded through every transform.

    Transforms never mutate a Context; they return a new one via with_value()
    and the engine carries it into every subsequent step of the run.
    """

    model_config = ConfigDict(frozen=True)

    values: dict[str, Any] = Field(default_factory=dict)

    def with_value(self, key: str, value: Any) -> "Context":
        return Context(values={**self.values, key: value})

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.values


class StepRecord(BaseModel):
    """One handler's one phase, captured by the engine."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    phase: Phase
    handler_name: str
    debug: str = Field(default="", description="Handler debug representation.")
    input_context: Any = None
    input_payload: bytes | None = None
    output_context: Any = None
    output_payload: bytes | None = None
    error: BaseException | None = None

    @field_serializer("error")
    def _serialize_error(self, error: BaseException | None) -> str | None:
        return None if error is None else repr(error)

    @field_serializer("input_context", "output_context")
    def _serialize_context(self, ctx: Any) -> Any:
        if isinstance(ctx, BaseModel):
            return ctx.model_dump(mode="json")
        return None if ctx is None else repr(ctx)


class ExecutionTrace(BaseModel):
    """
    Ordered record of a single run.

    Built incrementally by the engine and emitted exactly once, after the run
    concludes. The final context is attached on completion.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    steps: list[StepRecord] = Field(default_factory=list)
    context: Any = None
    error: BaseException | None = None
    started_at: datetime = Field(default_factory=_now)
    finished_at: datetime | None = None

    @field_serializer("error")
    def _serialize_error(self, error: BaseException | None) -> str | None:
        return None if error is None else repr(error)

    @field_serializer("context")
    def _serialize_context(self, ctx: Any) -> Any:
        if isinstance(ctx, BaseModel):
            return ctx.model_dump(mode="json")
        return None if ctx is None else repr(ctx)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def order(self) -> list[tuple[str, str]]:
        """(phase, handler name) pairs in execution order."""
        return [(step.phase.value, step.handler_name) for step in self.steps]

    def finish(self, ctx: Any, error: BaseException | None = None) -> None:
        self.context = ctx
        self.error = error
        self.finished_at = _now()
