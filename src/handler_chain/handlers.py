# handlers.py
# Handler capability set and the function-backed adapter.
#
# A handler contributes a pre-pass (before) and a post-pass (after) transform.
# A phase the handler does not implement raises NoOpTransform, which the
# engine absorbs without recording a step.

import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class NoOpTransform(Exception):
    """Raised by a phase that is intentionally not implemented. Never fatal."""


# ---------------------------------------------------------------------------
# Transform signature
# ---------------------------------------------------------------------------

TransformFn = Callable[[Any, bytes | None], tuple[Any, bytes | None]]


def noop_transform(ctx: Any, payload: bytes | None) -> tuple[Any, bytes | None]:
    raise NoOpTransform("empty transform")


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


class Handler(ABC):
    """
    A named unit in a HandlerChain.

    Subclasses implement before() and after(); either may raise NoOpTransform
    to opt out of that phase. Any other exception halts the run.
    str(handler) is its debug representation and is copied onto every step
    record the handler produces.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    def description(self) -> str:
        return ""

    @abstractmethod
    def before(self, ctx: Any, payload: bytes | None) -> tuple[Any, bytes | None]: ...

    @abstractmethod
    def after(self, ctx: Any, payload: bytes | None) -> tuple[Any, bytes | None]: ...

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FuncHandler(Handler):
    """
    Wraps two optional transform callables as a Handler.

    Example:
        upper = FuncHandler("upper", before=lambda ctx, data: (ctx, data.upper()))
    """

    def __init__(
        self,
        name: str,
        before: TransformFn | None = None,
        after: TransformFn | None = None,
        description: str = "Wraps transform functions as a handler.",
    ) -> None:
        self._name = name
        self._before = before
        self._after = after
        self._description = description

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    def before(self, ctx: Any, payload: bytes | None) -> tuple[Any, bytes | None]:
        if self._before is None:
            return noop_transform(ctx, payload)
        return self._before(ctx, payload)

    def after(self, ctx: Any, payload: bytes | None) -> tuple[Any, bytes | None]:
        if self._after is None:
            return noop_transform(ctx, payload)
        return self._after(ctx, payload)


# ---------------------------------------------------------------------------
# Debug representation helpers
# ---------------------------------------------------------------------------


def _public_state(obj: Any) -> dict[str, Any]:
    state = getattr(obj, "__dict__", {})
    return {key.lstrip("_"): value for key, value in state.items() if not callable(value)}


def json_string(handler: Any) -> str:
    """
    Render a handler's state as JSON, for use as its __str__.

    Pydantic models dump themselves; anything else contributes its instance
    attributes (leading underscores stripped, callables skipped).
    """
    if isinstance(handler, BaseModel):
        return handler.model_dump_json()
    return json.dumps(_public_state(handler), sort_keys=True, default=str)
