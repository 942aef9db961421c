# chain.py
# Ordered, mutable sequence of handlers.
#
# Every mutation rebuilds the backing list instead of editing it in place, so
# a snapshot (chain.handlers, chain.copy(), a slice) taken earlier never
# changes underfoot. Out-of-range positions never raise: delete/replace are
# no-ops, insert_before falls back to the head, insert_after to the tail.

from collections.abc import Iterable, Iterator
from typing import Any

from handler_chain import display
from handler_chain.emitters import TraceEmitter
from handler_chain.engine import Engine
from handler_chain.handlers import Handler


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class HandlerNotFoundError(LookupError):
    """Raised by get_by_name() when a requested name matches no handler."""

    def __init__(self, name: str) -> None:
        super().__init__(f"not found handler named: {name}")
        self.name = name


# ---------------------------------------------------------------------------
# HandlerChain
# ---------------------------------------------------------------------------


class HandlerChain:
    """
    Onion-ordered handler chain.

    Pre-pass order is the chain order; post-pass order is its exact reverse.

    Example:
        chain = HandlerChain(auth, compress)
        chain.insert_after(chain.index_first("auth"), audit)
        result = chain.run(Context(), b"payload")
    """

    def __init__(self, *handlers: Handler, warn_out_of_range: bool = False) -> None:
        self._handlers: list[Handler] = []
        self.warn_out_of_range = warn_out_of_range
        self.append(*handlers)

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    @property
    def handlers(self) -> tuple[Handler, ...]:
        """Immutable snapshot in chain order."""
        return tuple(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[Handler]:
        return iter(tuple(self._handlers))

    def __getitem__(self, key: int | slice) -> "Handler | HandlerChain":
        if isinstance(key, slice):
            return self._derive(self._handlers[key])
        return self._handlers[key]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandlerChain):
            return NotImplemented
        return self._handlers == other._handlers

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"HandlerChain({' -> '.join(self.get_names())})"

    def copy(self) -> "HandlerChain":
        return self._derive(self._handlers)

    def _derive(self, handlers: Iterable[Handler]) -> "HandlerChain":
        return HandlerChain(*handlers, warn_out_of_range=self.warn_out_of_range)

    def _out_of_range(self, operation: str, position: int) -> None:
        if self.warn_out_of_range:
            display.out_of_range(operation, position, len(self._handlers))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append(self, *handlers: Handler) -> None:
        self._handlers = [*self._handlers, *handlers]

    def insert_before(self, position: int, *handlers: Handler) -> None:
        """
        Insert handlers immediately before `position`.

        position <= 0 or past the last index inserts at the head.
        """
        current = self._handlers
        if position <= 0 or position > len(current) - 1:
            if position != 0:
                self._out_of_range("insert_before", position)
            self._handlers = [*handlers, *current]
            return
        self._handlers = [*current[:position], *handlers, *current[position:]]

    def insert_after(self, position: int, *handlers: Handler) -> None:
        """
        Insert handlers immediately after `position`.

        A negative position, or the last index and beyond, appends at the tail.
        """
        current = self._handlers
        if position < 0 or position + 1 >= len(current):
            if position < 0 or position >= len(current):
                self._out_of_range("insert_after", position)
            self._handlers = [*current, *handlers]
            return
        self._handlers = [*current[: position + 1], *handlers, *current[position + 1 :]]

    def delete(self, position: int) -> None:
        current = self._handlers
        if position < 0 or position >= len(current):
            self._out_of_range("delete", position)
            return
        self._handlers = [*current[:position], *current[position + 1 :]]

    def replace(self, position: int, *handlers: Handler) -> None:
        """Splice `handlers` (zero or more) in place of the handler at `position`."""
        current = self._handlers
        if position < 0 or position >= len(current):
            self._out_of_range("replace", position)
            return
        self._handlers = [*current[:position], *handlers, *current[position + 1 :]]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def index(self, name: str) -> list[int]:
        """All positions whose handler name equals `name` (case-sensitive)."""
        return [i for i, handler in enumerate(self._handlers) if handler.name == name]

    def index_first(self, name: str) -> int:
        for i, handler in enumerate(self._handlers):
            if handler.name == name:
                return i
        return -1

    def index_last(self, name: str) -> int:
        for i in range(len(self._handlers) - 1, -1, -1):
            if self._handlers[i].name == name:
                return i
        return -1

    def get_names(self) -> list[str]:
        return [handler.name for handler in self._handlers]

    def get_by_name(self, *names: str) -> "HandlerChain":
        """
        Sub-chain of the first case-insensitive match for each name.

        Order follows `names`, not the chain. Raises HandlerNotFoundError for
        the first name without a match; no partial result is returned.
        """
        selected: list[Handler] = []
        for name in names:
            wanted = name.casefold()
            match = next((h for h in self._handlers if h.name.casefold() == wanted), None)
            if match is None:
                raise HandlerNotFoundError(name)
            selected.append(match)
        return self._derive(selected)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(
        self, ctx: Any, payload: bytes | None, emitter: TraceEmitter | None = None
    ) -> bytes | None:
        """Run the chain once through the engine. See Engine.run."""
        return Engine(emitter).run(self, ctx, payload)
