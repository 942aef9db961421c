# emitters.py
# Sinks for execution traces.
#
# The engine hands every finished trace to exactly one emitter. Emitters are
# observability only: a failing emitter is reported on the console and never
# changes the outcome of the run that produced the trace.

import queue
import threading
from functools import lru_cache
from typing import Protocol, runtime_checkable

from handler_chain import display
from handler_chain.config import Settings
from handler_chain.models import ExecutionTrace


@runtime_checkable
class TraceEmitter(Protocol):
    """Receives one ExecutionTrace per run."""

    def emit(self, trace: ExecutionTrace) -> None: ...


# ---------------------------------------------------------------------------
# Synchronous emitters
# ---------------------------------------------------------------------------


class ConsoleTraceEmitter:
    """Renders each trace as a rich table."""

    def emit(self, trace: ExecutionTrace) -> None:
        display.trace_rendered(trace)


class MemoryTraceEmitter:
    """Keeps every emitted trace, oldest first."""

    def __init__(self) -> None:
        self.traces: list[ExecutionTrace] = []

    def emit(self, trace: ExecutionTrace) -> None:
        self.traces.append(trace)

    @property
    def last(self) -> ExecutionTrace | None:
        return self.traces[-1] if self.traces else None


class NullTraceEmitter:
    def emit(self, trace: ExecutionTrace) -> None:
        return None


# ---------------------------------------------------------------------------
# Fire-and-forget wrapper
# ---------------------------------------------------------------------------


class BackgroundTraceEmitter:
    """
    Forwards traces to `inner` on a daemon thread.

    emit() never blocks: when the queue is full the trace is dropped and
    counted. Inner failures are counted and reported, never raised.

    Example:
        emitter = BackgroundTraceEmitter(ConsoleTraceEmitter(), max_queue=50)
        chain.run(ctx, payload, emitter=emitter)
        emitter.flush()
        emitter.close()
    """

    _STOP = object()

    def __init__(self, inner: TraceEmitter, max_queue: int = 100) -> None:
        self._inner = inner
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue)
        self._dropped_lock = threading.Lock()
        self.dropped = 0
        self.failures = 0
        self.delivered = 0
        self._closed = False
        self._thread = threading.Thread(
            target=self._export_loop, name="trace-emitter", daemon=True
        )
        self._thread.start()

    def emit(self, trace: ExecutionTrace) -> None:
        if self._closed:
            self._drop()
            return
        try:
            self._queue.put_nowait(trace)
        except queue.Full:
            self._drop()

    def _drop(self) -> None:
        with self._dropped_lock:
            self.dropped += 1
            dropped = self.dropped
        display.emitter_dropped(dropped)

    def _export_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is self._STOP:
                    return
                self._inner.emit(item)
                self.delivered += 1
            except Exception as exc:
                self.failures += 1
                display.emitter_failed(type(self._inner).__name__, exc)
            finally:
                self._queue.task_done()

    def flush(self) -> None:
        """Block until every queued trace has been handed to `inner`."""
        self._queue.join()

    def close(self, timeout: float = 5.0) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put(self._STOP, timeout=timeout)
        except queue.Full:
            # Worker still busy; it is a daemon thread and dies with the process.
            return
        self._thread.join(timeout=timeout)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_EMITTERS = {
    "console": ConsoleTraceEmitter,
    "memory": MemoryTraceEmitter,
    "null": NullTraceEmitter,
}


def build_emitter(settings: Settings) -> TraceEmitter:
    emitter = _EMITTERS[settings.emitter]()
    if settings.background_emit:
        return BackgroundTraceEmitter(emitter, max_queue=settings.queue_size)
    return emitter


@lru_cache(maxsize=1)
def default_emitter() -> TraceEmitter:
    """Process-wide emitter built once from the environment."""
    return build_emitter(Settings.from_env())
