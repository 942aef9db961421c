# engine.py
# Two-phase ("onion") execution of a handler chain.
#
# Control flow:
#   pre-pass  handler[0] → handler[n-1]   (before)
#   post-pass handler[n-1] → handler[0]   (after)
#   → finalize trace → emit (every exit path)
#
# A phase raising NoOpTransform is skipped without a trace entry. Any other
# exception is recorded on its step and halts the run immediately; a pre-pass
# failure means no post-pass step runs at all. Nothing is retried or rolled
# back.

from collections.abc import Iterable
from typing import Any

from handler_chain import display
from handler_chain.emitters import TraceEmitter, default_emitter
from handler_chain.handlers import Handler, NoOpTransform
from handler_chain.models import ExecutionTrace, Phase, StepRecord


class Engine:
    """
    Drives one or more runs over a handler sequence.

    Holds no state between runs apart from the emitter; every run starts with
    a fresh trace owned exclusively by that run.

    Example:
        engine = Engine(MemoryTraceEmitter())
        out = engine.run(chain, Context(), b"data")
    """

    def __init__(self, emitter: TraceEmitter | None = None) -> None:
        self._emitter = emitter

    @property
    def emitter(self) -> TraceEmitter:
        if self._emitter is None:
            self._emitter = default_emitter()
        return self._emitter

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _step(
        self,
        trace: ExecutionTrace,
        phase: Phase,
        handler: Handler,
        ctx: Any,
        data: bytes | None,
    ) -> tuple[Any, bytes | None]:
        """
        Invoke one phase of one handler and record it.

        Returns the (context, payload) carried into the next step. Re-raises
        the handler's exception after recording it.
        """
        record = StepRecord(
            phase=phase,
            handler_name=handler.name,
            debug=str(handler),
            input_context=ctx,
            input_payload=data,
        )
        transform = handler.before if phase is Phase.PRE else handler.after
        try:
            new_ctx, new_data = transform(ctx, data)
        except NoOpTransform:
            return ctx, data
        except BaseException as exc:
            record.output_context = ctx
            record.error = exc
            trace.steps.append(record)
            raise

        record.output_context = new_ctx
        record.output_payload = new_data
        trace.steps.append(record)
        return new_ctx, new_data

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit(self, trace: ExecutionTrace) -> None:
        emitter_name = "default"
        try:
            emitter = self.emitter
            emitter_name = type(emitter).__name__
            emitter.emit(trace)
        except Exception as exc:
            display.emitter_failed(emitter_name, exc)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self, handlers: Iterable[Handler], ctx: Any, payload: bytes | None) -> bytes | None:
        """
        Run `handlers` once over `payload`.

        Returns the final payload. A handler exception propagates unchanged
        after being recorded. The trace, with the final context attached, is
        emitted exactly once whether the run succeeds or fails.
        """
        snapshot = tuple(handlers)
        trace = ExecutionTrace()
        data = payload
        error: BaseException | None = None

        try:
            for handler in snapshot:
                ctx, data = self._step(trace, Phase.PRE, handler, ctx, data)
            for handler in reversed(snapshot):
                ctx, data = self._step(trace, Phase.POST, handler, ctx, data)
            return data
        except BaseException as exc:
            error = exc
            raise
        finally:
            trace.finish(ctx, error)
            self._emit(trace)


def run_chain(
    handlers: Iterable[Handler],
    ctx: Any,
    payload: bytes | None,
    emitter: TraceEmitter | None = None,
) -> bytes | None:
    return Engine(emitter).run(handlers, ctx, payload)
