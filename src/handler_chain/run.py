# run.py
# Entry point. Config and wiring only, no logic lives here.
#
# Set HANDLER_CHAIN_FLOW (e.g. "upper,frame,base64") to pick which demo
# handlers run and in what order.

import base64

from handler_chain import display
from handler_chain.chain import HandlerChain, HandlerNotFoundError
from handler_chain.config import Settings
from handler_chain.emitters import BackgroundTraceEmitter, build_emitter
from handler_chain.engine import Engine
from handler_chain.flow import to_flow
from handler_chain.handlers import FuncHandler
from handler_chain.models import Context

DEFAULT_FLOW = "upper,frame,base64"

# Demo handlers. frame and base64 undo their pre-pass on the way back out.
DEMO_HANDLERS = HandlerChain(
    FuncHandler(
        "frame",
        before=lambda ctx, data: (ctx.with_value("framed", True), b"<" + data + b">"),
        after=lambda ctx, data: (ctx, data[1:-1]),
    ),
    FuncHandler(
        "base64",
        before=lambda ctx, data: (ctx, base64.b64encode(data)),
        after=lambda ctx, data: (ctx, base64.b64decode(data)),
    ),
    # Pre-pass only: the post-pass is a no-op and leaves no trace entry.
    FuncHandler("upper", before=lambda ctx, data: (ctx, data.upper())),
)

PAYLOADS = [
    b"hello onion",
    b"second payload",
]


def main() -> None:
    settings = Settings.from_env()
    flow = to_flow(settings.flow or DEFAULT_FLOW)

    try:
        chain = DEMO_HANDLERS.get_by_name(*flow)
    except HandlerNotFoundError as exc:
        display.halt(f"{exc}. Known handlers: {', '.join(DEMO_HANDLERS.get_names())}")
        raise SystemExit(1) from exc

    chain.warn_out_of_range = settings.warn_out_of_range
    display.chain_built(chain.get_names())

    emitter = build_emitter(settings)
    engine = Engine(emitter)
    for payload in PAYLOADS:
        try:
            result = engine.run(chain, Context(), payload)
        except Exception as exc:
            display.halt(f"Run failed: {exc!r}")
            continue
        display.final_result(result)

    if isinstance(emitter, BackgroundTraceEmitter):
        emitter.flush()
        emitter.close()


if __name__ == "__main__":
    main()
