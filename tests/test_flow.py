import pytest

from handler_chain.flow import Flow, to_flow

# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def test_to_flow_splits_and_trims():
    assert to_flow("auth, gzip ,frame") == ["auth", "gzip", "frame"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("a,b", "a,b"),
        (",a,,b,", "a,b"),
        ("a, ,b", "a,b"),
        ("  ", ""),
        ("", ""),
    ],
)
def test_round_trip_drops_blank_segments(raw, expected):
    assert str(to_flow(raw)) == expected


def test_custom_separator():
    flow = to_flow("a|b||c", sep="|")
    assert flow == ["a", "b", "c"]
    assert str(flow) == "a|b|c"


def test_drop_empty_in_place():
    flow = Flow(["x", " ", "", " y "])
    flow.drop_empty()
    assert flow == ["x", "y"]


def test_flow_feeds_get_by_name():
    from handler_chain.chain import HandlerChain
    from handler_chain.handlers import FuncHandler

    chain = HandlerChain(FuncHandler("a"), FuncHandler("b"))
    assert chain.get_by_name(*to_flow(" b , a ")).get_names() == ["b", "a"]


def test_flow_accepts_any_iterable_of_names():
    flow = Flow((name for name in ["a", "b"]), sep=";")
    assert str(flow) == "a;b"
