# flow.py
# Delimited handler-name lists, as found in configuration.
#
#   to_flow(" a, ,b,")  -> Flow(["a", "b"])
#   str(Flow(["a", "b"])) -> "a,b"

from collections.abc import Iterable

DEFAULT_SEPARATOR = ","


class Flow(list[str]):
    """Ordered handler names. str() joins them back with the separator."""

    def __init__(self, names: Iterable[str] = (), sep: str = DEFAULT_SEPARATOR) -> None:
        super().__init__(names)
        self.sep = sep

    def drop_empty(self) -> None:
        """Trim every name and discard blank ones, in place."""
        self[:] = [name.strip() for name in self if name.strip()]

    def __str__(self) -> str:
        return self.sep.join(self)


def to_flow(s: str, sep: str = DEFAULT_SEPARATOR) -> Flow:
    flow = Flow(s.split(sep), sep=sep)
    flow.drop_empty()
    return flow
