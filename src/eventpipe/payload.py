"""Payload — the per-occurrence record threaded through a stream.

One Payload is built for every occurrence of the source. Stages never
mutate it; each returns a new Payload (NamedTuple._replace).
"""

from __future__ import annotations

from typing import Any, NamedTuple


class Payload(NamedTuple):
    """result/error/args/use for one occurrence.

    error is None when there is no error. args is the occurrence's raw
    positional arguments and stays the same for every stage.
    """

    result: Any = None
    error: Any = None
    args: tuple = ()
    use: bool = True

    @classmethod
    def from_occurrence(cls, *args: Any) -> Payload:
        """Build the initial payload for a source callback invocation."""
        return cls(result=args[0] if args else None, args=args, use=True)

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def failed(self, error: BaseException) -> Payload:
        """Errored copy. The result is dropped; use and args are kept."""
        return Payload(result=None, error=error, args=self.args, use=self.use)
