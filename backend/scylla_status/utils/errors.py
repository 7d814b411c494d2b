"""Error types shared by the probe server and the status controller."""
from typing import List, Optional, Sequence


class AggregateError(Exception):
    """Several independent failures reported as one.

    Every underlying error is kept in ``errors`` so callers can inspect each cause.
    """

    def __init__(self, errors: Sequence[Exception]):
        self.errors: List[Exception] = list(errors)
        super().__init__(self._format())

    def _format(self) -> str:
        if len(self.errors) == 1:
            return str(self.errors[0])
        return "[" + ", ".join(str(e) for e in self.errors) + "]"

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)


def new_aggregate(errors: Sequence[Exception]) -> Optional[AggregateError]:
    """Combine errors into an AggregateError, or return None when there are none."""
    errors = [e for e in errors if e is not None]
    if not errors:
        return None
    return AggregateError(errors)


class ForeignPodError(Exception):
    """Pod is not controlled by the expected workload object."""


class ImageVersionError(ValueError):
    """Image reference carries no usable version tag."""


class RackNodeCountError(ValueError):
    """Node count cannot be determined for a rack."""
