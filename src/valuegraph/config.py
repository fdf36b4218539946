"""AdapterOptions — construction-time tunables for graph adapters."""

from __future__ import annotations

import pickle
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AdapterOptions:
    """Options for a value graph adapter.

    Carried by clones, never written to the wire.

    Attributes:
        check_converter: Verify at construction that the weight converter can
            be pickled, so that serialization cannot fail on it later.
        pickle_protocol: Pickle protocol used for vertices, values and the
            converter when writing the wire format.
    """

    check_converter: bool = True
    pickle_protocol: int = pickle.DEFAULT_PROTOCOL

    def __post_init__(self) -> None:
        if not 2 <= self.pickle_protocol <= pickle.HIGHEST_PROTOCOL:
            msg = (
                f"pickle_protocol must be between 2 and {pickle.HIGHEST_PROTOCOL}, "
                f"got {self.pickle_protocol}"
            )
            raise ValueError(msg)
