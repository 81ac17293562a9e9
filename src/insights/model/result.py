# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from typing import Literal, Optional, TypedDict

from insights.model.entry import Entry


@dataclass(frozen=True)
class Success[T]:
    value: T


@dataclass(frozen=True)
class Failure:
    error: str


type Result[T] = Success[T] | Failure


# confirmed:   remote accepted, store holds the server record
# rolled_back: remote rejected, store restored to the pre-mutation snapshot
# dropped:     another mutation for the same key was still in flight
# noop:        nothing to do for the current store state
MutationStatus = Literal["confirmed", "rolled_back", "dropped", "noop"]


class MutationOutcome(TypedDict):
    status: MutationStatus
    entry: Optional[Entry]
    error: Optional[str]
