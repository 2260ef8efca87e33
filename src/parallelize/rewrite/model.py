from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import List


class State(StrEnum):
    IGNORED = "ignored"
    SIMPLE_PARALLELIZED = "simple_parallelized"
    SUBTEST_PARALLELIZED = "subtest_parallelized"
    TABLE_FIXED = "table_fixed"
    REWRITE_ABORTED = "rewrite_aborted"


REWRITTEN_STATES = frozenset(
    {State.SIMPLE_PARALLELIZED, State.SUBTEST_PARALLELIZED, State.TABLE_FIXED}
)


@dataclass
class FunctionOutcome:
    path: str
    function: str
    state: State
    messages: List[str] = field(default_factory=list)

    @property
    def rewritten(self) -> bool:
        return self.state in REWRITTEN_STATES


@dataclass
class UnitReport:
    unit_id: str
    files: List[str] = field(default_factory=list)
    functions: List[FunctionOutcome] = field(default_factory=list)

    def counts(self) -> dict[State, int]:
        tally = Counter(outcome.state for outcome in self.functions)
        return {state: tally.get(state, 0) for state in State}

    def aborted(self) -> List[FunctionOutcome]:
        return [item for item in self.functions if item.state is State.REWRITE_ABORTED]
