"""
Tally aggregation.

Builds the Tally Snapshot ``{question_id: {option: count}}`` from every
stored response in a single pass with a two-level counter. The snapshot is
never stored; it is recomputed whenever it is needed.
"""

from collections import Counter, defaultdict
from collections.abc import Iterable

from repositories.provider import SurveyStoreProtocol
from schemas.survey import TallySnapshot


def count_selections(selections: Iterable[tuple[str, str]]) -> TallySnapshot:
    """
    Count (question_id, selected_option) pairs.

    The result does not depend on input order: questions and options are
    emitted in sorted key order. Questions or options with no selections are
    absent rather than zero.
    """
    counters: defaultdict[str, Counter[str]] = defaultdict(Counter)
    for question_id, selected_option in selections:
        counters[question_id][selected_option] += 1

    return {
        question_id: {option: counters[question_id][option] for option in sorted(counters[question_id])}
        for question_id in sorted(counters)
    }


class TallyAggregator:
    """Computes tallies from whatever store the process runs against."""

    def __init__(self, store: SurveyStoreProtocol):
        self.store = store

    async def compute_tallies(self) -> TallySnapshot:
        return count_selections(await self.store.list_selections())
