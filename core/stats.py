"""
Live participant statistics for the admin dashboard.
"""
import logging
from typing import Callable, Dict, List

from core.models import Participant, Stats, TagCount
from core.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

StatsObserver = Callable[[Stats], None]

TOP_TAGS_LIMIT = 10


class StatsAggregator:
    """Derives online count and tag histogram from the session registry."""

    def __init__(self, top_tags_limit: int = TOP_TAGS_LIMIT):
        self.top_tags_limit = top_tags_limit

    @staticmethod
    def tag_histogram(participants: List[Participant]) -> Dict[str, int]:
        """Count every tag across all participants, in first-seen order."""
        counts: Dict[str, int] = {}
        for participant in participants:
            for tag in participant.interests:
                counts[tag] = counts.get(tag, 0) + 1
        return counts

    def compute(self, registry: SessionRegistry) -> Stats:
        participants = registry.snapshot()
        histogram = self.tag_histogram(participants)
        # sorted() is stable, so ties keep first-seen order
        ranked = sorted(histogram.items(), key=lambda item: item[1], reverse=True)
        return Stats(
            online_count=len(participants),
            tag_histogram=histogram,
            top_tags=[TagCount(tag, count) for tag, count in ranked[:self.top_tags_limit]],
        )


class StatsPublisher:
    """Pushes fresh statistics to subscribed admin observers."""

    def __init__(self) -> None:
        self._observers: List[StatsObserver] = []

    def subscribe(self, observer: StatsObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: StatsObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def publish(self, stats: Stats) -> None:
        for observer in list(self._observers):
            try:
                observer(stats)
            except Exception as e:
                logger.error(f"Stats observer {observer!r} failed: {e}", exc_info=True)

    def __len__(self) -> int:
        return len(self._observers)
