"""Service for running a quiz session over the weighted hand list."""
import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Callable, List, Optional, Sequence

from rangequiz import monitoring
from rangequiz.errors import FetchError, ParseError
from rangequiz.models.quiz_models import (
    AnswerResult,
    AnswerStatus,
    Item,
    Number,
    ProgressStore,
)
from rangequiz.services.progress_service import ProgressService, merge, record_miss
from rangequiz.services.reference_loader import ReferenceLoader
from rangequiz.services.weighted_selector import WeightedSelector

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class QuizSession:
    """State machine for one quiz: current hand, answer status and progress.

    Every wrong answer is written through the progress service before the new
    weight is reflected back onto the in-memory items.
    """

    def __init__(
        self,
        items: Sequence[Item],
        progress: ProgressStore,
        progress_service: ProgressService,
        selector: Optional[WeightedSelector] = None,
        clock: Callable[[], str] = utc_timestamp,
    ):
        """Initialize the session with merged items and the loaded store."""
        self.items: List[Item] = list(items)
        self.progress = progress
        self.progress_service = progress_service
        self.selector = selector or WeightedSelector()
        self.clock = clock
        self.current: Optional[Item] = None
        self.status = AnswerStatus.AWAITING
        self.selected_value: Optional[Number] = None

    def select_next(self) -> Optional[Item]:
        """Pick the next hand and reset the answer state."""
        if not self.items:
            logger.debug("No hands to select from")
            return self.current

        self.current = self.selector.pick(self.items)
        self.status = AnswerStatus.AWAITING
        self.selected_value = None
        logger.debug(f"Selected hand {self.current.hand} (weight {self.current.misses})")
        return self.current

    def submit_answer(self, value: Number) -> AnswerStatus:
        """Check an answer for the current hand.

        Ignored unless a hand is selected and still awaiting an answer.
        """
        if self.current is None or self.status != AnswerStatus.AWAITING:
            logger.debug(f"Ignoring answer {value}, status is {self.status.value}")
            return self.status

        self.selected_value = value
        if value == self.current.players:
            self.status = AnswerStatus.CORRECT
            monitoring.answers_total.labels(result="correct").inc()
            logger.debug(f"Correct answer {value} for {self.current.hand}")
            return self.status

        self.status = AnswerStatus.INCORRECT
        monitoring.answers_total.labels(result="incorrect").inc()
        self._record_miss(self.current)
        return self.status

    def _record_miss(self, item: Item) -> None:
        timestamp = self.clock()
        self.progress = record_miss(self.progress, item.hand, timestamp, baseline=item.misses)
        self.progress_service.persist(self.progress)
        monitoring.misses_recorded.inc()

        record = self.progress.get(item.hand)
        updated = replace(item, misses=record.misses, last_missed_at=record.last_missed_at)
        self.items = [updated if i.hand == item.hand else i for i in self.items]
        self.current = updated
        logger.info(
            f"Missed {item.hand} (answered {self.selected_value}, expected {item.players}); "
            f"weight now {updated.misses}, total misses {self.progress.total_misses}"
        )

    @property
    def is_answered(self) -> bool:
        return self.status != AnswerStatus.AWAITING

    def result(self) -> Optional[AnswerResult]:
        """Get the outcome of the current hand once it has been answered."""
        if self.current is None or not self.is_answered:
            return None
        return AnswerResult(status=self.status, selected_value=self.selected_value, item=self.current)


@dataclass
class BootstrapResult:
    """Outcome of starting a quiz: a session, or the reason it failed."""
    session: Optional[QuizSession] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.session is not None


async def bootstrap_session(
    loader: ReferenceLoader,
    progress_service: ProgressService,
    source: str,
    selector: Optional[WeightedSelector] = None,
    clock: Callable[[], str] = utc_timestamp,
) -> BootstrapResult:
    """Fetch the table, merge stored progress and pick the first hand."""
    try:
        raw_table = await loader.fetch(source)
        base_items = loader.load(raw_table)
    except (FetchError, ParseError) as e:
        logger.error(f"Failed to start quiz from {source}: {e}")
        monitoring.bootstrap_failures.labels(error_type=type(e).__name__).inc()
        return BootstrapResult(error=str(e))

    progress = progress_service.load()
    items = merge(base_items, progress)
    monitoring.items_loaded.set(len(items))

    session = QuizSession(items, progress, progress_service, selector=selector, clock=clock)
    session.select_next()
    logger.info(f"Quiz started with {len(items)} hands, {progress.total_misses} total misses")
    return BootstrapResult(session=session)
