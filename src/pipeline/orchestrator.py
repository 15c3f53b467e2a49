"""Orchestrator: drives a batch of resumes through the analysis client.

Data flow:
  1. Snapshot the job context, create one idle BatchItem per file
  2. For each item in order: analyzing → completed | error
  3. Abort on MissingCredentialError (remaining items stay idle, no history)
  4. Persist the finished batch to the history store
"""

import inspect
import logging
from collections.abc import Awaitable, Callable

from src.analysis.client import AnalysisClient
from src.core.errors import (
    MissingCredentialError,
    ScreeningError,
    StorageQuotaExceededError,
)
from src.core.schemas import (
    AnalysisStatus,
    BatchItem,
    CandidateFile,
    HistorySession,
    JobContext,
)
from src.pipeline.history import HistoryStore

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[int, BatchItem], Awaitable[None] | None]


class BatchOutcome:
    """Final state of a batch run."""

    def __init__(
        self,
        items: list[BatchItem],
        session: HistorySession | None = None,
        aborted: bool = False,
        save_error: str | None = None,
    ) -> None:
        self.items = items
        self.session = session
        self.aborted = aborted
        self.save_error = save_error

    @property
    def config_required(self) -> bool:
        """True when the run stopped because the API key is missing or invalid."""
        return self.aborted

    @property
    def completed_count(self) -> int:
        return sum(1 for i in self.items if i.status is AnalysisStatus.COMPLETED)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.items if i.status is AnalysisStatus.ERROR)


async def _notify(on_update: UpdateCallback | None, index: int, item: BatchItem) -> None:
    if on_update is None:
        return
    ret = on_update(index, item)
    if inspect.isawaitable(ret):
        await ret


async def run_batch(
    files: list[CandidateFile],
    job: JobContext,
    client: AnalysisClient,
    history: HistoryStore,
    on_update: UpdateCallback | None = None,
) -> BatchOutcome:
    """Analyze every file sequentially, in input order.

    ``on_update(index, item)`` is called after every status change so the
    caller can render progress as it happens.

    Raises:
        ValueError: If files is empty, the job description is blank, or two
            files share an id.
    """
    if not files:
        msg = "at least one resume is required"
        raise ValueError(msg)
    if not job.description.strip():
        msg = "job description must not be empty"
        raise ValueError(msg)
    if len({f.id for f in files}) != len(files):
        msg = "resume ids must be unique within a batch"
        raise ValueError(msg)

    job = job.model_copy()
    items = [BatchItem(file=f) for f in files]
    logger.info("Starting batch of %d resumes for '%s'", len(items), job.title)

    for index, item in enumerate(items):
        item.status = AnalysisStatus.ANALYZING
        await _notify(on_update, index, item)

        try:
            item.result = await client.analyze(item.file, job)
        except MissingCredentialError as e:
            logger.error(
                "Aborting batch at '%s': %s (%d items left unprocessed)",
                item.file.name, e, len(items) - index - 1,
            )
            item.status = AnalysisStatus.ERROR
            item.error = str(e)
            await _notify(on_update, index, item)
            return BatchOutcome(items, aborted=True)
        except ScreeningError as e:
            logger.warning("Analysis failed for '%s': %s", item.file.name, e)
            item.status = AnalysisStatus.ERROR
            item.error = str(e)
        except Exception as e:
            logger.exception("Unexpected failure analyzing '%s'", item.file.name)
            item.status = AnalysisStatus.ERROR
            item.error = str(e) or type(e).__name__
        else:
            item.status = AnalysisStatus.COMPLETED
            logger.info(
                "Analyzed '%s': score %d (%s)",
                item.file.name, item.result.score, item.result.recommendation.value,
            )
        await _notify(on_update, index, item)

    outcome = BatchOutcome(items)
    logger.info(
        "Batch finished: %d completed, %d failed",
        outcome.completed_count, outcome.error_count,
    )
    try:
        outcome.session = history.save(job, items)
    except StorageQuotaExceededError as e:
        logger.error("Failed to save history: %s", e)
        outcome.save_error = str(e)
    return outcome


def restore_session(
    session: HistorySession,
) -> tuple[JobContext, list[CandidateFile], list[BatchItem]]:
    """Seed fresh working state from a stored session without touching it."""
    job = JobContext(title=session.job_title, description=session.job_description)
    items = [item.model_copy(deep=True) for item in session.items]
    files = [item.file for item in items]
    return job, files, items
