"""Result table helpers: search, filter, sort, and JSON export of batch items."""

import json
from typing import Literal

from src.core.schemas import AnalysisStatus, BatchItem, Recommendation

SortOption = Literal["score_desc", "score_asc", "name_asc"]

SORT_OPTIONS: tuple[str, ...] = ("score_desc", "score_asc", "name_asc")


def _score(item: BatchItem) -> int:
    return item.result.score if item.result is not None else -1


def filter_and_sort(
    items: list[BatchItem],
    search: str = "",
    recommendation: Recommendation | None = None,
    min_score: int = 0,
    sort_by: SortOption = "score_desc",
) -> list[BatchItem]:
    """Return a filtered, sorted view of items. The input list is not modified.

    Items without a result sort as score -1; for ``score_asc`` they go last.
    """
    result = list(items)

    if search:
        term = search.lower()
        result = [
            i for i in result
            if term in i.file.name.lower()
            or (i.result is not None and term in i.result.candidate_name.lower())
        ]

    if recommendation is not None:
        result = [
            i for i in result
            if i.result is not None and i.result.recommendation is recommendation
        ]

    if min_score > 0:
        result = [i for i in result if max(_score(i), 0) >= min_score]

    if sort_by == "score_desc":
        result.sort(key=_score, reverse=True)
    elif sort_by == "score_asc":
        result.sort(key=lambda i: (i.result is None, _score(i)))
    elif sort_by == "name_asc":
        result.sort(key=lambda i: i.file.name.lower())
    else:
        msg = f"Unknown sort option '{sort_by}'. Available: {', '.join(SORT_OPTIONS)}"
        raise ValueError(msg)

    return result


def progress(items: list[BatchItem]) -> tuple[int, int]:
    """Return (completed, total)."""
    completed = sum(1 for i in items if i.status is AnalysisStatus.COMPLETED)
    return completed, len(items)


def export_results_json(items: list[BatchItem]) -> str:
    """Export batch items as a JSON string (file content omitted)."""
    data = []
    for item in items:
        entry: dict[str, object] = {
            "file_id": item.file.id,
            "file_name": item.file.name,
            "kind": item.file.kind.value,
            "status": item.status.value,
        }
        if item.result is not None:
            r = item.result
            entry.update({
                "candidate_name": r.candidate_name,
                "score": r.score,
                "headline": r.headline,
                "recommendation": r.recommendation.value,
                "skills_gap": r.skills_gap,
                "archetype": r.personality.archetype,
            })
        if item.error:
            entry["error"] = item.error
        data.append(entry)
    return json.dumps(data, indent=2, ensure_ascii=False)
