"""Per-question answer frequency statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from formbuilder.logic.catalog import FormCatalog
from formbuilder.logic.ownership import require_owned_form
from formbuilder.models.records import ResponseRecord

logger = logging.getLogger(__name__)


@dataclass
class QuestionTally:
    question_id: str
    question_title: str
    question_type: str
    total_answers: int = 0
    # Observed value -> occurrences, in first-seen order
    answers: Dict[str, int] = field(default_factory=dict)


@dataclass
class FormStatistics:
    total_responses: int
    question_stats: List[QuestionTally]


def aggregate_tally(responses: Sequence[ResponseRecord]) -> FormStatistics:
    """Count answer values per question across `responses`.

    Questions appear in the order they are first met while scanning; a
    question nobody answered has no entry. Checkbox answers count each
    selected item once. Values are compared verbatim.
    """
    tallies: Dict[str, QuestionTally] = {}
    for response in responses:
        for answer in response.answers:
            tally = tallies.get(answer.question_id)
            if tally is None:
                question = answer.question
                tally = QuestionTally(
                    question_id=answer.question_id,
                    question_title=question.title if question else "",
                    question_type=question.type if question else "",
                )
                tallies[answer.question_id] = tally
            tally.total_answers += 1
            for key in answer.value.tally_keys():
                tally.answers[key] = tally.answers.get(key, 0) + 1
    return FormStatistics(total_responses=len(responses), question_stats=list(tallies.values()))


def compute_form_statistics(catalog: FormCatalog, form_id: str, requester_id: str) -> FormStatistics:
    require_owned_form(catalog, form_id, requester_id, missing_as_not_found=False)
    # Scan in storage order (oldest first) so entry order matches first submission
    stats = aggregate_tally(catalog.list_responses(form_id, newest_first=False))
    logger.info(
        "form_statistics_computed",
        extra={
            "form_id": form_id,
            "total_responses": stats.total_responses,
            "question_count": len(stats.question_stats),
        },
    )
    return stats


__all__ = ["FormStatistics", "QuestionTally", "aggregate_tally", "compute_form_statistics"]
