"""Question Filter.

Works out which of a route's questions currently apply, given the answers
collected so far. Only routes with a selector question branch; for Global
Talent the selected endorsing body decides which body-specific questions
are shown.
"""

from __future__ import annotations

from typing import List

from eligibility.answer_store import AnswerStore
from eligibility.catalog import EndorsingBody, Question, VisaRoute


def selected_endorsing_body(route: VisaRoute, answers: AnswerStore) -> EndorsingBody:
    """Endorsing body picked in the route's selector question, or NONE."""
    if not route.has_branching:
        return EndorsingBody.NONE

    value = answers.get(route.selector_question_id)
    if not isinstance(value, str) or not value:
        return EndorsingBody.NONE

    selector = route.get_question(route.selector_question_id)
    if value in selector.options:
        # Catalog validation guarantees each option names exactly one body.
        return EndorsingBody.matching(value)[0]
    return EndorsingBody.resolve(value)


def filter_questions(route: VisaRoute, answers: AnswerStore) -> List[Question]:
    """Return the active questions for ``route`` in authored order.

    Untagged questions are always included. Body-specific questions are
    included only for the selected body; with no (or an unrecognised)
    selection every body-specific question is hidden.
    """
    if not route.has_branching:
        return list(route.questions)

    body = selected_endorsing_body(route, answers)
    return [
        q for q in route.questions
        if q.endorsing_body is EndorsingBody.NONE
        or (body is not EndorsingBody.NONE and q.endorsing_body is body)
    ]
