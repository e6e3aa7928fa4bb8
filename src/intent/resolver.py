"""Intent resolver: one utterance, one backend call, one validated plan.

There is no fallback parser and no retry. Ambiguity is reported through the plan's
`clarification`, not through follow-up backend calls.
"""

from __future__ import annotations

import logging
from time import monotonic

from src.intent.llm_parser import (
    GenerationBackend,
    GenerationError,
    load_prompt,
    parse_generation_output,
)
from src.intent.schema import QueryPlan, plan_from_obj

logger = logging.getLogger(__name__)


class EmptyInputError(ValueError):
    """Raised for blank utterances; the backend is never contacted."""


class IntentResolver:
    """Translate a user utterance into a `QueryPlan` via the generation backend."""

    def __init__(self, backend: GenerationBackend, *, prompt: str | None = None) -> None:
        self._backend = backend
        self._prompt = prompt if prompt is not None else load_prompt()

    def resolve(self, utterance: str | None) -> QueryPlan:
        """Resolve an utterance into a validated plan.

        Raises:
            EmptyInputError: If the utterance is blank.
            GenerationError: If the backend call fails.
            MalformedOutputError: If the backend text is not a single JSON object.
            PlanValidationError: If the JSON object does not satisfy the plan schema.
        """

        if not utterance or not utterance.strip():
            raise EmptyInputError("Empty message")

        started = monotonic()
        try:
            raw_text = self._backend.complete(self._prompt, utterance)
        except GenerationError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise GenerationError(f"Generation backend failed: {exc}") from exc

        obj = parse_generation_output(raw_text)
        plan = plan_from_obj(obj)

        logger.debug(
            "resolved intent=%s listing_id=%s latency_ms=%d",
            plan.intent,
            plan.listing_id,
            int((monotonic() - started) * 1000),
        )
        return plan
