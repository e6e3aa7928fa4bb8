"""Chat message handler.

Contract: every incoming message produces exactly one `AssistantReply`. Resolver and matching
failures never escape this boundary; they become reply kinds the channel layer can word for the
user. Internal details only go to the logs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import monotonic
from typing import Literal

from src.app import App
from src.catalog.schema import PropertyRecord
from src.intent.llm_parser import GenerationError, MalformedOutputError
from src.intent.resolver import EmptyInputError
from src.intent.schema import (
    LISTING_SCOPED_INTENTS,
    IntentKind,
    PlanValidationError,
    QueryPlan,
)

logger = logging.getLogger(__name__)

ReplyKind = Literal[
    "listings",
    "photos",
    "clarification",
    "not_found",
    "no_results",
    "unsupported",
    "empty",
    "not_understood",
    "unavailable",
    "error",
]

MISSING_LISTING_QUESTION = "¿Cuál es la referencia del inmueble?"


@dataclass(frozen=True)
class AssistantReply:
    """Structured outcome of one message; wording and delivery belong to the channel."""

    kind: ReplyKind
    plan: QueryPlan | None = None
    listings: tuple[PropertyRecord, ...] = ()
    photos: tuple[str, ...] = ()
    questions: tuple[str, ...] = ()


def _result_limit(plan: QueryPlan, max_result_count: int) -> int:
    return max(1, min(plan.result_count, max_result_count))


def _clarify(plan: QueryPlan) -> AssistantReply:
    questions = plan.questions or (MISSING_LISTING_QUESTION,)
    return AssistantReply(kind="clarification", plan=plan, questions=questions)


def dispatch_plan(plan: QueryPlan, app: App) -> AssistantReply:
    """Turn a validated plan into a reply using the catalog and the matching engine."""

    if plan.intent == IntentKind.SEARCH:
        limit = _result_limit(plan, app.settings.max_result_count)
        listings = tuple(app.engine.search(plan.filters, limit))
        return AssistantReply(
            kind="listings" if listings else "no_results",
            plan=plan,
            listings=listings,
        )

    if plan.intent in LISTING_SCOPED_INTENTS:
        if plan.needs_listing_id:
            return _clarify(plan)

        record = app.catalog.get_by_id(plan.listing_id)
        if record is None:
            return AssistantReply(kind="not_found", plan=plan)

        if plan.intent == IntentKind.PHOTOS_MORE:
            return AssistantReply(
                kind="photos",
                plan=plan,
                listings=(record,),
                photos=record.photos[: plan.result_count],
            )
        return AssistantReply(kind="listings", plan=plan, listings=(record,))

    if plan.questions:
        return _clarify(plan)
    return AssistantReply(kind="unsupported", plan=plan)


def handle_text(app: App, text: str | None) -> AssistantReply:
    """Handle one incoming chat message and return exactly one reply."""

    started = monotonic()

    # noinspection PyBroadException
    try:
        plan = app.resolver.resolve(text)
        reply = dispatch_plan(plan, app)
    except EmptyInputError:
        return AssistantReply(kind="empty")
    except (PlanValidationError, MalformedOutputError) as exc:
        latency_ms = int((monotonic() - started) * 1000)
        logger.info("not understood reason=%s latency_ms=%d", exc, latency_ms)
        return AssistantReply(kind="not_understood")
    except GenerationError as exc:
        latency_ms = int((monotonic() - started) * 1000)
        logger.warning("generation failed reason=%s latency_ms=%d", exc, latency_ms)
        return AssistantReply(kind="unavailable")
    except Exception:
        # Handler boundary: internal errors become a generic reply without leaking details.
        logger.exception("handler failed")
        return AssistantReply(kind="error")

    latency_ms = int((monotonic() - started) * 1000)
    logger.info(
        "handled intent=%s kind=%s results=%d latency_ms=%d",
        plan.intent,
        reply.kind,
        len(reply.listings),
        latency_ms,
    )
    return reply
