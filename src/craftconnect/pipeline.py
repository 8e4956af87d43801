"""Response pipeline: upstream call -> extract -> parse/repair -> normalize.

The pipeline is a small linear state machine. Every terminal state yields
exactly one schema-valid record plus a provenance flag:

    CALL_UPSTREAM --fail--> FALLBACK("AI service unavailable: ...")
    EXTRACT --NoJsonFound--> FALLBACK("No JSON found in AI response")
    PARSE --fail--> REPAIR --RepairFailed--> FALLBACK("JSON parsing failed")
    PARSE|REPAIR --ok--> NORMALIZE --> DONE

Only the repair step is retried (once, inside the repair engine); the
upstream call never is.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Generic

from .exceptions import NoJsonFound, RepairFailed, UpstreamUnavailable
from .parsing import extract_json_span, parse_object, repair_json
from .schemas.base import R, ResultSchema

logger = logging.getLogger("craftconnect")

REASON_UPSTREAM = "AI service unavailable"
REASON_NO_JSON = "No JSON found in AI response"
REASON_PARSE_FAILED = "JSON parsing failed"


class Stage(str, Enum):
    CALL_UPSTREAM = "call_upstream"
    EXTRACT = "extract"
    PARSE = "parse"
    REPAIR = "repair"
    NORMALIZE = "normalize"
    FALLBACK = "fallback"
    DONE = "done"


@dataclass(frozen=True)
class PipelineResult(Generic[R]):
    """Uniform envelope handed back to callers."""

    data: R
    fallback: bool
    success: bool = True
    raw_upstream_text: str | None = None
    error: str | None = None
    stages: tuple[Stage, ...] = ()
    cause: Exception | None = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": self.success,
            "data": self.data.to_wire(),
            "fallback": self.fallback,
        }
        if self.raw_upstream_text is not None:
            out["rawUpstreamText"] = self.raw_upstream_text
        if self.error is not None:
            out["error"] = self.error
        return out


def describe_error(error: BaseException) -> str:
    """Exception message, or its class name when the message is empty."""
    return str(error) or type(error).__name__


class ResponsePipeline(Generic[R]):
    """Run one use case's schema over a single upstream response."""

    def __init__(self, schema: ResultSchema[R]):
        self._schema = schema

    @property
    def schema(self) -> ResultSchema[R]:
        return self._schema

    async def run(self, call: Callable[[], Awaitable[str]]) -> PipelineResult[R]:
        """Await the upstream call and process its text. Never raises."""
        trail = [Stage.CALL_UPSTREAM]
        try:
            raw = await call()
        except Exception as e:
            err = e if isinstance(e, UpstreamUnavailable) else UpstreamUnavailable(
                describe_error(e)
            )
            logger.warning("%s upstream call failed: %s", self._schema.name, err)
            return self._fallback(
                f"{REASON_UPSTREAM}: {describe_error(err)}", err, trail, raw=None
            )
        return self.process(raw, _trail=trail)

    def process(
        self, raw: str, _trail: list[Stage] | None = None
    ) -> PipelineResult[R]:
        """Run every post-upstream stage on model text. Pure and total."""
        trail = _trail if _trail is not None else []

        trail.append(Stage.EXTRACT)
        try:
            span = extract_json_span(raw)
        except NoJsonFound as e:
            logger.warning("%s: %s", self._schema.name, e)
            return self._fallback(REASON_NO_JSON, e, trail, raw=raw)

        trail.append(Stage.PARSE)
        try:
            payload = parse_object(span)
        except json.JSONDecodeError:
            trail.append(Stage.REPAIR)
            try:
                payload = repair_json(span)
            except RepairFailed as e:
                return self._fallback(REASON_PARSE_FAILED, e, trail, raw=raw)

        trail.append(Stage.NORMALIZE)
        record = self._schema.normalize(payload)
        trail.append(Stage.DONE)
        logger.debug("%s stages: %s", self._schema.name, [s.value for s in trail])
        return PipelineResult(
            data=record,
            fallback=False,
            raw_upstream_text=raw,
            stages=tuple(trail),
        )

    def fallback(self, reason: str, error: Exception) -> PipelineResult[R]:
        """Envelope for a failure that happened before any model call."""
        return self._fallback(reason, error, [], raw=None)

    def _fallback(
        self,
        reason: str,
        error: Exception,
        trail: list[Stage],
        raw: str | None,
    ) -> PipelineResult[R]:
        trail.extend((Stage.FALLBACK, Stage.DONE))
        logger.info("%s using fallback: %s", self._schema.name, reason)
        return PipelineResult(
            data=self._schema.fallback(reason),
            fallback=True,
            raw_upstream_text=raw,
            error=f"{type(error).__name__}: {describe_error(error)}",
            stages=tuple(trail),
            cause=error,
        )
