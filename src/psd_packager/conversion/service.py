import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Callable

from .errors import ConversionError
from .interfaces import ConversionOutcome, ConverterGateway, Document

logger = logging.getLogger(__name__)

GENERIC_PROCESS_ERROR = "Failed to process PSD file"


class ConversionStatus:
    IDLE = "idle"
    SUBMITTING = "submitting"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionState:
    status: str = ConversionStatus.IDLE
    outcome: ConversionOutcome | None = None
    error: str | None = None
    request_id: int = 0

    @property
    def is_ready(self) -> bool:
        return self.status == ConversionStatus.READY and self.outcome is not None


Listener = Callable[[ConversionState], None]


class ConversionController:
    """Owns the lifecycle of the current conversion request.

    The state is an immutable value that is swapped as a whole on every
    transition, so the result triple is never seen half-populated. Overlapping
    requests are tagged with an increasing id; unless
    `discard_stale_responses` is turned off, only the most recently issued
    request may move the machine out of SUBMITTING.
    """

    def __init__(self, converter: ConverterGateway, *, discard_stale_responses: bool = True) -> None:
        self._converter = converter
        self._discard_stale = discard_stale_responses
        self._ids = itertools.count(1)
        self._state = ConversionState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ConversionState:
        return self._state

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def reset(self) -> None:
        # Bumping the id turns any in-flight request into a stale one.
        self._transition(ConversionState(request_id=next(self._ids)))

    async def request_conversion(self, document: Document) -> ConversionState:
        if not document.content:
            raise ValueError("document is empty")

        request_id = next(self._ids)
        self._transition(ConversionState(status=ConversionStatus.SUBMITTING, request_id=request_id))
        logger.info("Submitting %s (request %d, %d bytes)", document.filename, request_id, len(document.content))

        try:
            outcome = await asyncio.to_thread(self._converter.convert, document)
        except ConversionError as e:
            new_state = self._failed(request_id, str(e) or GENERIC_PROCESS_ERROR)
        except Exception as e:
            logger.exception("Upload error for %s", document.filename)
            new_state = self._failed(request_id, str(e) or GENERIC_PROCESS_ERROR)
        else:
            new_state = ConversionState(status=ConversionStatus.READY, outcome=outcome, request_id=request_id)

        if self._discard_stale and request_id != self._state.request_id:
            logger.info("Discarding response of superseded request %d", request_id)
            return self._state
        self._transition(new_state)
        return new_state

    @staticmethod
    def _failed(request_id: int, message: str) -> ConversionState:
        return ConversionState(status=ConversionStatus.FAILED, error=message, request_id=request_id)

    def _transition(self, new_state: ConversionState) -> None:
        old = self._state
        self._state = new_state
        logger.debug("State %s -> %s (request %d)", old.status, new_state.status, new_state.request_id)
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("State listener %r failed", listener)
