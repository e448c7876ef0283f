"""Single-edit state machine: idle -> loading -> success or failure."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, ClassVar, Optional, Union

from . import image_codec
from .ai.base import EditRequestError, ImageEditor, NoImageInResponse, TransportError
from .image_codec import EncodedImage, ReadError, SourceImage
from .timing import log_timing

logger = logging.getLogger(__name__)

IMAGE_REQUIRED_MESSAGE = "Please upload an image first."
INSTRUCTION_REQUIRED_MESSAGE = "Please enter an editing instruction."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class ValidationError(ValueError):
    pass


@dataclass(frozen=True)
class Idle:
    name: ClassVar[str] = "idle"
    error: Optional[str] = None


@dataclass(frozen=True)
class Loading:
    name: ClassVar[str] = "loading"


@dataclass(frozen=True)
class Success:
    name: ClassVar[str] = "success"
    result: EncodedImage


@dataclass(frozen=True)
class Failure:
    name: ClassVar[str] = "failure"
    message: str
    kind: str = "unknown"


SessionPhase = Union[Idle, Loading, Success, Failure]


def _failure_kind(exc: BaseException) -> str:
    if isinstance(exc, ReadError):
        return "read_error"
    if isinstance(exc, NoImageInResponse):
        return "no_image"
    if isinstance(exc, TransportError):
        return "transport_error"
    return "unknown"


class EditSession:
    """Drives one user's edit requests and exposes the current phase.

    ``select_image`` and ``submit`` are the only commands. Every failure from
    the codec or the editor ends up as a ``Failure`` phase; nothing but
    cancellation escapes ``submit``.
    """

    def __init__(
        self,
        editor: ImageEditor,
        encode: Callable[[SourceImage], Awaitable[EncodedImage]] = image_codec.encode,
    ) -> None:
        self._editor = editor
        self._encode = encode
        self._source: Optional[SourceImage] = None
        self._phase: SessionPhase = Idle()
        self._last_instruction = ""
        # Bumped on every selection and submit so late outcomes can be dropped.
        self._generation = 0
        # True from the start of a remote call until it returns, even if a
        # reselect has already moved the phase back to Idle.
        self._in_flight = False

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def source_image(self) -> Optional[SourceImage]:
        return self._source

    @property
    def result(self) -> Optional[EncodedImage]:
        if isinstance(self._phase, Success):
            return self._phase.result
        return None

    @property
    def error(self) -> Optional[str]:
        if isinstance(self._phase, Failure):
            return self._phase.message
        if isinstance(self._phase, Idle):
            return self._phase.error
        return None

    @property
    def last_instruction(self) -> str:
        return self._last_instruction

    @property
    def is_loading(self) -> bool:
        return self._in_flight

    @property
    def can_submit(self) -> bool:
        return not self.is_loading and self._source is not None

    def select_image(self, blob: SourceImage) -> SessionPhase:
        self._source = blob
        self._generation += 1
        self._phase = Idle()
        return self._phase

    async def submit(self, instruction_text: str) -> SessionPhase:
        if self._in_flight:
            logger.warning("Edit already in progress; ignoring submit")
            return self._phase
        self._last_instruction = instruction_text or ""

        try:
            instruction = self._validate(instruction_text)
        except ValidationError as exc:
            self._phase = Idle(error=str(exc))
            return self._phase

        self._generation += 1
        generation = self._generation
        source = self._source
        self._phase = Loading()
        self._in_flight = True

        outcome: SessionPhase
        try:
            with log_timing("edit request", logger):
                encoded = await self._encode(source)
                result = await self._editor.request_edit(encoded, instruction)
        except (ReadError, EditRequestError) as exc:
            outcome = Failure(message=str(exc) or UNKNOWN_ERROR_MESSAGE, kind=_failure_kind(exc))
        except Exception as exc:
            logger.exception("Unexpected failure while editing image")
            outcome = Failure(message=str(exc) or UNKNOWN_ERROR_MESSAGE)
        else:
            outcome = Success(result=result)
        finally:
            self._in_flight = False

        if generation != self._generation:
            logger.info("Discarding outcome of superseded edit request")
            return self._phase
        if isinstance(outcome, Failure):
            logger.info("Edit failed (%s): %s", outcome.kind, outcome.message)
        self._phase = outcome
        return outcome

    def _validate(self, instruction_text: str) -> str:
        if self._source is None:
            raise ValidationError(IMAGE_REQUIRED_MESSAGE)
        instruction = (instruction_text or "").strip()
        if not instruction:
            raise ValidationError(INSTRUCTION_REQUIRED_MESSAGE)
        return instruction
