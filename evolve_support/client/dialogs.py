"""Modal dialog state machine shared by the feedback and title-edit flows."""

import contextlib
import enum
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

from evolve_support.client.errors import ValidationFailed

T = TypeVar("T")


class DialogState(enum.Enum):
    CLOSED = "closed"
    EDITING = "editing"
    SUBMITTING = "submitting"
    CLOSED_ON_SUCCESS = "closed_on_success"


class Dialog(Generic[T]):
    """``closed -> editing -> submitting -> closed_on_success``.

    A failed submission goes back to ``editing`` with the draft untouched.
    """

    def __init__(self) -> None:
        self.state = DialogState.CLOSED
        self.target: T | None = None
        self.draft = ""

    @property
    def is_open(self) -> bool:
        return self.state in (DialogState.EDITING, DialogState.SUBMITTING)

    def open(self, target: T, draft: str = "") -> None:
        self.state = DialogState.EDITING
        self.target = target
        self.draft = draft

    def close(self) -> None:
        self.state = DialogState.CLOSED
        self.target = None
        self.draft = ""

    @contextlib.asynccontextmanager
    async def submitting(self) -> AsyncIterator[T]:
        """Hold the ``submitting`` state for the duration of a save."""
        if self.state is not DialogState.EDITING or self.target is None:
            raise ValidationFailed("Dialog is not open for editing")

        self.state = DialogState.SUBMITTING
        try:
            yield self.target
        except BaseException:
            self.state = DialogState.EDITING
            raise
        self.state = DialogState.CLOSED_ON_SUCCESS
        self.target = None
        self.draft = ""
