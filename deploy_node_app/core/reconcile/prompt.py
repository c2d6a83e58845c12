"""
Prompt gateway — asks a human whether an existing file may be replaced.

The reconciler depends only on :class:`PromptGateway`.  The CLI wires in
:class:`ClickPromptGateway`; tests use :class:`ScriptedPromptGateway`.

Calling ``confirm`` is the one place a run waits on a person.  There is
no timeout: a prompt nobody answers blocks the process.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from enum import Enum

import click

logger = logging.getLogger(__name__)


class ConfirmChoice(str, Enum):
    """Answer to "would you like to update this file?"."""

    ACCEPT = "accept"
    REJECT = "reject"
    SHOW_DIFF = "show_diff"


class PromptGateway(ABC):
    """Tri-state confirmation for overwriting an existing file."""

    @abstractmethod
    def confirm(self, subject_path: str) -> ConfirmChoice:
        """Block until the user accepts, rejects, or asks for a diff."""


# Key → choice, in display order
_KEYS: dict[str, ConfirmChoice] = {
    "y": ConfirmChoice.ACCEPT,
    "n": ConfirmChoice.REJECT,
    "d": ConfirmChoice.SHOW_DIFF,
}


class ClickPromptGateway(PromptGateway):
    """Interactive gateway on the terminal via ``click.prompt``.

    ``y`` updates the file, ``n`` leaves it alone, ``d`` shows a diff.
    """

    def __init__(self, *, err: bool = True) -> None:
        self._err = err

    def confirm(self, subject_path: str) -> ConfirmChoice:
        key = click.prompt(
            f'Would you like to update "{subject_path}"? (y = yes, n = no, d = show diff)',
            type=click.Choice(list(_KEYS), case_sensitive=False),
            default="y",
            show_choices=True,
            err=self._err,
        )
        choice = _KEYS[key.lower()]
        logger.debug("Prompt for %s answered: %s", subject_path, choice.value)
        return choice


class ScriptedPromptGateway(PromptGateway):
    """Gateway that replays a fixed sequence of answers.

    Records every path it was asked about in ``asked``.  Running out of
    answers is an error: a scripted session must never fall through to a
    silent default.
    """

    def __init__(self, answers: Iterable[ConfirmChoice] = ()) -> None:
        self._answers = list(answers)
        self.asked: list[str] = []

    def confirm(self, subject_path: str) -> ConfirmChoice:
        self.asked.append(subject_path)
        if not self._answers:
            raise RuntimeError(f"No scripted answer left for {subject_path!r}")
        return self._answers.pop(0)
