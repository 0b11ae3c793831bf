"""Branch steps — actions and the Return control marker."""

from __future__ import annotations

from dataclasses import dataclass


class Action:
    """An executable step of a branch."""

    def execute(self) -> None:
        """Run the action.  Execution is not implemented; this does nothing."""


@dataclass(frozen=True)
class TextAction(Action):
    """Display *text*."""

    text: str


@dataclass(frozen=True)
class JumpAction(Action):
    """Transfer control to the branch named *label*."""

    label: str


@dataclass(frozen=True)
class Return:
    """Marks the end of a branch."""
