"""Move feedback classification and sinks."""

from __future__ import annotations

from abc import ABC, abstractmethod

from repertoire.board.interfaces import MoveOutcome
from repertoire.core.enums import MoveSound


def classify_move(outcome: MoveOutcome) -> MoveSound:
    """Sound for an applied move: check > promote > castle > capture > move."""
    if outcome.is_check:
        return MoveSound.CHECK
    if outcome.is_promotion:
        return MoveSound.PROMOTE
    if outcome.is_castle:
        return MoveSound.CASTLE
    if outcome.is_capture:
        return MoveSound.CAPTURE
    return MoveSound.MOVE


class IFeedbackSink(ABC):
    """Receives feedback cues (a UI plays sounds or flashes the board)."""

    @abstractmethod
    def play(self, sound: MoveSound) -> None: ...


class NullFeedback(IFeedbackSink):
    def play(self, sound: MoveSound) -> None:
        pass


class RecordingFeedback(IFeedbackSink):
    """Keeps every cue in order; handy for headless runs and tests."""

    def __init__(self) -> None:
        self.sounds: list[MoveSound] = []

    def play(self, sound: MoveSound) -> None:
        self.sounds.append(sound)

    def clear(self) -> None:
        self.sounds.clear()
