"""Quiz mode value object: direction of prompt and answer."""

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vocabcards.domain.entities.card import Card


class QuizMode(StrEnum):
    """Direction of the exercise, fixed for a session's lifetime.

    Modes:
        NATIVE_TO_TARGET: Prompt is the native text, answer is the target text
        TARGET_TO_NATIVE: Prompt is the target text, answer is the native text
    """

    NATIVE_TO_TARGET = "native-target"
    TARGET_TO_NATIVE = "target-native"

    def prompt_for(self, card: "Card") -> str:
        """Text shown before the answer is revealed."""
        if self is QuizMode.NATIVE_TO_TARGET:
            return card.native_text
        return card.target_text

    def answer_for(self, card: "Card") -> str:
        """Text shown once the answer is revealed."""
        if self is QuizMode.NATIVE_TO_TARGET:
            return card.target_text
        return card.native_text

    @property
    def speaks_prompt(self) -> bool:
        """Whether the prompt itself is target-language text worth speaking."""
        return self is QuizMode.TARGET_TO_NATIVE
