"""vocabcards - adaptive vocabulary flashcard quiz backend."""

__version__ = "0.1.0"
