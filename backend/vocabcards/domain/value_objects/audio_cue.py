"""Audio cue value object."""

from dataclasses import dataclass

from vocabcards.domain.constants import DEFAULT_TTS_LANG, DEFAULT_TTS_RATE


@dataclass(frozen=True)
class AudioCue:
    """Request to speak a piece of text.

    The engine never calls a speech API itself; it returns cues and the
    surrounding application plays them.

    Attributes:
        text: Text to speak
        lang: BCP-47 language tag for the utterance
        rate: Speaking rate multiplier
        voice: Preferred voice URI, if the user picked one
    """

    text: str
    lang: str = DEFAULT_TTS_LANG
    rate: float = DEFAULT_TTS_RATE
    voice: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "text": self.text,
            "lang": self.lang,
            "rate": self.rate,
            "voice": self.voice,
        }


@dataclass(frozen=True)
class VoiceSettings:
    """Speech settings applied to every cue a session emits."""

    lang: str = DEFAULT_TTS_LANG
    rate: float = DEFAULT_TTS_RATE
    voice: str | None = None

    def cue(self, text: str) -> AudioCue:
        """Build a cue for text using these settings."""
        return AudioCue(text=text, lang=self.lang, rate=self.rate, voice=self.voice)
