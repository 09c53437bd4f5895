"""Buffer for speech-to-text transcripts awaiting submission."""

from dataclasses import dataclass


@dataclass
class DictationBuffer:
    """Holds the latest transcript until the user explicitly submits it."""

    text: str = ""
    is_final: bool = False

    def on_transcript(self, text: str) -> None:
        """Replace the buffer with an interim transcript."""
        self.text = text
        self.is_final = False

    def on_final(self, text: str) -> None:
        """Record the transcript at an utterance boundary without submitting."""
        self.text = text
        self.is_final = True

    def reset(self) -> None:
        """Discard any buffered transcript."""
        self.text = ""
        self.is_final = False
