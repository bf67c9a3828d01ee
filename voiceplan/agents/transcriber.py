"""
Transcription Adapter.

Turns a recorded audio clip into plain text with one multimodal model call.
"""

from .llm_config import ModelInvoker
from voiceplan.schemas.audio import AudioPayload
from voiceplan.utils.exceptions import TranscriptionError
import logging

logger = logging.getLogger(__name__)

TRANSCRIPTION_PROMPT = (
    "Transcribe the following audio recording to text. "
    "Return only the words that were spoken, without commentary."
)


class TranscriptionAdapter:
    """Converts a base64 audio data URI to a transcription string."""

    def __init__(self, llm: ModelInvoker):
        self.llm = llm

    async def transcribe(self, audio_data_uri: str) -> str:
        """
        Transcribe a ``data:<mimetype>;base64,<data>`` recording.

        Raises:
            AudioFormatError: If the data URI is malformed
            TranscriptionError: If the model returns no text
        """
        audio = AudioPayload.from_data_uri(audio_data_uri)
        logger.info(f"Transcribing {audio.format} audio ({len(audio.data)} base64 chars)")

        text = await self.llm.transcribe(audio, TRANSCRIPTION_PROMPT)
        text = (text or "").strip()
        if not text:
            raise TranscriptionError(
                "Transcription failed: The model did not return any output.",
                context={"mime_type": audio.mime_type},
            )

        logger.info(f"Transcription complete: {len(text)} characters")
        return text
