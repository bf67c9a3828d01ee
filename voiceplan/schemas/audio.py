"""
Audio payload supplied by the capture side of the application.
"""
import base64
import binascii
import re

from pydantic import BaseModel, Field

from voiceplan.utils.exceptions import AudioFormatError

# data:<mimetype>[;param=value...];base64,<payload>
DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?P<params>(?:;[\w.+-]+=[^;,]*)*);base64,(?P<data>.*)$",
    re.DOTALL,
)


class AudioPayload(BaseModel):
    """Self-describing audio blob: MIME type plus base64 data"""
    mime_type: str = Field(..., description="MIME type of the recording (e.g. 'audio/webm')")
    data: str = Field(..., description="Base64-encoded audio bytes")

    @property
    def format(self) -> str:
        """Container format without codec parameters, e.g. 'webm' for 'audio/webm'."""
        return self.mime_type.split("/", 1)[1]

    @classmethod
    def from_data_uri(cls, data_uri: str) -> "AudioPayload":
        """
        Parse a ``data:<mimetype>;base64,<data>`` URI.

        Raises:
            AudioFormatError: If the URI is malformed, not base64, or empty
        """
        match = DATA_URI_PATTERN.match((data_uri or "").strip())
        if not match:
            raise AudioFormatError(
                "Audio must be a base64 data URI",
                context={"prefix": (data_uri or "")[:40]},
            )

        data = re.sub(r"\s+", "", match.group("data"))
        if not data:
            raise AudioFormatError("Audio data URI carries no data")
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AudioFormatError(f"Audio data is not valid base64: {e}") from e

        return cls(mime_type=match.group("mime").lower(), data=data)

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"
