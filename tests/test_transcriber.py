import pytest

from voiceplan.agents.transcriber import TranscriptionAdapter
from voiceplan.utils.exceptions import AudioFormatError, TranscriptionError

from tests.conftest import audio_uri


@pytest.mark.asyncio
async def test_transcribe_returns_stripped_text(llm):
    llm.queue_transcription("  Buy milk and eggs.\n")

    text = await TranscriptionAdapter(llm).transcribe(audio_uri(mime="audio/wav"))

    assert text == "Buy milk and eggs."
    assert llm.calls[0]["audio"].mime_type == "audio/wav"


@pytest.mark.asyncio
@pytest.mark.parametrize("output", [None, "", "   "])
async def test_empty_transcription_fails(llm, output):
    llm.queue_transcription(output)

    with pytest.raises(TranscriptionError):
        await TranscriptionAdapter(llm).transcribe(audio_uri())


@pytest.mark.asyncio
async def test_malformed_audio_never_reaches_model(llm):
    with pytest.raises(AudioFormatError):
        await TranscriptionAdapter(llm).transcribe("data:audio/webm;base64,***")

    assert llm.calls == []
