from gtts import gTTS, gTTSError
import io
import logging

from ..core.config import settings

logger = logging.getLogger(__name__)

def generate_pronunciation_audio(text: str, lang: str = settings.TTS_LANG, slow: bool = False) -> bytes:
    """
    Reads a practice sentence aloud so the learner can listen before typing.
    Returns the audio content as bytes (MP3 format).
    """
    if not text or not text.strip():
        raise ValueError("Text to pronounce must not be empty.")

    buffer = io.BytesIO()
    try:
        tts = gTTS(text=text.strip(), lang=lang, slow=slow)
        tts.write_to_fp(buffer)
    except gTTSError as e:
        # Network / upstream failure, not the caller's fault
        logger.error(f"Error generating TTS for '{text}': {e}")
        raise RuntimeError(f"Text-to-speech service unavailable: {e}") from e

    audio_bytes = buffer.getvalue()
    logger.info(f"Generated pronunciation audio for '{text}' ({len(audio_bytes)} bytes).")
    return audio_bytes
