"""
Text-to-speech synthesis with OpenAI and ElevenLabs, plus a silent placeholder
for providers without an integration.
"""

import glob
import hashlib
import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path

import httpx
from openai import OpenAI
from pydub import AudioSegment
from tqdm import tqdm

from .io_ffmpeg import ensure_dir
from .models import ScriptSegment, VoicePersona

logger = logging.getLogger("narrator")

SynthFunc = Callable[[str, str], None]

PLACEHOLDER_WORDS_PER_MINUTE = 150
DEFAULT_VOICE = VoicePersona(provider="openai", voice_id="alloy")


def _hash_for_cache(provider: str, model: str, voice: str, text: str) -> str:
    """Generate cache hash for TTS audio."""
    key = f"{provider}|{model}|{voice}|{text}".encode()
    return hashlib.sha1(key).hexdigest()[:12]


def estimate_speech_seconds(text: str) -> float:
    words = len(text.split())
    return words / PLACEHOLDER_WORDS_PER_MINUTE * 60.0


def write_silence(out_path: str, seconds: float) -> None:
    AudioSegment.silent(duration=int(max(0.0, seconds) * 1000)).export(out_path, format="wav")


def tts_speak_openai(
    client: OpenAI,
    text: str,
    model: str,
    voice: str,
    out_path: str,
    instructions: str | None = None,
) -> None:
    """Synthesize speech using OpenAI TTS."""
    if client is None:
        raise RuntimeError("OpenAI client is not initialized (missing OPENAI_API_KEY)")

    kwargs = {"instructions": instructions} if instructions else {}
    with client.audio.speech.with_streaming_response.create(
        model=model,
        voice=voice,
        input=text,
        response_format="wav",
        **kwargs,
    ) as resp:
        resp.stream_to_file(out_path)


def elevenlabs_tts_speak(
    api_key: str, voice_id: str, text: str, out_path: str, model_id: str = "eleven_multilingual_v2"
) -> None:
    """Synthesize speech using ElevenLabs TTS."""
    if not api_key:
        raise RuntimeError("ELEVENLABS_API_KEY is not set.")
    if not voice_id:
        raise RuntimeError("ElevenLabs voice_id is required (manifest voice or ELEVENLABS_VOICE_ID).")

    url = f"https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"
    headers = {
        "xi-api-key": api_key,
        "accept": "audio/mpeg",
        "Content-Type": "application/json",
        "User-Agent": "narrated-video-pipeline/0.1",
    }
    payload = {
        "text": text,
        "model_id": model_id,
        "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
    }

    with httpx.Client(follow_redirects=True, timeout=60.0) as client:
        r = client.post(url, json=payload, headers=headers)
        ctype = r.headers.get("content-type", "")
        if r.status_code != 200 or not ctype.startswith(("audio/", "application/octet-stream")):
            raise RuntimeError(f"ElevenLabs TTS failed: {r.status_code} {r.text[:300]}")
        tmp_mp3 = out_path.replace(".wav", ".mp3")
        with open(tmp_mp3, "wb") as f:
            f.write(r.content)
    AudioSegment.from_file(tmp_mp3, format="mp3").export(out_path, format="wav")
    try:
        Path(tmp_mp3).unlink()
    except OSError:
        pass


def placeholder_speak(text: str, out_path: str) -> None:
    """Silence as long as the text would take to read aloud."""
    write_silence(out_path, estimate_speech_seconds(text))


def make_synthesizer(
    voice: VoicePersona,
    *,
    openai_client: OpenAI | None = None,
    openai_model: str = "gpt-4o-mini-tts",
    instructions: str | None = None,
    elevenlabs_key: str | None = None,
    elevenlabs_model_id: str = "eleven_multilingual_v2",
) -> tuple[SynthFunc, tuple[str, str, str]]:
    """Pick a synthesis function for ``voice`` and return it with its cache signature."""
    if voice.provider == "openai":
        if openai_client is None:
            raise RuntimeError("OPENAI_API_KEY is not set. Put it in .env or environment.")

        def _synth(text: str, out_path: str) -> None:
            tts_speak_openai(openai_client, text, openai_model, voice.voice_id, out_path, instructions)

        return _synth, ("openai", openai_model, voice.voice_id)

    if voice.provider == "elevenlabs":
        key = elevenlabs_key or os.getenv("ELEVENLABS_API_KEY")
        voice_id = voice.voice_id or os.getenv("ELEVENLABS_VOICE_ID", "")
        if not key:
            raise RuntimeError("ELEVENLABS_API_KEY is not set. Put it in .env or environment.")

        def _synth(text: str, out_path: str) -> None:
            elevenlabs_tts_speak(key, voice_id, text, out_path, model_id=elevenlabs_model_id)

        return _synth, ("elevenlabs", elevenlabs_model_id, voice_id)

    logger.warning("%s TTS not integrated, generating placeholder audio", voice.provider)
    return placeholder_speak, ("placeholder", "silence", voice.voice_id)


def segment_audio_path(out_dir: str, project_id: str, index: int, sig: str) -> str:
    return os.path.join(out_dir, f"{project_id}_segment_{index:03d}_{sig}.wav")


def find_cached_clip(out_dir: str, project_id: str, index: int) -> str | None:
    """Most recent non-empty clip synthesized for segment ``index``, with any voice signature."""
    pattern = os.path.join(glob.escape(out_dir), f"{glob.escape(project_id)}_segment_{index:03d}_*.wav")
    cands = [p for p in glob.glob(pattern) if os.path.getsize(p) > 0]
    if not cands:
        return None
    return max(cands, key=os.path.getmtime)


def synthesize_script(
    script: Sequence[ScriptSegment],
    synth_func: SynthFunc,
    out_dir: str,
    project_id: str,
    cache_sig: tuple[str, str, str] | None = None,
) -> list[tuple[str, ScriptSegment]]:
    """
    Synthesize every segment's voiceover to its own WAV, in script order.
    Cached clips are reused; a failed segment is rendered as estimated-length silence.
    """
    ensure_dir(out_dir)
    provider, model, voice = cache_sig or ("prov", "model", "voice")
    out: list[tuple[str, ScriptSegment]] = []
    failures: list[int] = []

    for i, seg in enumerate(tqdm(script, desc="TTS segments")):
        sig = _hash_for_cache(provider, model, voice, seg.voiceover)
        path = segment_audio_path(out_dir, project_id, i, sig)
        if os.path.exists(path) and os.path.getsize(path) > 0:
            logger.debug("Reusing cached clip %s", path)
        else:
            try:
                synth_func(seg.voiceover, path)
            except Exception as e:
                logger.error(f"TTS failed for segment {i}: {e}")
                failures.append(i)
                write_silence(path, seg.estimated_duration_seconds)
        out.append((path, seg))

    if failures:
        logger.warning(
            f"TTS completed with {len(failures)} failed segments (rendered as silence): {failures}"
        )
    return out
