"""
Background music: track selection by mood and voiceover ducking driven by the
audio timeline.

The music bed is lowered while a segment's voiceover plays (attack), held down
until the voiceover ends, then brought back during the pacing gap (release).
Volumes are linear multipliers in [0, 1].
"""

import glob
import logging
import math
import os
from dataclasses import dataclass
from itertools import groupby

from pydub import AudioSegment

from .io_ffmpeg import mix_tracks
from .models import AudioTimeline
from .pacing import RandomFn
from .seeded_random import create_seeded_random
from .timeline import get_segment_at_frame

logger = logging.getLogger("narrator")

MUSIC_MOODS = ("upbeat", "dramatic", "chill", "none")
MUSIC_EXTENSIONS = (".mp3", ".wav", ".m4a", ".ogg")

# source tracks are assumed to be around this tempo
SOURCE_BPM = 120.0
MIN_PLAYBACK_RATE = 0.85
MAX_PLAYBACK_RATE = 1.15


@dataclass(frozen=True)
class SidechainConfig:
    duck_depth: float  # fraction of base volume kept under voiceover
    attack_frames: int
    release_frames: int
    base_volume: float


MOOD_SIDECHAIN: dict[str, SidechainConfig] = {
    "energetic": SidechainConfig(0.25, 3, 8, 0.35),
    "casual": SidechainConfig(0.20, 4, 10, 0.30),
    "professional": SidechainConfig(0.15, 5, 12, 0.25),
    "calm": SidechainConfig(0.12, 6, 15, 0.20),
}

MOOD_BPM: dict[str, int] = {
    "energetic": 140,
    "casual": 110,
    "professional": 100,
    "calm": 80,
}


def get_sidechain_config(visual_mood: str) -> SidechainConfig:
    """Ducking settings for a visual mood; unknown moods duck like ``professional``."""
    return MOOD_SIDECHAIN.get(visual_mood, MOOD_SIDECHAIN["professional"])


def get_target_bpm(visual_mood: str) -> int:
    return MOOD_BPM.get(visual_mood, MOOD_BPM["professional"])


def calculate_playback_rate(source_bpm: float, visual_mood: str) -> float:
    """Rate nudging the track toward the mood's tempo, clamped to +/-15%."""
    ratio = get_target_bpm(visual_mood) / source_bpm
    return max(MIN_PLAYBACK_RATE, min(MAX_PLAYBACK_RATE, ratio))


def select_background_music(
    music_mood: str, music_dir: str, random: RandomFn | None = None, project_id: str = ""
) -> str | None:
    """
    Pick a track named ``<mood>-*`` from ``music_dir``.
    Returns None for mood ``none`` or when no track matches.
    """
    if not music_mood or music_mood == "none" or not music_dir:
        return None
    pattern = os.path.join(glob.escape(music_dir), f"{music_mood}-*")
    tracks = sorted(p for p in glob.glob(pattern) if p.lower().endswith(MUSIC_EXTENSIONS))
    if not tracks:
        logger.warning(f"No '{music_mood}' tracks found in {music_dir}")
        return None
    if random is None:
        random = create_seeded_random(f"{project_id}:music")
    selected = tracks[min(int(random() * len(tracks)), len(tracks) - 1)]
    logger.info(f"Background music selected: {selected} (mood {music_mood})")
    return selected


def calculate_music_volume(
    frame: int,
    voiceover_active: bool,
    voiceover_start_frame: int,
    voiceover_end_frame: int,
    visual_mood: str,
) -> float:
    """Music volume at ``frame`` relative to the current voiceover window."""
    config = get_sidechain_config(visual_mood)
    ducked = config.base_volume * config.duck_depth

    if voiceover_active:
        progress = min(1.0, (frame - voiceover_start_frame) / config.attack_frames)
        return config.base_volume + (ducked - config.base_volume) * progress

    since_end = frame - voiceover_end_frame
    if 0 <= since_end < config.release_frames:
        progress = since_end / config.release_frames
        return ducked + (config.base_volume - ducked) * progress

    return config.base_volume


def music_volume_at(timeline: AudioTimeline, frame: int, visual_mood: str) -> float:
    """Volume at ``frame``: the voiceover window is the segment's audio part."""
    segment = get_segment_at_frame(timeline, frame)
    if segment is None:
        return get_sidechain_config(visual_mood).base_volume
    voiceover_end = segment.start_frame + segment.audio_frames
    return calculate_music_volume(
        frame,
        frame < voiceover_end,
        segment.start_frame,
        voiceover_end,
        visual_mood,
    )


def music_envelope(timeline: AudioTimeline, visual_mood: str) -> list[float]:
    """One volume per frame over the whole timeline."""
    return [music_volume_at(timeline, f, visual_mood) for f in range(timeline.total_frames)]


def _volume_to_db(volume: float) -> float:
    if volume <= 0:
        return -120.0
    return 20 * math.log10(volume)


def duck_music(
    music: AudioSegment, timeline: AudioTimeline, fps: float, visual_mood: str
) -> AudioSegment:
    """Loop ``music`` to the timeline length and apply the ducking envelope."""
    total_ms = int(round(timeline.total_frames * 1000 / fps))
    if total_ms <= 0 or len(music) == 0:
        return AudioSegment.silent(duration=max(0, total_ms))
    if len(music) < total_ms:
        music = music * math.ceil(total_ms / len(music))
    music = music[:total_ms]

    # consecutive frames at the same volume share one gain change
    envelope = music_envelope(timeline, visual_mood)
    out = AudioSegment.empty()
    frame = 0
    for volume, group in groupby(envelope, key=lambda v: round(v, 4)):
        count = sum(1 for _ in group)
        start_ms = int(round(frame * 1000 / fps))
        end_ms = int(round((frame + count) * 1000 / fps))
        out += music[start_ms:end_ms].apply_gain(_volume_to_db(volume))
        frame += count
    return out


def change_playback_rate(music: AudioSegment, rate: float) -> AudioSegment:
    """Resample so the track plays ``rate`` times faster (tempo and pitch move together)."""
    if rate == 1.0:
        return music
    shifted = music._spawn(music.raw_data, overrides={"frame_rate": int(music.frame_rate * rate)})
    return shifted.set_frame_rate(music.frame_rate)


def add_background_music(
    voice_path: str,
    track_path: str,
    timeline: AudioTimeline,
    fps: float,
    visual_mood: str,
    out_path: str | None = None,
) -> str:
    """Mix a ducked music bed under the merged voiceover and write it back as WAV."""
    voice = AudioSegment.from_file(voice_path)
    music = AudioSegment.from_file(track_path)
    music = change_playback_rate(music, calculate_playback_rate(SOURCE_BPM, visual_mood))
    bed = duck_music(music, timeline, fps, visual_mood)
    out_path = out_path or voice_path
    mix_tracks(voice, bed).export(out_path, format="wav")
    logger.info(f"Background music mixed ({os.path.basename(track_path)}) -> {out_path}")
    return out_path
