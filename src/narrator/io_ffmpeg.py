"""
Audio and video processing utilities using ffmpeg/ffprobe.
"""

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from pydub import AudioSegment

logger = logging.getLogger("narrator")


@dataclass(frozen=True)
class VideoInfo:
    width: int
    height: int
    duration: float  # seconds


def run(cmd: list[str], *, check: bool = True) -> str:
    """Run a shell command and return stdout."""
    logger.debug("Running: %s", " ".join(map(str, cmd)))
    proc = subprocess.run(
        cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True, check=False
    )
    if proc.returncode != 0 and check:
        logger.error("Command failed with code %d: %s", proc.returncode, proc.stdout)
        msg = f"Command failed with code {proc.returncode}"
        raise RuntimeError(msg)
    return proc.stdout


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    if path:
        Path(path).mkdir(parents=True, exist_ok=True)


def probe_duration_seconds(path: str) -> float:
    """Duration of a media file in seconds. Raises RuntimeError if it cannot be read."""
    out = run(
        [
            "ffprobe",
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            path,
        ]
    )
    try:
        seconds = float(out.strip())
    except ValueError:
        raise RuntimeError(f"ffprobe returned no duration for {path}: {out.strip()!r}") from None
    if seconds <= 0:
        raise RuntimeError(f"Non-positive duration {seconds} for {path}")
    return seconds


def get_video_info(path: str) -> VideoInfo:
    """Width, height and duration of the first video stream."""
    out = run(
        [
            "ffprobe",
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height:format=duration",
            "-of",
            "json",
            path,
        ]
    )
    data = json.loads(out or "{}")
    streams = data.get("streams") or []
    if not streams:
        raise RuntimeError(f"No video stream found in {path}")
    stream = streams[0]
    try:
        duration = float((data.get("format") or {}).get("duration", 0.0))
    except (TypeError, ValueError):
        duration = 0.0
    return VideoInfo(
        width=int(stream.get("width") or 1920),
        height=int(stream.get("height") or 1080),
        duration=duration,
    )


def concat_audio_files(files: list[str], out_path: str) -> None:
    """Join clips with the ffmpeg concat demuxer, falling back to pydub decoding."""
    ensure_dir(str(Path(out_path).parent))
    list_path = str(Path(out_path).with_suffix("")) + "_list.txt"
    content = "\n".join(f"file '{Path(f).resolve()}'" for f in files)
    Path(list_path).write_text(content, encoding="utf-8")
    try:
        run(["ffmpeg", "-y", "-f", "concat", "-safe", "0", "-i", list_path, "-c", "copy", out_path])
        return
    except RuntimeError as e:
        logger.warning("ffmpeg concat failed (%s), concatenating with pydub", e)

    merged = AudioSegment.silent(duration=0)
    for f in files:
        try:
            merged += AudioSegment.from_file(f)
        except Exception as e:
            logger.warning("Skipping unreadable clip %s: %s", f, e)
    fmt = Path(out_path).suffix.lstrip(".") or "mp3"
    merged.export(out_path, format=fmt)


def mix_tracks(
    main: AudioSegment,
    background: AudioSegment | None = None,
    main_db: float = 0.0,
    background_db: float = 0.0,
) -> AudioSegment:
    """Overlay ``background`` under ``main``, padding the shorter one with silence."""
    if background is None:
        return main
    dur = max(len(main), len(background))
    main_pad = main + AudioSegment.silent(duration=dur - len(main)) if len(main) < dur else main
    bg_pad = (
        background + AudioSegment.silent(duration=dur - len(background))
        if len(background) < dur
        else background
    )
    return main_pad.apply_gain(main_db).overlay(bg_pad.apply_gain(background_db))


def extract_clip(
    input_video: str,
    output_video: str,
    start_seconds: float,
    end_seconds: float,
    video_filter: str,
    crf: int = 20,
) -> None:
    """Cut ``[start, end)`` out of a video, re-encoding through ``video_filter``."""
    ensure_dir(str(Path(output_video).parent))
    cmd = [
        "ffmpeg",
        "-y",
        "-ss",
        f"{start_seconds:.3f}",
        "-i",
        input_video,
        "-t",
        f"{max(0.0, end_seconds - start_seconds):.3f}",
        "-vf",
        video_filter,
        "-c:v",
        "libx264",
        "-crf",
        str(crf),
        "-preset",
        "fast",
        "-c:a",
        "aac",
        "-b:a",
        "128k",
        output_video,
    ]
    run(cmd)


def capture_representative_frame(
    input_video: str, out_png: str, width: int = 1280, height: int = 720
) -> None:
    """Grab the most representative frame (ffmpeg ``thumbnail`` filter), scaled and cropped."""
    ensure_dir(str(Path(out_png).parent))
    vf = (
        f"thumbnail,scale={width}:{height}:force_original_aspect_ratio=increase,"
        f"crop={width}:{height}"
    )
    run(["ffmpeg", "-y", "-i", input_video, "-vf", vf, "-frames:v", "1", out_png])
