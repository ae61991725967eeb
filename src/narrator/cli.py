"""
Command-line interface for the narrated video pipeline.
"""

import argparse
import dataclasses
import logging
import os
import pathlib
import sys
import time

from dotenv import load_dotenv
from openai import OpenAI

from .io_ffmpeg import concat_audio_files, ensure_dir, run
from .manifest import load_manifest, write_updated_manifest
from .models import ScriptSegment
from .music import add_background_music, select_background_music
from .pacing import DEFAULT_PACING
from .render_profile import (
    RENDER_PROFILES,
    estimate_render_time,
    profile_summary,
    select_render_profile,
)
from .renderer import build_input_props, render_composition, select_theme
from .report import OutputPaths, build_render_report, write_json
from .shorts import extract_shorts
from .subtitles import write_timeline_srt
from .thumbnail import generate_thumbnail
from .timeline import calculate_timeline
from .timeline_async import calculate_timeline_concurrent
from .tts import DEFAULT_VOICE, find_cached_clip, make_synthesizer, synthesize_script

logger = logging.getLogger("narrator")


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    ap = argparse.ArgumentParser(description="Narrated video pipeline (audio-driven pacing)")

    # Phase control
    ap.add_argument(
        "--stage",
        choices=["timeline", "render"],
        default="render",
        help="timeline: TTS + timeline JSON + SRT; render: full video, Shorts and thumbnail",
    )

    # IO
    ap.add_argument("--manifest", required=True, help="Project manifest JSON")
    ap.add_argument("--output-dir", default="output")

    # Render profile
    ap.add_argument("--profile", choices=sorted(RENDER_PROFILES), default=None,
                    help="Render profile (default: from $RENDER_ENV, else preview)")
    ap.add_argument("--fps", type=int, default=None, help="Override the profile frame rate")
    ap.add_argument("--auto-preview", action="store_true", help="Open the main video when done")

    # Pacing
    ap.add_argument("--no-randomize", action="store_true",
                    help="Disable per-video randomization (always base pacing)")
    ap.add_argument("--no-retention", action="store_true",
                    help="Do not record retention metadata on the timeline")
    ap.add_argument("--async-probe", action="store_true",
                    help="Probe audio durations concurrently")

    # TTS
    ap.add_argument("--tts-provider", choices=["openai", "elevenlabs", "placeholder"], default=None,
                    help="Override the manifest voice provider")
    ap.add_argument("--tts-model", default="gpt-4o-mini-tts", help="Used when provider=openai")
    ap.add_argument(
        "--voice-instructions",
        default=os.getenv("OPENAI_TTS_INSTRUCTIONS"),
        help="Optional TTS style instructions for OpenAI (not read aloud)",
    )
    ap.add_argument("--elevenlabs-model-id", default="eleven_multilingual_v2")
    ap.add_argument(
        "--no-tts",
        action="store_true",
        help="Do not synthesize; time segments from cached clips or script estimates",
    )

    # Background music
    ap.add_argument("--music-dir", default=os.getenv("BACKGROUND_MUSIC_DIR"),
                    help="Directory of <mood>-*.mp3 tracks (mood from the manifest)")
    ap.add_argument("--music-track", default=None, help="Explicit background track (overrides mood)")
    ap.add_argument("--no-music", action="store_true", help="Do not mix background music")

    # Composition
    ap.add_argument("--remotion-entry", default="src/compositions/index.tsx")
    ap.add_argument("--composition-id", default="MainVideo")

    # Logging
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return ap.parse_args(argv)


def auto_open_preview(video_path: str) -> None:
    if sys.platform == "darwin":
        cmd = ["open", video_path]
    elif sys.platform == "win32":
        cmd = ["cmd", "/c", "start", "", video_path]
    else:
        cmd = ["xdg-open", video_path]
    try:
        run(cmd, check=False)
        logger.info(f"Preview opened: {video_path}")
    except OSError as e:
        logger.warning(f"Could not auto-open preview: {e}")


def _synthesize(args: argparse.Namespace, manifest, paths: OutputPaths) -> list[tuple[str, ScriptSegment]]:
    engine = manifest.content_engine
    if args.no_tts:
        # timeline falls back to script estimates for clips that do not exist
        out: list[tuple[str, ScriptSegment]] = []
        for i, seg in enumerate(engine.script):
            cached = find_cached_clip(paths.segments_dir, manifest.project_id, i)
            if cached is None:
                cached = os.path.join(paths.segments_dir, f"{manifest.project_id}_segment_{i:03d}.wav")
            out.append((cached, seg))
        reused = sum(os.path.exists(p) for p, _ in out)
        logger.info(f"--no-tts: reusing {reused}/{len(out)} cached clips")
        return out

    voice = engine.voice or DEFAULT_VOICE
    if args.tts_provider:
        voice = dataclasses.replace(voice, provider=args.tts_provider)

    client = None
    if voice.provider == "openai":
        openai_key = os.getenv("OPENAI_API_KEY")
        if not openai_key:
            raise RuntimeError("OPENAI_API_KEY is not set. Put it in .env or environment.")
        client = OpenAI(api_key=openai_key)

    synth, cache_sig = make_synthesizer(
        voice,
        openai_client=client,
        openai_model=args.tts_model,
        instructions=args.voice_instructions,
        elevenlabs_key=os.getenv("ELEVENLABS_API_KEY"),
        elevenlabs_model_id=args.elevenlabs_model_id,
    )
    return synthesize_script(engine.script, synth, paths.segments_dir, manifest.project_id, cache_sig)


def _mix_background_music(
    args: argparse.Namespace, engine, timeline, fps: int, audio_path: str, project_id: str
) -> None:
    """Duck the manifest mood's track (or --music-track) under the merged voiceover."""
    if args.no_music:
        return
    track = args.music_track or select_background_music(
        engine.music_mood, args.music_dir, project_id=project_id
    )
    if not track:
        return
    if timeline is None:
        logger.warning("Background music needs the audio timeline for ducking; skipped")
        return
    add_background_music(audio_path, track, timeline, fps, engine.mood)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    # Look for .env in the project root (parent of src directory)
    project_root = pathlib.Path(__file__).parent.parent.parent
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()

    args = parse_args(argv)
    setup_logging(args.verbose)

    start = time.monotonic()
    manifest = load_manifest(args.manifest)
    engine = manifest.content_engine
    project_id = manifest.project_id

    profile = select_render_profile(args.profile)
    if args.fps:
        profile = dataclasses.replace(profile, fps=args.fps)
    estimated_time = estimate_render_time(engine.estimated_duration_seconds, profile)
    logger.info(f"Render profile: {profile_summary(profile)} (estimated {estimated_time:.0f}s)")

    paths = OutputPaths(args.output_dir, project_id)
    ensure_dir(args.output_dir)

    if args.no_tts and args.stage == "render":
        raise RuntimeError("--no-tts cannot be used with stage 'render' (no audio to merge).")

    audio_segments = _synthesize(args, manifest, paths)

    tables = DEFAULT_PACING
    if args.no_randomize:
        tables = dataclasses.replace(tables, randomization_enabled=False)

    timeline = None
    if args.stage == "timeline" or not profile.skip_audio_sync:
        calculate = calculate_timeline_concurrent if args.async_probe else calculate_timeline
        timeline = calculate(
            audio_segments,
            profile.fps,
            engine,
            project_id=project_id,
            tables=tables,
            track_retention=not args.no_retention,
        )
        stats = timeline.pacing_stats
        logger.info(
            f"Pacing stats: total gap {stats.total_gap_seconds:.2f}s, "
            f"average gap {stats.average_gap_seconds:.2f}s ({stats.content_type})"
        )
        write_json(timeline.to_dict(), paths.timeline)
        write_timeline_srt(timeline, profile.fps, paths.subtitles)

    if args.stage == "timeline":
        logger.info("Stage 'timeline' complete. Review the timeline JSON, then run stage 'render'.")
        return

    concat_audio_files([p for p, _ in audio_segments], paths.audio)
    logger.info(f"Merged audio -> {paths.audio}")

    _mix_background_music(args, engine, timeline, profile.fps, paths.audio, project_id)

    theme = select_theme(engine)
    props = build_input_props(engine, paths.audio, timeline, theme, profile.fps)
    render_composition(
        args.remotion_entry, args.composition_id, props, paths.main_video, profile
    )
    logger.info(f"Main video rendered -> {paths.main_video}")

    shorts = []
    if not profile.skip_shorts:
        shorts = extract_shorts(
            paths.main_video, engine.hooks, args.output_dir, project_id, engine.vertical_crop_focus
        )
        logger.info(f"Shorts extracted: {len(shorts)}")

    thumbnail = None
    if not profile.skip_thumbnail:
        title = engine.titles[0] if engine.titles else project_id
        thumbnail = generate_thumbnail(paths.main_video, paths.thumbnail, title)

    write_updated_manifest(
        manifest,
        {
            "audio_url": paths.audio,
            "video_url": paths.main_video,
            "shorts_urls": [s.output_path for s in shorts],
            "thumbnail_url": thumbnail,
        },
        paths.manifest,
    )

    render_time = time.monotonic() - start
    report = build_render_report(
        project_id=project_id,
        profile=profile,
        render_time_seconds=render_time,
        estimated_time_seconds=estimated_time,
        timeline=timeline,
        main_video=paths.main_video,
        shorts_count=len(shorts),
        has_thumbnail=thumbnail is not None,
        audio_segments=len(engine.script),
        estimated_duration_seconds=engine.estimated_duration_seconds,
    )
    write_json(report, paths.render_report)
    logger.info(f"Done ({render_time:.1f}s) -> {paths.main_video}")

    if args.auto_preview or profile.auto_preview:
        auto_open_preview(paths.main_video)


if __name__ == "__main__":
    main()
