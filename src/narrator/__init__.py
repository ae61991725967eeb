"""
Narrated Video Pipeline - narrated long-form videos and Shorts from a content manifest.

A pipeline for:
- Synthesizing voiceover per script segment (OpenAI or ElevenLabs TTS)
- Building frame-accurate, audio-driven timelines with retention pacing
- Rendering compositions through Remotion
- Cutting vertical Shorts from hook annotations
- Capturing a thumbnail and writing a render report
"""

__version__ = "0.1.0"
