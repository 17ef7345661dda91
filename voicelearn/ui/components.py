from typing import Optional

from rich.text import Text


def voice_label(listening: bool, processing: bool) -> str:
    """Button label for the voice control bar."""
    if listening:
        return "Listening… tap to stop"
    if processing:
        return "Processing…"
    return "Voice control"


def voice_control_bar(
    listening: bool,
    processing: bool,
    last_transcript: Optional[str] = None,
    hint: Optional[str] = None,
) -> Text:
    """Render the voice status line: label plus last transcript or hint."""
    if listening:
        style = "listening"
    elif processing:
        style = "processing"
    else:
        style = "idle"
    text = Text(f"[{voice_label(listening, processing)}]", style=style)
    if last_transcript:
        text.append(f"  Heard: {last_transcript}", style="transcript")
    elif hint:
        text.append(f"  {hint}", style="hint")
    return text


def screen_banner(title: str) -> Text:
    return Text(f"== {title} ==", style="banner")
