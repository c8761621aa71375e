"""Persona prompt for the Milo chat widget.

The persona is maintained as a markdown document next to the website
content.  Only the part starting at the persona marker is sent to the
model, with markdown emphasis removed.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
import re

from loguru import logger

from ..config.app_config import get_app_config

PERSONA_MARKER = "You are an AI consultant"

DEFAULT_SYSTEM_PROMPT = (
    "You are Milo, an AI consultant for Archpoint Labs, a cutting-edge consulting firm "
    "specializing in AI transformation. You help businesses understand how AI can solve "
    "their challenges through strategy, implementation, automation, and training. Be "
    "professional, helpful, and solution-oriented while guiding potential clients toward "
    "deeper engagement with our services."
)

_HEADING = re.compile(r"#+\s*")


def extract_persona(document: str) -> str:
    """Return the persona text from a markdown prompt document.

    Everything before the first line starting with :data:`PERSONA_MARKER`
    is dropped; if no line matches the whole document is kept.
    """
    lines = document.split("\n")
    start = next(
        (index for index, line in enumerate(lines) if line.startswith(PERSONA_MARKER)),
        0,
    )
    text = "\n".join(lines[start:])
    text = _HEADING.sub("", text)
    return text.replace("**", "").strip()


def resolve_system_prompt(path: str | Path | None = None) -> str:
    """Load the persona prompt, falling back to the built-in default.

    Never raises: a missing, unreadable or empty document yields
    :data:`DEFAULT_SYSTEM_PROMPT` and a warning in the log.
    """
    prompt_path = path
    try:
        prompt_path = Path(path) if path is not None else Path(get_app_config().system_prompt_path)
        persona = extract_persona(prompt_path.read_text(encoding="utf-8"))
    except Exception as exc:
        logger.warning("Could not load system prompt from {} ({}), using default", prompt_path, exc)
        return DEFAULT_SYSTEM_PROMPT
    if not persona:
        logger.warning("System prompt at {} is empty, using default", prompt_path)
        return DEFAULT_SYSTEM_PROMPT
    return persona


@lru_cache()
def get_system_prompt() -> str:
    """Return the persona prompt, read once per process."""
    return resolve_system_prompt()
