"""Prompt construction for Uzbek translation requests."""

from __future__ import annotations

from uztrans_llms.config import DEFAULT_TEMPERATURE
from uztrans_llms.models import TargetLanguage, Tone, TranslationRequest

SOURCE_LANGUAGE_NAME = "Uzbek"

# Style directive embedded in the instruction for each tone
TONE_DIRECTIVES = {
    Tone.NATURAL: "natural, friendly, suited for casual messaging (Telegram, WhatsApp)",
    Tone.FORMAL: "professional, respectful, suited for business correspondence",
    Tone.SLANG: "casual, youth colloquialism with informal abbreviations",
}

OUTPUT_CONSTRAINT = (
    "Return ONLY the translated text. Do not add explanations, quotes, "
    "notes, transliterations or any preamble."
)


def build_system_instruction(target: TargetLanguage, tone: Tone) -> str:
    """Build the system message for one translation.

    Example:
        >>> "Russian" in build_system_instruction(TargetLanguage.RUSSIAN, Tone.FORMAL)
        True
    """
    lines = [
        "You are an elite professional translator.",
        f"Translate the user's {SOURCE_LANGUAGE_NAME} text into {target.display_name}.",
        f"Tone: {TONE_DIRECTIVES[tone]}.",
        OUTPUT_CONSTRAINT,
    ]
    return "\n".join(lines)


def build_request(
    text: str,
    target: TargetLanguage,
    tone: Tone,
    temperature: float = DEFAULT_TEMPERATURE,
) -> TranslationRequest:
    """Assemble the request for ``text``. The caller checks that it is not blank."""
    return TranslationRequest(
        text=text,
        target=target,
        tone=tone,
        system_instruction=build_system_instruction(target, tone),
        temperature=temperature,
    )
