"""Request building and translation backends."""

from uztrans_llms.translate.base import DemoTranslator, Translator, create_translator
from uztrans_llms.translate.prompting import build_request, build_system_instruction

__all__ = [
    "Translator",
    "DemoTranslator",
    "create_translator",
    "build_request",
    "build_system_instruction",
]
