"""
UzTrans-LLMs: Uzbek to Russian/English translation through hosted LLMs

Sends Uzbek text to a large-language-model API in the chosen tone and
keeps a local, bounded history of the results.

Core components:
1. Prompt builder (uztrans_llms.translate.prompting)
2. Translation backends (uztrans_llms.translate)
3. History store over pluggable key-value storage
4. Orchestrator state machine (uztrans_llms.pipeline)

License: MIT
"""

__version__ = "0.1.0"

from uztrans_llms.models import TargetLanguage, Tone, TranslationRecord, TranslationRequest
from uztrans_llms.history import HistoryStore
from uztrans_llms.pipeline import AppStatus, TranslationOrchestrator

__all__ = [
    "TargetLanguage",
    "Tone",
    "TranslationRecord",
    "TranslationRequest",
    "HistoryStore",
    "AppStatus",
    "TranslationOrchestrator",
]
