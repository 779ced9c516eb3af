"""Writing tones for message composition."""

from enum import Enum
from typing import Any


class WritingTone(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    FRIENDLY = "friendly"
    INTELLECTUAL = "intellectual"
    CONFIDENT = "confident"
    CONVERSATIONAL = "conversational"

    @classmethod
    def parse(cls, value: Any) -> "WritingTone":
        """Map free-form input to a tone; unknown or empty values become FORMAL."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.FORMAL

    @property
    def style_instruction(self) -> str:
        return TONE_INSTRUCTIONS[self]


DEFAULT_TONE = WritingTone.FORMAL

TONE_INSTRUCTIONS = {
    WritingTone.FORMAL: (
        "Use formal, professional business language. Be respectful and direct, "
        "keeping to corporate etiquette throughout."
    ),
    WritingTone.CASUAL: (
        "Use casual, friendly language with a modern vibe. Stay approachable and "
        "authentic while remaining professional."
    ),
    WritingTone.FRIENDLY: (
        "Use warm, personal language that builds connection. Be genuine and focus "
        "on the relationship."
    ),
    WritingTone.INTELLECTUAL: (
        "Use thoughtful, analytical language that shows a deep understanding of "
        "the company's business."
    ),
    WritingTone.CONFIDENT: (
        "Use confident, assertive language. Be direct about the value you bring "
        "and focus on results."
    ),
    WritingTone.CONVERSATIONAL: (
        "Use natural language as if speaking face-to-face. Keep it engaging and "
        "easy to follow."
    ),
}
