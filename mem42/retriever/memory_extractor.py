"""
Memory Point Extractor

Converts a final thought into a MemoryDraft (summary, tags, image prompt).
The model is asked to answer in a fixed three-section text shape; a missing
section falls back to a placeholder instead of failing the extraction.
"""

import logging
from typing import Dict, Optional

from ..common.errors import MalformedMemoryResponse
from ..common.llm_client import LLMClient
from ..common.schemas import MemoryDraft

logger = logging.getLogger("mem42.retriever.memory_extractor")

SUMMARY_MARKER = "Summary:"
TAGS_MARKER = "Tags:"
IMAGE_PROMPT_MARKER = "Image Prompt:"
_MARKERS = (SUMMARY_MARKER, TAGS_MARKER, IMAGE_PROMPT_MARKER)

SUMMARY_FALLBACK = "Could not parse summary."
IMAGE_PROMPT_FALLBACK = "Could not parse image prompt."

MEMORY_GENERATOR_PROMPT = '''You are the Memory Point Generator for the Mem 42 system. Your task is to take a final, refined thought and convert it into a structured long-term memory point. This helps store the essence of the topic for later retrieval.

The memory point MUST follow this exact format, with each section on a new line:

Summary:
[A summary of the thought. If the thought is substantial, provide 2-3 paragraphs. If the thought is short and simple, a single concise paragraph or even a few sentences is sufficient. Capture the main ideas, key arguments, and important facts. Do not add filler.]

Tags:
[3 to 8 descriptive tags as a comma-separated list. Single words or short hyphenated phrases representing the core subject matter.]

Image Prompt:
[1 to 3 sentences, creative, symbolic, and visually rich. Represents the main theme and can specify style, colors, composition, or mood.]

Here is the refined thought you need to process:
"""
{thought}
"""

Generate the memory point now.'''


def _extract_sections(text: str) -> Dict[str, Optional[str]]:
    """
    Split the response on the section markers.

    Each section runs from its marker to the next marker that follows it,
    or to the end of the text. Absent markers map to None.
    """
    positions = {marker: text.find(marker) for marker in _MARKERS}
    sections: Dict[str, Optional[str]] = {}

    for marker, start in positions.items():
        if start < 0:
            sections[marker] = None
            continue
        body_start = start + len(marker)
        later = [pos for pos in positions.values() if pos >= body_start]
        end = min(later) if later else len(text)
        sections[marker] = text[body_start:end].strip()

    return sections


def parse_memory_point(text: str, strict: bool = False) -> MemoryDraft:
    """
    Parse a memory-extraction response.

    Args:
        text: Raw model response
        strict: Raise instead of substituting fallbacks

    Returns:
        MemoryDraft with fallbacks for any missing section

    Raises:
        MalformedMemoryResponse: only when ``strict`` and a section is missing
    """
    sections = _extract_sections(text or "")

    summary = sections[SUMMARY_MARKER]
    raw_tags = sections[TAGS_MARKER]
    image_prompt = sections[IMAGE_PROMPT_MARKER]

    missing = [
        name for name, value in (
            ("summary", summary),
            ("tags", raw_tags),
            ("image_prompt", image_prompt),
        )
        if value is None
    ]
    if missing:
        error = MalformedMemoryResponse(missing)
        if strict:
            raise error
        logger.warning("%s; using fallbacks", error)

    tags = [t.strip() for t in raw_tags.split(",") if t.strip()] if raw_tags else []

    return MemoryDraft(
        summary=summary if summary is not None else SUMMARY_FALLBACK,
        tags=tags,
        image_prompt=image_prompt if image_prompt is not None else IMAGE_PROMPT_FALLBACK,
    )


class MemoryExtractor:
    """Generates and parses memory points with the LLM."""

    def __init__(self, llm_client: LLMClient):
        self._llm = llm_client

    def build_prompt(self, final_thought: str) -> str:
        return MEMORY_GENERATOR_PROMPT.replace("{thought}", final_thought)

    def extract(self, final_thought: str) -> MemoryDraft:
        """Generate a memory point for ``final_thought`` (default temperature)."""
        raw = self._llm.generate(self.build_prompt(final_thought))
        return parse_memory_point(raw)
