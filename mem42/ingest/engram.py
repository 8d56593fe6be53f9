"""
Engram Builder

Distills a whole document into a dense "memory engram" with the LLM. The
engram, not the raw text, is what gets embedded and retrieved.
"""

from ..common.llm_client import LLMClient


ENGRAM_CREATION_PROMPT = '''You are a Knowledge Architect AI. Your task is to read the entirety of the following document and distill its contents into a dense, high-quality "memory engram." This engram is not a simple summary; it is a comprehensive, structured synthesis of the document's core concepts, key arguments, critical data points, and overarching themes.

The goal is to create a self-contained piece of text that represents the document's essential knowledge, optimized for future semantic search.

Rules:
- Capture the primary thesis or purpose of the document.
- Extract all significant claims, evidence, and conclusions.
- Preserve important relationships between concepts (e.g., cause-and-effect, comparisons).
- Do not add outside information or personal interpretation. Your output must be based solely on the provided text.
- The output should be a well-written, coherent block of text.

Here is the document to process:
"""
{document}
"""

Generate the memory engram now.'''


class EngramBuilder:
    """Creates memory engrams from document text."""

    def __init__(self, llm_client: LLMClient, temperature: float = 0.2, max_tokens: int = 4096):
        self._llm = llm_client
        self._temperature = temperature
        self._max_tokens = max_tokens

    def build_prompt(self, document_text: str) -> str:
        return ENGRAM_CREATION_PROMPT.replace("{document}", document_text)

    def create(self, document_text: str) -> str:
        """Distill ``document_text`` into an engram (trimmed)."""
        return self._llm.generate(
            self.build_prompt(document_text),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        ).strip()
