"""
Synthesizer

Final answer synthesis from the user's query, the persona plans and the
retrieved knowledge-base context.
"""

import logging
from typing import List, Optional

from ..common.llm_client import LLMClient
from ..common.schemas import AgentPlan

logger = logging.getLogger("mem42.retriever.synthesizer")

NO_CONTEXT_PLACEHOLDER = "No context was retrieved from the knowledge base."

SYNTHESIZER_PROMPT = '''You are the Synthesizer, the final intelligence in the Mem 42 system. Your role is to take the user's original query, a set of initial plans from various specialist agents, and any relevant context retrieved from a knowledge base, and synthesize them all into a single, coherent, and comprehensive final answer.

Do not act as a chatbot. Behave as a system that has processed information through multiple internal layers and is now presenting the final, refined result.

Here is the information you have been given:

1. User's Original Query:
"""
{query}
"""

2. Perspectives from Specialist Agents:
"""
{plans}
"""

3. Context from Knowledge Base (if available, otherwise this section is empty):
"""
{context}
"""

Your Task:
Synthesize all of the above information into a well-structured, insightful, and complete final answer to the user's original query. Address the query directly, using the agent perspectives to structure your thinking and the knowledge base context to provide factual grounding.

Your Final Synthesized Answer:'''


def format_plans_for_synthesis(plans: List[AgentPlan]) -> str:
    """One ``"- {module}: {plan}"`` bullet per plan"""
    return "\n".join(f"- {p.module_name}: {p.plan}" for p in plans)


class Synthesizer:
    """Synthesizes the final thought with the LLM."""

    def __init__(self, llm_client: LLMClient, temperature: float = 0.7):
        self._llm = llm_client
        self._temperature = temperature

    def build_prompt(
        self,
        query: str,
        plans: List[AgentPlan],
        context: Optional[str],
    ) -> str:
        return (
            SYNTHESIZER_PROMPT
            .replace("{query}", query)
            .replace("{plans}", format_plans_for_synthesis(plans))
            .replace("{context}", context or NO_CONTEXT_PLACEHOLDER)
        )

    def synthesize(
        self,
        query: str,
        plans: List[AgentPlan],
        context: Optional[str],
    ) -> str:
        """
        Generate the final thought.

        Args:
            query: User's original query
            plans: Persona plans, in persona order
            context: Retrieved context, or None

        Returns:
            Trimmed final answer text
        """
        prompt = self.build_prompt(query, plans, context)
        return self._llm.generate(prompt, temperature=self._temperature).strip()
