"""
Query Optimizer

Turns the user's query plus the persona plans into one retrieval query
(the "Memory Philosopher" step).
"""

import logging
from typing import List

from ..common.llm_client import LLMClient
from ..common.schemas import AgentPlan

logger = logging.getLogger("mem42.retriever.query_optimizer")


MEMORY_QUERY_GENERATOR_PROMPT = '''You are the Memory Philosopher, a specialist in retrieving information from a vector database. You have received several plans from different cognitive modules on how to approach a user's query. Your task is to synthesize these plans into a single, optimal search query for the vector database. The query should be a statement that captures the core information need expressed across all the plans.

User's Original Query:
"""
{query}
"""

Collected Agent Plans:
"""
{plans}
"""

Based on the user's query and the agent plans, generate a single, concise, and effective search query.
Optimal Search Query:'''


def format_plans_for_query(plans: List[AgentPlan]) -> str:
    """One ``"{module}: {plan}"`` line per plan"""
    return "\n".join(f"{p.module_name}: {p.plan}" for p in plans)


class QueryOptimizer:
    """Asks the LLM for a single retrieval query."""

    def __init__(self, llm_client: LLMClient):
        self._llm = llm_client

    def build_prompt(self, query: str, plans: List[AgentPlan]) -> str:
        return (
            MEMORY_QUERY_GENERATOR_PROMPT
            .replace("{query}", query)
            .replace("{plans}", format_plans_for_query(plans))
        )

    def optimize(self, query: str, plans: List[AgentPlan]) -> str:
        """
        Generate the optimized retrieval query.

        Uses the provider's default temperature.
        """
        optimized = self._llm.generate(self.build_prompt(query, plans)).strip()
        logger.debug("Optimized query: %s", optimized)
        return optimized
