"""
Tests for Retriever prompt stages

Tests persona rendering, query optimization, and synthesis prompts.
"""

import pytest
from unittest.mock import Mock


@pytest.fixture
def plans():
    from mem42.common.schemas import AgentPlan

    return [
        AgentPlan("Logic Module", "Check the premises."),
        AgentPlan("Ethical Module", "Consider who is affected."),
    ]


class TestPersonas:
    """Tests for the planning personas"""

    def test_five_modules_in_order(self):
        from mem42.retriever.personas import PLANNING_MODULES

        assert [p.name for p in PLANNING_MODULES] == [
            "Logic Module",
            "Creativity Module",
            "Critical Module",
            "Planning Module",
            "Ethical Module",
        ]

    def test_render_substitutes_query(self):
        from mem42.retriever.personas import PLANNING_MODULES

        prompt = PLANNING_MODULES[0].render("Should we migrate?")

        assert 'User Query: "Should we migrate?"' in prompt
        assert "{query}" not in prompt

    def test_every_template_has_placeholder(self):
        from mem42.retriever.personas import PLANNING_MODULES

        for persona in PLANNING_MODULES:
            assert "{query}" in persona.template

    def test_system_prompt_names_the_system(self):
        from mem42.retriever.personas import SYSTEM_PROMPT_BASE

        assert "Mem 42" in SYSTEM_PROMPT_BASE


class TestQueryOptimizer:
    """Tests for QueryOptimizer"""

    def test_format_plans(self, plans):
        from mem42.retriever.query_optimizer import format_plans_for_query

        assert format_plans_for_query(plans) == (
            "Logic Module: Check the premises.\n"
            "Ethical Module: Consider who is affected."
        )

    def test_optimize_trims_response(self, plans):
        from mem42.retriever.query_optimizer import QueryOptimizer

        llm = Mock()
        llm.generate.return_value = "\n  migration risk assessment \n"

        result = QueryOptimizer(llm).optimize("Should we migrate?", plans)

        assert result == "migration risk assessment"
        prompt = llm.generate.call_args.args[0]
        assert "Should we migrate?" in prompt
        assert "Logic Module: Check the premises." in prompt
        assert prompt.endswith("Optimal Search Query:")


class TestSynthesizer:
    """Tests for Synthesizer"""

    def test_format_plans(self, plans):
        from mem42.retriever.synthesizer import format_plans_for_synthesis

        assert format_plans_for_synthesis(plans).splitlines() == [
            "- Logic Module: Check the premises.",
            "- Ethical Module: Consider who is affected.",
        ]

    def test_prompt_with_context(self, plans):
        from mem42.retriever.synthesizer import Synthesizer, NO_CONTEXT_PLACEHOLDER

        prompt = Synthesizer(Mock()).build_prompt("q", plans, "engram one")

        assert "engram one" in prompt
        assert NO_CONTEXT_PLACEHOLDER not in prompt

    def test_prompt_without_context_uses_placeholder(self, plans):
        from mem42.retriever.synthesizer import Synthesizer, NO_CONTEXT_PLACEHOLDER

        prompt = Synthesizer(Mock()).build_prompt("q", plans, None)

        assert NO_CONTEXT_PLACEHOLDER in prompt

    def test_synthesize_uses_configured_temperature(self, plans):
        from mem42.retriever.synthesizer import Synthesizer

        llm = Mock()
        llm.generate.return_value = "  final  "

        result = Synthesizer(llm, temperature=0.9).synthesize("q", plans, None)

        assert result == "final"
        assert llm.generate.call_args.kwargs["temperature"] == 0.9


class TestRetrievalResult:
    """Tests for RetrievalResult"""

    def test_no_hits_has_no_context(self):
        from mem42.retriever.searcher import RetrievalResult

        assert RetrievalResult(query="q").context is None

    def test_single_hit_has_no_separator(self):
        from mem42.retriever.searcher import RetrievalResult
        from mem42.common.vector_store import SearchHit

        result = RetrievalResult(query="q", hits=[SearchHit(id="1", content="only", score=0.5)])

        assert result.context == "only"
