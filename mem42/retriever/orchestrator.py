"""
Collaborative Synthesis Orchestrator

Runs one query through five stages:

1. Planning: every persona reacts to the query (concurrent fan-out)
2. QueryOptimization: plans are folded into one retrieval query
3. Retrieval: tag-filtered top-K search over the knowledge base
4. Synthesis: final answer from query + plans + context
5. MemoryExtraction (optional): memory point for the final answer

Stages 1-4 are fatal on error: the run stops and a StageFailure naming the
stage is raised. A stage 5 error is reported but the run still completes,
since the final thought has already been delivered.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, List, Optional, Sequence, TypeVar

from ..common.errors import Stage, StageFailure
from ..common.llm_client import LLMClient
from ..common.schemas import AgentPlan, MemoryDraft, normalize_tags
from ..common.vector_store import SearchHit
from .events import EventListener, EventType, SynthesisEvent, as_listener
from .memory_extractor import MemoryExtractor
from .personas import PLANNING_MODULES, SYSTEM_PROMPT_BASE, Persona
from .query_optimizer import QueryOptimizer
from .searcher import Searcher
from .synthesizer import Synthesizer

logger = logging.getLogger("mem42.retriever.orchestrator")

T = TypeVar("T")


@dataclass
class SynthesisRun:
    """Transient state of one end-to-end query"""
    query: str
    tag_filter: List[str] = field(default_factory=list)
    plans: List[AgentPlan] = field(default_factory=list)
    optimized_query: Optional[str] = None
    context: Optional[str] = None
    hits: List[SearchHit] = field(default_factory=list)
    final_thought: Optional[str] = None
    memory: Optional[MemoryDraft] = None
    memory_error: Optional[StageFailure] = None


class CollaborativeOrchestrator:
    """
    Sequences the synthesis stages and notifies the caller as each completes.

    Notifications go to an ``on_event`` callback (``run``) or are yielded
    from an async iterator (``stream``).
    """

    def __init__(
        self,
        llm_client: LLMClient,
        searcher: Searcher,
        personas: Sequence[Persona] = PLANNING_MODULES,
        system_prompt: str = SYSTEM_PROMPT_BASE,
        plan_temperature: float = 0.5,
        synthesis_temperature: float = 0.7,
        always_optimize_query: bool = True,
    ):
        if not personas:
            raise ValueError("At least one persona is required")

        self._llm = llm_client
        self._searcher = searcher
        self._personas = list(personas)
        self._system_prompt = system_prompt
        self._plan_temperature = plan_temperature
        self._always_optimize_query = always_optimize_query

        self._optimizer = QueryOptimizer(llm_client)
        self._synthesizer = Synthesizer(llm_client, temperature=synthesis_temperature)
        self._memory_extractor = MemoryExtractor(llm_client)

    @classmethod
    def from_config(cls, synthesis_config, llm_client: LLMClient, searcher: Searcher):
        return cls(
            llm_client=llm_client,
            searcher=searcher,
            plan_temperature=synthesis_config.plan_temperature,
            synthesis_temperature=synthesis_config.synthesis_temperature,
            always_optimize_query=synthesis_config.always_optimize_query,
        )

    # =========================================================================
    # Stages
    # =========================================================================

    async def _plan_for(self, persona: Persona, query: str) -> AgentPlan:
        text = await asyncio.to_thread(
            self._llm.generate,
            persona.render(query),
            system=self._system_prompt,
            temperature=self._plan_temperature,
        )
        return AgentPlan(module_name=persona.name, plan=text.strip())

    async def _generate_plans(self, query: str) -> List[AgentPlan]:
        """Fan out to every persona; the first failure cancels the rest."""
        tasks = [asyncio.create_task(self._plan_for(p, query)) for p in self._personas]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # Collect the other outcomes so no task exception goes unretrieved
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _optimize_query(
        self,
        query: str,
        plans: List[AgentPlan],
        tag_filter: List[str],
    ) -> str:
        if not self._always_optimize_query:
            if await self._searcher.candidate_count(tag_filter) == 0:
                logger.info("Candidate pool empty, using the original query for retrieval")
                return query
        return await asyncio.to_thread(self._optimizer.optimize, query, plans)

    async def _run_stage(self, stage: Stage, work: Awaitable[T], emit: EventListener) -> T:
        """Await one fatal stage; errors become a StageFailure and an error event.

        Only the stage's own work is tagged. Exceptions raised by the event
        listener propagate unchanged from ``run``.
        """
        try:
            return await work
        except Exception as e:
            failure = StageFailure(stage, e)
            logger.error("Run aborted: %s", failure)
        emit(SynthesisEvent(EventType.ERROR, {
            "stage": stage.value,
            "message": str(failure.cause),
            "recoverable": False,
        }))
        raise failure from failure.cause

    async def _extract_memory(self, run: SynthesisRun, emit: EventListener) -> None:
        try:
            run.memory = await asyncio.to_thread(self._memory_extractor.extract, run.final_thought)
        except Exception as e:
            run.memory_error = StageFailure(Stage.MEMORY_EXTRACTION, e)
            logger.warning("%s", run.memory_error)
            emit(SynthesisEvent(EventType.ERROR, {
                "stage": Stage.MEMORY_EXTRACTION.value,
                "message": str(e),
                "recoverable": True,
            }))
            return
        emit(SynthesisEvent(EventType.MEMORY, run.memory))

    # =========================================================================
    # Entry points
    # =========================================================================

    async def run(
        self,
        query: str,
        tag_filter: Optional[Sequence[str]] = None,
        request_memory: bool = False,
        on_event: Optional[EventListener] = None,
    ) -> SynthesisRun:
        """
        Run one query end to end.

        Args:
            query: User's free-text query
            tag_filter: Tags every retrieved entry must (fuzzily) carry
            request_memory: Also extract a memory point from the answer
            on_event: Called with each SynthesisEvent, in stage order

        Returns:
            The completed SynthesisRun

        Raises:
            StageFailure: if planning, query optimization, retrieval or
                synthesis fails
        """
        emit = as_listener(on_event)
        run = SynthesisRun(query=query, tag_filter=normalize_tags(tag_filter))

        logger.info("Planning with %d personas", len(self._personas))
        run.plans = await self._run_stage(Stage.PLANNING, self._generate_plans(query), emit)
        emit(SynthesisEvent(EventType.PLANS, list(run.plans)))

        run.optimized_query = await self._run_stage(
            Stage.QUERY_OPTIMIZATION,
            self._optimize_query(query, run.plans, run.tag_filter),
            emit,
        )

        retrieval = await self._run_stage(
            Stage.RETRIEVAL,
            self._searcher.retrieve(run.optimized_query, run.tag_filter),
            emit,
        )
        run.hits = retrieval.hits
        run.context = retrieval.context
        emit(SynthesisEvent(EventType.CONTEXT, {
            "context": run.context,
            "query": run.optimized_query,
        }))

        emit(SynthesisEvent(EventType.SYNTHESIS_START))
        run.final_thought = await self._run_stage(
            Stage.SYNTHESIS,
            asyncio.to_thread(self._synthesizer.synthesize, query, run.plans, run.context),
            emit,
        )
        emit(SynthesisEvent(EventType.THOUGHT, run.final_thought))

        if request_memory:
            await self._extract_memory(run, emit)

        emit(SynthesisEvent(EventType.DONE))
        logger.info("Run complete (context: %s)", "yes" if run.context else "none")
        return run

    async def stream(
        self,
        query: str,
        tag_filter: Optional[Sequence[str]] = None,
        request_memory: bool = False,
    ) -> AsyncIterator[SynthesisEvent]:
        """
        Run one query and yield its events as they happen.

        Closing the iterator early cancels the run; events already yielded
        stay delivered. A fatal failure ends the stream after its error event.
        """
        queue: asyncio.Queue = asyncio.Queue()
        task = asyncio.create_task(
            self.run(query, tag_filter, request_memory, on_event=queue.put_nowait)
        )

        def _finished(done: asyncio.Task) -> None:
            # Failures were already delivered as an error event
            if not done.cancelled():
                done.exception()
            queue.put_nowait(None)

        task.add_done_callback(_finished)

        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            if not task.done():
                task.cancel()
