#!/usr/bin/env python3
"""
Mem42 command line.

Usage:
    mem42 ask "What should we learn from the outage?" [--tags ops,incident] [--memory]
    mem42 ingest notes.md report.pdf [--tags finance,q3]
    mem42 count
    mem42 clear
"""

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from .common.config import load_config, Mem42Config
from .common.embedding_service import create_embedding_service
from .common.errors import StageFailure
from .common.llm_client import LLMClient
from .common.vector_store import InMemoryVectorStore, QdrantVectorStore, VectorStore
from .ingest import Document, DocumentIngestor, EngramBuilder, KnowledgeBase
from .retriever import CollaborativeOrchestrator, EventType, Searcher, SynthesisEvent


def build_store(config: Mem42Config, backend: str) -> VectorStore:
    if backend == "qdrant":
        return QdrantVectorStore.from_config(config.qdrant, dimension=config.embedding.dimension)
    return InMemoryVectorStore(dimension=config.embedding.dimension)


def build_ingestor(config: Mem42Config, llm: LLMClient, embedding, store: VectorStore) -> DocumentIngestor:
    return DocumentIngestor(
        engram_builder=EngramBuilder(llm, temperature=config.ingest.engram_temperature),
        embedding_service=embedding,
        store=store,
        max_pdf_pages=config.ingest.max_pdf_pages,
    )


def _print_event(event: SynthesisEvent, as_json: bool) -> None:
    if as_json:
        print(json.dumps(event.to_dict()), flush=True)
        return

    if event.type == EventType.PLANS:
        print("[Plans]")
        for plan in event.payload:
            print(f"  - {plan.module_name}: {plan.plan}")
    elif event.type == EventType.CONTEXT:
        print(f"[Retrieval] query: {event.payload['query']}")
        context = event.payload["context"]
        print(context if context else "[Retrieval] No context retrieved")
    elif event.type == EventType.SYNTHESIS_START:
        print("[Synthesis] Synthesizing final thought...")
    elif event.type == EventType.THOUGHT:
        print()
        print(event.payload)
        print()
    elif event.type == EventType.MEMORY:
        memory = event.payload
        print("[Memory] Summary:")
        print(memory.summary)
        print(f"[Memory] Tags: {', '.join(memory.tags)}")
        print(f"[Memory] Image Prompt: {memory.image_prompt}")
    elif event.type == EventType.ERROR:
        print(f"[Error] {event.payload['stage']}: {event.payload['message']}", file=sys.stderr)
    sys.stdout.flush()


def cmd_ask(args, config: Mem42Config) -> int:
    llm = LLMClient.from_config(config.llm)
    embedding = create_embedding_service(config.embedding, config.llm)
    store = build_store(config, args.store)

    if args.docs:
        report = build_ingestor(config, llm, embedding, store).ingest(
            [Document.from_path(p) for p in args.docs], args.doc_tags
        )
        print(f"[Ingest] {report.message}")
        for error in report.errors:
            print(f"[Ingest] {error}", file=sys.stderr)

    searcher = Searcher(store, embedding, topk=config.synthesis.topk)
    orchestrator = CollaborativeOrchestrator.from_config(config.synthesis, llm, searcher)

    try:
        asyncio.run(orchestrator.run(
            args.query,
            tag_filter=args.tags,
            request_memory=args.memory,
            on_event=lambda event: _print_event(event, args.json),
        ))
    except StageFailure:
        return 1
    return 0


def cmd_ingest(args, config: Mem42Config) -> int:
    llm = LLMClient.from_config(config.llm)
    embedding = create_embedding_service(config.embedding, config.llm)
    store = build_store(config, args.store)

    report = build_ingestor(config, llm, embedding, store).ingest(
        [Document.from_path(p) for p in args.files], args.tags
    )
    print(f"[Ingest] {report.message}")
    for error in report.errors:
        print(f"[Ingest] {error}", file=sys.stderr)
    return 0 if not report.errors else 1


def cmd_count(args, config: Mem42Config) -> int:
    kb = KnowledgeBase(build_store(config, args.store), dimension=config.embedding.dimension)
    print(kb.engram_count())
    return 0


def cmd_clear(args, config: Mem42Config) -> int:
    kb = KnowledgeBase(build_store(config, args.store), dimension=config.embedding.dimension)
    kb.clear()
    print("[KnowledgeBase] Knowledge base cleared successfully.")
    return 0


def build_parser(config: Mem42Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mem42", description="Collaborative synthesis over an engram knowledge base")
    parser.add_argument("--store", choices=["memory", "qdrant"], default=config.store_backend,
                        help="Knowledge base backend (default: qdrant when QDRANT_URL is set)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ask = subparsers.add_parser("ask", help="Run a query through the persona pipeline")
    ask.add_argument("query", help="Free-text query")
    ask.add_argument("--tags", default="", help="Comma-separated tag filter for retrieval")
    ask.add_argument("--memory", action="store_true", help="Also generate a memory point")
    ask.add_argument("--docs", nargs="*", default=[], help="Documents to ingest before asking")
    ask.add_argument("--doc-tags", default="", help="Tags for documents given with --docs")
    ask.add_argument("--json", action="store_true", help="Print events as JSON lines")
    ask.set_defaults(func=cmd_ask)

    ingest = subparsers.add_parser("ingest", help="Distill documents into engrams and store them")
    ingest.add_argument("files", nargs="+", help="Text or PDF files")
    ingest.add_argument("--tags", default="", help="Comma-separated tags for every file")
    ingest.set_defaults(func=cmd_ingest)

    count = subparsers.add_parser("count", help="Print the number of stored engrams")
    count.set_defaults(func=cmd_count)

    clear = subparsers.add_parser("clear", help="Delete every stored engram")
    clear.set_defaults(func=cmd_clear)

    return parser


def main(argv=None) -> int:
    load_dotenv()
    config = load_config()
    args = build_parser(config).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
