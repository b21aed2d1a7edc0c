#!/usr/bin/env python3
"""
Demo script for the AI thesaurus.

Analyzes a handful of words against a running Ollama server, stores their
definitions as embeddings in Redis and runs a few semantic searches.
"""

import asyncio
import time

from semantic_thesaurus.api.dependencies import ServiceContainer
from semantic_thesaurus.config import configure_logging, settings
from semantic_thesaurus.repositories import OllamaClient
from semantic_thesaurus.services import EmbeddingJob


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_analysis(container: ServiceContainer) -> None:
    """Demonstrate a full word analysis and the cache in front of it."""
    print_section("Word Analysis")

    word, context = "brilliant", "academic performance"

    start = time.time()
    result = await container.analysis.analyze(word, context)
    first_ms = (time.time() - start) * 1000

    print(f"\n📖 {result.word} ({result.part_of_speech})")
    print(f"  Definition: {result.definition}")
    print(f"  Synonyms: {', '.join(w.word for w in result.synonyms) or '-'}")
    print(f"  Antonyms: {', '.join(w.word for w in result.antonyms) or '-'}")
    for meaning in result.contexts:
        print(f"  In '{meaning.context}': {meaning.meaning}")
    print(f"  Confidence: {result.confidence:.2f}{' (degraded)' if result.degraded else ''}")

    start = time.time()
    await container.analysis.analyze(word.upper(), context)
    second_ms = (time.time() - start) * 1000

    print("\n⚡ Cache:")
    print(f"  First call:  {first_ms:.1f}ms")
    print(f"  Second call: {second_ms:.1f}ms (served from cache)")


async def demo_semantic_search(container: ServiceContainer) -> None:
    """Demonstrate embedding storage and semantic search."""
    print_section("Semantic Search")

    words = ["happy", "joyful", "cheerful", "sad", "gloomy", "angry"]

    print("\n📝 Storing definitions as embeddings...")
    jobs = []
    for word in words:
        definition = await container.analysis.get_definition(word)
        jobs.append(EmbeddingJob(subject_id=word, text=f"{word}: {definition}", metadata={"definition": definition}))
        print(f"  ✓ {word}: {definition[:60]}")

    summary = await container.embeddings.batch_generate(jobs)
    print(f"\n  Stored: {summary['stored']}, Failed: {summary['failed']}")

    queries = ["feeling very good", "feeling down"]
    print("\n🔍 Searching:")
    for query in queries:
        matches = await container.search.search(query, limit=3, threshold=0.3)
        print(f"\n  Query: '{query}' (via {container.engine.last_backend})")
        if not matches:
            print("  ✗ No matches")
        for match in matches:
            print(f"  {match.subject_id:<12} {match.similarity:.2%}")


def demo_stats(container: ServiceContainer) -> None:
    """Print cache statistics."""
    print_section("Cache Statistics")

    stats = container.cache.stats()
    print(f"\n  Live keys: {stats['live_key_count']}")
    print(f"  Hit rate:  {stats['hit_rate']:.2%} ({stats['hits']} hits, {stats['misses']} misses)")
    print(f"  Size:      ~{stats['approx_size_bytes']} bytes")


async def run() -> None:
    container = ServiceContainer.create()
    try:
        await demo_analysis(container)
        await demo_semantic_search(container)
        demo_stats(container)
    finally:
        if isinstance(container.client, OllamaClient):
            await container.client.close()


def main() -> None:
    """Run all demos."""
    configure_logging("WARNING")

    print("\n🚀 AI Thesaurus Demo")
    print("=" * 70)
    print(f"Language model: {settings.ollama_model}")
    print(f"Embedding model: {settings.ollama_embedding_model}")

    try:
        asyncio.run(run())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error: {e}")
        print("\nMake sure Ollama and Redis are running:")
        print(f"  ollama serve && ollama pull {settings.ollama_model}")
        print("  docker run -d -p 6379:6379 redis/redis-stack-server")
        print("\nOr set OLLAMA_BASE_URL / REDIS_URL.")


if __name__ == "__main__":
    main()
