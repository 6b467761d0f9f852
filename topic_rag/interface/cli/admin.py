"""CLI for admin tasks: collections, stats, topic listing.

Why: Operative Tasks gehören in die Admin-CLI, nicht in Use-Cases.
"""

from __future__ import annotations

import argparse
import json

from topic_rag.config.composition import Container


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_init_collections(args: argparse.Namespace, container: Container) -> int:
    """Create missing topic collections.

    Returns:
        Exit code (0=all ready, 1=at least one topic failed)
    """
    status = container.initialize_collections.execute()
    for topic, state in status.items():
        mark = "✓" if state == "ready" else "✗"
        print(f"{mark} {topic}: {state}")
    return 0 if all(s == "ready" for s in status.values()) else 1


def cmd_stats(args: argparse.Namespace, container: Container) -> int:
    stats = container.index_cache.stats()
    _print_json(stats)
    return 0 if all(s.get("status") == "active" for s in stats.values()) else 1


def cmd_topics(args: argparse.Namespace, container: Container) -> int:
    _print_json(
        {
            t.id: {"collectionName": t.collection_name, "description": t.description}
            for t in container.catalog.all()
        }
    )
    return 0
