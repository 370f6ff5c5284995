"""Demo: Projecting a semantic embedding collection to 3D.

Builds a synthetic embedding collection with a few topic clusters, then
walks through the edits an interactive viewer makes:
1. Initial layout (positions + colors)
2. Adding a word (whole layout rebuilt)
3. A stale background computation being discarded
4. Switching embedding source (different scale)

Usage:
    python examples/demo_projection.py --dim 384 --per-topic 4
"""

import argparse
import logging
from typing import Dict

import numpy as np

from embedspace import VectorSpace, compare
from embedspace.space import SpaceLayout


TOPICS = {
    "animals": ["cat", "dog", "horse", "sparrow", "otter", "lynx"],
    "tools": ["hammer", "wrench", "saw", "chisel", "drill", "pliers"],
    "weather": ["rain", "snow", "fog", "thunder", "drizzle", "hail"],
}


def synthetic_embeddings(dim: int, per_topic: int, seed: int) -> Dict[str, np.ndarray]:
    """Unit vectors scattered around one centroid per topic."""
    rng = np.random.default_rng(seed)
    embeddings = {}
    for words in TOPICS.values():
        centroid = rng.normal(0, 1, dim)
        for word in words[:per_topic]:
            v = centroid + rng.normal(0, 0.35, dim)
            embeddings[word] = v / np.linalg.norm(v)
    return embeddings


def print_layout(title: str, layout: SpaceLayout):
    print(f"\n{title}")
    print("-" * 72)
    if layout.is_empty:
        print("  (empty)")
        return
    print(f"  source={layout.source} scale={layout.scale} generation={layout.generation}")
    for key, (x, y, z), color in layout.items():
        print(f"  {key:<10s} [{x:7.3f}, {y:7.3f}, {z:7.3f}]  {color.to_hex()}")
    shares = layout.projection.explained_variance
    print(f"  explained variance: {', '.join(f'{s:.1%}' for s in shares)}")
    for warning in layout.projection.warnings:
        print(f"  ⚠ {type(warning).__name__}: {warning}")
    if layout.pending:
        print(f"  pending: {', '.join(layout.pending)}")


def main():
    parser = argparse.ArgumentParser(description="embedspace projection demo")
    parser.add_argument("--dim", type=int, default=384, help="Embedding dimension")
    parser.add_argument("--per-topic", type=int, default=4, help="Words per topic (max 6)")
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print("=" * 72)
    print("embedspace 3D Projection Demo")
    print("=" * 72)

    embeddings = synthetic_embeddings(args.dim, args.per_topic, args.seed)
    space = VectorSpace(source="minilm")
    for word, vector in embeddings.items():
        space.set_embedding(word, vector)
    space.set_embedding("loading", None)

    print_layout("Initial layout", space.rebuild())

    # A background computation that loses the race
    generation, snapshot = space.snapshot()
    extra = synthetic_embeddings(args.dim, 6, args.seed)["otter"]
    space.set_embedding("otter", extra)
    stale = space.compute_layout(generation, snapshot)
    print(f"\nStale layout committed: {space.commit(stale)}")

    print_layout("After adding 'otter'", space.rebuild())

    # Comparison panel view of two words
    layout = space.layout
    a, b = layout.points[0], layout.points[1]
    full = compare(space.embeddings.get(a.key).vector, space.embeddings.get(b.key).vector)
    flat = compare(a.as_tuple(), b.as_tuple())
    print(f"\n{a.key} vs {b.key}:")
    print(f"  full-dimension cosine: {full.cosine:.3f} ({full.band.value})")
    print(f"  3D cosine:             {flat.cosine:.3f} ({flat.band.value})")
    print(f"  3D distance:           {flat.euclidean:.3f}")

    # Re-embed with a tighter-clustering source
    reembedded = synthetic_embeddings(args.dim, 6, args.seed + 1)
    space.switch_source("e5small", {k: reembedded[k] for k in space.embeddings.keys if k in reembedded})
    print_layout("After switching to e5small", space.rebuild())


if __name__ == "__main__":
    main()
