"""
Tag Graph

Implicit relationship graph derived from shared tags. Rebuilt on every
read; nothing here is persisted.
"""

from __future__ import annotations

from collections.abc import Sequence

from mindpad.schemas.notes import GraphData, GraphEdge, GraphNode, Note


def build_graph(notes: Sequence[Note]) -> GraphData:
    """
    One node per note, one edge per (shared tag, note pair).

    A pair sharing several tags gets several parallel edges, each labelled
    with its tag, so the reason for every connection stays visible.
    """
    nodes = [GraphNode(id=note.id, title=note.title) for note in notes]

    by_tag: dict[str, list[str]] = {}
    for note in notes:
        for tag in dict.fromkeys(note.tags):
            by_tag.setdefault(tag, []).append(note.id)

    edges: list[GraphEdge] = []
    for tag, note_ids in by_tag.items():
        if len(note_ids) < 2:
            continue
        for i, source in enumerate(note_ids):
            for target in note_ids[i + 1 :]:
                edges.append(GraphEdge(source=source, target=target, label=tag))

    return GraphData(nodes=nodes, edges=edges)
