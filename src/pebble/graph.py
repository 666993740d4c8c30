"""Bounded link-graph exploration and graph views.

:class:`LinkGraphBuilder` walks outgoing links breadth-first from the
current note, up to ``max_depth`` hops, recording both edge directions.
Results are cached per starting note for ``graph_ttl_ms``.

Two views are provided: :func:`render_graph_text` for a plain-text panel and
:func:`build_graph_chart`, an Altair force-directed chart laid out with
:mod:`networkx`.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pebble.fs import file_exists

if TYPE_CHECKING:
    import altair as alt
    import networkx as nx

    from pebble.resolver import Resolver
    from pebble.store import IndexStore

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class GraphNode:
    name: str
    #: ``None`` for a dangling link
    path: Path | None
    depth: int
    outgoing: set[str] = field(default_factory=set)
    incoming: set[str] = field(default_factory=set)

    @property
    def exists(self) -> bool:
        return self.path is not None and file_exists(self.path)


@dataclass
class LinkGraph:
    root: str
    nodes: dict[str, GraphNode] = field(default_factory=dict)
    #: names in the order their files were read
    visited: list[str] = field(default_factory=list)

    def __contains__(self, name: object) -> bool:
        return name in self.nodes

    def __getitem__(self, name: str) -> GraphNode:
        return self.nodes[name]

    def __len__(self) -> int:
        return len(self.nodes)

    def outgoing(self, name: str | None = None) -> list[str]:
        return sorted(self.nodes[name or self.root].outgoing)

    def incoming(self, name: str | None = None) -> list[str]:
        return sorted(self.nodes[name or self.root].incoming)

    def others(self) -> list[str]:
        """Nodes not directly linked to or from the root."""
        near = self.nodes[self.root].outgoing | self.nodes[self.root].incoming | {self.root}
        return sorted(n for n in self.nodes if n not in near)

    def edges(self) -> list[tuple[str, str]]:
        return [(n.name, t) for n in self.nodes.values() for t in sorted(n.outgoing)]


@dataclass
class GraphCacheEntry:
    graph: LinkGraph
    timestamp: float

    def is_expired(self, now: float, ttl_ms: float) -> bool:
        return now - self.timestamp >= ttl_ms


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class LinkGraphBuilder:
    def __init__(self, store: "IndexStore", resolver: "Resolver") -> None:
        self.store = store
        self.resolver = resolver

    def build(self, current_name: str, current_path: Path | None, max_depth: int | None = None) -> LinkGraph:
        """Return the link graph around *current_name*, cached for the TTL."""
        ttl = self.store.config.graph_ttl_ms
        now = self.store.now()
        cached = self.store.graphs.get(current_name)
        if cached is not None and not cached.is_expired(now, ttl):
            return cached.graph

        depth_limit = self.store.config.graph_depth if max_depth is None else max_depth
        graph = self._traverse(current_name, current_path, depth_limit)

        self.store.graphs[current_name] = GraphCacheEntry(graph, now)
        for name, entry in list(self.store.graphs.items()):
            if now - entry.timestamp > 2 * ttl:
                del self.store.graphs[name]
        log.debug("Built graph for %s: %d nodes, %d visited", current_name, len(graph), len(graph.visited))
        return graph

    def _traverse(self, current_name: str, current_path: Path | None, max_depth: int) -> LinkGraph:
        self.store.ensure_file_index()
        graph = LinkGraph(root=current_name)
        graph.nodes[current_name] = GraphNode(current_name, current_path, depth=0)

        queue: deque[tuple[str, int]] = deque([(current_name, 0)])
        processed: set[str] = set()
        while queue:
            name, depth = queue.popleft()
            if name in processed or depth > max_depth:
                continue
            processed.add(name)

            node = graph.nodes[name]
            if node.path is None:
                continue
            graph.visited.append(name)

            for link in self.store.links.extract(node.path):
                if link == name:
                    continue
                target = graph.nodes.get(link)
                if target is None:
                    target = GraphNode(link, self.resolver.resolve(link), depth=depth + 1)
                    graph.nodes[link] = target
                node.outgoing.add(link)
                target.incoming.add(name)
                if depth < max_depth and link not in processed:
                    queue.append((link, depth + 1))
        return graph


# ---------------------------------------------------------------------------
# Text view
# ---------------------------------------------------------------------------

_OTHERS_SHOWN = 5


@dataclass(frozen=True)
class GraphLine:
    text: str
    #: note name opened when this line is chosen; ``None`` for decoration
    target: str | None = None


def render_graph_text(graph: LinkGraph) -> list[GraphLine]:
    """Render *graph* as a panel: incoming, current, outgoing, then others."""
    lines: list[GraphLine] = [GraphLine("Pebble - Markdown Link Graph"), GraphLine("")]
    incoming = graph.incoming()
    outgoing = graph.outgoing()
    others = graph.others()

    if incoming:
        lines.append(GraphLine("◄── Incoming Links:"))
        lines.extend(GraphLine(f"  ➤ {name}", name) for name in incoming)
        lines.append(GraphLine(""))

    lines.append(GraphLine(f"● {graph.root} (current)"))
    lines.append(GraphLine(""))

    if outgoing:
        lines.append(GraphLine("──► Outgoing Links:"))
        for name in outgoing:
            if graph[name].exists:
                lines.append(GraphLine(f"  ➤ {name}", name))
            else:
                lines.append(GraphLine(f"  ✗ {name}"))
        lines.append(GraphLine(""))

    if others:
        lines.append(GraphLine("○ Other Connected Files:"))
        for name in others[:_OTHERS_SHOWN]:
            if graph[name].exists:
                lines.append(GraphLine(f"  ➤ {name}", name))
            else:
                lines.append(GraphLine(f"  ○ {name}"))
        if len(others) > _OTHERS_SHOWN:
            lines.append(GraphLine(f"  ... and {len(others) - _OTHERS_SHOWN} more"))
        lines.append(GraphLine(""))

    lines.append(
        GraphLine(f"Total files: {len(graph)} │ Outgoing: {len(outgoing)} │ Incoming: {len(incoming)}")
    )
    return lines


# ---------------------------------------------------------------------------
# Chart view
# ---------------------------------------------------------------------------


def to_networkx(graph: LinkGraph) -> "nx.DiGraph":
    import networkx as nx

    G: nx.DiGraph = nx.DiGraph()
    for node in graph.nodes.values():
        G.add_node(node.name, depth=node.depth, exists=node.path is not None)
    G.add_edges_from(graph.edges())
    return G


def build_graph_chart(
    graph: LinkGraph,
    *,
    width: int = 640,
    height: int = 480,
    seed: int = 42,
) -> "alt.LayerChart":
    """Return an Altair chart of *graph* with the root note highlighted.

    Dangling links are drawn in a muted colour.  *seed* is passed to
    ``networkx.spring_layout`` for reproducible positioning.
    """
    import altair as alt
    import networkx as nx
    import polars as pl

    G = to_networkx(graph)
    pos: dict[str, Any] = nx.spring_layout(G, seed=seed, k=2.0)

    nodes_df = pl.DataFrame(
        [
            {
                "name": name,
                "x": float(pos[name][0]),
                "y": float(pos[name][1]),
                "degree": int(G.degree(name)),
                "depth": int(G.nodes[name]["depth"]),
                "status": "current" if name == graph.root else ("note" if G.nodes[name]["exists"] else "missing"),
            }
            for name in G.nodes()
        ]
    )

    edge_rows = [
        {
            "x": float(pos[src][0]),
            "y": float(pos[src][1]),
            "x2": float(pos[tgt][0]),
            "y2": float(pos[tgt][1]),
            "source": src,
            "target": tgt,
        }
        for src, tgt in G.edges()
    ]
    if edge_rows:
        edge_layer = (
            alt.Chart(pl.DataFrame(edge_rows))
            .mark_rule(color="#888", strokeWidth=1, opacity=0.55)
            .encode(
                x=alt.X("x:Q", axis=None),
                y=alt.Y("y:Q", axis=None),
                x2="x2:Q",
                y2="y2:Q",
                tooltip=[alt.Tooltip("source:N", title="from"), alt.Tooltip("target:N", title="to")],
            )
        )
    else:
        edge_layer = alt.Chart(pl.DataFrame({"x": [0.0], "y": [0.0], "x2": [0.0], "y2": [0.0]})).mark_rule(opacity=0)

    node_layer = (
        alt.Chart(nodes_df)
        .mark_circle(opacity=0.9)
        .encode(
            x=alt.X("x:Q", axis=None),
            y=alt.Y("y:Q", axis=None),
            size=alt.Size("degree:Q", scale=alt.Scale(range=[80, 400]), legend=None),
            color=alt.Color(
                "status:N",
                scale=alt.Scale(domain=["current", "note", "missing"], range=["#7C3AED", "#4B90D9", "#C0C0C0"]),
                legend=None,
            ),
            tooltip=[alt.Tooltip("name:N", title="note"), alt.Tooltip("depth:Q", title="hops")],
        )
    )

    label_layer = (
        alt.Chart(nodes_df)
        .mark_text(dy=-12, fontSize=11, fontWeight="bold")
        .encode(
            x=alt.X("x:Q", axis=None),
            y=alt.Y("y:Q", axis=None),
            text="name:N",
        )
    )

    return (edge_layer + node_layer + label_layer).properties(width=width, height=height).configure_view(strokeWidth=0)
