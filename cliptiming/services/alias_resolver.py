"""Alias resolution for cross-clip timing references.

A clip may declare `start` or `length` as `alias://<name>`, meaning "the
same field of the clip whose alias is <name>". This module builds the
dependency graph of those references, rejects cycles and dangling names,
and copies resolved values in dependency order.

The pass is all-or-nothing: values are staged first and written back only
once every reference has resolved, so a failing pass leaves every clip as
it was.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from cliptiming.config import Settings, get_settings
from cliptiming.exceptions import (
    AliasNotFoundError,
    CircularAliasReferenceError,
    UnresolvedAliasTargetError,
)
from cliptiming.models.project import Clip, ProjectState
from cliptiming.schemas.timing import AliasRef, TimingField
from cliptiming.utils.timing import clamp_length

logger = logging.getLogger(__name__)

TIMING_FIELDS: tuple[TimingField, ...] = ("start", "length")


def node_id_for(clip: Clip, track_index: int, clip_index: int) -> str:
    """Graph node id: the alias when set, else "<track>:<clip>"."""
    return clip.alias or f"{track_index}:{clip_index}"


@dataclass
class AliasGraph:
    """Dependency graph over clips; edges point at the aliases a clip reads."""

    nodes: dict[str, Clip] = field(default_factory=dict)
    edges: dict[str, list[str]] = field(default_factory=dict)
    aliases: dict[str, Clip] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(self.edges.values())

    def references(self) -> Iterator[tuple[str, str]]:
        for node_id, targets in self.edges.items():
            for target in targets:
                yield node_id, target


def _alias_refs(clip: Clip) -> list[AliasRef]:
    return [
        value
        for value in (clip.intent.start, clip.intent.length)
        if isinstance(value, AliasRef)
    ]


class AliasResolver:
    """Resolves `alias://` timing references across a project."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def build_graph(self, project: ProjectState) -> AliasGraph:
        graph = AliasGraph()
        positions: dict[str, str] = {}
        for track_index, clip_index, clip in project.iter_clips():
            node_id = node_id_for(clip, track_index, clip_index)
            if clip.alias:
                if clip.alias in graph.aliases:
                    logger.warning(
                        f'Duplicate alias "{clip.alias}" at track {track_index} clip {clip_index}; '
                        "the later clip wins"
                    )
                    # The shadowed clip stays in the pass under its position id
                    shadowed_id = positions[clip.alias]
                    graph.nodes[shadowed_id] = graph.nodes.pop(clip.alias)
                    graph.edges[shadowed_id] = graph.edges.pop(clip.alias)
                positions[clip.alias] = f"{track_index}:{clip_index}"
                graph.aliases[clip.alias] = clip
            graph.nodes[node_id] = clip
            targets = graph.edges.setdefault(node_id, [])
            for ref in _alias_refs(clip):
                if ref.name not in targets:
                    targets.append(ref.name)
        return graph

    def detect_cycle(self, graph: AliasGraph) -> list[str] | None:
        """Return the first cycle found as a path ending where it began, else None."""
        visited: set[str] = set()
        stack: list[str] = []
        on_stack: set[str] = set()

        def visit(node_id: str) -> list[str] | None:
            visited.add(node_id)
            stack.append(node_id)
            on_stack.add(node_id)
            for target in graph.edges.get(node_id, []):
                if target in on_stack:
                    return stack[stack.index(target):] + [target]
                if target not in visited and target in graph.nodes:
                    cycle = visit(target)
                    if cycle:
                        return cycle
            stack.pop()
            on_stack.discard(node_id)
            return None

        for node_id in graph.nodes:
            if node_id not in visited:
                cycle = visit(node_id)
                if cycle:
                    return cycle
        return None

    def topological_order(self, graph: AliasGraph) -> list[str]:
        """Post-order over dependencies: every target precedes its dependents."""
        order: list[str] = []
        visited: set[str] = set()

        def visit(node_id: str) -> None:
            if node_id in visited:
                return
            visited.add(node_id)
            for target in graph.edges.get(node_id, []):
                if target in graph.nodes:
                    visit(target)
            order.append(node_id)

        for node_id in graph.nodes:
            visit(node_id)
        return order

    def validate(self, project: ProjectState) -> AliasGraph:
        """
        Check that every reference names a known alias and the graph is acyclic.

        Raises:
            CircularAliasReferenceError: references form a cycle
            AliasNotFoundError: a reference names an alias no clip declares
        """
        graph = self.build_graph(project)
        if graph.is_empty:
            return graph

        cycle = self.detect_cycle(graph)
        if cycle:
            raise CircularAliasReferenceError(cycle)

        for track_index, clip_index, clip in project.iter_clips():
            for value, slot in ((clip.intent.start, "start"), (clip.intent.length, "length")):
                if isinstance(value, AliasRef) and value.name not in graph.aliases:
                    logger.warning(
                        f'Unknown alias "{value.name}" referenced by {slot} of '
                        f"track {track_index} clip {clip_index}"
                    )
                    raise AliasNotFoundError(value.name, list(graph.aliases), field=slot)
        return graph

    def resolve(self, project: ProjectState) -> list[Clip]:
        """
        Resolve every alias reference in the project.

        Returns:
            Clips whose resolved timing changed

        Raises:
            AliasResolutionError: cycle, unknown alias or unresolved target;
                no clip is modified in that case
        """
        graph = self.validate(project)
        if graph.is_empty:
            return []

        staged: dict[str, dict[str, int]] = {}
        for node_id in self.topological_order(graph):
            clip = graph.nodes[node_id]
            for slot in TIMING_FIELDS:
                value = getattr(clip.intent, slot)
                if not isinstance(value, AliasRef):
                    continue
                resolved = self._read_target(graph, staged, value.name, slot)
                if slot == "length":
                    resolved = clamp_length(resolved, self.settings.min_clip_length_ms)
                staged.setdefault(clip.id, {})[slot] = resolved

        changed: list[Clip] = []
        for clip in graph.nodes.values():
            values = staged.get(clip.id)
            if not values:
                continue
            before = clip.resolved
            clip.set_resolved(start=values.get("start"), length=values.get("length"))
            if clip.resolved != before:
                changed.append(clip)

        logger.debug(f"Alias pass resolved {len(staged)} clips, {len(changed)} changed")
        return changed

    def _read_target(
        self,
        graph: AliasGraph,
        staged: dict[str, dict[str, int]],
        alias: str,
        slot: TimingField,
    ) -> int:
        target = graph.aliases.get(alias)
        if target is None:
            raise AliasNotFoundError(alias, list(graph.aliases), field=slot)

        if slot in staged.get(target.id, {}):
            return staged[target.id][slot]

        value = getattr(target.intent, slot)
        if isinstance(value, float):
            return getattr(target.resolved, slot)
        raise UnresolvedAliasTargetError(alias, slot)
