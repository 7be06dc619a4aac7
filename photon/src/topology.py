"""
Topology: the set of sources and sinks built from the config file.

A run collects every source in declaration order, tags each point with the
name of the source that produced it (``source=<name>``), merges all batches,
then hands the merged batch to every sink in order. The first failing source
or sink aborts the run.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from photon.src.point import Points
from photon.src.sinks import Sink
from photon.src.sources import DataSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Component(Generic[T]):
    """A named source or sink instance."""

    name: str
    component: T


@dataclass
class Topology:
    sources: list[Component[DataSource]] = field(default_factory=list)
    sinks: list[Component[Sink]] = field(default_factory=list)

    async def close(self) -> None:
        """Close every sink, logging (not raising) close failures."""
        for sink in self.sinks:
            try:
                await sink.component.close()
            except Exception:
                logger.warning("Failed to close sink %s", sink.name, exc_info=True)


async def collect(name: str, source: DataSource) -> Points:
    """Collect one source and tag its points with ``source=<name>``."""
    points = await source.collect()
    points.tag_all("source", name)
    logger.info("Source %s produced %d points", name, len(points))
    return points


async def run(topology: Topology) -> Points:
    """Collect every source, then deliver the merged batch to every sink.

    Returns:
        The merged batch that was delivered.
    """
    points = Points()

    for source in topology.sources:
        points.merge_with(await collect(source.name, source.component))

    for sink in topology.sinks:
        logger.info("Sending %d points to sink %s", len(points), sink.name)
        await sink.component.sink(points)

    return points
