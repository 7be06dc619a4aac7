"""
Console sink: dumps point batches to stdout as pretty-printed JSON.
"""

from __future__ import annotations

import json
import sys
from typing import Literal, TextIO

from photon.src.point import Points
from photon.src.sinks.base import Sink, SinkConfig, register


class ConsoleSink(Sink):
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def sink(self, points: Points) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        print(json.dumps(points.to_list(), indent=2), file=stream)


@register("console")
class ConsoleConfig(SinkConfig):
    codec: Literal["json"] = "json"

    def build(self) -> Sink:
        return ConsoleSink()
