"""
Shared fixtures: an in-memory backend and payload builders.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest
from lsprotocol import types as lsp

from symtree.core.errors import BackendError


def node_payload(
    id: Any,
    name: str,
    children: Optional[List[dict]] = None,
    num_children: Optional[int] = None,
    uri: Optional[str] = "file:///src/foo/bar.cpp",
    line: int = 0,
    **extra: Any,
) -> dict:
    """Build a wire-shaped hierarchy node."""
    children = children or []
    payload = {
        "id": id,
        "name": name,
        "numChildren": len(children) if num_children is None else num_children,
        "children": children,
        **extra,
    }
    if uri is not None:
        payload["location"] = {
            "uri": uri,
            "range": {
                "start": {"line": line, "character": 4},
                "end": {"line": line, "character": 10},
            },
        }
    return payload


def make_position(uri: str = "file:///src/foo/bar.cpp", line: int = 9, character: int = 4):
    return lsp.TextDocumentPositionParams(
        text_document=lsp.TextDocumentIdentifier(uri=uri),
        position=lsp.Position(line=line, character=character),
    )


class FakeBackend:
    """
    Scripted hierarchy backend.

    Responses are queued per key: ``("call", id)`` / ``("inheritance", id, derived)``,
    with ``id`` None for root queries that carry a position. A queued value that
    is an exception is raised; an ``(asyncio.Event, response)`` pair makes the request
    wait until the event is set before answering.
    """

    def __init__(self) -> None:
        self.responses: Dict[Tuple, List[Any]] = {}
        self.calls: List[Tuple[str, dict]] = []

    def add(self, key: Tuple, *responses: Any) -> None:
        self.responses.setdefault(key, []).extend(responses)

    def count(self, method: str) -> int:
        return sum(1 for m, _ in self.calls if m == method)

    async def call_hierarchy(self, params: dict) -> Any:
        self.calls.append(("call", params))
        return await self._answer(("call", params.get("id")))

    async def inheritance_hierarchy(self, params: dict) -> Any:
        self.calls.append(("inheritance", params))
        return await self._answer(("inheritance", params.get("id"), params["derived"]))

    async def _answer(self, key: Tuple) -> Any:
        queue = self.responses.get(key)
        if not queue:
            raise BackendError(str(key[0]), LookupError(f"no scripted response for {key}"))
        response = queue.pop(0)
        if isinstance(response, tuple):
            gate, response = response
            await gate.wait()
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def position():
    return make_position()


@pytest.fixture
def make_node():
    return node_payload
