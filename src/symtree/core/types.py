"""
Core type definitions for symtree.

Hierarchy nodes are parsed from backend responses with pydantic so that a
contract violation (missing ``id``/``numChildren``, a partially materialized
child list) is rejected at the boundary instead of leaking into the tree.
Locations are kept as ``lsprotocol`` types.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, List, Optional, Union

from lsprotocol import converters
from lsprotocol import types as lsp
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator, model_validator

from .errors import MalformedResponseError

_converter = converters.get_converter()

# Reserved name of the synthetic node grouping the supertypes of an
# inheritance root.
BASE_GROUP_NAME = "[[Base]]"

NodeId = Union[int, str, None]


class CallType(IntEnum):
    """Classification of a call edge, as a bitmask."""
    NORMAL = 0
    BASE = 1
    DERIVED = 2
    ALL = 3  # BASE | DERIVED


class HierarchyNode(BaseModel):
    """
    One vertex of a lazily materialized hierarchy.

    ``children`` is either empty or holds exactly ``num_children`` nodes.
    ``synthetic`` and ``revealed`` are client-side state and never part of
    the wire shape.
    """
    id: NodeId
    name: str
    kind: Optional[int] = None
    location: Optional[lsp.Location] = None
    num_children: int = Field(alias="numChildren", ge=0)
    children: List["HierarchyNode"] = Field(default_factory=list)

    synthetic: bool = Field(default=False, exclude=True)
    revealed: bool = Field(default=False, exclude=True)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    @field_validator("location", mode="before")
    @classmethod
    def _structure_location(cls, value: Any) -> Optional[lsp.Location]:
        if value is None or isinstance(value, lsp.Location):
            return value
        try:
            return _converter.structure(value, lsp.Location)
        except Exception as e:
            raise ValueError(f"invalid location: {e}") from e

    @field_serializer("location")
    def _unstructure_location(self, location: Optional[lsp.Location]) -> Any:
        if location is None:
            return None
        return _converter.unstructure(location)

    @model_validator(mode="after")
    def _check_materialized(self) -> "HierarchyNode":
        if self.children and len(self.children) != self.num_children:
            raise ValueError(
                f"node {self.id!r} reports numChildren={self.num_children} "
                f"but carries {len(self.children)} children"
            )
        return self

    @classmethod
    def from_wire(cls, payload: Any) -> "HierarchyNode":
        """
        Validate a raw backend payload into a node tree.

        Raises:
            MalformedResponseError: If the payload violates the node schema.
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError(f"expected an object, got {type(payload).__name__}")
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponseError(str(e)) from e

    @property
    def is_expandable(self) -> bool:
        return self.num_children > 0

    @property
    def is_expanded(self) -> bool:
        return self.num_children > 0 and len(self.children) == self.num_children

    @property
    def is_materialized(self) -> bool:
        """True when no backend round trip is needed to list the children."""
        return len(self.children) == self.num_children

    def iter_tree(self):
        """Yield this node and every materialized descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class CallHierarchyNode(HierarchyNode):
    """Node of a call hierarchy; ``call_type`` only drives the icon."""
    call_type: CallType = Field(default=CallType.NORMAL, alias="callType")
    children: List["CallHierarchyNode"] = Field(default_factory=list)


class InheritanceHierarchyNode(HierarchyNode):
    """
    Node of an inheritance hierarchy.

    ``wants_derived`` selects the direction used when this node is expanded:
    subtypes when True, supertypes when False.
    """
    wants_derived: bool = Field(default=True, exclude=True)
    children: List["InheritanceHierarchyNode"] = Field(default_factory=list)

    def with_direction(self, wants_derived: bool) -> "InheritanceHierarchyNode":
        """Return a copy of this subtree with every node tagged ``wants_derived``."""
        return self.model_copy(
            update={
                "wants_derived": wants_derived,
                "children": [c.with_direction(wants_derived) for c in self.children],
            }
        )

    @classmethod
    def base_group(cls, supertypes: List["InheritanceHierarchyNode"]) -> "InheritanceHierarchyNode":
        """Build the synthetic group node holding the supertype side of a root."""
        return cls(
            id=None,
            name=BASE_GROUP_NAME,
            num_children=len(supertypes),
            children=[c.with_direction(False) for c in supertypes],
            wants_derived=False,
            synthetic=True,
        )


class CallRequest(BaseModel):
    """Parameters of a call hierarchy query."""
    text_document: Optional[dict] = Field(default=None, alias="textDocument")
    position: Optional[dict] = None
    id: NodeId = None
    callee: bool = False
    call_type: CallType = Field(default=CallType.ALL, alias="callType")
    qualified: bool = False
    levels: int = 1
    hierarchy: bool = True

    model_config = ConfigDict(populate_by_name=True)

    def to_params(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class InheritanceRequest(BaseModel):
    """Parameters of a type inheritance query."""
    text_document: Optional[dict] = Field(default=None, alias="textDocument")
    position: Optional[dict] = None
    id: NodeId = None
    kind: Optional[int] = None
    derived: bool = True
    qualified: bool = False
    levels: int = 1
    hierarchy: bool = True

    model_config = ConfigDict(populate_by_name=True)

    def to_params(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def position_fields(position: lsp.TextDocumentPositionParams) -> dict:
    """Split a document position into the ``textDocument``/``position`` request fields."""
    return {
        "text_document": _converter.unstructure(position.text_document),
        "position": _converter.unstructure(position.position),
    }


class ServerInfo(BaseModel):
    """Index statistics reported by the backend's info request."""
    files: int = 0
    funcs: int = 0
    types: int = 0
    vars: int = 0
    entries: int = 0
    pending_index_requests: int = 0

    @classmethod
    def from_wire(cls, payload: Any) -> "ServerInfo":
        if not isinstance(payload, dict):
            raise MalformedResponseError(f"expected an object, got {type(payload).__name__}")
        db = payload.get("db") or {}
        pipeline = payload.get("pipeline") or {}
        project = payload.get("project") or {}
        try:
            return cls(
                files=db.get("files", 0),
                funcs=db.get("funcs", 0),
                types=db.get("types", 0),
                vars=db.get("vars", 0),
                entries=project.get("entries", 0),
                pending_index_requests=pipeline.get("pendingIndexRequests") or 0,
            )
        except ValidationError as e:
            raise MalformedResponseError(str(e)) from e

    def status_text(self) -> str:
        return f"{self.pending_index_requests} jobs"

    def tooltip_text(self) -> str:
        return (
            "Statistics:\n"
            f"  {self.files} files,\n"
            f"  {self.funcs} functions,\n"
            f"  {self.types} types,\n"
            f"  {self.vars} variables,\n"
            f"  {self.entries} entries in project.\n\n"
            f"  {self.pending_index_requests} pending index requests"
        )
