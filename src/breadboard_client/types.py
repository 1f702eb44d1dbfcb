"""
Request and response models for the board server catalog endpoints.
Unknown keys are kept so newer server versions do not break parsing.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Schema(BaseModel):
    """
    JSON-schema subset used by boards to describe their inputs and outputs.
    ``behavior`` carries Breadboard hints such as "llm-content" or "bubble".
    """
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[Union[str, list[str]]] = None
    properties: Optional[dict[str, "Schema"]] = None
    required: Optional[list[str]] = None
    behavior: Optional[list[str]] = None


class BoardListEntry(BaseModel):
    """One board as returned by ``GET /boards``."""
    model_config = ConfigDict(extra="allow")

    title: str
    description: Optional[str] = None
    path: str
    username: str
    readonly: bool
    mine: bool
    tags: list[str] = Field(default_factory=list)


class BoardDescribeResponse(BaseModel):
    """Input/output contract of a board, from ``POST .../{board}.api/describe``."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    input_schema: Schema = Field(alias="inputSchema")
    output_schema: Schema = Field(alias="outputSchema")
    title: Optional[str] = None
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class NodeDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    configuration: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = None


class EdgeDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    out: Optional[str] = None
    in_: Optional[str] = Field(default=None, alias="in")
    metadata: Optional[dict[str, Any]] = None


class GraphDescriptor(BaseModel):
    """Raw board graph, from ``GET /boards/@{user}/{board}.json``."""
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    nodes: list[NodeDescriptor]
    edges: list[EdgeDescriptor]
    main: Optional[str] = None


class BoardRequest(BaseModel):
    """Arguments of a run/invoke call."""
    model_config = ConfigDict(extra="forbid")

    user: str
    board: str
    data: dict[str, Any] = Field(default_factory=dict)
    next: Optional[str] = None

    def run_payload(self, api_key: str) -> dict[str, Any]:
        payload: dict[str, Any] = {"$key": api_key}
        if self.next is not None:
            payload["$next"] = self.next
        payload.update(self.data)
        return payload

    def invoke_payload(self, api_key: str) -> dict[str, Any]:
        return {"$key": api_key, **self.data}
