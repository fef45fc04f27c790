"""Lookup result types shared by the inventory client and resolver."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class Found(BaseModel):
    """A value was found."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["found"] = "found"
    value: str


class Absent(BaseModel):
    """Nothing usable was found. This is not an error."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["absent"] = "absent"


class NotFound(BaseModel):
    """The inventory has no record with the requested name."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["not-found"] = "not-found"
    name: str


class LookupFailed(BaseModel):
    """The inventory could not be queried or its answer was unusable."""

    model_config = ConfigDict(frozen=True)
    kind: Literal["lookup-failed"] = "lookup-failed"
    reason: str


AttributeLookup = Union[Found, Absent]
AlternateLookup = Union[Found, Absent, LookupFailed]
