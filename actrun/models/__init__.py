"""Data models for actrun."""

from actrun.models.action import Action, ActionKind, ExecutionResult
from actrun.models.command import CommandFile, RunConfig
from actrun.models.params import (
    IntParam,
    MapParam,
    NullParam,
    NumberParam,
    Param,
    Params,
    PointParam,
    StringParam,
    decode_param,
)

__all__ = [
    "Action",
    "ActionKind",
    "CommandFile",
    "ExecutionResult",
    "IntParam",
    "MapParam",
    "NullParam",
    "NumberParam",
    "Param",
    "Params",
    "PointParam",
    "RunConfig",
    "StringParam",
    "decode_param",
]
