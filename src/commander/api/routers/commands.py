"""
Command introspection and liveness.

GET /commands
GET /health
"""

from __future__ import annotations

from fastapi import APIRouter

from commander.api.deps import Pipeline
from commander.api.schemas import CommandSchema, HealthSchema

router = APIRouter()


@router.get("/commands", response_model=list[CommandSchema])
def list_commands(pipeline: Pipeline) -> list[CommandSchema]:
    """Registered commands in execution order, with their filter outcome."""
    return [
        CommandSchema(
            name=cmd.name,
            order=cmd.order,
            cls=cmd.__class__.__name__,
            description=cmd.description,
            enabled=pipeline.name_filter.matches(cmd.name),
        )
        for cmd in pipeline.commands
    ]


@router.get("/health", response_model=HealthSchema)
def health(pipeline: Pipeline) -> HealthSchema:
    return HealthSchema(status="ok", running=pipeline.is_running)
