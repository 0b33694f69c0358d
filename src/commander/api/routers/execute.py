"""
Execute router — the pipeline trigger.

POST /execute

No request body.  ``204 No Content`` on success; a problem document naming
the failing command on failure (see :mod:`commander.api.errors`).
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from commander.api.deps import Conn, Pipeline
from commander.api.schemas import ProblemDetail

router = APIRouter()


@router.post(
    "/execute",
    status_code=204,
    response_class=Response,
    responses={
        409: {"model": ProblemDetail, "description": "A run is already in progress"},
        500: {"model": ProblemDetail, "description": "A command failed; the run was rolled back"},
    },
)
def execute(pipeline: Pipeline, conn: Conn) -> Response:
    """Run all enabled commands in one transaction."""
    pipeline.execute(conn, caller="api")
    return Response(status_code=204)
