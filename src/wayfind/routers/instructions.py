"""Instruction endpoints: segment preview, streamed generation, bulk generation, display."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from wayfind.config import settings
from wayfind.core.bulk import generate_bulk
from wayfind.core.engine import prepare_path
from wayfind.core.models import InstructionSet, PathRecord, Room, StepSize
from wayfind.core.parser import parse_completion
from wayfind.core.steps import adjust_instruction_set
from wayfind.errors import ConfigurationError, ProviderError
from wayfind.providers.factory import build_provider
from wayfind.store.instructions import get_store

log = logging.getLogger(__name__)

router = APIRouter(prefix="/instructions", tags=["instructions"])


class PathRequest(BaseModel):
    path: PathRecord
    rooms: List[Room] = []
    provider: str = Field(default_factory=lambda: settings.default_provider)


class SegmentOut(BaseModel):
    direction: str
    steps: int
    nearby_rooms: List[str] = []
    relative_direction: Optional[str] = None
    facing_direction: Optional[str] = None


class PreparedOut(BaseModel):
    path_id: str
    segments: List[SegmentOut]
    concise_instructions: List[str]
    prompt: str


class ParseRequest(BaseModel):
    text: str


class ParseOut(BaseModel):
    steps: List[str]
    concise_instructions: List[str]


class BulkRequest(BaseModel):
    paths: List[PathRecord] = Field(..., min_length=1)
    # Rooms keyed by path_id; paths on the same floor may share one list
    rooms: Dict[str, List[Room]] = {}
    provider: str = Field(default_factory=lambda: settings.default_provider)


class PathResultOut(BaseModel):
    path_id: str
    success: bool
    error: Optional[str] = None


class BulkOut(BaseModel):
    total: int
    succeeded: int
    failed: int
    results: List[PathResultOut]


def _provider_or_400(provider_str: str):
    try:
        return build_provider(provider_str)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/segments", response_model=PreparedOut)
def preview_segments(req: PathRequest):
    prepared = prepare_path(req.path, req.rooms)
    return PreparedOut(
        path_id=prepared.path_id,
        segments=[SegmentOut(**s.to_dict()) for s in prepared.segments],
        concise_instructions=prepared.concise_instructions,
        prompt=prepared.prompt,
    )


@router.post("/generate")
def generate_stream(req: PathRequest):
    """Stream the raw delimited completion; the client parses growing prefixes."""
    provider = _provider_or_400(req.provider)
    prepared = prepare_path(req.path, req.rooms)
    stream = provider.stream_text(prepared.prompt)

    # Pull the first delta here so setup failures become proper status codes.
    try:
        first = next(stream, "")
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=e.message)

    def body():
        if first:
            yield first
        yield from stream

    return StreamingResponse(body(), media_type="text/plain; charset=utf-8")


@router.post("/parse", response_model=ParseOut)
def parse(req: ParseRequest):
    parsed = parse_completion(req.text)
    return ParseOut(steps=parsed.steps, concise_instructions=parsed.concise_instructions)


@router.post("/bulk", response_model=BulkOut)
def bulk_generate(req: BulkRequest):
    provider = _provider_or_400(req.provider)
    report = generate_bulk(
        req.paths, req.rooms, provider, get_store(), batch_size=settings.bulk_batch_size,
    )
    return BulkOut(
        total=report.total,
        succeeded=report.succeeded,
        failed=report.failed,
        results=[PathResultOut(path_id=r.path_id, success=r.success, error=r.error) for r in report.results],
    )


@router.get("/{path_id}", response_model=InstructionSet)
def get_instructions(path_id: str, step_size: StepSize = StepSize.MEDIUM):
    """Stored set with step counts rescaled for the caller's stride."""
    stored = get_store().get(path_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Instructions not found")
    return adjust_instruction_set(stored, step_size)


@router.put("/{path_id}", response_model=InstructionSet)
def save_instructions(path_id: str, body: InstructionSet):
    if body.path_id != path_id:
        raise HTTPException(status_code=400, detail="path_id mismatch")
    if not body.descriptive_instructions:
        raise HTTPException(status_code=400, detail="No descriptive instructions to save")
    return get_store().upsert(body)


@router.delete("/{path_id}", status_code=204)
def delete_instructions(path_id: str):
    if not get_store().delete(path_id):
        raise HTTPException(status_code=404, detail="Instructions not found")
    return None
