"""User stride preference: GET/PUT /settings/{user_id}/step-size."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from wayfind.core.models import StepSize
from wayfind.store.instructions import get_store

router = APIRouter(prefix="/settings", tags=["settings"])


class StepSizeBody(BaseModel):
    step_size: StepSize


@router.get("/{user_id}/step-size", response_model=StepSizeBody)
def get_step_size(user_id: str):
    return StepSizeBody(step_size=get_store().get_step_size(user_id))


@router.put("/{user_id}/step-size", response_model=StepSizeBody)
def update_step_size(user_id: str, body: StepSizeBody):
    try:
        saved = get_store().set_step_size(user_id, body.step_size)
    except Exception:
        raise HTTPException(status_code=500, detail="Could not update user settings")
    return StepSizeBody(step_size=saved)
