"""Program analytics: effective sets per muscle and estimated time per template."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from liftlog.api.deps import get_registry
from liftlog.schemas.analytics import ProgramAnalysisRequest, ProgramReport
from liftlog.services.program_analyzer import analyze_program
from liftlog.services.registry import SessionRegistry

router = APIRouter()


@router.post("/program", response_model=ProgramReport)
async def program_report(
    payload: ProgramAnalysisRequest,
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Analyze the selected templates as one program.

    Warmup/drop counting and seconds-per-set come from the current settings
    unless overridden in the request, so the same templates can be reported
    under different flags.
    """
    storage = registry.storage
    settings = registry.settings
    templates = await storage.get_templates(payload.template_ids)
    if not templates:
        raise HTTPException(status_code=404, detail="Templates not found")
    custom = await storage.list_custom_exercises()

    count_warmup = payload.count_warmup_as_effective
    if count_warmup is None:
        count_warmup = settings.count_warmup_as_effective
    count_drop = payload.count_drop_set_as_effective
    if count_drop is None:
        count_drop = settings.count_drop_set_as_effective
    seconds_per_set = payload.seconds_per_set
    if seconds_per_set is None:
        seconds_per_set = settings.seconds_per_set

    analysis = analyze_program(templates, custom_exercises=custom)
    return analysis.report(count_warmup, count_drop, seconds_per_set)
