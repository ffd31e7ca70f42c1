import asyncio
import logging

from fastapi import APIRouter, HTTPException

from backend.jobs import job_manager
from backend.models import GenerateRequest, JobResponse
from propbuilder import object_spec_from_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/generate", tags=["generate"])

# Keeps background tasks alive until they finish.
_tasks: set = set()


@router.post("", response_model=JobResponse)
async def generate_templates(request: GenerateRequest):
    """Start a template generation.

    The spec is validated up front so that missing inputs are reported
    immediately as 422.  Generation itself runs in a background task; the
    caller receives a job ID and can poll ``/status/{job_id}``.
    """
    spec_data = request.to_spec_dict()
    try:
        spec = object_spec_from_dict(spec_data)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    errors = spec.validation_errors()
    if errors:
        raise HTTPException(status_code=422, detail=errors)

    job = job_manager.submit(spec)
    task = asyncio.create_task(job_manager.run_generate(job))
    _tasks.add(task)
    task.add_done_callback(_tasks.discard)

    return JobResponse(**job.to_response())


@router.get("/status/{job_id}", response_model=JobResponse)
async def get_generate_status(job_id: str):
    """Poll the status of a running or completed generation job."""
    job = job_manager.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    return JobResponse(**job.to_response())
