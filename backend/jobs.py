import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from propbuilder import FileTemplateStore, GenerationError, ObjectSpec, PropBuilder
from propbuilder.models import TemplateHandle

logger = logging.getLogger(__name__)


class JobState(str, Enum):
    queued = "queued"
    generating = "generating"
    saved = "saved"
    failed = "failed"


@dataclass
class GenerationJob:
    """One background generation of a validated ObjectSpec."""
    id: str
    spec: ObjectSpec
    state: JobState = JobState.queued
    progress: float = 0.0
    message: str = "Queued"
    templates: List[TemplateHandle] = field(default_factory=list)
    failed_stage: Optional[str] = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def result(self) -> Optional[dict]:
        if self.state is not JobState.saved:
            return None
        return {
            "category": self.spec.category.value,
            "object_name": self.spec.name or None,
            "templates": [{"artifact": h.artifact, "path": h.path}
                          for h in self.templates],
        }

    def to_response(self) -> dict:
        """Fields of backend.models.JobResponse."""
        return {
            "job_id": self.id,
            "status": self.state.value,
            "category": self.spec.category.value,
            "progress": self.progress,
            "message": self.message,
            "failed_stage": self.failed_stage,
            "result": self.result,
        }


def _sync_generate(spec: ObjectSpec, progress_callback=None) -> List[TemplateHandle]:
    """Generate and save every template of *spec*; runs in a worker thread."""
    from backend import config as _cfg

    store = FileTemplateStore(_cfg.OUTPUT_DIR, preview=_cfg.PREVIEW)
    return PropBuilder(store=store).generate(spec, progress_callback=progress_callback)


class JobManager:
    def __init__(self) -> None:
        self.jobs: dict = {}  # job id → GenerationJob

    def submit(self, spec: ObjectSpec) -> GenerationJob:
        job = GenerationJob(id=uuid.uuid4().hex, spec=spec)
        self.jobs[job.id] = job
        logger.info(f"Queued {spec.category.value} generation {job.id}")
        return job

    def get(self, job_id: str) -> Optional[GenerationJob]:
        return self.jobs.get(job_id)

    async def run_generate(self, job: GenerationJob) -> None:
        """Generate *job*'s templates off the event loop, tracking progress."""
        job.state = JobState.generating

        def _update_progress(pct: float, msg: str) -> None:
            job.progress = pct
            job.message = msg

        try:
            job.templates = await asyncio.to_thread(
                _sync_generate, job.spec, progress_callback=_update_progress)
        except Exception as exc:
            logger.exception("Generation failed for job %s", job.id)
            job.state = JobState.failed
            job.failed_stage = exc.stage if isinstance(exc, GenerationError) else None
            job.message = f"Generation failed: {exc}"
        else:
            job.state = JobState.saved
            job.message = f"Saved {len(job.templates)} templates"
        finally:
            job.finished_at = datetime.now(timezone.utc)


# Shared by the routers
job_manager = JobManager()
