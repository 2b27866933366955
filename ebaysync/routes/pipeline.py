"""
Pipeline job status routes.
"""

from fastapi import APIRouter

from ..errors import NotFoundError
from ..pipeline import get_pipeline_job, get_pipeline_jobs

router = APIRouter(prefix="/api/pipeline")


@router.get("/jobs")
async def list_jobs():
    """All pipeline jobs, most recent first."""
    jobs = get_pipeline_jobs()
    return {
        "jobs": [job.model_dump(mode="json", by_alias=True) for job in jobs],
        "count": len(jobs),
    }


@router.get("/jobs/{job_id}")
async def get_job(job_id: str):
    job = get_pipeline_job(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return job.model_dump(mode="json", by_alias=True)
