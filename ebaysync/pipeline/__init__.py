"""
Auto-listing pipeline job tracking.
"""

from .models import PipelineJob, PipelineStep, StepName, StepStatus, JobStatus, STEP_NAMES
from .tracker import (
    PipelineJobTracker,
    MAX_JOBS,
    tracker,
    create_pipeline_job,
    start_pipeline_job,
    update_pipeline_step,
    get_pipeline_jobs,
    get_pipeline_job,
)

__all__ = [
    "PipelineJob",
    "PipelineStep",
    "StepName",
    "StepStatus",
    "JobStatus",
    "STEP_NAMES",
    "PipelineJobTracker",
    "MAX_JOBS",
    "tracker",
    "create_pipeline_job",
    "start_pipeline_job",
    "update_pipeline_step",
    "get_pipeline_jobs",
    "get_pipeline_job",
]
