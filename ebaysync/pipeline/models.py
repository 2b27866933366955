"""
Pydantic models for auto-listing pipeline jobs.
Serialized with camelCase keys for the dashboard.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..db.models import utcnow


class StepName(str, Enum):
    FETCH_PRODUCT = "fetch_product"
    GENERATE_DESCRIPTION = "generate_description"
    PROCESS_IMAGES = "process_images"
    CREATE_EBAY_LISTING = "create_ebay_listing"


# Fixed execution order of pipeline steps
STEP_NAMES: List[StepName] = [
    StepName.FETCH_PRODUCT,
    StepName.GENERATE_DESCRIPTION,
    StepName.PROCESS_IMAGES,
    StepName.CREATE_EBAY_LISTING,
]


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


class PipelineStep(BaseModel):
    """One stage of a pipeline job."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: StepName
    status: StepStatus = StepStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    result: Optional[str] = None


class PipelineJob(BaseModel):
    """Tracked lifecycle of one product's auto-listing run."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    product_id: str
    status: JobStatus = JobStatus.QUEUED
    steps: List[PipelineStep] = Field(
        default_factory=lambda: [PipelineStep(name=name) for name in STEP_NAMES]
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def derive_status(self) -> JobStatus:
        """
        Overall status from the step statuses.

        done if every step is done, else error if any step failed,
        else processing.
        """
        if all(step.status == StepStatus.DONE for step in self.steps):
            return JobStatus.DONE
        if any(step.status == StepStatus.ERROR for step in self.steps):
            return JobStatus.ERROR
        return JobStatus.PROCESSING
