"""
Tests for the pipeline job tracker.
"""

import threading

import pytest

from ebaysync.pipeline import (
    STEP_NAMES,
    JobStatus,
    PipelineJobTracker,
    StepStatus,
    create_pipeline_job,
    get_pipeline_job,
    get_pipeline_jobs,
    start_pipeline_job,
    update_pipeline_step,
)


def step(job, name):
    return next(s for s in job.steps if s.name.value == name)


class TestCreateJob:
    """Tests for job creation."""

    def test_new_job_is_queued_with_pending_steps(self):
        job_id = create_pipeline_job("p1")
        job = get_pipeline_job(job_id)

        assert job.product_id == "p1"
        assert job.status == JobStatus.QUEUED
        assert [s.name for s in job.steps] == STEP_NAMES
        assert [s.name.value for s in job.steps] == [
            "fetch_product", "generate_description", "process_images", "create_ebay_listing"
        ]
        assert all(s.status == StepStatus.PENDING for s in job.steps)
        assert all(s.started_at is None and s.completed_at is None for s in job.steps)

    def test_ids_are_unique_and_ordered(self):
        ids = [create_pipeline_job(f"p{i}") for i in range(50)]
        assert len(set(ids)) == 50

    def test_jobs_listed_most_recent_first(self):
        first = create_pipeline_job("p1")
        second = create_pipeline_job("p2")
        third = create_pipeline_job("p3")

        assert [job.id for job in get_pipeline_jobs()] == [third, second, first]

    def test_unknown_job_not_found(self):
        assert get_pipeline_job("job_missing") is None


class TestEviction:
    """Tests for the FIFO capacity bound."""

    def test_201st_job_evicts_the_first(self):
        tracker = PipelineJobTracker(max_jobs=200)
        ids = [tracker.create_job(f"p{i}") for i in range(201)]

        assert len(tracker) == 200
        assert tracker.get_job(ids[0]) is None
        assert tracker.get_job(ids[1]) is not None
        assert tracker.get_job(ids[200]) is not None

    def test_eviction_ignores_access(self):
        tracker = PipelineJobTracker(max_jobs=2)
        first = tracker.create_job("p1")
        second = tracker.create_job("p2")

        # Touching the oldest job does not protect it
        tracker.update_step(first, "fetch_product", "running")
        tracker.get_job(first)

        third = tracker.create_job("p3")

        assert tracker.get_job(first) is None
        assert [job.id for job in tracker.get_jobs()] == [third, second]

    def test_concurrent_creation_keeps_bound(self):
        tracker = PipelineJobTracker(max_jobs=50)

        def worker():
            for i in range(40):
                tracker.create_job(f"p{i}")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(tracker) == 50
        assert len(tracker.get_jobs()) == 50

    def test_max_jobs_must_be_positive(self):
        with pytest.raises(ValueError):
            PipelineJobTracker(max_jobs=0)


class TestUpdateStep:
    """Tests for step transitions and derived job status."""

    def test_start_marks_processing(self):
        job_id = create_pipeline_job("p1")
        start_pipeline_job(job_id)
        assert get_pipeline_job(job_id).status == JobStatus.PROCESSING

    def test_start_unknown_job_is_noop(self):
        start_pipeline_job("job_missing")

    def test_running_stamps_started_at(self):
        job_id = create_pipeline_job("p1")
        update_pipeline_step(job_id, "fetch_product", "running")

        job = get_pipeline_job(job_id)
        fetch = step(job, "fetch_product")
        assert fetch.status == StepStatus.RUNNING
        assert fetch.started_at is not None
        assert fetch.completed_at is None
        assert job.status == JobStatus.PROCESSING

    def test_done_stamps_completed_at_and_result(self):
        job_id = create_pipeline_job("p1")
        update_pipeline_step(job_id, "fetch_product", "running")
        update_pipeline_step(job_id, "fetch_product", "done", "Fetched Canon 5D")

        fetch = step(get_pipeline_job(job_id), "fetch_product")
        assert fetch.completed_at is not None
        assert fetch.completed_at >= fetch.started_at
        assert fetch.result == "Fetched Canon 5D"

    def test_error_wins_over_pending(self):
        job_id = create_pipeline_job("p1")
        update_pipeline_step(job_id, "fetch_product", "done")
        update_pipeline_step(job_id, "generate_description", "done")
        update_pipeline_step(job_id, "process_images", "error", "Image too large")

        job = get_pipeline_job(job_id)
        assert step(job, "create_ebay_listing").status == StepStatus.PENDING
        assert job.status == JobStatus.ERROR

    def test_all_done_is_done(self):
        job_id = create_pipeline_job("p1")
        for name in STEP_NAMES:
            update_pipeline_step(job_id, name, StepStatus.RUNNING)
            update_pipeline_step(job_id, name, StepStatus.DONE)

        assert get_pipeline_job(job_id).status == JobStatus.DONE

    def test_partial_progress_is_processing(self):
        job_id = create_pipeline_job("p1")
        update_pipeline_step(job_id, "fetch_product", "done")
        assert get_pipeline_job(job_id).status == JobStatus.PROCESSING

    def test_unknown_job_or_step_is_noop(self):
        job_id = create_pipeline_job("p1")
        update_pipeline_step("job_missing", "fetch_product", "done")
        update_pipeline_step(job_id, "publish_to_amazon", "done")

        job = get_pipeline_job(job_id)
        assert job.status == JobStatus.QUEUED
        assert all(s.status == StepStatus.PENDING for s in job.steps)

    def test_invalid_status_rejected(self):
        job_id = create_pipeline_job("p1")
        with pytest.raises(ValueError):
            update_pipeline_step(job_id, "fetch_product", "finished")

    def test_returned_jobs_are_snapshots(self):
        job_id = create_pipeline_job("p1")
        snapshot = get_pipeline_job(job_id)
        snapshot.steps[0].status = StepStatus.ERROR

        assert get_pipeline_job(job_id).steps[0].status == StepStatus.PENDING

    def test_camel_case_serialization(self):
        job_id = create_pipeline_job("p1")
        update_pipeline_step(job_id, "fetch_product", "running")

        data = get_pipeline_job(job_id).model_dump(mode="json", by_alias=True)
        assert data["productId"] == "p1"
        assert "createdAt" in data and "updatedAt" in data
        assert data["steps"][0]["startedAt"] is not None
