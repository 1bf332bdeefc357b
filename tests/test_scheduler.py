"""Tests for the recurring job scheduler."""

import threading

import schedule

from content_ingest.config import PipelineConfig, ScheduleConfig
from content_ingest.scheduler import CLEANUP_JOB, CONTENT_FETCH_JOB, IngestionScheduler


class FakeRecords:
    def __init__(self):
        self.purged = []

    def purge_processed(self, older_than):
        self.purged.append(older_than)
        return 4


class FakeDatabase:
    def __init__(self):
        self.records = FakeRecords()


class FakePipeline:
    """Stands in for IngestionPipeline; records batch runs."""

    def __init__(self, fail: bool = False):
        self.db = FakeDatabase()
        self.runs: list[int] = []
        self.fail = fail
        self.closed = False

    def run_all(self, max_posts_per_company=None):
        self.runs.append(max_posts_per_company)
        if self.fail:
            raise RuntimeError("batch exploded")
        return ["record"] * 2

    def close(self):
        self.closed = True


def make_scheduler(pipeline=None, **schedule_kwargs):
    config = PipelineConfig(schedule=ScheduleConfig(**schedule_kwargs))
    sched = schedule.Scheduler()
    return IngestionScheduler(config, pipeline or FakePipeline(), scheduler=sched), sched


def test_initialize_registers_both_jobs():
    scheduler, sched = make_scheduler()
    scheduler.initialize(start_runner=False)

    assert scheduler.status() == {CONTENT_FETCH_JOB: True, CLEANUP_JOB: True}
    assert len(sched.jobs) == 2


def test_initialize_is_idempotent():
    scheduler, sched = make_scheduler()
    scheduler.initialize(start_runner=False)
    scheduler.initialize(start_runner=False)

    assert len(sched.jobs) == 2


def test_job_cadence_follows_config():
    scheduler, _ = make_scheduler(fetch_interval_minutes=15, cleanup_at="03:30")
    scheduler.initialize(start_runner=False)

    fetch = scheduler.jobs[CONTENT_FETCH_JOB]
    cleanup = scheduler.jobs[CLEANUP_JOB]
    assert fetch.interval == 15 and fetch.unit == "minutes"
    assert cleanup.unit == "days"
    assert cleanup.at_time.hour == 3 and cleanup.at_time.minute == 30


def test_stop_all_cancels_and_clears():
    scheduler, sched = make_scheduler()
    scheduler.initialize(start_runner=False)

    scheduler.stop_all()

    assert sched.jobs == []
    assert scheduler.status() == {}


def test_restart_re_registers_jobs():
    scheduler, sched = make_scheduler()
    scheduler.initialize(start_runner=False)
    try:
        scheduler.restart_all()
        assert scheduler.status() == {CONTENT_FETCH_JOB: True, CLEANUP_JOB: True}
        assert len(sched.jobs) == 2
    finally:
        scheduler.shutdown()


def test_status_reflects_underlying_scheduler():
    """A job cancelled behind our back reports as not scheduled."""
    scheduler, sched = make_scheduler()
    scheduler.initialize(start_runner=False)

    sched.cancel_job(scheduler.jobs[CLEANUP_JOB])

    assert scheduler.status() == {CONTENT_FETCH_JOB: True, CLEANUP_JOB: False}


def test_scheduled_fetch_uses_scheduled_cap():
    pipeline = FakePipeline()
    scheduler, sched = make_scheduler(pipeline, fetch_max_posts=3)
    scheduler.initialize(start_runner=False)

    sched.run_all()

    assert pipeline.runs == [3]


def test_scheduled_fetch_errors_are_swallowed():
    pipeline = FakePipeline(fail=True)
    scheduler, sched = make_scheduler(pipeline)
    scheduler.initialize(start_runner=False)

    sched.run_all()

    assert pipeline.runs == [3]
    assert scheduler.status()[CONTENT_FETCH_JOB] is True


def test_cleanup_is_noop_without_retention():
    pipeline = FakePipeline()
    scheduler, sched = make_scheduler(pipeline, retention_days=0)
    scheduler.initialize(start_runner=False)

    sched.run_all()

    assert pipeline.db.records.purged == []


def test_cleanup_purges_with_retention():
    pipeline = FakePipeline()
    scheduler, sched = make_scheduler(pipeline, retention_days=30)
    scheduler.initialize(start_runner=False)

    sched.run_all()

    assert len(pipeline.db.records.purged) == 1


def test_trigger_now_runs_batch_outside_schedule():
    pipeline = FakePipeline()
    scheduler, _ = make_scheduler(pipeline)

    saved = scheduler.trigger_now(7)

    assert pipeline.runs == [7]
    assert len(saved) == 2
    assert scheduler.status() == {}


def test_trigger_now_defaults_to_configured_cap():
    pipeline = FakePipeline()
    scheduler, _ = make_scheduler(pipeline)

    scheduler.trigger_now()

    assert pipeline.runs == [5]


def test_shutdown_closes_pipeline():
    pipeline = FakePipeline()
    scheduler, sched = make_scheduler(pipeline)
    scheduler.initialize()

    scheduler.shutdown()

    assert pipeline.closed
    assert sched.jobs == []


def test_disabled_schedule_registers_nothing():
    scheduler, sched = make_scheduler(enabled=False)
    scheduler.initialize()

    assert sched.jobs == []
    assert scheduler.status() == {}
    assert scheduler._thread is None


def test_trigger_now_honours_explicit_zero_cap():
    pipeline = FakePipeline()
    scheduler, _ = make_scheduler(pipeline)

    scheduler.trigger_now(0)

    assert pipeline.runs == [0]


def test_shutdown_waits_for_in_flight_run():
    started = threading.Event()
    release = threading.Event()
    finished = []
    pipeline = FakePipeline()
    scheduler, _ = make_scheduler(pipeline)
    scheduler.poll_seconds = 0.01

    def busy_run():
        started.set()
        release.wait(5)
        finished.append(pipeline.closed)

    scheduler.run_pending = busy_run
    scheduler.initialize()
    assert started.wait(5)

    closer = threading.Thread(target=scheduler.shutdown)
    closer.start()
    closer.join(0.2)
    assert closer.is_alive()
    assert not pipeline.closed

    release.set()
    closer.join(5)
    assert finished == [False]
    assert pipeline.closed
