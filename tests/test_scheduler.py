import pytest
import schedule

import scheduler
from conftest import INSTANCE


def test_parse_days_accepts_short_and_long_names():
    assert scheduler.parse_days("mon, Tue,friday") == ["monday", "tuesday", "friday"]
    assert scheduler.parse_days("") == []


@pytest.mark.parametrize("days", ["funday", "mo", "monkey", "thursdayz"])
def test_parse_days_rejects_unknown(days):
    with pytest.raises(ValueError):
        scheduler.parse_days(days)


def test_register_jobs_per_weekday_plus_check():
    sched = schedule.Scheduler()

    jobs = scheduler.register_jobs(
        sched, start_time="08:30", stop_time="19:00",
        days="mon,wed", tz="Europe/Berlin", interval=60,
    )

    assert len(jobs) == 5
    assert len(sched.get_jobs()) == 5
    assert [j.start_day for j in jobs[:4]] == ["monday", "monday", "wednesday", "wednesday"]
    assert [j.job_func.func for j in jobs[:2]] == [scheduler.scheduled_start, scheduler.scheduled_stop]
    assert jobs[0].at_time.strftime("%H:%M") == "08:30"
    assert jobs[1].at_time.strftime("%H:%M") == "19:00"
    assert jobs[-1].interval == 60
    assert jobs[-1].unit == "minutes"
    assert jobs[-1].job_func.func is scheduler.run_check


def test_empty_stop_time_disables_stop_job():
    sched = schedule.Scheduler()

    jobs = scheduler.register_jobs(sched, start_time="08:00", stop_time="", days="fri", tz="UTC", interval=30)

    assert [j.job_func.func for j in jobs] == [scheduler.scheduled_start, scheduler.run_check]


def test_scheduled_start_and_stop(ec2):
    ec2.add(state="stopped")

    assert scheduler.scheduled_start(INSTANCE, ec2=ec2) is True
    assert scheduler.scheduled_stop(INSTANCE, ec2=ec2) is True
    assert ec2.mutations == ["start_instances", "stop_instances"]
    assert "LastStartedAt" not in ec2.tags()


def test_scheduled_stop_failure_is_logged_not_raised(ec2):
    ec2.add()
    ec2.fail_on.add("stop_instances")

    assert scheduler.scheduled_stop(INSTANCE, ec2=ec2) is False


def test_run_check_swallows_errors(monkeypatch):
    def boom():
        raise RuntimeError("EC2 API unavailable")

    monkeypatch.setattr(scheduler, "periodic_check", boom)

    scheduler.run_check()
