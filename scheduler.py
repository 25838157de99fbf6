# scheduler.py
import schedule
from config import *
from ec2_utils import connect_ec2, start_instance, stop_instance
from lifecycle_manager import periodic_check
from logger import log

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# -----------------------
# Scheduled Start / Stop
# -----------------------

def scheduled_start(instance_id=None, ec2=None):
    """Start the devbox at the configured time. Tags are left to the state-change handler."""
    instance_id = instance_id or INSTANCE_ID
    log(f"[⏰] Scheduled start triggered for {instance_id}.")

    ec2 = ec2 or connect_ec2()
    if not ec2:
        log("[!] Cannot connect to EC2, skipping start.", "error")
        return False

    try:
        start_instance(ec2, instance_id)
    except Exception as e:
        log(f"[!] Failed to start {instance_id}: {e}", "error")
        return False
    return True


def scheduled_stop(instance_id=None, ec2=None):
    instance_id = instance_id or INSTANCE_ID
    log(f"[⏰] Scheduled stop triggered for {instance_id}.")

    ec2 = ec2 or connect_ec2()
    if not ec2:
        log("[!] Cannot connect to EC2, skipping stop.", "error")
        return False

    try:
        stop_instance(ec2, instance_id)
    except Exception as e:
        log(f"[!] Failed to stop {instance_id}: {e}", "error")
        return False
    return True


def run_check():
    try:
        result = periodic_check()
        log(f"[Info] Fail-safe check: {result['message']}")
    except Exception as e:
        log(f"[!] Fail-safe check failed: {e}", "error")

# -----------------------
# Job registration
# -----------------------

def parse_days(days):
    """Turn 'mon,Tue,friday' into full lowercase weekday names."""
    names = []
    for part in days.split(","):
        part = part.strip().lower()
        if not part:
            continue
        found = [d for d in WEEKDAYS if d.startswith(part)]
        if len(part) < 3 or not found:
            raise ValueError(f"Unknown weekday: {part!r}")
        names.append(found[0])
    return names


def register_jobs(scheduler=schedule, start_time=SCHEDULE_START_TIME, stop_time=SCHEDULE_STOP_TIME,
                  days=SCHEDULE_DAYS, tz=SCHEDULE_TIMEZONE, interval=CHECK_INTERVAL_MINUTES):
    """Register start/stop jobs per weekday plus the periodic fail-safe check."""
    jobs = []
    for day in parse_days(days):
        if start_time:
            jobs.append(getattr(scheduler.every(), day).at(start_time, tz).do(scheduled_start))
        if stop_time:
            jobs.append(getattr(scheduler.every(), day).at(stop_time, tz).do(scheduled_stop))

    jobs.append(scheduler.every(interval).minutes.do(run_check))
    return jobs
