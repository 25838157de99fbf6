import math
from datetime import datetime, timezone

from config import *
from ec2_utils import connect_ec2, describe_instance, merge_tags, stop_instance, utcnow
from events import PeriodicCheck, StateChanged, parse_event
from logger import log
from notify import send_notification

# -----------------------
# Helpers
# -----------------------

def _result(ok, action, message, **extra):
    return {"ok": ok, "action": action, "message": message, **extra}


def _require_ec2(ec2):
    if ec2 is not None:
        return ec2
    ec2 = connect_ec2()
    if ec2 is None:
        raise RuntimeError("EC2 API unavailable")
    return ec2


def parse_defer_hours(value):
    """Deferral in hours from the tag value; anything unusable counts as 0."""
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(hours):
        return 0.0
    return hours


def parse_timestamp(value):
    """Parse an ISO-8601 timestamp as an aware UTC datetime, or None."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(text)
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def effective_threshold(base_hours, tags):
    return float(base_hours) + parse_defer_hours(tags.get(TAG_DEFER_HOURS))


def reference_start(instance):
    """LastStartedAt when it parses, otherwise the instance's launch time."""
    started = parse_timestamp(instance["tags"].get(TAG_LAST_STARTED))
    if started is not None:
        return started
    launch_time = instance.get("launch_time")
    if isinstance(launch_time, str):
        launch_time = parse_timestamp(launch_time)
    elif launch_time is not None and launch_time.tzinfo is None:
        launch_time = launch_time.replace(tzinfo=timezone.utc)
    return launch_time


def elapsed_hours(instance, now):
    start = reference_start(instance)
    if start is None:
        return 0.0
    return (now - start).total_seconds() / 3600


def restart_command(instance_id):
    return f"aws ec2 start-instances --instance-ids {instance_id}"

# -----------------------
# Event paths
# -----------------------

def on_state_change(instance_id, state, ec2=None, now=None):
    """Stamp LastStartedAt and clear the deferral when the instance enters running."""
    if state != "running":
        log(f"[Info] {instance_id} is now '{state}', nothing to record.")
        return _result(True, "none", f"ignored state '{state}'")

    ec2 = _require_ec2(ec2)
    now = now or utcnow()
    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    merge_tags(ec2, instance_id, {TAG_LAST_STARTED: stamp, TAG_DEFER_HOURS: "0"})
    return _result(True, "tagged", f"{TAG_LAST_STARTED} set to {stamp}", started_at=stamp)


def periodic_check(ec2=None, instance_id=None, stop_after_hours=None, topic=None, now=None):
    """Fail-safe: stop the instance once it has run past its threshold.

    Scheduled stops are the primary mechanism; this only catches a stop that
    never fired or a manual start that was forgotten. The next timer firing
    is the retry, so nothing here loops.
    """
    instance_id = instance_id or INSTANCE_ID
    base_hours = STOP_AFTER_HOURS if stop_after_hours is None else stop_after_hours
    topic = NTFY_TOPIC if topic is None else topic

    ec2 = _require_ec2(ec2)
    instance = describe_instance(ec2, instance_id)
    if instance is None:
        log(f"[!] Instance {instance_id} not found, check INSTANCE_ID.", "error")
        return _result(False, "not_found", f"instance {instance_id} not found")

    if instance["state"] != "running":
        return _result(True, "none", f"instance is {instance['state']}")

    threshold = effective_threshold(base_hours, instance["tags"])
    elapsed = elapsed_hours(instance, now or utcnow())

    if elapsed < threshold:
        return _result(
            True, "none", "no action needed",
            elapsed_hours=round(elapsed, 2), threshold_hours=threshold,
        )

    log(f"[⏰] {instance_id} running {elapsed:.1f}h (limit {threshold:g}h), stopping.", "warning")
    stop_instance(ec2, instance_id)

    send_notification(
        topic,
        "Devbox auto-stopped",
        f"Instance {instance_id} ran for {elapsed:.1f}h and was stopped by the fail-safe.\n"
        f"Restart with: {restart_command(instance_id)}",
        priority="urgent",
        tags="warning,computer",
    )

    merge_tags(ec2, instance_id, {TAG_DEFER_HOURS: "0"})
    return _result(
        True, "stopped", "fail-safe: instance stopped",
        elapsed_hours=round(elapsed, 2), threshold_hours=threshold,
    )

# -----------------------
# Operator commands
# -----------------------

def defer_stop(hours, ec2=None, instance_id=None):
    """Add hours to the current running period's deferral."""
    hours = float(hours)
    if not math.isfinite(hours):
        raise ValueError(f"deferral must be a finite number of hours, got {hours}")
    instance_id = instance_id or INSTANCE_ID
    ec2 = _require_ec2(ec2)

    instance = describe_instance(ec2, instance_id)
    if instance is None:
        return _result(False, "not_found", f"instance {instance_id} not found")
    if instance["state"] != "running":
        return _result(True, "none", f"instance is {instance['state']}, nothing to defer")

    total = parse_defer_hours(instance["tags"].get(TAG_DEFER_HOURS)) + hours
    merge_tags(ec2, instance_id, {TAG_DEFER_HOURS: f"{total:g}"})
    return _result(True, "deferred", f"fail-safe deferred by {total:g}h", defer_hours=total)


def instance_status(ec2=None, instance_id=None, stop_after_hours=None, now=None):
    instance_id = instance_id or INSTANCE_ID
    base_hours = STOP_AFTER_HOURS if stop_after_hours is None else stop_after_hours
    ec2 = _require_ec2(ec2)

    instance = describe_instance(ec2, instance_id)
    if instance is None:
        return _result(False, "not_found", f"instance {instance_id} not found")

    status = _result(True, "none", f"instance is {instance['state']}", state=instance["state"])
    if instance["state"] == "running":
        threshold = effective_threshold(base_hours, instance["tags"])
        elapsed = elapsed_hours(instance, now or utcnow())
        status.update(
            elapsed_hours=round(elapsed, 2),
            threshold_hours=threshold,
            remaining_hours=round(max(threshold - elapsed, 0.0), 2),
        )
    return status

# -----------------------
# Entry point
# -----------------------

def handler(event, context=None, ec2=None, now=None):
    """Single entry point for both EC2 state-change events and timer ticks."""
    try:
        match parse_event(event, default_instance_id=INSTANCE_ID):
            case StateChanged(instance_id=instance_id, state=state):
                return on_state_change(instance_id, state, ec2=ec2, now=now)
            case PeriodicCheck():
                return periodic_check(ec2=ec2, now=now)
    except Exception as e:
        log(f"[!] Lifecycle handler failed: {e}", "error")
        raise
