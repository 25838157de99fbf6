# events.py
from dataclasses import dataclass

STATE_CHANGE_SOURCES = ("ec2", "aws.ec2")


@dataclass(frozen=True)
class StateChanged:
    instance_id: str
    state: str


@dataclass(frozen=True)
class PeriodicCheck:
    pass


def parse_event(event, default_instance_id=""):
    """Classify a raw trigger payload.

    EC2 state-change notifications carry a source marker and a detail block;
    anything else (scheduled timer ticks, manual invokes) is a periodic check.
    """
    if isinstance(event, dict) and event.get("source") in STATE_CHANGE_SOURCES:
        detail = event.get("detail")
        if not isinstance(detail, dict):
            detail = {}
        return StateChanged(
            instance_id=detail.get("instance-id") or default_instance_id,
            state=str(detail.get("state", "")),
        )
    return PeriodicCheck()
