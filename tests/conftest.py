from datetime import datetime, timedelta, timezone

import pytest
from botocore.exceptions import ClientError

NOW = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)
INSTANCE = "i-0123456789abcdef0"


class FakeEC2:
    """In-memory stand-in for the boto3 EC2 client calls the controller makes."""

    def __init__(self):
        self.instances = {}
        self.calls = []
        self.fail_on = set()

    def add(self, instance_id=INSTANCE, state="running", launch_time=None, tags=None):
        self.instances[instance_id] = {
            "InstanceId": instance_id,
            "State": {"Name": state},
            "LaunchTime": launch_time or NOW - timedelta(hours=1),
            "Tags": [{"Key": k, "Value": v} for k, v in (tags or {}).items()],
        }

    def tags(self, instance_id=INSTANCE):
        return {t["Key"]: t["Value"] for t in self.instances[instance_id]["Tags"]}

    def calls_to(self, name):
        return [kwargs for op, kwargs in self.calls if op == name]

    def _record(self, op, kwargs):
        self.calls.append((op, kwargs))
        if op in self.fail_on:
            raise ClientError({"Error": {"Code": "RequestLimitExceeded", "Message": "slow down"}}, op)

    def describe_instances(self, InstanceIds):
        self._record("describe_instances", {"InstanceIds": InstanceIds})
        found = [self.instances[i] for i in InstanceIds if i in self.instances]
        if not found:
            raise ClientError(
                {"Error": {"Code": "InvalidInstanceID.NotFound", "Message": "not found"}},
                "DescribeInstances",
            )
        return {"Reservations": [{"Instances": found}]}

    def create_tags(self, Resources, Tags):
        self._record("create_tags", {"Resources": Resources, "Tags": Tags})
        for instance_id in Resources:
            current = self.tags(instance_id)
            current.update({t["Key"]: t["Value"] for t in Tags})
            self.instances[instance_id]["Tags"] = [{"Key": k, "Value": v} for k, v in current.items()]

    def stop_instances(self, InstanceIds):
        self._record("stop_instances", {"InstanceIds": InstanceIds})
        for instance_id in InstanceIds:
            self.instances[instance_id]["State"]["Name"] = "stopping"

    def start_instances(self, InstanceIds):
        self._record("start_instances", {"InstanceIds": InstanceIds})
        for instance_id in InstanceIds:
            self.instances[instance_id]["State"]["Name"] = "pending"

    @property
    def mutations(self):
        return [op for op, _ in self.calls if op != "describe_instances"]


@pytest.fixture
def ec2():
    return FakeEC2()


@pytest.fixture
def notifications(monkeypatch):
    """Capture notifications instead of posting them."""
    import lifecycle_manager

    sent = []

    def fake_send(topic, title, message, priority="default", tags="computer"):
        sent.append({"topic": topic, "title": title, "message": message, "priority": priority})
        return True

    monkeypatch.setattr(lifecycle_manager, "send_notification", fake_send)
    return sent
