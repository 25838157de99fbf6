# ec2_utils.py
import time
from datetime import datetime, timezone

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from config import *
from logger import log

NOT_FOUND_CODES = ("InvalidInstanceID.NotFound", "InvalidInstanceID.Malformed")


def utcnow():
    return datetime.now(timezone.utc)


def connect_ec2(retries=CONNECT_RETRIES, delay=CONNECT_DELAY):
    """Create an EC2 client with per-call timeouts and no SDK-level retries."""
    client_config = Config(
        region_name=AWS_REGION,
        connect_timeout=API_TIMEOUT,
        read_timeout=API_TIMEOUT,
        retries={"total_max_attempts": 1},
    )
    for attempt in range(1, retries + 1):
        try:
            return boto3.client("ec2", config=client_config)
        except BotoCoreError as e:
            log(f"[!] Failed to create EC2 client (attempt {attempt}/{retries}): {e}", "warning")
            if attempt < retries:
                time.sleep(delay)
            else:
                log("[✗] Giving up after repeated EC2 client failures.", "error")
                return None


def _tag_dict(raw_tags):
    return {t["Key"]: t["Value"] for t in raw_tags or []}


def describe_instance(ec2, instance_id):
    """Return {"id", "state", "launch_time", "tags"} for the instance, or None if it does not exist."""
    try:
        resp = ec2.describe_instances(InstanceIds=[instance_id])
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
            return None
        raise

    for reservation in resp.get("Reservations", []):
        for inst in reservation.get("Instances", []):
            if inst.get("InstanceId") == instance_id:
                return {
                    "id": instance_id,
                    "state": inst.get("State", {}).get("Name", ""),
                    "launch_time": inst.get("LaunchTime"),
                    "tags": _tag_dict(inst.get("Tags")),
                }
    return None


def merge_tags(ec2, instance_id, tags):
    """Create or overwrite the given keys in one call. Other tags are untouched."""
    ec2.create_tags(
        Resources=[instance_id],
        Tags=[{"Key": k, "Value": str(v)} for k, v in tags.items()],
    )
    log(f"[✓] Tagged {instance_id}: {', '.join(f'{k}={v}' for k, v in tags.items())}")


def stop_instance(ec2, instance_id):
    ec2.stop_instances(InstanceIds=[instance_id])
    log(f"[-] Stop requested for {instance_id}")


def start_instance(ec2, instance_id):
    ec2.start_instances(InstanceIds=[instance_id])
    log(f"[+] Start requested for {instance_id}")
