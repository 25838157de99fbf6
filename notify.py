# notify.py
import requests
from config import NTFY_SERVER, NOTIFY_TIMEOUT
from logger import log


def send_notification(topic, title, message, priority="default", tags="computer"):
    """Push a message to an ntfy topic. Best-effort: never raises.

    Returns True when the server accepted the message.
    """
    if not topic:
        log(f"[Info] No notification topic configured, skipping '{title}'.")
        return False

    url = f"{NTFY_SERVER.rstrip('/')}/{topic}"
    headers = {"Title": title, "Priority": priority, "Tags": tags}

    try:
        resp = requests.post(
            url,
            data=message.encode("utf-8"),
            headers=headers,
            timeout=NOTIFY_TIMEOUT,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        log(f"[!] Notification '{title}' failed: {e}", "warning")
        return False

    log(f"[✓] Notification sent: {title}")
    return True
