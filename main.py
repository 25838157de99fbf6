# main.py
import argparse, json, math, time
import schedule
from config import INSTANCE_ID, SCHEDULE_START_TIME, SCHEDULE_STOP_TIME, SCHEDULE_TIMEZONE, CHECK_INTERVAL_MINUTES
from lifecycle_manager import defer_stop, instance_status, periodic_check
from scheduler import register_jobs, scheduled_start, scheduled_stop
from logger import log


def run_forever():
    log(f"🚀 Devbox scheduler active — start at {SCHEDULE_START_TIME}, stop at {SCHEDULE_STOP_TIME} "
        f"({SCHEDULE_TIMEZONE}), fail-safe check every {CHECK_INTERVAL_MINUTES} min")

    try:
        register_jobs()

        while True:
            try:
                schedule.run_pending()
            except Exception as e:
                log(f"[!] Scheduler runtime error: {e}", "error")
            time.sleep(10)

    except KeyboardInterrupt:
        log("[🛑] Scheduler manually stopped.")


def non_negative_hours(value):
    hours = float(value)
    if not math.isfinite(hours) or hours < 0:
        raise argparse.ArgumentTypeError("hours must be a finite number >= 0")
    return hours


def build_parser():
    parser = argparse.ArgumentParser(description="Devbox lifecycle controller")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="run the start/stop scheduler and fail-safe loop (default)")
    sub.add_parser("check", help="run the fail-safe check once")
    sub.add_parser("status", help="show running time and remaining hours")
    defer = sub.add_parser("defer", help="extend the fail-safe threshold for this running period")
    defer.add_argument("hours", type=non_negative_hours)
    sub.add_parser("start", help=f"start {INSTANCE_ID or 'the instance'} now")
    sub.add_parser("stop", help=f"stop {INSTANCE_ID or 'the instance'} now")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.command in (None, "run"):
        run_forever()
        return 0
    if args.command == "start":
        return 0 if scheduled_start() else 1
    if args.command == "stop":
        return 0 if scheduled_stop() else 1

    if args.command == "check":
        result = periodic_check()
    elif args.command == "status":
        result = instance_status()
    else:
        result = defer_stop(args.hours)

    print(json.dumps(result, indent=2))
    return 0 if result["ok"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
