import logging
import sys

from skillbridge.config import settings
from skillbridge.services.scheduler import run_inactivity_sweep


def main() -> int:
    """One-off inactivity sweep, for cron or manual runs outside the API process."""
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    try:
        results = run_inactivity_sweep()
    except Exception as exc:
        print(f"Inactivity sweep failed: {exc}", file=sys.stderr)
        return 1

    for result in results:
        line = (
            f"Mentorship {result['mentorship_id']}: {result['resulting_status']} "
            f"(counter={result['counter_value']})"
        )
        if result["error"]:
            line += f" ERROR: {result['error']}"
        print(line)

    failed = sum(1 for r in results if r["error"])
    print(f"Processed {len(results)} mentorships, {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
