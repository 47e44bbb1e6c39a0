import logging
import sys

from yugen.config import Config
from yugen.scheduler_jobs import scheduled_weekly_plan_refresh

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    summary = scheduled_weekly_plan_refresh()
    print(f"Processed: {summary['processed']}, Failed: {summary['failed']}, Skipped: {summary['skipped']}")
    # Non-zero exit so cron/CI notices partial failures
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
