from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from app.core.database import SessionLocal
from app.core.errors import APIError
from app.services.scheduled_publisher import ScheduledPublisher
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)


class ScheduledPublishScheduler:
    def __init__(self, session_factory=SessionLocal):
        self.scheduler = AsyncIOScheduler()
        self.session_factory = session_factory

    def publish_due_posts(self) -> int:
        """
        Run one sweep of the scheduled publisher.

        Each run uses its own session. A failed run is logged and the posts
        stay scheduled, so the next tick picks them up again.
        """
        db = self.session_factory()
        try:
            result = ScheduledPublisher(db).publish_due_posts()
            if result.published_count:
                logger.info(
                    f"Scheduled publish completed: {result.published_count} posts published"
                )
            return result.published_count
        except APIError as e:
            logger.error(f"Error in scheduled publish: {e.message}")
            return 0
        finally:
            db.close()

    async def run(self):
        self.publish_due_posts()

    def start(self):
        """Start the scheduler."""
        if not settings.SCHEDULER_ENABLED:
            logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
            return

        self.scheduler.add_job(
            self.run,
            trigger=IntervalTrigger(minutes=settings.SCHEDULED_PUBLISH_INTERVAL),
            id="publish_scheduled_posts",
            name="Publish due scheduled posts",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(
            f"Scheduler started with interval: {settings.SCHEDULED_PUBLISH_INTERVAL} minutes"
        )

    def shutdown(self):
        """Shutdown the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler shutdown")


# Global scheduler instance
scheduler = ScheduledPublishScheduler()
