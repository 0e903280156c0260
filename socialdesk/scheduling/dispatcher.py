"""
Publish Dispatcher

Hands approved, due content to OneUp and records the outcome. A send is
committed in two steps: the "in flight" status (``publishing``/``sending``)
first, then the result, so a crash mid-call leaves a visible trace. Failures
are stored on the record and in ``scheduling_history``; nothing is retried
automatically.
"""
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from ..config import Settings
from ..clients.oneup import OneUpClient
from ..logging_config import publish_logger
from ..models.post import Post
from ..models.post_schedule import PostSchedule
from ..models.schedule_instance import ScheduleInstance
from ..timeutils import utcnow
from . import state_machine
from .errors import ExternalServiceError, PreconditionError, SchedulingError, ValidationError
from .service import approval_for, record_history
from .states import PLATFORMS_ALL, InstanceStatus, ScheduledStatus, ScheduleStatus


def failure_message(error: Exception) -> str:
    if isinstance(error, SchedulingError):
        return error.message
    return str(error) or type(error).__name__


class PublishDispatcher:
    """Sends posts and schedule instances to the external scheduler."""

    def __init__(self, db: Session, client: OneUpClient, settings: Settings):
        self.db = db
        self.client = client
        self.settings = settings

    # ------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------

    def image_url(self, post: Post) -> str:
        filename = post.image_filename or ""
        if filename.startswith(("http://", "https://")):
            return filename
        return f"{self.settings.public_app_url.rstrip('/')}/images/{filename}"

    def resolve_category(self, post: Post, category_id: Optional[int] = None) -> int:
        resolved = category_id or (post.brand.oneup_category_id if post.brand else None)
        if not resolved:
            raise ValidationError("No OneUp category configured for this brand")
        return resolved

    def _send(self, category_id: int, networks: Union[str, List[str]], post: Post, when) -> Dict[str, Any]:
        """Call OneUp; any failure is raised as ExternalServiceError."""
        result = self.client.schedule_image_post(
            category_id=category_id,
            social_network_id=networks,
            scheduled_datetime=when,
            image_url=self.image_url(post),
            content=post.content,
        )
        if result.get("error"):
            raise ExternalServiceError(result.get("message") or "OneUp rejected the post")
        return result

    def _require_configured(self) -> None:
        if not self.client.configured:
            raise ValidationError("OneUp API is not configured. Set ONEUP_API_KEY.")

    # ------------------------------------------------------------
    # one-time posts
    # ------------------------------------------------------------

    def publish_post(self, post: Post) -> Dict[str, Any]:
        """
        Send a scheduled post to OneUp.

        Returns:
            The OneUp response on success

        Raises:
            ValidationError: post not scheduled, no category, OneUp not configured
            ExternalServiceError: OneUp failed; the post is left ``failed``
        """
        self._require_configured()
        approval = approval_for(self.db, post)
        if state_machine.scheduled_status_of(approval) != ScheduledStatus.SCHEDULED.value:
            raise ValidationError("Post is not scheduled")
        category_id = self.resolve_category(post, approval.oneup_category_id)

        state_machine.begin_publish(approval)
        self.db.commit()

        networks = list(approval.target_platforms or []) or PLATFORMS_ALL
        try:
            result = self._send(category_id, networks, post, approval.scheduled_for)
        except Exception as e:
            message = failure_message(e)
            state_machine.mark_failed(approval, message)
            record_history(self.db, post.id, "publish_failed", error_message=message)
            self.db.commit()
            publish_logger.warning("Publish failed", post_id=post.id, error=message)
            raise ExternalServiceError(f"Failed to publish: {message}") from e

        state_machine.mark_published(approval)
        record_history(self.db, post.id, "published", oneup_response=result)
        self.db.commit()
        publish_logger.info("Post published", post_id=post.id, category_id=category_id)
        return result

    # ------------------------------------------------------------
    # schedule instances
    # ------------------------------------------------------------

    def send_instance(
        self,
        instance: ScheduleInstance,
        approved_by: str,
        category_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Approve one instance and send it to OneUp."""
        self._require_configured()
        if instance.status == InstanceStatus.SENT.value:
            raise ValidationError("Instance already sent")
        if instance.status == InstanceStatus.SKIPPED.value:
            raise ValidationError("Instance was skipped")
        if instance.status == InstanceStatus.SENDING.value:
            raise PreconditionError("Instance is already being sent")

        post = instance.post
        if not state_machine.is_fully_approved(approval_for(self.db, post)):
            raise PreconditionError("Post must be fully approved before it can be sent")
        category = self.resolve_category(post, category_id)

        instance.approved_by = approved_by
        instance.approved_at = utcnow()
        instance.status = InstanceStatus.SENDING.value
        instance.error_message = None
        self.db.commit()

        try:
            result = self._send(category, PLATFORMS_ALL, post, instance.scheduled_for)
        except Exception as e:
            message = failure_message(e)
            instance.status = InstanceStatus.FAILED.value
            instance.error_message = message
            record_history(self.db, post.id, "instance_failed", instance_id=instance.id,
                           scheduled_for=instance.scheduled_for, error_message=message)
            self.db.commit()
            publish_logger.warning("Instance send failed", instance_id=instance.id, error=message)
            raise ExternalServiceError(f"Failed to send to OneUp: {message}") from e

        instance.status = InstanceStatus.SENT.value
        instance.oneup_response = result
        instance.sent_at = utcnow()
        record_history(self.db, post.id, "instance_sent", instance_id=instance.id,
                       scheduled_for=instance.scheduled_for, oneup_response=result)
        self.db.commit()
        publish_logger.info("Instance sent", instance_id=instance.id, category_id=category)
        return result

    def approve_schedule(
        self,
        schedule: PostSchedule,
        approved_by: str,
        category_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Approve a schedule and send each of its pending instances."""
        self._require_configured()
        if schedule.status not in (ScheduleStatus.PENDING_APPROVAL.value, ScheduleStatus.APPROVED.value):
            raise ValidationError(f"Cannot approve a {schedule.status} schedule")
        category = self.resolve_category(schedule.post, category_id)

        schedule.status = ScheduleStatus.APPROVED.value
        schedule.approved_by = approved_by
        schedule.approved_at = utcnow()
        self.db.commit()

        results = {"sent": 0, "failed": 0, "errors": []}
        pending = [i for i in schedule.instances if i.status == InstanceStatus.PENDING.value]
        for instance in pending:
            try:
                self.send_instance(instance, approved_by, category)
                results["sent"] += 1
            except SchedulingError as e:
                results["failed"] += 1
                results["errors"].append(e.message)

        publish_logger.info("Schedule approved", schedule_id=schedule.id, **{k: results[k] for k in ("sent", "failed")})
        return results
