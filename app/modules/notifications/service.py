from app.database.resource_store import ResourceStore
from app.modules.notifications.schemas import NotificationCreate, NotificationResponse
from app.modules.users.service import UserService
from app.core.errors import AuthorizationError, UpstreamError
from fastapi import HTTPException
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, store: ResourceStore):
        self.store = store

    def notify(
        self,
        recipient_id: Optional[str],
        sender_id: str,
        type: str,
        title: str,
        content: str,
        source_url: Optional[str] = None
    ) -> Optional[NotificationResponse]:
        """
        Fire-and-forget notification for a resource owner.

        Nothing is sent when the actor is the recipient. Failures are logged
        and swallowed so they never undo the mutation that triggered them.
        """
        if not recipient_id or recipient_id == sender_id:
            return None
        try:
            row = self.store.insert("notifications", {
                "type": type,
                "title": title,
                "content": content,
                "source_url": source_url,
                "recipient_id": recipient_id,
                "sender_id": sender_id,
                "is_read": False,
            })
            return NotificationResponse(**row)
        except Exception as e:
            logger.error(f"Failed to notify {recipient_id} ({type}): {e}")
            return None

    def create_notification(self, data: NotificationCreate, sender_id: str) -> NotificationResponse:
        """Create a notification explicitly (client-triggered)"""
        try:
            row = self.store.insert("notifications", {
                "type": data.type,
                "title": data.title,
                "content": data.content,
                "source_url": data.source_url,
                "recipient_id": data.recipient_id,
                "sender_id": sender_id,
                "is_read": False,
            })
            return NotificationResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating notification: {e}")
            raise UpstreamError("Failed to create notification")

    def list_notifications(self, user_id: str, limit: int = 20) -> List[NotificationResponse]:
        """Latest notifications for the recipient, newest first, with sender info"""
        rows = self.store.query(
            "notifications",
            filters={"recipient_id": user_id},
            order="created_at",
            desc=True,
            limit=limit
        )
        senders = UserService(self.store).summaries(r.get("sender_id") for r in rows)
        return [NotificationResponse(**r, sender=senders.get(r.get("sender_id"))) for r in rows]

    def mark_read(self, notification_id: str, user_id: str) -> NotificationResponse:
        """Mark one notification read. Only the recipient may do this."""
        notification = self.store.get("notifications", notification_id, not_found="Notification not found")
        if notification.get("recipient_id") != user_id:
            raise AuthorizationError("You can only mark your own notifications as read")
        row = self.store.update("notifications", notification_id, {"is_read": True}, not_found="Notification not found")
        return NotificationResponse(**row)

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of the recipient as read; returns how many changed"""
        updated = self.store.update_where(
            "notifications",
            {"recipient_id": user_id, "is_read": False},
            {"is_read": True}
        )
        return len(updated)

    def unread_count(self, user_id: str) -> int:
        return self.store.count("notifications", {"recipient_id": user_id, "is_read": False})
