"""Response envelope shared by every storefront route.

Routes never raise on a failed backend call; they answer with
``success=false``, the message and the toasts the page should show.
"""

from typing import Any

from pydantic import BaseModel

from shared.notifications import Notifier
from shared.result import ServiceResult


class NotificationSchema(BaseModel):
    level: str
    message: str


class ResultResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"success": True, "message": None, "notifications": []}]}}

    success: bool = True
    message: str | None = None
    data: Any = None
    degraded: bool = False
    notifications: list[NotificationSchema] = []


def drain_notifications(notifier: Notifier) -> list[NotificationSchema]:
    return [NotificationSchema(level=item.level.value, message=item.message) for item in notifier.drain()]


def envelope(result: ServiceResult, notifier: Notifier, data: Any = None) -> ResultResponse:
    """Fold a service result and pending toasts into a response body."""
    if result.success and data is None:
        data = result.data
    return ResultResponse(
        success=result.success,
        message=result.message,
        data=data if result.success else None,
        degraded=result.degraded,
        notifications=drain_notifications(notifier),
    )
