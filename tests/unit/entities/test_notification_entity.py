"""Unit tests for notification entities."""

from datetime import datetime
from uuid import uuid4

import pytest

from domain.entities.notification import (
    GroupApprovalNotification,
    Notification,
    NotificationStatus,
)
from domain.entities.user import User


@pytest.fixture
def notification() -> GroupApprovalNotification:
    requester = User(username="bob", email="bob@example.com", display_name="Bob")
    return GroupApprovalNotification(
        id=5, group_id=1, from_user=requester, group_name="Study01"
    )


class TestGroupApprovalNotification:
    def test_starts_pending(self, notification: GroupApprovalNotification):
        assert notification.is_pending
        assert not notification.is_approved
        assert not notification.is_denied

    def test_message(self, notification: GroupApprovalNotification):
        assert notification.message == "Bob (bob) requested to join group: Study01"

    def test_resolution_is_one_shot(self, notification: GroupApprovalNotification):
        admin_id = uuid4()
        notification.mark_resolved(NotificationStatus.APPROVED, admin_id, datetime.utcnow())

        assert notification.is_approved
        assert notification.resolved_by == admin_id
        with pytest.raises(ValueError):
            notification.mark_resolved(NotificationStatus.DENIED, admin_id, datetime.utcnow())
        assert notification.is_approved

    def test_cannot_resolve_to_pending(self, notification: GroupApprovalNotification):
        with pytest.raises(ValueError):
            notification.mark_resolved(NotificationStatus.PENDING, uuid4(), datetime.utcnow())


class TestNotificationBase:
    def test_base_is_abstract(self):
        requester = User(username="bob", email="bob@example.com")

        with pytest.raises(TypeError):
            Notification(group_id=1, from_user=requester)  # type: ignore[abstract]
