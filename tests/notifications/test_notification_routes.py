from unittest.mock import AsyncMock

import pytest
from redis.exceptions import RedisError

from quickdesk.core import redis as redis_module
from quickdesk.notifications.models.notification import Notification
from tests.utils.factories import create_notification_factory, create_ticket_factory
from tests.utils.helpers import assert_error_response, set_access_token_cookie


@pytest.fixture
def mock_redis():
    client = AsyncMock()
    client.get.return_value = None
    redis_module.redis_client = client
    yield client
    redis_module.redis_client = None


class TestListNotifications:
    @pytest.mark.asyncio
    async def test_should_return_own_notifications_newest_first(
        self, test_client, test_user_token, test_user, other_user, test_category, db_session
    ):
        ticket = create_ticket_factory(db_session, test_user, test_category, title="Printer")
        create_notification_factory(db_session, test_user, title="Older", created_offset_minutes=10)
        create_notification_factory(db_session, test_user, title="Newer", ticket=ticket)
        create_notification_factory(db_session, other_user, title="Not mine")
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.get("/api/v1/notifications")

        assert response.status_code == 200
        data = response.json()
        assert [n["title"] for n in data] == ["Newer", "Older"]
        assert data[0]["ticket_id"] == str(ticket.id)
        assert data[0]["metadata"] == {"ticket_title": "Printer"}
        assert data[0]["read"] is False

    @pytest.mark.asyncio
    async def test_should_cap_inbox_at_fifty(self, test_client, test_user_token, test_user, db_session):
        for minutes in range(55):
            create_notification_factory(db_session, test_user, created_offset_minutes=minutes)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.get("/api/v1/notifications")

        assert len(response.json()) == 50


class TestUnreadCount:
    @pytest.mark.asyncio
    async def test_should_count_unread_only(self, test_client, test_user_token, test_user, db_session):
        create_notification_factory(db_session, test_user)
        create_notification_factory(db_session, test_user)
        create_notification_factory(db_session, test_user, read=True)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.get("/api/v1/notifications/unread-count")

        assert response.json() == {"unread_count": 2}

    @pytest.mark.asyncio
    async def test_should_cache_count_on_miss(
        self, test_client, test_user_token, test_user, db_session, mock_redis
    ):
        create_notification_factory(db_session, test_user)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.get("/api/v1/notifications/unread-count")

        assert response.json() == {"unread_count": 1}
        _script, numkeys, *keys_and_args = mock_redis.eval.await_args.args
        assert numkeys == 2
        assert keys_and_args == [
            f"notifications:unread:{test_user.id}",
            f"notifications:unread:{test_user.id}:gen",
            "",
            1,
            60,
        ]

    @pytest.mark.asyncio
    async def test_should_serve_cached_count(self, test_client, test_user_token, test_user, mock_redis):
        mock_redis.get.return_value = "7"
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.get("/api/v1/notifications/unread-count")

        assert response.json() == {"unread_count": 7}
        mock_redis.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_count_is_cached_against_generation_read_before_counting(
        self, test_client, test_user_token, test_user, db_session, mock_redis
    ):
        mock_redis.get.side_effect = lambda key: "4" if key.endswith(":gen") else None
        create_notification_factory(db_session, test_user)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.get("/api/v1/notifications/unread-count")

        assert response.json() == {"unread_count": 1}
        assert mock_redis.eval.await_args.args[4:] == ("4", 1, 60)

    @pytest.mark.asyncio
    async def test_count_changed_while_counting_is_still_returned(
        self, test_client, test_user_token, test_user, db_session, mock_redis
    ):
        mock_redis.eval.return_value = 0
        create_notification_factory(db_session, test_user)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.get("/api/v1/notifications/unread-count")

        assert response.json() == {"unread_count": 1}

    @pytest.mark.asyncio
    async def test_should_fall_back_to_database_when_redis_fails(
        self, test_client, test_user_token, test_user, db_session, mock_redis
    ):
        mock_redis.get.side_effect = RedisError("down")
        mock_redis.eval.side_effect = RedisError("down")
        create_notification_factory(db_session, test_user)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.get("/api/v1/notifications/unread-count")

        assert response.status_code == 200
        assert response.json() == {"unread_count": 1}

    @pytest.mark.asyncio
    async def test_new_notification_invalidates_recipient_cache(
        self, test_client, test_agent_token, test_user, test_agent, test_category, db_session, mock_redis
    ):
        ticket = create_ticket_factory(db_session, test_user, test_category, assigned_agent=test_agent)
        set_access_token_cookie(test_client, test_agent_token)

        await test_client.post(f"/api/v1/tickets/{ticket.id}/comments", json={"content": "On it"})

        mock_redis.delete.assert_awaited_once_with(f"notifications:unread:{test_user.id}")
        mock_redis.incr.assert_awaited_once_with(f"notifications:unread:{test_user.id}:gen")


class TestMarkRead:
    @pytest.mark.asyncio
    async def test_should_mark_single_notification_read(
        self, test_client, test_user_token, test_user, db_session, mock_redis
    ):
        notification = create_notification_factory(db_session, test_user)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.patch(f"/api/v1/notifications/{notification.id}/read")

        assert response.status_code == 200
        assert response.json()["read"] is True
        mock_redis.delete.assert_awaited_once_with(f"notifications:unread:{test_user.id}")

    @pytest.mark.asyncio
    async def test_should_return_404_for_other_users_notification(
        self, test_client, test_user_token, other_user, db_session
    ):
        notification = create_notification_factory(db_session, other_user)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.patch(f"/api/v1/notifications/{notification.id}/read")

        assert response.status_code == 404
        assert_error_response(response.json(), "NOT_FOUND")
        db_session.refresh(notification)
        assert notification.read is False

    @pytest.mark.asyncio
    async def test_should_mark_all_read(self, test_client, test_user_token, test_user, other_user, db_session):
        create_notification_factory(db_session, test_user)
        create_notification_factory(db_session, test_user)
        create_notification_factory(db_session, test_user, read=True)
        foreign = create_notification_factory(db_session, other_user)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.patch("/api/v1/notifications/read-all")

        assert response.status_code == 200
        assert response.json() == {"updated": 2}
        db_session.refresh(foreign)
        assert foreign.read is False


class TestDeleteNotification:
    @pytest.mark.asyncio
    async def test_should_delete_own_notification(self, test_client, test_user_token, test_user, db_session):
        notification = create_notification_factory(db_session, test_user)
        notification_id = notification.id
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.delete(f"/api/v1/notifications/{notification_id}")

        assert response.status_code == 204
        assert db_session.query(Notification).filter(Notification.id == notification_id).first() is None

    @pytest.mark.asyncio
    async def test_should_not_delete_other_users_notification(
        self, test_client, test_user_token, other_user, db_session
    ):
        notification = create_notification_factory(db_session, other_user)
        set_access_token_cookie(test_client, test_user_token)

        response = await test_client.delete(f"/api/v1/notifications/{notification.id}")

        assert response.status_code == 404
        assert db_session.query(Notification).count() == 1
