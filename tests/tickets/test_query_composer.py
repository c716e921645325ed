import pytest

from quickdesk.core.exceptions import ValidationError
from quickdesk.tickets.schemas.ticket import TicketFilters
from quickdesk.tickets.services.query_composer import compose_ticket_query, paginate
from tests.utils.factories import (
    create_category_factory,
    create_profile_factory,
    create_ticket_factory,
)


def _titles(query):
    return [ticket.title for ticket in query.all()]


class TestVisibility:
    def test_end_user_sees_only_own_tickets(self, db_session, test_user, other_user, test_category):
        create_ticket_factory(db_session, test_user, test_category, title="Mine")
        create_ticket_factory(db_session, other_user, test_category, title="Theirs")

        query = compose_ticket_query(db_session, test_user, TicketFilters())

        assert _titles(query) == ["Mine"]

    def test_agent_sees_created_and_assigned_tickets(
        self, db_session, test_user, test_agent, other_agent, test_category
    ):
        create_ticket_factory(db_session, test_user, test_category, title="Assigned", assigned_agent=test_agent)
        create_ticket_factory(db_session, test_agent, test_category, title="Raised by agent")
        create_ticket_factory(db_session, test_user, test_category, title="Unassigned")
        create_ticket_factory(db_session, test_user, test_category, title="Other agent", assigned_agent=other_agent)

        query = compose_ticket_query(db_session, test_agent, TicketFilters())

        assert set(_titles(query)) == {"Assigned", "Raised by agent"}

    def test_admin_sees_everything(self, db_session, test_admin, test_user, other_user, test_category):
        create_ticket_factory(db_session, test_user, test_category)
        create_ticket_factory(db_session, other_user, test_category)

        query = compose_ticket_query(db_session, test_admin, TicketFilters())

        assert query.count() == 2

    def test_unknown_role_sees_nothing(self, db_session, test_user, test_category):
        guest = create_profile_factory(db_session, role="guest")
        create_ticket_factory(db_session, test_user, test_category)

        query = compose_ticket_query(db_session, guest, TicketFilters())

        assert query.count() == 0

    def test_filters_cannot_widen_visibility(self, db_session, test_user, other_user, test_agent, test_category):
        create_ticket_factory(db_session, other_user, test_category, assigned_agent=test_agent)

        filters = TicketFilters(assigned_to=str(test_agent.id))
        query = compose_ticket_query(db_session, test_user, filters)

        assert query.count() == 0


class TestFilters:
    def test_search_matches_title_or_description_case_insensitively(
        self, db_session, test_admin, test_user, test_category
    ):
        create_ticket_factory(db_session, test_user, test_category, title="Printer jammed", description="x")
        create_ticket_factory(db_session, test_user, test_category, title="VPN", description="The PRINTER is offline")
        create_ticket_factory(db_session, test_user, test_category, title="Password reset", description="y")

        query = compose_ticket_query(db_session, test_admin, TicketFilters(search="printer"))

        assert set(_titles(query)) == {"Printer jammed", "VPN"}

    def test_search_treats_wildcards_literally(self, db_session, test_admin, test_user, test_category):
        create_ticket_factory(db_session, test_user, test_category, title="Disk at 100% usage", description="a")
        create_ticket_factory(db_session, test_user, test_category, title="Disk at 1000 MB", description="b")
        create_ticket_factory(db_session, test_user, test_category, title="snake_case field", description="c")
        create_ticket_factory(db_session, test_user, test_category, title="snakeXcase field", description="d")

        percent = compose_ticket_query(db_session, test_admin, TicketFilters(search="100%"))
        underscore = compose_ticket_query(db_session, test_admin, TicketFilters(search="snake_case"))

        assert _titles(percent) == ["Disk at 100% usage"]
        assert _titles(underscore) == ["snake_case field"]

    def test_empty_strings_are_ignored(self, db_session, test_admin, test_user, test_category):
        create_ticket_factory(db_session, test_user, test_category)

        filters = TicketFilters(search="  ", status="", priority="", category_id="", assigned_to="")
        query = compose_ticket_query(db_session, test_admin, filters)

        assert query.count() == 1

    def test_status_priority_and_category(self, db_session, test_admin, test_user, test_category):
        billing = create_category_factory(db_session, name="Billing")
        create_ticket_factory(db_session, test_user, test_category, title="A", status="open", priority="high")
        create_ticket_factory(db_session, test_user, billing, title="B", status="open", priority="high")
        create_ticket_factory(db_session, test_user, test_category, title="C", status="closed", priority="high")
        create_ticket_factory(db_session, test_user, test_category, title="D", status="open", priority="low")

        filters = TicketFilters(status="open", priority="high", category_id=str(test_category.id))
        query = compose_ticket_query(db_session, test_admin, filters)

        assert _titles(query) == ["A"]

    def test_unassigned_filter(self, db_session, test_admin, test_user, test_agent, test_category):
        create_ticket_factory(db_session, test_user, test_category, title="Waiting")
        create_ticket_factory(db_session, test_user, test_category, title="Taken", assigned_agent=test_agent)

        unassigned = compose_ticket_query(db_session, test_admin, TicketFilters(assigned_to="unassigned"))
        by_agent = compose_ticket_query(db_session, test_admin, TicketFilters(assigned_to=str(test_agent.id)))

        assert _titles(unassigned) == ["Waiting"]
        assert _titles(by_agent) == ["Taken"]

    def test_invalid_assignee_raises_validation_error(self, db_session, test_admin):
        with pytest.raises(ValidationError) as exc_info:
            compose_ticket_query(db_session, test_admin, TicketFilters(assigned_to="someone"))

        assert exc_info.value.details == {"field": "assigned_to"}

    def test_mine_narrows_admin_to_own_tickets(self, db_session, test_admin, test_user, test_category):
        create_ticket_factory(db_session, test_admin, test_category, title="Admin ticket")
        create_ticket_factory(db_session, test_user, test_category, title="User ticket")

        query = compose_ticket_query(db_session, test_admin, TicketFilters(mine=True))

        assert _titles(query) == ["Admin ticket"]


class TestSortingAndPagination:
    def test_default_is_newest_first(self, db_session, test_user, test_category):
        create_ticket_factory(db_session, test_user, test_category, title="Old", created_offset_minutes=30)
        create_ticket_factory(db_session, test_user, test_category, title="New", created_offset_minutes=1)
        create_ticket_factory(db_session, test_user, test_category, title="Middle", created_offset_minutes=10)

        query = compose_ticket_query(db_session, test_user, TicketFilters())

        assert _titles(query) == ["New", "Middle", "Old"]

    def test_priority_sorts_by_rank_not_alphabetically(self, db_session, test_user, test_category):
        for priority in ("medium", "urgent", "low", "high"):
            create_ticket_factory(db_session, test_user, test_category, title=priority, priority=priority)

        descending = compose_ticket_query(db_session, test_user, TicketFilters(sort_by="priority"))
        ascending = compose_ticket_query(
            db_session, test_user, TicketFilters(sort_by="priority", sort_order="asc")
        )

        assert _titles(descending) == ["urgent", "high", "medium", "low"]
        assert _titles(ascending) == ["low", "medium", "high", "urgent"]

    def test_status_sorts_by_workflow_order(self, db_session, test_user, test_category):
        for status in ("closed", "open", "resolved", "in_progress"):
            create_ticket_factory(db_session, test_user, test_category, title=status, status=status)

        query = compose_ticket_query(
            db_session, test_user, TicketFilters(sort_by="status", sort_order="asc")
        )

        assert _titles(query) == ["open", "in_progress", "resolved", "closed"]

    def test_title_sort(self, db_session, test_user, test_category):
        for title in ("Bravo", "Alpha", "Charlie"):
            create_ticket_factory(db_session, test_user, test_category, title=title)

        query = compose_ticket_query(
            db_session, test_user, TicketFilters(sort_by="title", sort_order="asc")
        )

        assert _titles(query) == ["Alpha", "Bravo", "Charlie"]

    def test_paginate_returns_page_and_total(self, db_session, test_user, test_category):
        for minutes in range(5):
            create_ticket_factory(
                db_session, test_user, test_category, title=f"T{minutes}", created_offset_minutes=minutes
            )
        query = compose_ticket_query(db_session, test_user, TicketFilters())

        items, total = paginate(query, page=2, page_size=2)

        assert total == 5
        assert [t.title for t in items] == ["T2", "T3"]

    def test_page_past_the_end_is_empty(self, db_session, test_user, test_category):
        create_ticket_factory(db_session, test_user, test_category)
        query = compose_ticket_query(db_session, test_user, TicketFilters())

        items, total = paginate(query, page=5, page_size=10)

        assert items == []
        assert total == 1
