import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quickdesk.auth.models.profile import Profile
from quickdesk.core.datetime_utils import utcnow
from quickdesk.core.repository import BaseRepository
from quickdesk.tickets.models.vote import TicketVote, VoteType
from quickdesk.tickets.schemas.ticket import VoteSummary

logger = logging.getLogger(__name__)


class VoteService:
    """One vote per (ticket, user); casting again replaces the previous vote."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.votes = BaseRepository(db, TicketVote)

    def get_summary(self, ticket_id: UUID, viewer: Profile) -> VoteSummary:
        rows = (
            self.db.query(TicketVote.vote_type, func.count(TicketVote.id))
            .filter(TicketVote.ticket_id == ticket_id)
            .group_by(TicketVote.vote_type)
            .all()
        )
        counts = {str(vote_type): int(count) for vote_type, count in rows}
        mine = self._find(ticket_id, viewer.id)
        return VoteSummary(
            upvotes=counts.get(VoteType.UPVOTE.value, 0),
            downvotes=counts.get(VoteType.DOWNVOTE.value, 0),
            my_vote=VoteType(mine.vote_type) if mine else None,
        )

    def cast_vote(self, ticket_id: UUID, voter: Profile, vote_type: VoteType) -> VoteSummary:
        existing = self._find(ticket_id, voter.id)
        if existing is not None:
            existing.vote_type = vote_type.value
            existing.updated_at = utcnow()
            self.db.commit()
            return self.get_summary(ticket_id, voter)

        self.db.add(TicketVote(ticket_id=ticket_id, user_id=voter.id, vote_type=vote_type.value))
        try:
            self.db.commit()
        except IntegrityError:
            # Lost the race against a concurrent insert for the same pair
            self.db.rollback()
            logger.info("Concurrent vote on ticket %s by %s, updating", ticket_id, voter.id)
            existing = self._find(ticket_id, voter.id)
            if existing is None:
                raise
            existing.vote_type = vote_type.value
            existing.updated_at = utcnow()
            self.db.commit()

        return self.get_summary(ticket_id, voter)

    def withdraw_vote(self, ticket_id: UUID, voter: Profile) -> VoteSummary:
        self.db.query(TicketVote).filter(
            TicketVote.ticket_id == ticket_id, TicketVote.user_id == voter.id
        ).delete(synchronize_session=False)
        self.db.commit()
        return self.get_summary(ticket_id, voter)

    def _find(self, ticket_id: UUID, user_id: UUID) -> TicketVote | None:
        return self.votes.find_one(TicketVote.ticket_id == ticket_id, TicketVote.user_id == user_id)
