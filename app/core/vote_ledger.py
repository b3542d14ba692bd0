"""
Tri-state voting (none / up / down) per (subject, voter) with a denormalised
`upvotes` counter on the subject row.

The counter is only ever changed through ResourceStore.increment, a single
atomic store-side statement, so concurrent voters cannot lose updates. The
ledger row write and the counter increment are still two statements; the
unique (subject, voter) constraint on the vote table turns a racing
duplicate insert into a 409 instead of a second vote.

Vote toggles are not idempotent and must never be retried.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.core.errors import ValidationError
from app.database.resource_store import ResourceStore

logger = logging.getLogger(__name__)

UPVOTE = 1
DOWNVOTE = -1

CREATED = "created"
UPDATED = "updated"
REMOVED = "removed"

INVALID_VOTE_TYPE = "Invalid vote type. Must be 1 (upvote) or -1 (downvote)"


@dataclass(frozen=True)
class VoteSubject:
    vote_table: str
    subject_column: str
    subject_table: str


IDEA_VOTES = VoteSubject("idea_votes", "idea_id", "ideas")
POST_VOTES = VoteSubject("post_votes", "post_id", "posts")
FEATURE_REQUEST_VOTES = VoteSubject("feature_request_votes", "feature_request_id", "feature_requests")


@dataclass
class VoteResult:
    action: str
    upvotes: int
    vote: Optional[Dict[str, Any]] = None


def validate_vote_type(vote_type: Any) -> int:
    # bool is an int subclass; True must not count as an upvote
    if isinstance(vote_type, bool) or vote_type not in (UPVOTE, DOWNVOTE):
        raise ValidationError(INVALID_VOTE_TYPE)
    return int(vote_type)


class VoteLedger:
    def __init__(self, store: ResourceStore, subject: VoteSubject):
        self.store = store
        self.subject = subject

    def _find(self, subject_id: str, voter_id: str) -> Optional[Dict[str, Any]]:
        return self.store.find_one(
            self.subject.vote_table,
            {self.subject.subject_column: subject_id, "user_id": voter_id},
        )

    def _adjust(self, subject_id: str, delta: int) -> int:
        if delta == 0:
            return self.current_upvotes(subject_id)
        return self.store.increment(self.subject.subject_table, subject_id, "upvotes", delta)

    def current_upvotes(self, subject_id: str) -> int:
        row = self.store.get(self.subject.subject_table, subject_id)
        return int(row.get("upvotes") or 0)

    def current_vote(self, subject_id: str, voter_id: Optional[str]) -> Optional[int]:
        """The voter's current vote type, or None for no vote / anonymous voter."""
        if not voter_id:
            return None
        existing = self._find(subject_id, voter_id)
        return existing["vote_type"] if existing else None

    def apply_vote(self, subject_id: str, voter_id: str, requested_type: Any) -> VoteResult:
        requested_type = validate_vote_type(requested_type)
        existing = self._find(subject_id, voter_id)

        if existing is None:
            vote = self.store.insert(self.subject.vote_table, {
                self.subject.subject_column: subject_id,
                "user_id": voter_id,
                "vote_type": requested_type,
            })
            action, delta = CREATED, requested_type
        elif existing["vote_type"] == requested_type:
            self.store.delete(self.subject.vote_table, existing["id"])
            vote, action, delta = None, REMOVED, -requested_type
        else:
            vote = self.store.update(self.subject.vote_table, existing["id"], {"vote_type": requested_type})
            action, delta = UPDATED, requested_type - existing["vote_type"]

        upvotes = self._adjust(subject_id, delta)
        logger.debug(
            f"Vote {action} on {self.subject.subject_table}/{subject_id} by {voter_id}: delta={delta}, upvotes={upvotes}"
        )
        return VoteResult(action=action, upvotes=upvotes, vote=vote)

    def remove_vote(self, subject_id: str, voter_id: str) -> VoteResult:
        """Explicit removal. Removing a vote that does not exist leaves the counter unchanged."""
        existing = self._find(subject_id, voter_id)
        if existing is None:
            return VoteResult(action=REMOVED, upvotes=self.current_upvotes(subject_id))
        self.store.delete(self.subject.vote_table, existing["id"])
        return VoteResult(action=REMOVED, upvotes=self._adjust(subject_id, -existing["vote_type"]))
