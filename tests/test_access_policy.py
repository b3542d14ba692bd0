"""Tests for ownership, membership and sharing rules."""

import pytest

from app.core import access_policy
from app.core.access_policy import AccessContext, enforce
from app.core.errors import AuthorizationError

OWNER = "owner"
MEMBER = "member"
STRANGER = "stranger"


class TestIdeaPolicy:
    """Tests for idea read/modify rules."""

    def test_published_idea_readable_by_anyone(self):
        """Published ideas are readable anonymously."""
        idea = {"id": "i1", "creator_id": OWNER, "is_published": True}
        assert access_policy.ideas.can_read(None, idea)
        assert access_policy.ideas.can_read(STRANGER, idea)

    def test_unpublished_idea_readable_by_creator_only(self):
        """Unpublished ideas are private to the creator."""
        idea = {"id": "i1", "creator_id": OWNER, "is_published": False}
        assert access_policy.ideas.can_read(OWNER, idea)
        assert not access_policy.ideas.can_read(STRANGER, idea)
        assert not access_policy.ideas.can_read(None, idea)

    def test_member_reads_unpublished_idea(self):
        """Assigned members see the unpublished idea they work on."""
        idea = {"id": "i1", "creator_id": OWNER, "is_published": False}
        ctx = AccessContext(idea_creator_id=OWNER, is_member=True)
        assert access_policy.ideas.can_read(MEMBER, idea, ctx)

    def test_only_creator_modifies_and_deletes(self):
        """Membership and publication grant no write rights."""
        idea = {"id": "i1", "creator_id": OWNER, "is_published": True}
        ctx = AccessContext(idea_creator_id=OWNER, is_member=True)
        assert access_policy.ideas.can_modify(OWNER, idea)
        assert not access_policy.ideas.can_modify(MEMBER, idea, ctx)
        assert not access_policy.ideas.can_delete(MEMBER, idea, ctx)
        assert not access_policy.ideas.can_delete(None, idea)


class TestPostAndFeatureRequestPolicy:
    """Tests for is_public based resources."""

    @pytest.mark.parametrize("policy", [access_policy.posts, access_policy.feature_requests])
    def test_private_resource_hidden_from_others(self, policy):
        """Private rows are readable by their creator only."""
        row = {"id": "p1", "creator_id": OWNER, "is_public": False}
        assert policy.can_read(OWNER, row)
        assert not policy.can_read(STRANGER, row)
        assert not policy.can_read(None, row)

    @pytest.mark.parametrize("policy", [access_policy.posts, access_policy.feature_requests])
    def test_public_resource_readable_but_not_writable(self, policy):
        """Public rows are readable by anyone and writable by the creator only."""
        row = {"id": "p1", "creator_id": OWNER, "is_public": True}
        assert policy.can_read(None, row)
        assert not policy.can_modify(STRANGER, row)
        assert policy.can_modify(OWNER, row)


class TestCommentPolicy:
    """Tests for comment rules."""

    def test_only_author_deletes(self):
        """Comments belong to user_id, not creator_id."""
        comment = {"id": "c1", "user_id": MEMBER}
        assert access_policy.comments.can_delete(MEMBER, comment)
        assert not access_policy.comments.can_delete(OWNER, comment)

    def test_read_follows_parent(self):
        """Comment visibility is the parent resource's visibility."""
        comment = {"id": "c1", "user_id": MEMBER}
        assert access_policy.comments.can_read(None, comment, AccessContext(parent_readable=True))
        assert not access_policy.comments.can_read(MEMBER, comment, AccessContext(parent_readable=False))


class TestChecklistPolicy:
    """Tests for checklist and checklist item rules."""

    def setup_method(self):
        self.shared = {"id": "c1", "idea_id": "i1", "creator_id": MEMBER, "is_shared": True}
        self.personal = {"id": "c2", "idea_id": "i1", "creator_id": MEMBER, "is_shared": False}
        self.member_ctx = AccessContext(idea_creator_id=OWNER, is_member=True)
        self.stranger_ctx = AccessContext(idea_creator_id=OWNER, is_member=False)
        self.owner_ctx = AccessContext(idea_creator_id=OWNER, is_member=False)

    def test_member_modifies_shared_checklist(self):
        """Any member may work on a shared checklist."""
        assert access_policy.checklists.can_modify("other-member", self.shared, self.member_ctx)

    def test_member_cannot_modify_someone_elses_personal_checklist(self):
        """Personal checklists stay with their creator."""
        assert not access_policy.checklists.can_modify("other-member", self.personal, self.member_ctx)
        assert access_policy.checklists.can_modify(MEMBER, self.personal, self.member_ctx)

    def test_non_member_cannot_modify_shared_checklist(self):
        """Sharing only extends to members."""
        assert not access_policy.checklists.can_modify(STRANGER, self.shared, self.stranger_ctx)
        assert not access_policy.checklists.can_read(STRANGER, self.shared, self.stranger_ctx)

    def test_idea_creator_modifies_any_checklist(self):
        """The idea creator has full rights over the idea's checklists."""
        assert access_policy.checklists.can_modify(OWNER, self.personal, self.owner_ctx)
        assert access_policy.checklists.can_read(OWNER, self.personal, self.owner_ctx)

    def test_only_checklist_creator_deletes_checklist(self):
        """Deleting the whole checklist is reserved to its creator."""
        assert access_policy.checklists.can_delete(MEMBER, self.shared, self.member_ctx)
        assert not access_policy.checklists.can_delete(OWNER, self.shared, self.owner_ctx)

    def test_item_delete_rules(self):
        """Item creator, idea creator, or modifiers of a shared checklist may delete an item."""
        item = {"id": "t1", "checklist_id": "c2", "created_by": "author"}
        assert access_policy.checklists.can_delete_item("author", self.personal, item, self.stranger_ctx)
        assert access_policy.checklists.can_delete_item(OWNER, self.personal, item, self.owner_ctx)
        # checklist creator on a personal checklist, item written by someone else
        assert not access_policy.checklists.can_delete_item(MEMBER, self.personal, item, self.member_ctx)
        shared_item = {"id": "t2", "checklist_id": "c1", "created_by": "author"}
        assert access_policy.checklists.can_delete_item("other-member", self.shared, shared_item, self.member_ctx)

    def test_anonymous_denied_everything(self):
        """An absent actor never passes a checklist rule."""
        item = {"id": "t1", "created_by": None}
        assert not access_policy.checklists.can_read(None, self.shared, self.member_ctx)
        assert not access_policy.checklists.can_modify(None, self.shared, self.member_ctx)
        assert not access_policy.checklists.can_delete_item(None, self.shared, item, AccessContext())


class TestHelpers:
    """Tests for enforce."""

    def test_enforce_raises_forbidden(self):
        """A denial becomes a 403."""
        with pytest.raises(AuthorizationError) as exc:
            enforce(False, "nope")
        assert exc.value.status_code == 403
        assert exc.value.detail == "nope"
        enforce(True)
