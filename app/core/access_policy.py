"""
Ownership, membership and sharing rules for every resource kind.

Each kind is a policy object with the same capability (can_read, can_modify,
can_delete) so rules live in one place and can be tested without a store.
Resources are plain row dicts as returned by the ResourceStore; anything a
rule needs from outside the row (parent idea creator, membership) is passed
in an AccessContext that the caller loads beforehand.

Policies only answer yes/no. Callers check existence first (404) and map a
denial to AuthorizationError (403).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.core.errors import AuthorizationError

Row = Dict[str, Any]


@dataclass
class AccessContext:
    idea_creator_id: Optional[str] = None
    is_member: bool = False
    parent_readable: bool = True


_EMPTY = AccessContext()


class AccessPolicy:
    owner_field = "creator_id"
    public_field: Optional[str] = None

    def is_owner(self, actor_id: Optional[str], resource: Row) -> bool:
        return actor_id is not None and resource.get(self.owner_field) == actor_id

    def is_public(self, resource: Row) -> bool:
        return bool(self.public_field and resource.get(self.public_field))

    def can_read(self, actor_id: Optional[str], resource: Row, ctx: AccessContext = _EMPTY) -> bool:
        return self.is_public(resource) or self.is_owner(actor_id, resource)

    def can_modify(self, actor_id: Optional[str], resource: Row, ctx: AccessContext = _EMPTY) -> bool:
        return self.is_owner(actor_id, resource)

    def can_delete(self, actor_id: Optional[str], resource: Row, ctx: AccessContext = _EMPTY) -> bool:
        return self.is_owner(actor_id, resource)


class IdeaPolicy(AccessPolicy):
    public_field = "is_published"

    def can_read(self, actor_id, resource, ctx=_EMPTY):
        if super().can_read(actor_id, resource, ctx):
            return True
        # Members see unpublished ideas they are assigned to
        return actor_id is not None and ctx.is_member


class PostPolicy(AccessPolicy):
    public_field = "is_public"


class FeatureRequestPolicy(AccessPolicy):
    public_field = "is_public"


class CommentPolicy(AccessPolicy):
    owner_field = "user_id"

    def can_read(self, actor_id, resource, ctx=_EMPTY):
        return ctx.parent_readable


class ChecklistPolicy(AccessPolicy):
    """
    Checklists hang off an idea. The idea creator has full rights; the
    checklist creator keeps rights over their own checklist; anyone assigned
    to the idea may work on checklists that are shared.
    """

    def _is_idea_creator(self, actor_id, ctx: AccessContext) -> bool:
        return actor_id is not None and ctx.idea_creator_id == actor_id

    def can_read(self, actor_id, resource, ctx=_EMPTY):
        if actor_id is None:
            return False
        if self.is_owner(actor_id, resource) or self._is_idea_creator(actor_id, ctx):
            return True
        return bool(resource.get("is_shared")) and ctx.is_member

    def can_modify(self, actor_id, resource, ctx=_EMPTY):
        if actor_id is None:
            return False
        if self._is_idea_creator(actor_id, ctx) or self.is_owner(actor_id, resource):
            return True
        return ctx.is_member and bool(resource.get("is_shared"))

    def can_delete(self, actor_id, resource, ctx=_EMPTY):
        return self.is_owner(actor_id, resource)

    def can_delete_item(self, actor_id: Optional[str], checklist: Row, item: Row, ctx: AccessContext = _EMPTY) -> bool:
        if actor_id is None:
            return False
        if self._is_idea_creator(actor_id, ctx) or item.get("created_by") == actor_id:
            return True
        return self.can_modify(actor_id, checklist, ctx) and bool(checklist.get("is_shared"))


ideas = IdeaPolicy()
posts = PostPolicy()
feature_requests = FeatureRequestPolicy()
comments = CommentPolicy()
checklists = ChecklistPolicy()


def enforce(allowed: bool, detail: str = "Forbidden") -> None:
    if not allowed:
        raise AuthorizationError(detail)
