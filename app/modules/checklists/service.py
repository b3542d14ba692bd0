from app.database.resource_store import ResourceStore
from app.modules.checklists.schemas import (
    ChecklistCreate, ChecklistItemCreate, ChecklistItemUpdate, ChecklistResponse,
    ChecklistItemResponse, IdeaChecklistsResponse, ItemMutationResponse, ItemDeleteResponse
)
from app.modules.users.service import UserService
from app.core import access_policy
from app.core.access_policy import AccessContext, enforce
from app.core.dependencies import check_idea_access, checklist_access_context, idea_access_context
from app.core.errors import NotFoundError, UpstreamError
from app.core.progress import progress, with_progress
from fastapi import HTTPException
from typing import Any, Dict, List, Tuple
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class ChecklistService:
    def __init__(self, store: ResourceStore):
        self.store = store
        self.users = UserService(store)

    def _items(self, checklist_ids: List[str]) -> Dict[str, List[Dict[str, Any]]]:
        by_checklist: Dict[str, List[Dict[str, Any]]] = {cid: [] for cid in checklist_ids}
        for item in self.store.query("checklist_items", in_={"checklist_id": checklist_ids}):
            by_checklist.setdefault(item["checklist_id"], []).append(item)
        return by_checklist

    def _shape(self, checklists: List[Dict[str, Any]]) -> List[ChecklistResponse]:
        """Attach ordered items, progress and owner / completer info"""
        if not checklists:
            return []
        items = self._items([c["id"] for c in checklists])
        user_ids = [c.get("creator_id") for c in checklists]
        user_ids += [i.get("completed_by") for rows in items.values() for i in rows]
        users = self.users.summaries(user_ids)

        shaped = []
        for checklist in checklists:
            row = with_progress(checklist, items.get(checklist["id"], []))
            row["checklist_items"] = [
                ChecklistItemResponse(**i, completed_by_user=users.get(i.get("completed_by")))
                for i in row["checklist_items"]
            ]
            shaped.append(ChecklistResponse(**row, owner=users.get(checklist.get("creator_id"))))
        return shaped

    def _progress(self, checklist_id: str) -> int:
        return progress(self.store.query("checklist_items", filters={"checklist_id": checklist_id}))

    def _load(self, checklist_id: str, user_id: str) -> Tuple[Dict[str, Any], AccessContext]:
        checklist = self.store.get("checklists", checklist_id, not_found="Checklist not found")
        return checklist, checklist_access_context(checklist, user_id, self.store)

    def _load_item(self, checklist_id: str, item_id: str) -> Dict[str, Any]:
        item = self.store.find_one("checklist_items", {"id": item_id, "checklist_id": checklist_id})
        if item is None:
            raise NotFoundError("Checklist item not found")
        return item

    def list_for_idea(self, idea_id: str, user_data: dict) -> IdeaChecklistsResponse:
        """The caller's personal checklists and the shared checklists they can see"""
        idea = check_idea_access(idea_id, user_data, self.store)
        user_id = user_data["id"]
        ctx = idea_access_context(idea, user_id, self.store)

        personal = self.store.query(
            "checklists",
            filters={"idea_id": idea_id, "creator_id": user_id, "is_shared": False},
            order="created_at"
        )
        shared = [
            c for c in self.store.query(
                "checklists", filters={"idea_id": idea_id, "is_shared": True}, order="created_at"
            )
            if access_policy.checklists.can_read(user_id, c, ctx)
        ]
        return IdeaChecklistsResponse(
            personal_checklists=self._shape(personal),
            shared_checklists=self._shape(shared)
        )

    def create_checklist(self, idea_id: str, data: ChecklistCreate, user_data: dict) -> ChecklistResponse:
        """Create a checklist on an idea the caller can see, with optional initial items"""
        check_idea_access(idea_id, user_data, self.store)
        user_id = user_data["id"]
        try:
            checklist = self.store.insert("checklists", {
                "idea_id": idea_id,
                "creator_id": user_id,
                "title": data.title,
                "is_shared": data.is_shared,
            })
            texts = data.item_texts()
            if texts:
                self.store.insert_many("checklist_items", [
                    {
                        "checklist_id": checklist["id"],
                        "text": text,
                        "completed": False,
                        "position": position,
                        "created_by": user_id,
                    }
                    for position, text in enumerate(texts)
                ])
            return self._shape([checklist])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating checklist: {e}")
            raise UpstreamError("Failed to create checklist")

    def get_checklist(self, checklist_id: str, user_id: str) -> ChecklistResponse:
        checklist, ctx = self._load(checklist_id, user_id)
        enforce(access_policy.checklists.can_read(user_id, checklist, ctx), "Not authorized to view this checklist")
        return self._shape([checklist])[0]

    def delete_checklist(self, checklist_id: str, user_id: str) -> None:
        """Delete a checklist (its creator only). Items cascade in the database."""
        checklist = self.store.get("checklists", checklist_id, not_found="Checklist not found")
        enforce(access_policy.checklists.can_delete(user_id, checklist), "Only the creator can delete this checklist")
        self.store.delete("checklists", checklist_id)

    # Items

    def add_item(self, checklist_id: str, data: ChecklistItemCreate, user_id: str) -> ItemMutationResponse:
        """Append an item. Without an explicit position it goes after the current last item."""
        checklist, ctx = self._load(checklist_id, user_id)
        enforce(
            access_policy.checklists.can_modify(user_id, checklist, ctx),
            "You are not authorized to add items to this checklist"
        )

        position = data.position
        if position is None:
            last = self.store.query(
                "checklist_items",
                filters={"checklist_id": checklist_id},
                order="position",
                desc=True,
                limit=1
            )
            position = last[0]["position"] + 1 if last else 0

        item = self.store.insert("checklist_items", {
            "checklist_id": checklist_id,
            "text": data.text,
            "completed": False,
            "position": position,
            "created_by": user_id,
        })
        return ItemMutationResponse(item=ChecklistItemResponse(**item), progress=self._progress(checklist_id))

    def update_item(
        self,
        checklist_id: str,
        item_id: str,
        data: ChecklistItemUpdate,
        user_id: str
    ) -> ItemMutationResponse:
        """
        Edit text or position, or toggle completion.

        completed_by / completed_at are set together when an item is checked
        and cleared together when it is unchecked.
        """
        checklist, ctx = self._load(checklist_id, user_id)
        item = self._load_item(checklist_id, item_id)
        enforce(
            access_policy.checklists.can_modify(user_id, checklist, ctx),
            "You are not authorized to update items in this checklist"
        )

        patch: Dict[str, Any] = {}
        if data.text is not None:
            patch["text"] = data.text
        if data.position is not None:
            patch["position"] = data.position
        if data.completed is not None:
            patch["completed"] = data.completed
            if data.completed:
                patch["completed_by"] = user_id
                patch["completed_at"] = datetime.utcnow().isoformat()
            else:
                patch["completed_by"] = None
                patch["completed_at"] = None

        if patch:
            item = self.store.update("checklist_items", item_id, patch, not_found="Checklist item not found")

        completer = item.get("completed_by")
        response = ChecklistItemResponse(**item, completed_by_user=self.users.summaries([completer]).get(completer))
        return ItemMutationResponse(item=response, progress=self._progress(checklist_id))

    def update_item_by_id(self, item_id: str, data: ChecklistItemUpdate, user_id: str) -> ItemMutationResponse:
        item = self.store.get("checklist_items", item_id, not_found="Checklist item not found")
        return self.update_item(item["checklist_id"], item_id, data, user_id)

    def delete_item(self, checklist_id: str, item_id: str, user_id: str) -> ItemDeleteResponse:
        """Delete an item: idea creator, the item's creator, or any modifier of a shared checklist"""
        checklist, ctx = self._load(checklist_id, user_id)
        item = self._load_item(checklist_id, item_id)
        enforce(
            access_policy.checklists.can_delete_item(user_id, checklist, item, ctx),
            "You are not authorized to delete this item"
        )
        self.store.delete("checklist_items", item_id)
        return ItemDeleteResponse(success=True, progress=self._progress(checklist_id))

    def delete_item_by_id(self, item_id: str, user_id: str) -> ItemDeleteResponse:
        item = self.store.get("checklist_items", item_id, not_found="Checklist item not found")
        return self.delete_item(item["checklist_id"], item_id, user_id)
