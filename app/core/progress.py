from typing import Any, Dict, Iterable, List


def progress(items: Iterable[Dict[str, Any]]) -> int:
    """Completion percentage of checklist items, rounded half-up. Empty checklists are 0."""
    items = list(items)
    total = len(items)
    if total == 0:
        return 0
    done = sum(1 for item in items if item.get("completed"))
    # round-half-up of 100 * done / total in integer arithmetic
    return (200 * done + total) // (2 * total)


def with_progress(checklist: Dict[str, Any], items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Checklist row shaped for responses: its items ordered by position plus the derived progress."""
    ordered = sorted(items, key=lambda i: (i.get("position") is None, i.get("position") or 0))
    return {**checklist, "checklist_items": ordered, "progress": progress(ordered)}
