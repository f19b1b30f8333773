"""
Client-side edit session for one achievement list.

A ``DraftReconciler`` holds the last known server collection and a working
copy that can be edited freely, including items the server has not seen
yet. ``commit`` turns the difference into remote calls:

1. deletions of removed persisted items (settled before anything else),
2. updates of changed items and creates of new ones, concurrently,
3. staged image uploads for items whose write succeeded,
4. one full reorder if the server order differs from the draft order,
5. a re-fetch that becomes the new snapshot and draft.

Every call may fail on its own. Failures are collected in the returned
``CommitResult``; none of them is raised.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Optional, Union
from uuid import UUID, uuid4

from portal.client.transport import IAchievementTransport
from portal.core.exceptions import NotFoundError, ValidationError
from portal.core.logger import logger
from portal.models.achievement import (
    EDITABLE_FIELDS,
    Achievement,
    AchievementCreate,
    AchievementUpdate,
    resolve_progress_goal,
)
from portal.models.enums import AchievementType
from portal.services.ordering import move, next_order

_FIELD_ALIASES = {
    "progressGoal": "progress_goal",
    "isHidden": "is_hidden",
    "imageUrl": "image_url",
}


@dataclass(frozen=True)
class PersistedKey:
    """Key of an item the server knows."""

    id: UUID


@dataclass(frozen=True)
class DraftKey:
    """Key of an item that only exists locally. Never sent to the server."""

    temp: str

    @classmethod
    def new(cls) -> "DraftKey":
        return cls(temp=f"draft-{uuid4().hex}")


ItemKey = Union[PersistedKey, DraftKey]


@dataclass(frozen=True)
class StagedImage:
    filename: str
    data: bytes
    content_type: Optional[str] = None


@dataclass
class DraftItem:
    key: ItemKey
    title: str = ""
    description: str = ""
    type: AchievementType = AchievementType.PROGRESS
    progress_goal: int = 1
    is_hidden: bool = False
    image_url: str = ""
    order: int = 0
    staged_image: Optional[StagedImage] = None

    @classmethod
    def from_achievement(cls, achievement: Achievement) -> "DraftItem":
        return cls(
            key=PersistedKey(achievement.id),
            title=achievement.title,
            description=achievement.description,
            type=achievement.type,
            progress_goal=achievement.progress_goal,
            is_hidden=achievement.is_hidden,
            image_url=achievement.image_url,
            order=achievement.order,
        )

    @property
    def is_persisted(self) -> bool:
        return isinstance(self.key, PersistedKey)

    def fields(self) -> dict[str, Any]:
        """Editable fields, without ``order``."""
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}


class CommitOperation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    UPLOAD_IMAGE = "upload_image"
    REORDER = "reorder"


@dataclass(frozen=True)
class CommitSuccess:
    operation: CommitOperation
    item: Optional[DraftItem] = None
    achievement_id: Optional[UUID] = None


@dataclass(frozen=True)
class CommitFailure:
    """One remote call that did not take effect, with the draft item it was for."""

    operation: CommitOperation
    item: Optional[DraftItem]
    error: Exception
    achievement_id: Optional[UUID] = None


@dataclass
class CommitResult:
    succeeded: list[CommitSuccess] = field(default_factory=list)
    failed: list[CommitFailure] = field(default_factory=list)
    # Set when the closing re-fetch failed; the draft then keeps local merges.
    refresh_error: Optional[Exception] = None
    # False when the session was discarded while the commit was in flight.
    applied: bool = True

    @property
    def ok(self) -> bool:
        return not self.failed and self.refresh_error is None

    def succeeded_for(self, operation: CommitOperation) -> list[CommitSuccess]:
        return [s for s in self.succeeded if s.operation == operation]

    def failed_for(self, operation: CommitOperation) -> list[CommitFailure]:
        return [f for f in self.failed if f.operation == operation]


class DraftReconciler:
    """Speculative local edits of one list, committed as a batch of remote calls."""

    def __init__(
        self,
        transport: IAchievementTransport,
        list_id: UUID,
        snapshot: Iterable[Achievement] = (),
    ):
        self._transport = transport
        self.list_id = list_id
        self._snapshot: list[Achievement] = sorted(snapshot, key=lambda a: a.order)
        self._draft: Optional[list[DraftItem]] = None
        self._pending_deletions: dict[UUID, DraftItem] = {}
        self._generation = 0
        self._dirty = False

    @classmethod
    async def load(cls, transport: IAchievementTransport, list_id: UUID) -> "DraftReconciler":
        """Fetch the list and start a reconciler on it."""
        return cls(transport, list_id, await transport.list_achievements(list_id))

    # ===========================================
    # State
    # ===========================================

    @property
    def server_snapshot(self) -> list[Achievement]:
        return list(self._snapshot)

    @property
    def draft(self) -> list[DraftItem]:
        return list(self._require_draft())

    @property
    def pending_deletions(self) -> list[UUID]:
        return list(self._pending_deletions)

    @property
    def is_editing(self) -> bool:
        return self._draft is not None

    @property
    def has_unsaved_changes(self) -> bool:
        """True while the draft holds edits that were neither committed nor discarded."""
        return self._draft is not None and self._dirty

    def _require_draft(self) -> list[DraftItem]:
        if self._draft is None:
            raise RuntimeError("No edit in progress; call begin_edit() first")
        return self._draft

    def _index_of(self, key: ItemKey) -> int:
        for index, item in enumerate(self._require_draft()):
            if item.key == key:
                return index
        raise NotFoundError(f"No draft item with key {key}")

    def _renumber(self) -> None:
        for index, item in enumerate(self._require_draft(), start=1):
            item.order = index

    # ===========================================
    # Local edits
    # ===========================================

    def begin_edit(self) -> None:
        """Start (or restart) editing from the server snapshot."""
        self._draft = [DraftItem.from_achievement(a) for a in self._snapshot]
        self._pending_deletions = {}
        self._dirty = False

    def add_draft_item(
        self,
        title: str = "",
        description: str = "",
        type: AchievementType = AchievementType.PROGRESS,
        progress_goal: Optional[int] = None,
        is_hidden: bool = False,
        image_url: str = "",
    ) -> DraftKey:
        draft = self._require_draft()
        achievement_type = AchievementType(type)
        item = DraftItem(
            key=DraftKey.new(),
            title=title,
            description=description,
            type=achievement_type,
            progress_goal=resolve_progress_goal(achievement_type, progress_goal),
            is_hidden=is_hidden,
            image_url=image_url,
            order=next_order(i.order for i in draft),
        )
        draft.append(item)
        self._dirty = True
        return item.key

    def edit_draft_item(self, key: ItemKey, field_name: str, value: Any) -> DraftItem:
        """
        Set one field of a draft item.

        Accepts the field name or its camelCase alias. Changing ``type``
        resets ``progress_goal`` to what the new type allows.
        """
        item = self._require_draft()[self._index_of(key)]
        name = _FIELD_ALIASES.get(field_name, field_name)
        if name not in EDITABLE_FIELDS:
            raise ValidationError(f"Field {field_name} cannot be edited")

        if name == "type":
            new_type = AchievementType(value)
            if new_type != item.type:
                item.type = new_type
                item.progress_goal = resolve_progress_goal(new_type, None)
        elif name == "progress_goal":
            goal = int(value)
            if goal < 1:
                raise ValidationError("Progress goal must be a positive integer.")
            item.progress_goal = resolve_progress_goal(item.type, goal)
        else:
            setattr(item, name, value)

        self._dirty = True
        return item

    def move_draft_item(self, old_index: int, new_index: int) -> None:
        draft = self._require_draft()
        draft[:] = move(draft, old_index, new_index)
        self._renumber()
        self._dirty = True

    def remove_draft_item(self, key: ItemKey) -> None:
        """Drop an item; persisted ones are also scheduled for deletion."""
        draft = self._require_draft()
        item = draft.pop(self._index_of(key))
        if isinstance(item.key, PersistedKey):
            self._pending_deletions[item.key.id] = item
        self._renumber()
        self._dirty = True

    def stage_image(
        self,
        key: ItemKey,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> None:
        """Attach a local file to upload after the item is saved."""
        item = self._require_draft()[self._index_of(key)]
        item.staged_image = StagedImage(filename=filename, data=data, content_type=content_type)
        self._dirty = True

    def discard(self) -> None:
        """Drop the draft. Results of a commit still in flight are ignored."""
        self._draft = None
        self._pending_deletions = {}
        self._generation += 1
        self._dirty = False

    # ===========================================
    # Commit
    # ===========================================

    def _record(
        self,
        result: CommitResult,
        operation: CommitOperation,
        item: Optional[DraftItem],
        outcome: Any,
        achievement_id: Optional[UUID] = None,
    ) -> bool:
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning(
                f"Commit {operation.value} failed for list {self.list_id}"
                f" ({achievement_id or (item.key if item else '-')}): {outcome}"
            )
            result.failed.append(CommitFailure(operation, item, outcome, achievement_id))
            return False
        result.succeeded.append(CommitSuccess(operation, item, achievement_id))
        return True

    def _diff(self, item: DraftItem, snapshot: dict[UUID, Achievement]) -> dict[str, Any]:
        current = snapshot.get(item.key.id)
        if current is None:
            return item.fields()
        return {
            name: value
            for name, value in item.fields().items()
            if getattr(current, name) != value
        }

    async def _reconcile_order(
        self,
        result: CommitResult,
        desired: list[UUID],
    ) -> None:
        """Issue one full reorder if the server order differs from ``desired``."""
        try:
            server_ids = [a.id for a in await self._transport.list_achievements(self.list_id)]
            present = set(server_ids)
            ordered = [item_id for item_id in desired if item_id in present]
            placed = set(ordered)
            ordered += [item_id for item_id in server_ids if item_id not in placed]
            if ordered == server_ids:
                return
            await self._transport.reorder_achievements(self.list_id, ordered)
        except Exception as e:
            self._record(result, CommitOperation.REORDER, None, e)
            return
        result.succeeded.append(CommitSuccess(CommitOperation.REORDER))

    def _merge_partial(
        self,
        created: dict[ItemKey, Achievement],
        updated: dict[UUID, Achievement],
        deleted: list[UUID],
        uploaded: set[ItemKey],
    ) -> None:
        """Fold successful calls into local state when the re-fetch is unavailable."""
        snapshot = {a.id: a for a in self._snapshot}
        snapshot.update(updated)
        for achievement in created.values():
            snapshot[achievement.id] = achievement
        for achievement_id in deleted:
            snapshot.pop(achievement_id, None)
            self._pending_deletions.pop(achievement_id, None)
        self._snapshot = sorted(snapshot.values(), key=lambda a: a.order)

        for item in self._draft or []:
            if item.key in uploaded:
                item.staged_image = None
            if item.key in created:
                item.key = PersistedKey(created[item.key].id)

    async def commit(self) -> CommitResult:
        """
        Send the draft to the server and re-synchronize from it.

        Only changed fields of persisted items are sent; ``order`` is
        reconciled by a single reorder at the end. Per-call failures are
        reported in the result, never raised.
        """
        draft = self._require_draft()
        if not draft:
            raise ValidationError("Add at least one achievement before saving.")

        generation = self._generation
        items = [replace(item) for item in draft]
        snapshot = {a.id: a for a in self._snapshot}
        result = CommitResult()

        kept_ids = {item.key.id for item in items if isinstance(item.key, PersistedKey)}
        deletions = [
            (achievement_id, removed)
            for achievement_id, removed in self._pending_deletions.items()
            if achievement_id not in kept_ids
        ]

        to_update: list[tuple[DraftItem, dict[str, Any]]] = []
        image_only: list[DraftItem] = []
        for item in items:
            if not isinstance(item.key, PersistedKey):
                continue
            changes = self._diff(item, snapshot)
            if changes:
                to_update.append((item, changes))
            elif item.staged_image:
                image_only.append(item)
        to_create = [item for item in items if isinstance(item.key, DraftKey)]

        real_ids: dict[ItemKey, UUID] = {
            item.key: item.key.id for item in items if isinstance(item.key, PersistedKey)
        }
        created: dict[ItemKey, Achievement] = {}
        updated: dict[UUID, Achievement] = {}
        deleted: list[UUID] = []
        uploaded: set[ItemKey] = set()

        # Deletions settle before any update or create is issued.
        outcomes = await asyncio.gather(
            *(self._transport.delete_achievement(self.list_id, d) for d, _ in deletions),
            return_exceptions=True,
        )
        for (achievement_id, removed), outcome in zip(deletions, outcomes):
            if self._record(result, CommitOperation.DELETE, removed, outcome, achievement_id):
                deleted.append(achievement_id)

        writes = [
            self._transport.update_achievement(
                self.list_id, item.key.id, AchievementUpdate(**changes)
            )
            for item, changes in to_update
        ] + [
            self._transport.create_achievement(self.list_id, AchievementCreate(**item.fields()))
            for item in to_create
        ]
        write_items = [(CommitOperation.UPDATE, item) for item, _ in to_update] + [
            (CommitOperation.CREATE, item) for item in to_create
        ]
        outcomes = await asyncio.gather(*writes, return_exceptions=True)

        to_upload = list(image_only)
        for (operation, item), outcome in zip(write_items, outcomes):
            achievement_id = outcome.id if isinstance(outcome, Achievement) else real_ids.get(item.key)
            if not self._record(result, operation, item, outcome, achievement_id):
                continue
            if operation == CommitOperation.CREATE:
                created[item.key] = outcome
                real_ids[item.key] = outcome.id
            else:
                updated[outcome.id] = outcome
            if item.staged_image:
                to_upload.append(item)

        outcomes = await asyncio.gather(
            *(
                self._transport.upload_image(
                    self.list_id,
                    real_ids[item.key],
                    item.staged_image.filename,
                    item.staged_image.data,
                    item.staged_image.content_type,
                )
                for item in to_upload
            ),
            return_exceptions=True,
        )
        for item, outcome in zip(to_upload, outcomes):
            if self._record(
                result, CommitOperation.UPLOAD_IMAGE, item, outcome, real_ids[item.key]
            ):
                uploaded.add(item.key)

        desired = [
            real_ids[item.key]
            for item in sorted(items, key=lambda i: i.order)
            if item.key in real_ids
        ]
        await self._reconcile_order(result, desired)

        if generation != self._generation:
            result.applied = False
            return result

        try:
            fresh = await self._transport.list_achievements(self.list_id)
        except Exception as e:
            logger.warning(f"Re-fetch of list {self.list_id} after commit failed: {e}")
            result.refresh_error = e
            self._merge_partial(created, updated, deleted, uploaded)
            return result

        if generation != self._generation:
            result.applied = False
            return result

        self._snapshot = sorted(fresh, key=lambda a: a.order)
        self.begin_edit()
        return result
