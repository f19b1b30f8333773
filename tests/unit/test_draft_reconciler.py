"""
Unit tests for the client-side draft reconciler.
"""

from collections import Counter
from typing import Callable, Optional
from uuid import UUID, uuid4

import pytest
import pytest_asyncio

from portal.client.draft import (
    CommitOperation,
    DraftKey,
    DraftReconciler,
    PersistedKey,
)
from portal.client.transport import IAchievementTransport, TransportError
from portal.core.exceptions import NotFoundError, ValidationError
from portal.models.achievement import Achievement, AchievementCreate, AchievementUpdate
from portal.models.enums import AchievementType
from portal.utils.datetime_utils import now_utc


class FakeTransport(IAchievementTransport):
    """In-memory server for one list, recording every call."""

    def __init__(self, list_id: UUID, titles: list[str]):
        self.list_id = list_id
        self.items: dict[UUID, Achievement] = {}
        self.calls: list[tuple[str, object]] = []
        self.fail_updates: set[UUID] = set()
        self.fail_uploads: set[UUID] = set()
        self.fail_list = False
        self.on_create: Optional[Callable[[], None]] = None
        for title in titles:
            self._insert(title, AchievementType.PROGRESS, 1)

    def _insert(self, title, achievement_type, goal, **fields) -> Achievement:
        now = now_utc()
        achievement = Achievement(
            id=uuid4(),
            list_id=self.list_id,
            title=title,
            type=achievement_type,
            progress_goal=goal,
            order=len(self.items) + 1,
            created_at=now,
            updated_at=now,
            **fields,
        )
        self.items[achievement.id] = achievement
        return achievement

    def ordered(self) -> list[Achievement]:
        return sorted(self.items.values(), key=lambda a: a.order)

    def count(self, name: str) -> int:
        return Counter(call for call, _ in self.calls)[name]

    async def list_achievements(self, list_id):
        self.calls.append(("list", None))
        if self.fail_list:
            raise TransportError(None, "connection reset")
        return self.ordered()

    async def create_achievement(self, list_id, data: AchievementCreate):
        self.calls.append(("create", data))
        if self.on_create:
            self.on_create()
        if not data.title:
            raise TransportError(400, "Title and type are required.")
        return self._insert(
            data.title,
            data.type,
            data.progress_goal or 1,
            description=data.description,
            is_hidden=data.is_hidden,
            image_url=data.image_url,
        )

    async def update_achievement(self, list_id, achievement_id, update: AchievementUpdate):
        self.calls.append(("update", achievement_id))
        assert isinstance(achievement_id, UUID)
        if achievement_id in self.fail_updates:
            raise TransportError(500, "store unavailable")
        if achievement_id not in self.items:
            raise TransportError(404, "not found")
        updated = self.items[achievement_id].model_copy(update=update.field_changes())
        self.items[achievement_id] = updated
        return updated

    async def delete_achievement(self, list_id, achievement_id):
        self.calls.append(("delete", achievement_id))
        assert isinstance(achievement_id, UUID)
        removed = self.items.pop(achievement_id)
        for other in self.items.values():
            if other.order > removed.order:
                self.items[other.id] = other.model_copy(update={"order": other.order - 1})

    async def reorder_achievements(self, list_id, ordered_ids):
        self.calls.append(("reorder", list(ordered_ids)))
        assert sorted(ordered_ids) == sorted(self.items)
        for index, achievement_id in enumerate(ordered_ids, start=1):
            self.items[achievement_id] = self.items[achievement_id].model_copy(
                update={"order": index}
            )
        return self.ordered()

    async def upload_image(self, list_id, achievement_id, filename, data, content_type=None):
        self.calls.append(("upload", achievement_id))
        assert isinstance(achievement_id, UUID)
        if achievement_id in self.fail_uploads:
            raise TransportError(400, "No image file provided.")
        url = f"http://test/storage/achievements/{achievement_id}_{filename}"
        self.items[achievement_id] = self.items[achievement_id].model_copy(
            update={"image_url": url}
        )
        return url


@pytest.fixture
def list_id():
    return uuid4()


@pytest.fixture
def transport(list_id):
    return FakeTransport(list_id, ["A", "B", "C"])


@pytest_asyncio.fixture
async def reconciler(transport, list_id):
    reconciler = await DraftReconciler.load(transport, list_id)
    reconciler.begin_edit()
    transport.calls.clear()
    return reconciler


def _key_of(reconciler, title):
    return next(item.key for item in reconciler.draft if item.title == title)


@pytest.mark.asyncio
async def test_begin_edit_copies_snapshot(reconciler):
    assert [item.title for item in reconciler.draft] == ["A", "B", "C"]
    assert all(isinstance(item.key, PersistedKey) for item in reconciler.draft)
    assert reconciler.has_unsaved_changes is False


@pytest.mark.asyncio
async def test_edits_are_local_until_commit(reconciler, transport):
    reconciler.edit_draft_item(_key_of(reconciler, "A"), "title", "A!")
    reconciler.add_draft_item(title="D")
    reconciler.move_draft_item(0, 2)

    assert transport.calls == []
    assert [a.title for a in reconciler.server_snapshot] == ["A", "B", "C"]
    assert reconciler.has_unsaved_changes is True


@pytest.mark.asyncio
async def test_add_draft_item_uses_temporary_key(reconciler):
    key = reconciler.add_draft_item(title="D", type=AchievementType.MILESTONE, progress_goal=9)

    assert isinstance(key, DraftKey)
    item = reconciler.draft[-1]
    assert item.key == key
    assert item.order == 4
    assert item.progress_goal == 1


@pytest.mark.asyncio
async def test_move_renumbers_contiguously(reconciler):
    reconciler.move_draft_item(2, 0)

    assert [(item.title, item.order) for item in reconciler.draft] == [
        ("C", 1),
        ("A", 2),
        ("B", 3),
    ]


@pytest.mark.asyncio
async def test_edit_type_adjusts_progress_goal(reconciler):
    key = _key_of(reconciler, "A")
    reconciler.edit_draft_item(key, "progressGoal", 12)
    assert reconciler.draft[0].progress_goal == 12

    reconciler.edit_draft_item(key, "type", "milestone")
    assert reconciler.draft[0].type == AchievementType.MILESTONE
    assert reconciler.draft[0].progress_goal == 1

    reconciler.edit_draft_item(key, "progress_goal", 30)
    assert reconciler.draft[0].progress_goal == 1


@pytest.mark.asyncio
async def test_edit_rejects_unknown_field_and_key(reconciler):
    with pytest.raises(ValidationError):
        reconciler.edit_draft_item(_key_of(reconciler, "A"), "order", 3)
    with pytest.raises(NotFoundError):
        reconciler.edit_draft_item(DraftKey.new(), "title", "x")


@pytest.mark.asyncio
async def test_remove_temporary_item_is_not_scheduled(reconciler):
    key = reconciler.add_draft_item(title="D")
    reconciler.remove_draft_item(key)

    assert reconciler.pending_deletions == []
    assert len(reconciler.draft) == 3


@pytest.mark.asyncio
async def test_remove_persisted_item_is_scheduled(reconciler):
    key = _key_of(reconciler, "B")
    reconciler.remove_draft_item(key)

    assert reconciler.pending_deletions == [key.id]
    assert [(item.title, item.order) for item in reconciler.draft] == [("A", 1), ("C", 2)]


@pytest.mark.asyncio
async def test_operations_require_begin_edit(transport, list_id):
    reconciler = DraftReconciler(transport, list_id)
    with pytest.raises(RuntimeError):
        reconciler.add_draft_item(title="x")


@pytest.mark.asyncio
async def test_round_trip_sends_minimal_calls(reconciler, transport):
    new_key = reconciler.add_draft_item(title="D", type=AchievementType.MILESTONE)
    reconciler.move_draft_item(3, 0)
    removed = _key_of(reconciler, "B")
    reconciler.remove_draft_item(removed)

    result = await reconciler.commit()

    assert result.ok
    assert transport.count("create") == 1
    assert transport.count("update") == 0
    assert transport.count("delete") == 1
    assert transport.count("reorder") == 1
    assert ("delete", removed.id) in transport.calls

    titles = [a.title for a in reconciler.server_snapshot]
    assert titles == ["D", "A", "C"]
    assert [a.order for a in reconciler.server_snapshot] == [1, 2, 3]
    assert all(isinstance(item.key, PersistedKey) for item in reconciler.draft)
    assert new_key not in [item.key for item in reconciler.draft]
    assert reconciler.pending_deletions == []
    assert reconciler.has_unsaved_changes is False


@pytest.mark.asyncio
async def test_delete_settles_before_writes(reconciler, transport):
    reconciler.remove_draft_item(_key_of(reconciler, "A"))
    reconciler.edit_draft_item(_key_of(reconciler, "C"), "title", "C!")
    reconciler.add_draft_item(title="D")

    await reconciler.commit()

    names = [name for name, _ in transport.calls]
    assert names.index("delete") < names.index("update")
    assert names.index("delete") < names.index("create")


@pytest.mark.asyncio
async def test_unchanged_draft_sends_no_writes(reconciler, transport):
    result = await reconciler.commit()

    assert result.ok
    assert result.succeeded == []
    assert [name for name, _ in transport.calls] == ["list", "list"]


@pytest.mark.asyncio
async def test_only_changed_fields_are_sent(reconciler, transport):
    reconciler.edit_draft_item(_key_of(reconciler, "B"), "isHidden", True)

    await reconciler.commit()

    assert transport.count("update") == 1
    assert ("update", reconciler.draft[1].key.id) in transport.calls
    assert transport.items[reconciler.draft[1].key.id].is_hidden is True


@pytest.mark.asyncio
async def test_partial_failure_is_reported_per_item(list_id):
    transport = FakeTransport(list_id, ["A", "B", "C", "D", "E"])
    reconciler = await DraftReconciler.load(transport, list_id)
    reconciler.begin_edit()
    ids = [item.key.id for item in reconciler.draft]
    for item in reconciler.draft:
        reconciler.edit_draft_item(item.key, "title", item.title + "!")
    transport.fail_updates = {ids[1], ids[3]}

    result = await reconciler.commit()

    failed = result.failed_for(CommitOperation.UPDATE)
    assert len(failed) == 2
    assert {f.item.key.id for f in failed} == {ids[1], ids[3]}
    assert {f.item.title for f in failed} == {"B!", "D!"}
    assert all(isinstance(f.error, TransportError) for f in failed)
    assert all(f.error.status_code == 500 for f in failed)
    assert len(result.succeeded_for(CommitOperation.UPDATE)) == 3
    assert len(result.failed) == 2
    assert result.refresh_error is None

    # The refreshed snapshot is the server's truth: failed edits did not land.
    assert [a.title for a in reconciler.server_snapshot] == ["A!", "B", "C!", "D", "E!"]


@pytest.mark.asyncio
async def test_failed_create_is_reported(reconciler, transport):
    key = reconciler.add_draft_item(title="")

    result = await reconciler.commit()

    failed = result.failed_for(CommitOperation.CREATE)
    assert len(failed) == 1
    assert failed[0].item.key == key
    assert failed[0].error.status_code == 400
    assert len(transport.items) == 3


@pytest.mark.asyncio
async def test_images_upload_after_save_with_real_ids(reconciler, transport):
    new_key = reconciler.add_draft_item(title="D")
    reconciler.stage_image(new_key, "d.png", b"png", "image/png")
    existing = _key_of(reconciler, "A")
    reconciler.stage_image(existing, "a.png", b"png")

    result = await reconciler.commit()

    assert result.ok
    uploads = [target for name, target in transport.calls if name == "upload"]
    assert len(uploads) == 2
    assert all(isinstance(target, UUID) for target in uploads)
    assert existing.id in uploads
    names = [name for name, _ in transport.calls]
    assert names.index("create") < names.index("upload")
    by_title = {a.title: a for a in reconciler.server_snapshot}
    assert by_title["D"].image_url.endswith("_d.png")
    assert by_title["A"].image_url.endswith("_a.png")
    assert all(item.staged_image is None for item in reconciler.draft)


@pytest.mark.asyncio
async def test_failed_upload_keeps_created_item(reconciler, transport):
    key = reconciler.add_draft_item(title="D")
    reconciler.stage_image(key, "d.png", b"png")

    original_create = transport.create_achievement

    async def create_and_fail_upload(list_id, data):
        created = await original_create(list_id, data)
        transport.fail_uploads = {created.id}
        return created

    transport.create_achievement = create_and_fail_upload

    result = await reconciler.commit()

    failed = result.failed_for(CommitOperation.UPLOAD_IMAGE)
    assert len(failed) == 1
    assert failed[0].item.key == key
    assert len(result.succeeded_for(CommitOperation.CREATE)) == 1
    assert "D" in [a.title for a in reconciler.server_snapshot]


@pytest.mark.asyncio
async def test_commit_on_empty_draft_is_rejected(list_id):
    transport = FakeTransport(list_id, [])
    reconciler = await DraftReconciler.load(transport, list_id)
    reconciler.begin_edit()
    transport.calls.clear()

    with pytest.raises(ValidationError):
        await reconciler.commit()

    assert transport.calls == []


@pytest.mark.asyncio
async def test_discard_drops_draft(reconciler):
    reconciler.add_draft_item(title="D")
    reconciler.discard()

    assert reconciler.is_editing is False
    assert reconciler.has_unsaved_changes is False
    assert [a.title for a in reconciler.server_snapshot] == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_discard_during_commit_ignores_results(reconciler, transport):
    reconciler.add_draft_item(title="D")
    transport.on_create = reconciler.discard

    result = await reconciler.commit()

    assert result.applied is False
    assert reconciler.is_editing is False
    # The call itself ran to completion on the server.
    assert "D" in [a.title for a in transport.ordered()]
    assert [a.title for a in reconciler.server_snapshot] == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_refresh_failure_keeps_local_merge(reconciler, transport):
    key = reconciler.add_draft_item(title="D")

    def go_offline():
        transport.fail_list = True

    transport.on_create = go_offline

    result = await reconciler.commit()

    assert result.refresh_error is not None
    assert len(result.failed_for(CommitOperation.REORDER)) == 1
    assert key not in [item.key for item in reconciler.draft]
    created = reconciler.draft[-1]
    assert isinstance(created.key, PersistedKey)
    assert created.key.id in {a.id for a in reconciler.server_snapshot}
    assert reconciler.has_unsaved_changes is True
