"""Tests for crudgate/api/controllers/audited.py."""

from unittest.mock import AsyncMock, MagicMock

from crudgate.api.controllers.audited import AuditedCRUDController
from crudgate.domain.context import RequestContext
from crudgate.domain.models.entity import AuditedEntity
from crudgate.domain.models.enums import CRUDAction


class Note(AuditedEntity):
    text: str = ""


def _mock_repo():
    repo = AsyncMock()
    repo.entity_type = Note
    repo.create = MagicMock()
    repo.create_range = MagicMock()
    repo.delete = MagicMock()
    repo.delete_range = MagicMock()
    return repo


def _controller(repo, actor_id=4, *actions):
    return AuditedCRUDController(repo, *actions, context=RequestContext(actor_id=actor_id))


# --- Actor is forwarded ---

async def test_create_passes_actor():
    repo = _mock_repo()
    note = Note(text="a")

    result = await _controller(repo).create(note)

    assert result.status_code == 200
    repo.create.assert_called_once_with(note, actor_id=4)
    repo.save_changes.assert_awaited_once()


async def test_create_range_passes_actor():
    repo = _mock_repo()
    notes = [Note(text="a")]

    await _controller(repo).create_range(notes)

    repo.create_range.assert_called_once_with(notes, actor_id=4)


async def test_update_passes_actor_to_strict_form():
    repo = _mock_repo()
    note = Note(id=2, text="a")

    await _controller(repo).update(2, note)

    repo.update.assert_awaited_once_with(2, note, actor_id=4)


async def test_update_with_create_flag_passes_actor_to_upsert():
    repo = _mock_repo()
    note = Note(id=2, text="a")

    await _controller(repo).update(2, note, create_if_not_exists=True)

    repo.upsert.assert_awaited_once_with(note, actor_id=4, create_if_not_exists=True)


async def test_update_range_passes_actor():
    repo = _mock_repo()
    notes = [Note(id=1), Note(id=2)]

    await _controller(repo).update_range(notes)

    repo.update_range.assert_awaited_once_with(notes, actor_id=4, create_if_not_exists=False)


# --- Missing actor ---

async def test_write_without_actor_is_bad_request():
    repo = _mock_repo()

    result = await _controller(repo, None).create(Note(text="a"))

    assert result.status_code == 400
    repo.create.assert_not_called()
    repo.save_changes.assert_not_awaited()


async def test_identity_check_precedes_actor_check():
    result = await _controller(_mock_repo(), None).create(Note(id=3))
    assert result.content == {"detail": "Note.id must NOT be predefined."}


async def test_permission_check_precedes_actor_check():
    result = await _controller(_mock_repo(), None, CRUDAction.READ).create(Note(text="a"))
    assert result.status_code == 403


async def test_delete_needs_no_actor():
    repo = _mock_repo()

    result = await _controller(repo, None).delete(1)

    assert result.status_code == 200
    repo.delete.assert_called_once_with(1)
