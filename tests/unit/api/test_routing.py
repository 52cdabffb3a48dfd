"""End-to-end tests for crudgate/api/routing.py and app.py.

Each test gets a fresh file-backed SQLite database served through the
FastAPI TestClient.
"""

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import String
from sqlalchemy import create_engine as create_sync_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import Mapped, Session, mapped_column
from sqlalchemy.pool import NullPool

from crudgate.api.app import create_app
from crudgate.api.routing import ControllerKind, Resource, build_router
from crudgate.domain.models.entity import AuditedEntity, Entity
from crudgate.domain.models.enums import CRUDAction
from crudgate.infrastructure.database import Base, Settings, create_session_factory
from crudgate.infrastructure.persistence.models.base import AuditMixin, IdentityMixin


class WidgetRow(IdentityMixin, Base):
    __tablename__ = "widgets"

    name: Mapped[str] = mapped_column(String(50), unique=True, default="")
    quantity: Mapped[int] = mapped_column(default=0)


class Widget(Entity):
    name: str = ""
    quantity: int = 0


class NoteRow(IdentityMixin, AuditMixin, Base):
    __tablename__ = "notes"

    text: Mapped[str] = mapped_column(String(200), default="")


class Note(AuditedEntity):
    text: str = ""


class CountryRow(IdentityMixin, Base):
    __tablename__ = "countries"

    name: Mapped[str] = mapped_column(String(50), default="")


class Country(Entity):
    name: str = ""


RESOURCES = [
    Resource("widgets", Widget, WidgetRow),
    Resource("gadgets", Widget, WidgetRow, allowed_actions=(CRUDAction.READ,)),
    Resource("notes", Note, NoteRow, kind=ControllerKind.AUDITED),
    Resource("countries", Country, CountryRow, kind=ControllerKind.READ_ONLY),
    Resource("legacy-widgets", Widget, WidgetRow, kind=ControllerKind.LEGACY),
]


@pytest.fixture
def app(tmp_path):
    path = tmp_path / "app.db"
    sync_engine = create_sync_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    with Session(sync_engine) as session:
        session.add_all(
            [
                WidgetRow(id=1, name="one", quantity=1),
                WidgetRow(id=2, name="two", quantity=2),
                WidgetRow(id=3, name="three", quantity=3),
                CountryRow(id=1, name="Norway"),
                CountryRow(id=2, name="Chile"),
                CountryRow(id=3, name="Japan"),
            ]
        )
        session.commit()
    sync_engine.dispose()

    url = f"sqlite+aiosqlite:///{path}"
    engine = create_async_engine(url, poolclass=NullPool)
    return create_app(
        RESOURCES,
        settings=Settings(database_url=url),
        session_factory=create_session_factory(engine),
    )


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def _widget_ids(client) -> list[int]:
    return sorted(w["id"] for w in client.get("/widgets").json())


# --- Resource ---

def test_audited_resource_requires_audited_entity():
    with pytest.raises(TypeError):
        Resource("widgets", Widget, WidgetRow, kind=ControllerKind.AUDITED)


def test_build_router_uses_resource_prefix():
    router = build_router(Resource("widgets", Widget, WidgetRow))
    assert {route.path for route in router.routes} >= {"/widgets", "/widgets/{id}", "/widgets/batch"}


def test_legacy_router_has_no_batch_routes():
    router = build_router(Resource("legacy", Widget, WidgetRow, kind=ControllerKind.LEGACY))
    assert "/legacy/batch" not in {route.path for route in router.routes}


# --- Reads ---

def test_read_all(client):
    response = client.get("/widgets")

    assert response.status_code == 200
    assert len(response.json()) == 3


def test_read_one(client):
    response = client.get("/widgets/2")

    assert response.status_code == 200
    assert response.json() == {"id": 2, "name": "two", "quantity": 2}


def test_read_missing_is_404(client):
    response = client.get("/widgets/99")

    assert response.status_code == 404
    assert response.json() == {"detail": "Widget 99 not found."}


def test_read_with_non_integer_identity_is_422(client):
    assert client.get("/widgets/abc").status_code == 422


# --- Create ---

def test_create(client):
    response = client.post("/widgets", json={"name": "four", "quantity": 4})

    assert response.status_code == 200
    assert response.content == b""
    assert _widget_ids(client) == [1, 2, 3, 4]


def test_create_with_preset_identity_is_400(client):
    response = client.post("/widgets", json={"id": 7, "name": "seven"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Widget.id must NOT be predefined."}
    assert _widget_ids(client) == [1, 2, 3]


def test_create_range(client):
    response = client.post("/widgets/batch", json=[{"name": "four"}, {"name": "five"}])

    assert response.status_code == 200
    assert len(_widget_ids(client)) == 5


# --- Update ---

def test_update(client):
    response = client.put("/widgets/2", json={"id": 2, "name": "TWO", "quantity": 20})

    assert response.status_code == 200
    assert client.get("/widgets/2").json()["name"] == "TWO"


def test_update_missing_is_404(client):
    assert client.put("/widgets/9", json={"id": 9, "name": "nine"}).status_code == 404
    assert 9 not in _widget_ids(client)


def test_update_with_create_flag_creates(client):
    response = client.put(
        "/widgets/9", params={"createIfNotExists": "true"}, json={"id": 9, "name": "nine"}
    )

    assert response.status_code == 200
    assert client.get("/widgets/9").json()["name"] == "nine"


def test_update_with_mismatched_identity_is_400(client):
    response = client.put("/widgets/1", json={"id": 7, "name": "seven"})

    assert response.status_code == 400
    assert _widget_ids(client) == [1, 2, 3]


def test_update_without_identity_is_400(client):
    assert client.put("/widgets/2", json={"name": "two"}).status_code == 400


def test_update_range_skips_missing(client):
    response = client.put("/widgets", json=[{"id": 1, "name": "ONE"}, {"id": 9, "name": "nine"}])

    assert response.status_code == 200
    assert client.get("/widgets/1").json()["name"] == "ONE"
    assert 9 not in _widget_ids(client)


def test_update_range_with_create_flag(client):
    response = client.put(
        "/widgets",
        params={"createIfNotExists": "true"},
        json=[{"id": 1, "name": "ONE"}, {"id": 9, "name": "nine"}],
    )

    assert response.status_code == 200
    assert _widget_ids(client) == [1, 2, 3, 9]


# --- Store conflicts ---

def test_conflict_at_commit_is_a_server_error(app):
    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.post("/widgets", json={"name": "one"})

        assert response.status_code == 500
        assert _widget_ids(client) == [1, 2, 3]


def test_conflict_at_commit_raises_integrity_error(client):
    with pytest.raises(IntegrityError):
        client.put(
            "/widgets/9", params={"createIfNotExists": "true"}, json={"id": 9, "name": "two"}
        )


# --- Delete ---

def test_delete(client):
    assert client.delete("/widgets/1").status_code == 200
    assert _widget_ids(client) == [2, 3]


def test_delete_missing_is_404(client):
    assert client.delete("/widgets/42").status_code == 404


def test_delete_range(client):
    response = client.request("DELETE", "/widgets", json=[1, 2])

    assert response.status_code == 200
    assert _widget_ids(client) == [3]


def test_delete_range_skips_missing_identities(client):
    response = client.request("DELETE", "/widgets", json=[1, 42])

    assert response.status_code == 200
    assert _widget_ids(client) == [2, 3]


# --- Permissions ---

def test_restricted_resource_allows_reads(client):
    assert client.get("/gadgets/1").status_code == 200


def test_restricted_resource_forbids_writes(client):
    assert client.post("/gadgets", json={"name": "x"}).status_code == 403
    assert client.put("/gadgets/1", json={"id": 1, "name": "x"}).status_code == 403
    assert client.delete("/gadgets/1").status_code == 403
    assert _widget_ids(client) == [1, 2, 3]


# --- Audited resource ---

def test_audited_create_without_actor_is_400(client):
    response = client.post("/notes", json={"text": "hello"})

    assert response.status_code == 400
    assert client.get("/notes").json() == []


def test_audited_create_and_update_stamp_actor(client):
    assert client.post("/notes", json={"text": "hello"}, headers={"X-Actor-Id": "7"}).status_code == 200
    note = client.get("/notes").json()[0]
    assert note["created_by"] == 7
    assert note["created_at"] is not None
    assert note["updated_by"] is None

    response = client.put(
        f"/notes/{note['id']}",
        json={"id": note["id"], "text": "edited"},
        headers={"X-Actor-Id": "8"},
    )
    assert response.status_code == 200
    edited = client.get(f"/notes/{note['id']}").json()
    assert edited["text"] == "edited"
    assert edited["created_by"] == 7
    assert edited["updated_by"] == 8


# --- Read-only resource ---

def test_read_only_resource_reads(client):
    assert client.get("/countries/1").json() == {"id": 1, "name": "Norway"}
    assert len(client.get("/countries").json()) == 3


def test_read_only_resource_reads_range(client):
    response = client.get("/countries", params=[("ids", 1), ("ids", 3)])

    assert response.status_code == 200
    assert sorted(c["name"] for c in response.json()) == ["Japan", "Norway"]


def test_read_only_resource_missing_is_404(client):
    assert client.get("/countries/9").status_code == 404


def test_read_only_resource_has_no_writes(client):
    assert client.post("/countries", json={"name": "Peru"}).status_code == 405
    assert client.delete("/countries/1").status_code == 405


# --- Legacy resource ---

def test_legacy_update_ignores_create_flag(client):
    response = client.put(
        "/legacy-widgets/9", params={"createIfNotExists": "true"}, json={"id": 9, "name": "nine"}
    )

    assert response.status_code == 404
    assert 9 not in _widget_ids(client)


def test_legacy_has_no_batch_create(client):
    assert client.post("/legacy-widgets/batch", json=[{"name": "x"}]).status_code == 405


def test_legacy_single_entity_routes(client):
    assert client.post("/legacy-widgets", json={"name": "four"}).status_code == 200
    assert client.delete("/legacy-widgets/1").status_code == 200
    assert _widget_ids(client) == [2, 3, 4]


# --- Correlation id ---

def test_correlation_id_is_echoed(client):
    cid = str(uuid4())

    response = client.get("/widgets/1", headers={"X-Correlation-ID": cid})

    assert response.headers["X-Correlation-ID"] == cid


def test_correlation_id_is_generated_when_absent(client):
    response = client.get("/widgets/1")

    assert UUID(response.headers["X-Correlation-ID"])
