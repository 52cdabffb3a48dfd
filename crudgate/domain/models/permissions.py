"""Per-resource permission gate."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, field_validator

from .enums import CRUDAction


class PermissionSet(BaseModel):
    """Immutable set of CRUD actions a resource allows.

    PermissionSet() allows every action; PermissionSet(CRUDAction.READ)
    allows only the listed ones.
    """

    model_config = ConfigDict(frozen=True)

    actions: frozenset[CRUDAction] = frozenset(CRUDAction)

    def __init__(self, *allowed_actions: CRUDAction) -> None:
        super().__init__(actions=frozenset(CRUDAction(a) for a in allowed_actions))

    @field_validator("actions")
    @classmethod
    def _empty_means_all(cls, v: frozenset[CRUDAction]) -> frozenset[CRUDAction]:
        return v or frozenset(CRUDAction)

    @classmethod
    def all(cls) -> PermissionSet:
        return cls()

    def is_allowed(self, action: CRUDAction) -> bool:
        return action in self.actions

    def __contains__(self, action: object) -> bool:
        return action in self.actions

    def __iter__(self) -> Iterator[CRUDAction]:  # type: ignore[override]
        return iter(sorted(self.actions, key=list(CRUDAction).index))

    def __len__(self) -> int:
        return len(self.actions)

    def __repr__(self) -> str:
        return f"PermissionSet({', '.join(a.name for a in self)})"
