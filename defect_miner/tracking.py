"""
Method identity across release snapshots.

A method keeps its id from one release to the next only when its
(filepath, signature) key is unchanged. Renamed methods, moved methods and
changed parameter lists all start over with a fresh id. Continuity is one
release deep: the snapshot handed back holds the current release's keys only.
"""

import uuid
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from .models import Declaration, MethodKey, TrackedMethod


def _new_id() -> str:
    return uuid.uuid4().hex


class MethodSnapshot:
    """Immutable (filepath, signature) -> id mapping of one release"""

    def __init__(self, ids: Mapping[MethodKey, str] | None = None):
        self._ids = MappingProxyType(dict(ids or {}))

    @property
    def ids(self) -> Mapping[MethodKey, str]:
        return self._ids

    def get(self, key: MethodKey) -> str | None:
        return self._ids.get(key)

    def __contains__(self, key) -> bool:
        return key in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __eq__(self, other) -> bool:
        return isinstance(other, MethodSnapshot) and dict(self._ids) == dict(other._ids)

    def __repr__(self) -> str:
        return f"MethodSnapshot({len(self._ids)} methods)"


EMPTY_SNAPSHOT = MethodSnapshot()


class MethodIdentityTracker:
    """Assign ids to a release's declarations given the previous release's snapshot"""

    def __init__(self, id_factory: Callable[[], str] = _new_id):
        self.id_factory = id_factory

    def track_release(
        self,
        declarations: Iterable[Declaration],
        previous: MethodSnapshot = EMPTY_SNAPSHOT,
    ) -> tuple[list[TrackedMethod], MethodSnapshot]:
        methods = []
        ids = {}
        for decl in declarations:
            method_id = previous.get(decl.key)
            if method_id is None:
                method_id = self.id_factory()
            methods.append(TrackedMethod(
                id=method_id,
                signature=decl.signature,
                filepath=decl.path,
                start_line=decl.start_line,
                end_line=decl.end_line,
            ))
            ids[decl.key] = method_id
        return methods, MethodSnapshot(ids)
