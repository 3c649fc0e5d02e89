"""
Selection and folder expansion state for the receipt directory.
Both are plain sets of identifiers so they can live in session state.
"""

from typing import Iterable, List, Optional, Union, FrozenSet, Set

from .models import ExpenseRecord

IdsOrRecords = Iterable[Union[str, ExpenseRecord]]

FOLDER_ALL = "all"
FOLDER_SOME = "some"
FOLDER_NONE = "none"


def _as_ids(items: IdsOrRecords) -> List[str]:
    return [item.id if isinstance(item, ExpenseRecord) else str(item) for item in items]


def folder_id(year: int, month_index: Optional[int] = None) -> str:
    """Identifier of a year folder ('2024') or a month folder ('2024-2')."""
    if month_index is None:
        return str(year)
    return f"{year}-{month_index}"


class SelectionSet:
    """Record ids the user has ticked.

    Ids stay selected when the records are filtered out of view; only
    `deselect_all` or `clear` remove them.
    """

    def __init__(self, ids: Optional[Iterable[str]] = None):
        self._ids: Set[str] = set(ids or [])

    def toggle(self, record_id: str) -> bool:
        """Flip membership of one id and return the new state."""
        if record_id in self._ids:
            self._ids.discard(record_id)
            return False
        self._ids.add(record_id)
        return True

    def select_all(self, items: IdsOrRecords) -> None:
        self._ids.update(_as_ids(items))

    def deselect_all(self, items: IdsOrRecords) -> None:
        self._ids.difference_update(_as_ids(items))

    def clear(self) -> None:
        self._ids.clear()

    def is_selected(self, record_id: str) -> bool:
        return record_id in self._ids

    def size(self) -> int:
        return len(self._ids)

    def ids(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def folder_state(self, records: Iterable[ExpenseRecord]) -> str:
        """Checkbox state of a folder: 'all', 'some' or 'none' of its records selected."""
        ids = _as_ids(records)
        selected = sum(1 for record_id in ids if record_id in self._ids)
        if ids and selected == len(ids):
            return FOLDER_ALL
        if selected:
            return FOLDER_SOME
        return FOLDER_NONE

    def resolve(self, records: Iterable[ExpenseRecord]) -> List[ExpenseRecord]:
        """Selected records among `records`, in the given order."""
        return [record for record in records if record.id in self._ids]

    def to_list(self) -> List[str]:
        return sorted(self._ids)

    @classmethod
    def from_list(cls, ids: Iterable[str]) -> "SelectionSet":
        return cls(ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, record_id) -> bool:
        return record_id in self._ids

    def __eq__(self, other) -> bool:
        if not isinstance(other, SelectionSet):
            return NotImplemented
        return self._ids == other._ids

    def __repr__(self) -> str:
        return f"SelectionSet({self.to_list()!r})"


class ExpandedFolders:
    """Folder ids currently expanded in the tree view."""

    def __init__(self, folder_ids: Optional[Iterable[str]] = None):
        self._folders: Set[str] = set(folder_ids or [])

    def toggle(self, folder: str) -> bool:
        if folder in self._folders:
            self._folders.discard(folder)
            return False
        self._folders.add(folder)
        return True

    def expand(self, folder: str) -> None:
        self._folders.add(folder)

    def collapse(self, folder: str) -> None:
        self._folders.discard(folder)

    def is_expanded(self, folder: str) -> bool:
        return folder in self._folders

    def clear(self) -> None:
        self._folders.clear()

    def __len__(self) -> int:
        return len(self._folders)
