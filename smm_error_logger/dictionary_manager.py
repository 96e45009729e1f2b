"""Storage for RDE BEJ dictionaries received from the BIOS."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

ANNOTATION_RESOURCE_ID = 0
"""Resource ID the peer uses for the annotation dictionary."""


@dataclass
class DictionaryEntry:
    """A dictionary and whether its data is complete."""

    valid: bool
    data: bytearray = field(default_factory=bytearray)


class DictionaryManager:
    """Collects dictionary chunks per resource ID and tracks completion."""

    def __init__(self) -> None:
        self._dictionaries: Dict[int, DictionaryEntry] = {}
        self._valid_count = 0

    def _invalidate(self, entry: DictionaryEntry) -> None:
        if entry.valid:
            entry.valid = False
            self._valid_count -= 1

    def _validate(self, entry: DictionaryEntry) -> None:
        if not entry.valid:
            entry.valid = True
            self._valid_count += 1

    def start_dictionary_entry(self, resource_id: int, data: bytes) -> None:
        """Start a new, incomplete dictionary, replacing any existing one."""
        existing = self._dictionaries.get(resource_id)
        if existing is not None:
            self._invalidate(existing)
        self._dictionaries[resource_id] = DictionaryEntry(False, bytearray(data))

    def mark_data_complete(self, resource_id: int) -> bool:
        """Mark a dictionary ready for use; False if it does not exist."""
        entry = self._dictionaries.get(resource_id)
        if entry is None:
            return False
        self._validate(entry)
        return True

    def add_dictionary_data(self, resource_id: int, data: bytes) -> bool:
        """Append data to an existing dictionary, marking it incomplete."""
        entry = self._dictionaries.get(resource_id)
        if entry is None:
            return False
        self._invalidate(entry)
        entry.data.extend(data)
        return True

    def get_dictionary(self, resource_id: int) -> Optional[bytes]:
        """Return a complete dictionary's data, or None."""
        entry = self._dictionaries.get(resource_id)
        if entry is None or not entry.valid:
            return None
        return bytes(entry.data)

    def get_annotation_dictionary(self) -> Optional[bytes]:
        """Return the complete annotation dictionary, or None."""
        return self.get_dictionary(ANNOTATION_RESOURCE_ID)

    def dictionary_count(self) -> int:
        """Number of complete dictionaries."""
        return self._valid_count

    def invalidate_dictionaries(self) -> None:
        """Drop every dictionary."""
        self._dictionaries.clear()
        self._valid_count = 0