"""In-memory metadata index for filtering by modality and metadata values."""

from __future__ import annotations

import uuid
from collections import defaultdict

from barqvault.models import BarqRecord, Modality


class MetadataIndex:
    """Indexes records by modality, filename and flat string metadata fields."""

    def __init__(self) -> None:
        self._key_value_map: defaultdict[str, defaultdict[str, list[uuid.UUID]]] = (
            defaultdict(lambda: defaultdict(list))
        )
        self._modality_map: defaultdict[str, list[uuid.UUID]] = defaultdict(list)
        self._filename_map: dict[str, uuid.UUID] = {}

    @staticmethod
    def _string_fields(record: BarqRecord):
        if isinstance(record.metadata, dict):
            for key, value in record.metadata.items():
                if isinstance(value, str):
                    yield key, value

    def index_record(self, record: BarqRecord) -> None:
        """Index the modality, filename and string metadata values of a record."""
        self._modality_map[str(record.modality)].append(record.id)
        if record.filename is not None:
            self._filename_map[record.filename] = record.id
        for key, value in self._string_fields(record):
            self._key_value_map[key][value].append(record.id)

    def remove_record(self, doc_id: uuid.UUID, record: BarqRecord) -> None:
        """Remove every entry indexed for the record."""
        ids = self._modality_map.get(str(record.modality))
        if ids is not None:
            ids[:] = [x for x in ids if x != doc_id]

        if record.filename is not None:
            self._filename_map.pop(record.filename, None)

        for key, value in self._string_fields(record):
            values = self._key_value_map.get(key)
            if values is not None and value in values:
                values[value][:] = [x for x in values[value] if x != doc_id]

    def filter_by_modality(self, modality: Modality | str) -> list[uuid.UUID]:
        """All ids indexed under the given modality."""
        return list(self._modality_map.get(str(modality), ()))

    def filter_by_meta_key_value(self, key: str, value: str) -> list[uuid.UUID]:
        """All ids whose metadata[key] equals value."""
        values = self._key_value_map.get(key)
        if values is None:
            return []
        return list(values.get(value, ()))