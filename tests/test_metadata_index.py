import uuid

from barqvault.metadata_index import MetadataIndex
from barqvault.models import BarqRecord, Modality


def make_record(modality=Modality.TEXT, metadata=None, filename=None):
    return BarqRecord(
        id=uuid.uuid4(),
        modality=modality,
        metadata=metadata or {},
        filename=filename,
    )


def test_filter_by_modality_returns_indexed_ids():
    index = MetadataIndex()
    first = make_record(Modality.IMAGE)
    second = make_record(Modality.IMAGE)
    other = make_record(Modality.AUDIO)
    for record in (first, second, other):
        index.index_record(record)
    assert index.filter_by_modality(Modality.IMAGE) == [first.id, second.id]
    assert index.filter_by_modality("audio") == [other.id]


def test_filter_by_unknown_modality_is_empty():
    index = MetadataIndex()
    index.index_record(make_record(Modality.TEXT))
    assert index.filter_by_modality(Modality.VIDEO) == []


def test_filter_by_meta_key_value():
    index = MetadataIndex()
    record = make_record(metadata={"author": "alice", "topic": "db"})
    index.index_record(record)
    assert index.filter_by_meta_key_value("author", "alice") == [record.id]
    assert index.filter_by_meta_key_value("topic", "db") == [record.id]
    assert index.filter_by_meta_key_value("author", "bob") == []
    assert index.filter_by_meta_key_value("missing", "alice") == []


def test_non_string_metadata_not_indexed():
    index = MetadataIndex()
    record = make_record(metadata={"pages": 3, "draft": True})
    index.index_record(record)
    assert index.filter_by_meta_key_value("pages", "3") == []
    assert index.filter_by_meta_key_value("draft", "true") == []


def test_remove_record_clears_entries():
    index = MetadataIndex()
    keep = make_record(metadata={"author": "alice"}, filename="keep.txt")
    drop = make_record(metadata={"author": "alice"}, filename="drop.txt")
    index.index_record(keep)
    index.index_record(drop)
    index.remove_record(drop.id, drop)
    assert index.filter_by_modality(Modality.TEXT) == [keep.id]
    assert index.filter_by_meta_key_value("author", "alice") == [keep.id]


def test_filter_result_is_a_copy():
    index = MetadataIndex()
    record = make_record()
    index.index_record(record)
    result = index.filter_by_modality(Modality.TEXT)
    result.clear()
    assert index.filter_by_modality(Modality.TEXT) == [record.id]