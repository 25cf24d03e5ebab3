import uuid

import numpy as np
import pytest

from barqvault.models import InvalidInputError
from barqvault.vector import VectorIndex, cosine_similarity

_rng = np.random.default_rng(7)


def random_embedding(dim):
    return _rng.uniform(-1.0, 1.0, dim).astype(np.float32).tolist()


def similar_embedding(base, noise):
    base = np.asarray(base, dtype=np.float32)
    return (base + _rng.uniform(-noise, noise, base.size)).tolist()


def orthogonal_embedding(base):
    base = np.asarray(base, dtype=np.float64)
    other = _rng.uniform(-1.0, 1.0, base.size)
    other -= base * (other @ base) / (base @ base)
    return other.tolist()


def test_vector_upsert_and_retrieve():
    index = VectorIndex(4)
    doc_id = uuid.uuid4()
    index.upsert(doc_id, [1.0, 0.0, 0.0, 0.0])
    results = index.search_cosine([1.0, 0.0, 0.0, 0.0], 5)
    assert len(results) == 1
    assert results[0][0] == doc_id
    assert results[0][1] == pytest.approx(1.0)


def test_vector_dim_mismatch_error():
    index = VectorIndex(4)
    with pytest.raises(InvalidInputError):
        index.upsert(uuid.uuid4(), [1.0, 2.0])


def test_vector_cosine_similarity_ordering():
    index = VectorIndex(384)
    base = random_embedding(384)
    id_similar = uuid.uuid4()
    id_different = uuid.uuid4()
    index.upsert(id_similar, similar_embedding(base, 0.05))
    index.upsert(id_different, orthogonal_embedding(base))
    results = index.search_cosine(base, 2)
    assert len(results) == 2
    assert results[0][0] == id_similar


def test_vector_top_k_limit():
    index = VectorIndex(4)
    for _ in range(10):
        index.upsert(uuid.uuid4(), [1.0, 0.0, 0.0, 0.0])
    assert len(index.search_cosine([1.0, 0.0, 0.0, 0.0], 3)) == 3


def test_vector_remove():
    index = VectorIndex(4)
    doc_id = uuid.uuid4()
    index.upsert(doc_id, [1.0, 0.0, 0.0, 0.0])
    index.remove(doc_id)
    assert index.search_cosine([1.0, 0.0, 0.0, 0.0], 5) == []


def test_upsert_replaces_existing():
    index = VectorIndex(2)
    doc_id = uuid.uuid4()
    index.upsert(doc_id, [1.0, 0.0])
    index.upsert(doc_id, [0.0, 1.0])
    results = index.search_cosine([0.0, 1.0], 5)
    assert len(results) == 1
    assert results[0][1] == pytest.approx(1.0)


def test_cosine_zero_norm_is_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0


def test_cosine_opposite_vectors():
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)