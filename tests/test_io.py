import json
from decimal import Decimal

import pytest

from backend.utils.io import BufferStats, JSONStreamError, iter_json_array


def _chunked(data: bytes, size: int):
    return [data[i:i + size] for i in range(0, len(data), size)]


def test_single_byte_chunks_match_whole_document():
    doc = json.dumps(
        [{"name": "Café ☕", "rent": 4500.25, "tags": ["a", "b"]}, 12345, "x", None, True, {"n": {}}]
    ).encode("utf-8")
    expected = json.loads(doc, parse_float=Decimal)
    assert list(iter_json_array(_chunked(doc, 1))) == expected
    assert list(iter_json_array([doc])) == expected


def test_number_split_across_chunks_is_not_truncated():
    assert list(iter_json_array([b"[12", b"345", b", 6]"])) == [12345, 6]


def test_empty_array_and_surrounding_whitespace():
    assert list(iter_json_array([b"  [ \n ]  "])) == []
    assert list(iter_json_array([b"[", b"]"])) == []


def test_byte_order_mark_is_skipped():
    assert list(iter_json_array([b"\xef\xbb\xbf[1, 2]"])) == [1, 2]


@pytest.mark.parametrize(
    "doc",
    [
        b'{"PropertyId": "P1"}',
        b'[{"a": 1},]',
        b'[{"a": 1}',
        b'[{"a": 1} {"b": 2}]',
        b"[1] trailing",
        b"",
        b"[\xff]",
    ],
)
def test_malformed_documents_raise(doc):
    with pytest.raises(JSONStreamError):
        list(iter_json_array(_chunked(doc, 3) or [doc]))


def test_buffer_stays_near_chunk_size():
    records = [{"PropertyId": f"P{i}", "PropertyName": f"Tower {i}"} for i in range(2000)]
    doc = json.dumps(records).encode("utf-8")
    stats = BufferStats()
    parsed = list(iter_json_array(_chunked(doc, 256), stats))
    assert len(parsed) == 2000
    assert stats.elements == 2000
    assert stats.peak_chars < 512


def _records(n):
    return [{"PropertyId": f"P{i}", "PropertyName": f"Tower {i}"} for i in range(n)]


def test_syntax_error_fails_without_reading_the_rest():
    chunk = 64 * 1024
    doc = b'[{"PropertyId": "P0",, "PropertyName": "Broken"}, ' + json.dumps(_records(3000))[1:].encode("utf-8")
    assert len(doc) > 8 * chunk
    stats = BufferStats()
    seen = []

    def feed():
        for piece in _chunked(doc, chunk):
            seen.append(len(piece))
            yield piece

    with pytest.raises(JSONStreamError):
        list(iter_json_array(feed(), stats))
    assert stats.peak_chars < 2 * chunk
    assert sum(seen) <= 2 * chunk


def test_element_split_across_many_chunks_still_parses():
    big = {"PropertyId": "P1", "PropertyName": "Long", "Features": ["f" * 50] * 2000}
    doc = json.dumps([big, {"PropertyId": "P2"}]).encode("utf-8")
    parsed = list(iter_json_array(_chunked(doc, 1024), max_element_chars=len(doc)))
    assert parsed[0] == big and parsed[1] == {"PropertyId": "P2"}


def test_oversized_element_is_rejected_early():
    doc = b'[{"PropertyId": "P1", "PropertyName": "' + b"x" * 500_000 + b'"}]'
    stats = BufferStats()
    with pytest.raises(JSONStreamError, match="exceeds"):
        list(iter_json_array(_chunked(doc, 4096), stats, max_element_chars=20_000))
    assert stats.peak_chars < 20_000 + 2 * 4096
