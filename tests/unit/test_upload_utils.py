"""Tests for upload hashing, slicing and session bookkeeping."""

import hashlib
import io

import pytest

from pan123.upload import CompleteResult, CompletionState, PollOutcome, UploadMode, UploadSession
from pan123.upload.utils import (
    compute_body_length,
    compute_etag,
    count_slices,
    iter_slices,
    open_source,
    read_all,
)


class TestSlicing:
    def test_bytes_are_cut_into_fixed_slices(self):
        data = bytes(range(10))
        assert list(iter_slices(data, 4)) == [data[0:4], data[4:8], data[8:10]]

    def test_file_object_slices_match_bytes(self):
        data = b"abcdefghij"
        assert list(iter_slices(io.BytesIO(data), 3)) == list(iter_slices(data, 3))

    def test_empty_payload_has_no_slices(self):
        assert list(iter_slices(b"", 4)) == []
        assert count_slices(0, 4) == 0

    def test_invalid_slice_size(self):
        with pytest.raises(ValueError):
            list(iter_slices(b"abc", 0))

    @pytest.mark.parametrize(
        ("total", "size", "expected"),
        [(5 * 1024 * 1024, 2 * 1024 * 1024, 3), (4, 2, 2), (1, 2, 1)],
    )
    def test_count_slices(self, total, size, expected):
        assert count_slices(total, size) == expected


class TestHashing:
    def test_etag_is_md5_hex(self):
        assert compute_etag(b"hello") == hashlib.md5(b"hello").hexdigest()

    def test_file_object_hash_rewinds(self):
        body = io.BytesIO(b"x" * (3 * 1024 * 1024 + 5))
        etag = compute_etag(body)
        assert etag == hashlib.md5(body.getvalue()).hexdigest()
        assert body.tell() == 0

    def test_length_counts_from_current_position(self):
        body = io.BytesIO(b"0123456789")
        body.seek(4)
        assert compute_body_length(body) == 6
        assert body.tell() == 4

    def test_read_all_restores_position(self):
        body = io.BytesIO(b"payload")
        assert read_all(body) == b"payload"
        assert body.tell() == 0


class TestOpenSource:
    def test_path_is_opened_and_closed(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"on disk")
        with open_source(path) as body:
            assert body.read() == b"on disk"
        assert body.closed

    def test_str_path(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"x")
        with open_source(str(path)) as body:
            assert body.read() == b"x"

    def test_bytes_pass_through(self):
        with open_source(b"raw") as body:
            assert body == b"raw"

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            with open_source(12345):  # type: ignore[arg-type]
                pass


class TestCompletionOutcome:
    def test_outcomes(self):
        assert CompleteResult(completed=True, file_id=9).outcome is PollOutcome.COMPLETED
        assert CompleteResult(completed=False, file_id=0).outcome is PollOutcome.PENDING
        assert CompleteResult(completed=True, file_id=0).outcome is PollOutcome.COMPLETED_WITHOUT_ID


class TestUploadSession:
    def _session(self) -> UploadSession:
        return UploadSession(filename="a.bin", total_size=3, content_hash="abc", mode=UploadMode.MULTIPART)

    def test_pending_to_polling_to_done(self):
        session = self._session()
        session.transition(CompletionState.POLLING)
        session.transition(CompletionState.DONE)
        assert session.finished

    def test_terminal_states_are_final(self):
        session = self._session()
        session.transition(CompletionState.FAILED)
        with pytest.raises(RuntimeError):
            session.transition(CompletionState.DONE)

    def test_cannot_go_back_to_pending(self):
        session = self._session()
        session.transition(CompletionState.POLLING)
        with pytest.raises(RuntimeError):
            session.transition(CompletionState.PENDING)
