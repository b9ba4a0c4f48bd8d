"""
Unit test file.
"""

import unittest

from s3_fake import FakeS3Client

from s3_csv_reformat.errors import ReconciliationError, UploadError
from s3_csv_reformat.s3.multipart.coordinator import (
    abort_session,
    begin_session,
    finalize,
    list_parts,
    upload_part,
)
from s3_csv_reformat.s3.multipart.finished_piece import FinishedPiece

_BUCKET = "bucket"
_KEY = "out.csv"


class UploadCoordinatorTester(unittest.TestCase):
    """Test the multipart session lifecycle."""

    def setUp(self) -> None:
        self.client = FakeS3Client()
        self.session = begin_session(self.client, _BUCKET, _KEY)  # type: ignore

    def test_out_of_order_parts_complete_in_order(self) -> None:
        pieces = [
            upload_part(self.session, n, f"part{n}|".encode()) for n in (3, 1, 2)
        ]
        self.assertEqual([p.part_number for p in pieces], [3, 1, 2])
        finalize(self.session, expected_parts=3)
        self.assertEqual(self.client.objects[(_BUCKET, _KEY)], b"part1|part2|part3|")
        self.assertTrue(self.session.finalized)

    def test_listing_is_paginated(self) -> None:
        self.client.list_page_cap = 2
        for n in range(1, 6):
            upload_part(self.session, n, bytes([64 + n]))
        parts = list_parts(self.session)
        self.assertEqual([p.part_number for p in parts], [1, 2, 3, 4, 5])
        self.assertEqual(self.client.calls.count("list_parts"), 3)
        finalize(self.session, expected_parts=5)
        self.assertEqual(self.client.objects[(_BUCKET, _KEY)], b"ABCDE")

    def test_missing_part_is_not_completed(self) -> None:
        upload_part(self.session, 1, b"a")
        upload_part(self.session, 3, b"c")
        with self.assertRaises(ReconciliationError):
            finalize(self.session, expected_parts=3)
        self.assertNotIn("complete_multipart_upload", self.client.calls)
        self.assertNotIn((_BUCKET, _KEY), self.client.objects)

    def test_storage_listing_is_authoritative(self) -> None:
        for n in (1, 2):
            upload_part(self.session, n, b"x")
        self.client.hidden_part_numbers.add(2)
        with self.assertRaises(ReconciliationError):
            finalize(self.session, expected_parts=2)

    def test_extra_part_is_rejected(self) -> None:
        for n in (1, 2, 3):
            upload_part(self.session, n, b"x")
        with self.assertRaises(ReconciliationError):
            finalize(self.session, expected_parts=2)

    def test_upload_failure_raises(self) -> None:
        self.client.fail_part_numbers.add(2)
        with self.assertRaises(UploadError):
            upload_part(self.session, 2, b"x")
        self.assertEqual(list_parts(self.session), [])

    def test_finalize_only_once(self) -> None:
        upload_part(self.session, 1, b"x")
        finalize(self.session, expected_parts=1)
        with self.assertRaises(UploadError):
            finalize(self.session, expected_parts=1)
        abort_session(self.session)
        self.assertNotIn("abort_multipart_upload", self.client.calls)

    def test_abort(self) -> None:
        upload_part(self.session, 1, b"x")
        abort_session(self.session)
        self.assertTrue(self.session.aborted)
        self.assertEqual(self.client.uploads[self.session.upload_id]["state"], "aborted")
        with self.assertRaises(UploadError):
            finalize(self.session, expected_parts=1)

    def test_finished_piece_json(self) -> None:
        parts = [FinishedPiece(2, '"b"'), FinishedPiece(1, '"a"')]
        self.assertEqual(
            FinishedPiece.to_json_array(parts),
            [{"PartNumber": 1, "ETag": '"a"'}, {"PartNumber": 2, "ETag": '"b"'}],
        )
        self.assertEqual(
            FinishedPiece.from_json({"PartNumber": 4, "ETag": '"d"'}),
            FinishedPiece(4, '"d"'),
        )


if __name__ == "__main__":
    unittest.main()
