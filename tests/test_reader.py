import unittest

from fake_s3 import FakeBody, FakeS3Client

from s3_blob.bucket import S3Bucket
from s3_blob.errors import TransferCancelledError
from s3_blob.models import GET_OBJECT_OUTPUT
from s3_blob.options import ReaderOptions
from s3_blob.reader import RangeReader, build_range_header

ALPHABET = b"abcdefghijklmnopqrstuvwxyz!"  # 27 bytes


class BuildRangeHeaderTests(unittest.TestCase):
    def test_full_object_needs_no_range(self):
        self.assertIsNone(build_range_header(0, -1))

    def test_open_ended_range_from_offset(self):
        self.assertEqual("bytes=10-", build_range_header(10, -1))

    def test_zero_length_requests_single_byte(self):
        self.assertEqual("bytes=10-10", build_range_header(10, 0))
        self.assertEqual("bytes=0-0", build_range_header(0, 0))

    def test_closed_range(self):
        self.assertEqual("bytes=10-14", build_range_header(10, 5))
        self.assertEqual("bytes=0-4", build_range_header(0, 5))


class RangeReaderTests(unittest.TestCase):
    def setUp(self):
        self.fake_client = FakeS3Client(objects={"alpha.txt": ALPHABET})
        self.bucket = S3Bucket(self.fake_client, "bucket-one")

    def test_partial_read_reports_full_size(self):
        with self.bucket.new_range_reader("alpha.txt", 10, 5) as reader:
            data = reader.read()

        self.assertEqual(b"klmno", data)
        self.assertEqual(27, reader.attributes.size)
        self.assertEqual("bytes=10-14", self.fake_client.get_object_calls[0]["Range"])

    def test_zero_length_read_is_empty_with_true_size(self):
        reader = self.bucket.new_range_reader("alpha.txt", 10, 0)

        self.assertEqual(b"", reader.read())
        self.assertEqual(27, reader.attributes.size)
        self.assertEqual("bytes=10-10", self.fake_client.get_object_calls[0]["Range"])
        self.assertTrue(self.fake_client.get_object_bodies[0].closed)
        reader.close()

    def test_open_ended_read(self):
        with self.bucket.new_range_reader("alpha.txt", 20) as reader:
            self.assertEqual(b"uvwxyz!", reader.read())
        self.assertEqual(27, reader.attributes.size)

    def test_full_read_sends_no_range(self):
        self.assertEqual(ALPHABET, self.bucket.read_all("alpha.txt"))
        self.assertNotIn("Range", self.fake_client.get_object_calls[0])

    def test_sequential_reads(self):
        with self.bucket.new_reader("alpha.txt") as reader:
            self.assertEqual(b"abc", reader.read(3))
            self.assertEqual(b"def", reader.read(3))
        self.assertTrue(self.fake_client.get_object_bodies[0].closed)

    def test_negative_offset_is_rejected(self):
        with self.assertRaises(ValueError):
            self.bucket.new_range_reader("alpha.txt", -1, 5)
        self.assertEqual([], self.fake_client.get_object_calls)

    def test_read_after_close_is_rejected(self):
        reader = self.bucket.new_reader("alpha.txt")
        reader.close()
        reader.close()

        with self.assertRaises(ValueError):
            reader.read()

    def test_cancellation_releases_body(self):
        cancel_flag = {"value": False}
        reader = self.bucket.new_reader(
            "alpha.txt",
            ReaderOptions(cancel_requested=lambda: cancel_flag["value"]),
        )
        self.assertEqual(b"ab", reader.read(2))
        cancel_flag["value"] = True

        with self.assertRaises(TransferCancelledError):
            reader.read(2)
        self.assertTrue(reader.closed)
        self.assertTrue(self.fake_client.get_object_bodies[0].closed)

    def test_attributes_and_raw_response(self):
        response = {
            "Body": FakeBody(b"hello"),
            "ContentLength": 5,
            "ContentType": "text/plain",
        }
        reader = RangeReader(response)

        self.assertEqual(5, reader.attributes.size)
        self.assertEqual("text/plain", reader.attributes.content_type)
        self.assertIs(response, reader.as_raw(GET_OBJECT_OUTPUT))
        self.assertIsNone(reader.as_raw("HeadObjectOutput"))


if __name__ == "__main__":
    unittest.main()
