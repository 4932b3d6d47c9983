import threading
import unittest

from s3_blob.errors import TransferCancelledError
from s3_blob.pipe import BytePipe


class BytePipeTests(unittest.TestCase):
    def test_read_returns_written_bytes_in_order(self):
        pipe = BytePipe(capacity=64)
        pipe.write(b"hello ")
        pipe.write(b"world")
        pipe.close()

        self.assertEqual(b"hel", pipe.read(3))
        self.assertEqual(b"lo world", pipe.read())
        self.assertEqual(b"", pipe.read(3))

    def test_short_read_only_at_end_of_stream(self):
        pipe = BytePipe(capacity=64)
        pipe.write(b"ab")
        pipe.close()

        self.assertEqual(b"ab", pipe.read(10))
        self.assertEqual(b"", pipe.read(10))

    def test_writer_blocks_when_buffer_is_full(self):
        pipe = BytePipe(capacity=4)
        writer = threading.Thread(target=pipe.write, args=(b"0123456789",))
        writer.start()

        writer.join(0.2)
        self.assertTrue(writer.is_alive())
        self.assertEqual(4, pipe.buffered)

        received = pipe.read(10)
        writer.join(5)

        self.assertFalse(writer.is_alive())
        self.assertEqual(b"0123456789", received)

    def test_close_with_error_wakes_blocked_reader(self):
        pipe = BytePipe(capacity=4)
        outcome = {}

        def reader():
            try:
                pipe.read(5)
            except RuntimeError as exc:
                outcome["error"] = exc

        thread = threading.Thread(target=reader)
        thread.start()
        error = RuntimeError("upload failed")
        pipe.close_with_error(error)
        thread.join(5)

        self.assertIs(error, outcome["error"])

    def test_close_with_error_wakes_blocked_writer(self):
        pipe = BytePipe(capacity=2)
        outcome = {}

        def writer():
            try:
                pipe.write(b"abcdef")
            except RuntimeError as exc:
                outcome["error"] = exc

        thread = threading.Thread(target=writer)
        thread.start()
        thread.join(0.1)
        error = RuntimeError("upload failed")
        pipe.close_with_error(error)
        thread.join(5)

        self.assertFalse(thread.is_alive())
        self.assertIs(error, outcome["error"])

    def test_first_error_is_kept(self):
        pipe = BytePipe(capacity=2)
        first = RuntimeError("first")
        pipe.close_with_error(first)
        pipe.close_with_error(RuntimeError("second"))

        with self.assertRaises(RuntimeError) as ctx:
            pipe.write(b"x")
        self.assertIs(first, ctx.exception)

    def test_write_after_close_is_rejected(self):
        pipe = BytePipe(capacity=2)
        pipe.close()

        with self.assertRaises(ValueError):
            pipe.write(b"x")

    def test_blocked_read_observes_cancellation(self):
        cancel_flag = {"value": False}
        pipe = BytePipe(capacity=2, cancel_requested=lambda: cancel_flag["value"])
        outcome = {}

        def reader():
            try:
                pipe.read(1)
            except TransferCancelledError as exc:
                outcome["error"] = exc

        thread = threading.Thread(target=reader)
        thread.start()
        cancel_flag["value"] = True
        thread.join(5)

        self.assertIsInstance(outcome["error"], TransferCancelledError)

    def test_rejects_non_positive_capacity(self):
        with self.assertRaises(ValueError):
            BytePipe(capacity=0)

    def test_reader_end_is_not_seekable(self):
        pipe = BytePipe()

        self.assertTrue(pipe.reader.readable())
        self.assertFalse(pipe.reader.seekable())


if __name__ == "__main__":
    unittest.main()
