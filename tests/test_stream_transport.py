"""Tests for StreamTransport over a socket pair."""
import socket
import threading
import unittest

from rawdev.models import ConnectionState
from rawdev.transport import StreamTransport

WAIT = 2.0  # seconds


class TestStreamTransport(unittest.TestCase):
    """Tests for StreamTransport."""

    def setUp(self):
        self.local, self.remote = socket.socketpair()
        self.remote.settimeout(WAIT)
        self.stream = self.local.makefile('rwb', buffering=0)
        self.transport = StreamTransport(self.stream)

        self.closed = threading.Event()
        self.statuses = []

        def on_status(status, more):
            self.statuses.append(status)
            if status is ConnectionState.CLOSED:
                self.closed.set()

        self.transport.subscribe_status(on_status)

    def tearDown(self):
        self.transport.close()
        self.local.close()
        self.remote.close()

    def test_connect_reports_opened(self):
        self.assertTrue(self.transport.connect())
        self.assertEqual(self.statuses, [ConnectionState.OPENED])

    def test_write(self):
        self.transport.connect()
        self.assertTrue(self.transport.write(b"\x02VOL 10\x03"))
        self.assertEqual(self.remote.recv(64), b"\x02VOL 10\x03")

    def test_read(self):
        received = threading.Event()
        chunks = []

        def on_data(chunk):
            chunks.append(chunk)
            received.set()

        self.transport.subscribe_data(on_data)
        self.transport.connect()
        self.remote.sendall(b"VOL=10\n")

        self.assertTrue(received.wait(WAIT))
        self.assertEqual(b"".join(chunks), b"VOL=10\n")

    def test_end_of_input_keeps_write_side_open(self):
        self.transport.connect()
        self.remote.shutdown(socket.SHUT_WR)

        self.transport._reader_thread.join(WAIT)
        self.assertFalse(self.transport._reader_thread.is_alive())
        self.assertFalse(self.closed.is_set())
        self.assertTrue(self.transport.is_connected())

        self.assertTrue(self.transport.write(b"STILL HERE"))
        self.assertEqual(self.remote.recv(64), b"STILL HERE")

    def test_close_after_end_of_input(self):
        self.transport.connect()
        self.remote.shutdown(socket.SHUT_WR)
        self.transport._reader_thread.join(WAIT)

        self.transport.close()
        self.assertTrue(self.closed.is_set())
        self.assertFalse(self.transport.is_connected())

    def test_close_closes_stream(self):
        self.transport.connect()
        self.transport.close()

        self.assertTrue(self.stream.closed)
        self.assertEqual(self.statuses[-1], ConnectionState.CLOSED)


if __name__ == '__main__':
    unittest.main()
