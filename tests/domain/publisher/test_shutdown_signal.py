"""Tests for ShutdownSignal."""

import os
import signal
import time

from room_publisher.domain.publisher.shutdown import ShutdownSignal


class TestShutdownSignal:
    def test_defaults_to_keep_running(self):
        shutdown = ShutdownSignal()
        assert shutdown.keep_running is True
        assert shutdown.requested is False

    def test_request_is_one_way(self):
        shutdown = ShutdownSignal()
        shutdown.request()
        shutdown.request()
        assert shutdown.keep_running is False
        assert shutdown.requested is True

    def test_sigint_flips_flag_and_restore_puts_back_previous_handler(self):
        previous = signal.getsignal(signal.SIGINT)
        shutdown = ShutdownSignal()
        shutdown.install()
        try:
            assert signal.getsignal(signal.SIGINT) == shutdown._handle

            os.kill(os.getpid(), signal.SIGINT)
            deadline = time.monotonic() + 1.0
            while shutdown.keep_running and time.monotonic() < deadline:
                time.sleep(0.01)

            assert shutdown.requested is True
        finally:
            shutdown.restore()

        assert signal.getsignal(signal.SIGINT) == previous

    def test_sigterm_is_handled_too(self):
        shutdown = ShutdownSignal()
        shutdown.install()
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            deadline = time.monotonic() + 1.0
            while shutdown.keep_running and time.monotonic() < deadline:
                time.sleep(0.01)
            assert shutdown.requested is True
        finally:
            shutdown.restore()
