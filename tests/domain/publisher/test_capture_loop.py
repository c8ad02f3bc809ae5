"""Tests for CaptureLoopRunner and CancellationFlag."""

import threading
import time

from room_publisher.domain.publisher.capture import CancellationFlag, CaptureLoopRunner
from room_publisher.schemas import MediaKind
from tests.fixtures.publisher_fixtures import CountingGenerator, FakeSink


def _wait_for(predicate, timeout: float = 1.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestCancellationFlag:
    def test_starts_running(self):
        assert CancellationFlag().is_running is True

    def test_cancel_is_one_way(self):
        flag = CancellationFlag()
        flag.cancel()
        flag.cancel()
        assert flag.is_running is False
        assert not hasattr(flag, "reset")

    def test_wait_returns_early_when_cancelled(self):
        flag = CancellationFlag()
        threading.Timer(0.02, flag.cancel).start()

        started = time.monotonic()
        assert flag.wait(2.0) is True
        assert time.monotonic() - started < 1.0

    def test_wait_times_out_while_running(self):
        assert CancellationFlag().wait(0.01) is False


class TestCaptureLoopRunner:
    def test_produces_frames_into_sink_until_stopped(self):
        sink = FakeSink(MediaKind.AUDIO)
        runner = CaptureLoopRunner(CountingGenerator(MediaKind.AUDIO, 0.01), sink)

        runner.start()
        assert _wait_for(lambda: sink.frame_count >= 5)
        runner.stop()
        runner.join(timeout=1.0)

        assert runner.is_alive() is False
        assert sink.frames[:5] == [0, 1, 2, 3, 4]
        assert runner.frames_produced == sink.frame_count

    def test_stops_within_one_frame_interval(self):
        sink = FakeSink(MediaKind.AUDIO)
        runner = CaptureLoopRunner(CountingGenerator(MediaKind.AUDIO, 0.01), sink)
        runner.start()
        assert _wait_for(lambda: sink.frame_count >= 3)

        started = time.monotonic()
        runner.stop()
        runner.join(timeout=1.0)
        elapsed = time.monotonic() - started

        assert runner.is_alive() is False
        assert elapsed < 0.06

    def test_no_frames_after_join(self):
        sink = FakeSink(MediaKind.VIDEO)
        runner = CaptureLoopRunner(CountingGenerator(MediaKind.VIDEO, 0.005), sink)
        runner.start()
        assert _wait_for(lambda: sink.frame_count >= 3)

        runner.stop()
        runner.join(timeout=1.0)
        frames_at_join = sink.frame_count
        time.sleep(0.05)

        assert sink.frame_count == frames_at_join

    def test_long_interval_is_interrupted_by_cancel(self):
        sink = FakeSink(MediaKind.VIDEO)
        runner = CaptureLoopRunner(CountingGenerator(MediaKind.VIDEO, 5.0), sink)
        runner.start()
        assert _wait_for(lambda: sink.frame_count == 1)

        started = time.monotonic()
        runner.stop()
        runner.join(timeout=2.0)

        assert runner.is_alive() is False
        assert time.monotonic() - started < 1.0
        assert sink.frame_count == 1

    def test_frame_errors_do_not_stop_the_loop(self):
        sink = FakeSink(MediaKind.AUDIO, fail_first=3)
        runner = CaptureLoopRunner(CountingGenerator(MediaKind.AUDIO, 0.005), sink)

        runner.start()
        assert _wait_for(lambda: sink.frame_count >= 2)
        runner.stop()
        runner.join(timeout=1.0)

        assert runner.errors == 3
        assert runner.is_alive() is False
        # Frames 0..2 were lost to the failing sink
        assert sink.frames[0] == 3

    def test_cancelled_before_start_produces_nothing(self):
        sink = FakeSink(MediaKind.AUDIO)
        flag = CancellationFlag()
        flag.cancel()
        runner = CaptureLoopRunner(CountingGenerator(MediaKind.AUDIO), sink, flag)

        runner.start()
        runner.join(timeout=1.0)

        assert sink.frame_count == 0
        assert runner.frames_produced == 0

    def test_join_before_start_is_a_noop(self):
        runner = CaptureLoopRunner(CountingGenerator(MediaKind.AUDIO), FakeSink(MediaKind.AUDIO))
        runner.join()
        assert runner.started is False

    def test_thread_named_after_kind(self):
        sink = FakeSink(MediaKind.VIDEO)
        runner = CaptureLoopRunner(CountingGenerator(MediaKind.VIDEO), sink)
        runner.start()
        try:
            assert _wait_for(lambda: sink.frame_count >= 1)
            assert "capture-video" in [t.name for t in threading.enumerate()]
        finally:
            runner.stop()
            runner.join(timeout=1.0)
