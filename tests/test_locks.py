from __future__ import annotations

import threading
import time

from complaintdesk.locks import ReadWriteLock


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    barrier = threading.Barrier(2, timeout=5)
    errors: list[BaseException] = []

    def reader() -> None:
        try:
            with lock.read():
                barrier.wait()
        except threading.BrokenBarrierError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert errors == []


def test_writer_excludes_readers() -> None:
    lock = ReadWriteLock()
    entered = threading.Event()

    def reader() -> None:
        with lock.read():
            entered.set()

    with lock.write():
        thread = threading.Thread(target=reader)
        thread.start()
        assert not entered.wait(timeout=0.2)

    thread.join(timeout=5)
    assert entered.is_set()


def test_writer_waits_for_active_reader() -> None:
    lock = ReadWriteLock()
    written = threading.Event()

    def writer() -> None:
        with lock.write():
            written.set()

    with lock.read():
        thread = threading.Thread(target=writer)
        thread.start()
        assert not written.wait(timeout=0.2)

    thread.join(timeout=5)
    assert written.is_set()


def test_waiting_writer_blocks_new_readers() -> None:
    lock = ReadWriteLock()
    order: list[str] = []
    late_reader_entered = threading.Event()

    def writer() -> None:
        with lock.write():
            order.append("writer")

    def late_reader() -> None:
        with lock.read():
            order.append("reader")
            late_reader_entered.set()

    with lock.read():
        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        deadline = time.monotonic() + 5
        while lock._writers_waiting == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert lock._writers_waiting == 1

        reader_thread = threading.Thread(target=late_reader)
        reader_thread.start()
        assert not late_reader_entered.wait(timeout=0.2)
        assert order == []

    writer_thread.join(timeout=5)
    reader_thread.join(timeout=5)
    assert order == ["writer", "reader"]


def test_lock_is_released_when_body_raises() -> None:
    lock = ReadWriteLock()

    try:
        with lock.write():
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    acquired = threading.Event()

    def reader() -> None:
        with lock.read():
            acquired.set()

    thread = threading.Thread(target=reader)
    thread.start()
    thread.join(timeout=5)
    assert acquired.is_set()
