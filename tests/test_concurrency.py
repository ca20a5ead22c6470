"""Tests for concurrent registration and message processing."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from herald.commands.rwlock import ReadWriteLock

REGISTRARS = 8
COMMANDS_PER_REGISTRAR = 25
PROCESSORS = 8
MESSAGES_PER_PROCESSOR = 50


def test_concurrent_registration_and_processing(bot, make_handler, make_message):
    handlers = {}
    handlers_lock = threading.Lock()
    errors = []
    default = make_handler()
    bot.set_default_handler(default)

    def register(worker):
        for i in range(COMMANDS_PER_REGISTRAR):
            name = f"cmd_{worker}_{i}"
            handler = make_handler()
            with handlers_lock:
                handlers[name] = handler
            bot.register_command(name, handler)
            # visible to every message processed after registration returns
            bot.process_message(make_message(f"{name} arg", direct=True))
            if handler.calls != [["arg"]]:
                errors.append(name)

    def process(worker):
        for i in range(MESSAGES_PER_PROCESSOR):
            bot.process_message(make_message(f"noise_{worker}_{i}", direct=True))

    with ThreadPoolExecutor(max_workers=REGISTRARS + PROCESSORS) as pool:
        futures = [pool.submit(register, w) for w in range(REGISTRARS)]
        futures += [pool.submit(process, w) for w in range(PROCESSORS)]
        for future in futures:
            future.result(timeout=30)

    assert errors == []
    assert len(bot.commands()) == REGISTRARS * COMMANDS_PER_REGISTRAR
    assert default.times_run == PROCESSORS * MESSAGES_PER_PROCESSOR

    for name, handler in handlers.items():
        bot.process_message(make_message(f"{name} again", direct=True))
        assert handler.calls == [["arg"], ["again"]]


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)

    def reader():
        with lock.read():
            # all three readers must be inside at once to pass the barrier
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not any(t.is_alive() for t in threads)


def test_writer_waits_for_readers():
    lock = ReadWriteLock()
    order = []
    reader_in = threading.Event()

    def reader():
        with lock.read():
            reader_in.set()
            time.sleep(0.1)
            order.append("reader_done")

    def writer():
        reader_in.wait(timeout=5)
        with lock.write():
            order.append("writer")

    threads = [threading.Thread(target=reader), threading.Thread(target=writer)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert order == ["reader_done", "writer"]


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    order = []
    lock.acquire_read()

    writer = threading.Thread(target=lambda: (lock.acquire_write(), order.append("writer"), lock.release_write()))
    writer.start()
    # give the writer time to start waiting
    while not lock._writers_waiting:
        time.sleep(0.001)

    reader = threading.Thread(target=lambda: (lock.acquire_read(), order.append("reader"), lock.release_read()))
    reader.start()
    time.sleep(0.05)
    assert order == []

    lock.release_read()
    writer.join(timeout=5)
    reader.join(timeout=5)
    assert order == ["writer", "reader"]


def test_registration_blocks_while_message_in_flight(bot, make_message):
    started = threading.Event()
    release = threading.Event()
    registered = threading.Event()

    def slow(state):
        started.set()
        release.wait(timeout=5)

    bot.register_command("slow", slow)

    processor = threading.Thread(
        target=bot.process_message, args=(make_message("slow", direct=True),)
    )
    processor.start()
    assert started.wait(timeout=5)

    registrar = threading.Thread(
        target=lambda: (bot.register_command("late", slow), registered.set())
    )
    registrar.start()
    time.sleep(0.05)
    assert not registered.is_set()

    release.set()
    processor.join(timeout=5)
    registrar.join(timeout=5)
    assert registered.is_set()
    assert "late" in bot.commands()
