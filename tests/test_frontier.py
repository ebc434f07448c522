from __future__ import annotations

import threading

from sitegraph import Frontier


def test_claim_then_take_in_fifo_order():
    frontier = Frontier()
    assert frontier.claim("https://example.com")
    assert frontier.claim("https://example.com/a")
    assert frontier.claim("https://example.com/b")

    assert frontier.take() == "https://example.com"
    assert frontier.take() == "https://example.com/a"
    assert frontier.take() == "https://example.com/b"
    assert frontier.take() is None
    assert frontier.empty()


def test_claim_is_at_most_once_even_after_take():
    frontier = Frontier()
    assert frontier.claim("https://example.com/a")
    assert frontier.take() == "https://example.com/a"

    assert not frontier.claim("https://example.com/a")
    assert frontier.take() is None
    assert frontier.is_visited("https://example.com/a")
    assert frontier.snapshot()["rejected_duplicates"] == 1


def test_concurrent_claims_of_one_url_have_a_single_winner():
    frontier = Frontier()
    workers = 64
    barrier = threading.Barrier(workers)
    results: list[bool] = []
    results_lock = threading.Lock()

    def worker() -> None:
        barrier.wait()
        outcome = frontier.claim("https://example.com/contested")
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert results.count(False) == workers - 1
    assert frontier.pending() == 1


def test_concurrent_claims_of_overlapping_urls_enqueue_each_once():
    frontier = Frontier()
    urls = [f"https://example.com/page/{idx}" for idx in range(200)]
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        for url in urls:
            frontier.claim(url)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    taken = []
    while True:
        url = frontier.take()
        if url is None:
            break
        taken.append(url)

    assert sorted(taken) == sorted(urls)
    assert frontier.visited() == frozenset(urls)
    snapshot = frontier.snapshot()
    assert snapshot["claimed"] == 200
    assert snapshot["taken"] == 200
    assert snapshot["rejected_duplicates"] == 200 * 7
