import threading

from care_assistant.agent.health import HealthCell
from care_assistant.types import ProviderHealth


def test_starts_healthy_and_tracks_latest_outcome() -> None:
    cell = HealthCell()

    assert cell.current() is ProviderHealth.HEALTHY
    assert cell.mark_unhealthy("RemoteCallError: timeout") is ProviderHealth.UNHEALTHY
    assert cell.current() is ProviderHealth.UNHEALTHY
    assert cell.last_error == "RemoteCallError: timeout"
    assert cell.mark_healthy() is ProviderHealth.HEALTHY
    assert cell.current() is ProviderHealth.HEALTHY


def test_history_is_bounded() -> None:
    cell = HealthCell(history_size=3)
    for _ in range(10):
        cell.mark_healthy()

    assert len(cell.recent_outcomes()) == 3


def test_concurrent_updates_stay_consistent() -> None:
    cell = HealthCell(history_size=50)
    start = threading.Barrier(8)

    def _worker(index: int) -> None:
        start.wait()
        for _ in range(200):
            if index % 2:
                cell.mark_healthy()
            else:
                cell.mark_unhealthy("boom")

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    outcomes = cell.recent_outcomes()
    assert len(outcomes) == 50
    expected = ProviderHealth.HEALTHY if outcomes[-1].succeeded else ProviderHealth.UNHEALTHY
    assert cell.current() is expected
