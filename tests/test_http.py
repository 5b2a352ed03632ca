import sys, pathlib
import threading

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import pytest

import datasources.http as http


@pytest.fixture(autouse=True)
def fresh_session():
    http.close_shared_session()
    yield
    http.close_shared_session()


def test_one_session_shared_across_threads():
    seen = []
    t = threading.Thread(target=lambda: seen.append(http.get_shared_session()))
    t.start()
    t.join(1.0)
    assert seen == [http.get_shared_session()]


def test_session_retries_gets_only():
    adapter = http.get_shared_session().get_adapter("https://min-api.cryptocompare.com")
    retry = adapter.max_retries
    assert retry.total == 2
    assert 429 in retry.status_forcelist
    assert list(retry.allowed_methods) == ["GET"]
    assert http.get_shared_session().headers["User-Agent"] == http.USER_AGENT


def test_close_builds_new_session_next_time():
    first = http.get_shared_session()
    http.close_shared_session()
    assert http.get_shared_session() is not first
