import itertools
from unittest import mock

from kitutil.hostname import hostname, short_hostname

# Each test starts far enough past the previous one to force a fresh lookup.
_epochs = itertools.count(1_000_000_000, 1_000)


def _at(seconds):
    return mock.patch("kitutil.hostname.time.time", return_value=seconds)


def test_hostname_comes_from_system():
    with _at(next(_epochs)), mock.patch("socket.gethostname", return_value="box.example.com"):
        assert hostname() == "box.example.com"


def test_hostname_is_cached_within_interval():
    start = next(_epochs)
    with _at(start), mock.patch("socket.gethostname", return_value="first.example.com"):
        assert hostname() == "first.example.com"
    with _at(start + 30), mock.patch("socket.gethostname", return_value="second.example.com"):
        assert hostname() == "first.example.com"
    with _at(start + 61), mock.patch("socket.gethostname", return_value="second.example.com"):
        assert hostname() == "second.example.com"


def test_hostname_falls_back_when_lookup_fails():
    with _at(next(_epochs)), mock.patch("socket.gethostname", side_effect=OSError("boom")):
        assert hostname() == "Amnesiac"


def test_short_hostname_cuts_at_second_dot():
    with _at(next(_epochs)), mock.patch("socket.gethostname", return_value="host.dc.example.com"):
        assert short_hostname() == "host.dc"
        assert hostname() == "host.dc.example.com"


def test_short_hostname_keeps_single_dot():
    with _at(next(_epochs)), mock.patch("socket.gethostname", return_value="host.local"):
        assert short_hostname() == "host.local"


def test_short_hostname_without_dot():
    with _at(next(_epochs)), mock.patch("socket.gethostname", return_value="plain"):
        assert short_hostname() == "plain"