import sys
import os

sys.path.append(os.path.dirname(os.path.realpath(__file__)) + "/../lib")
from warning_limiter import WarningLimiter, BoundedMessageList


def test_periodic_warnings():
    limiter = WarningLimiter()
    reported = [ count for count in range(1, 2501) if limiter.record(f"warning {count}") is not None ]
    assert reported[:10] == list(range(1, 11))
    assert 11 not in reported
    assert 100 in reported
    assert 150 not in reported
    assert 900 in reported
    assert 1000 in reported
    assert 1100 not in reported
    assert 2000 in reported
    assert limiter.count == 2500
    assert len(limiter.messages) == len(reported)


def test_capped_warnings():
    limiter = WarningLimiter(max_reported=3, suppression_message='Suppressing further warnings')
    assert limiter.record('a') == 'a'
    assert limiter.record('b') == 'b'
    assert limiter.record('c') == 'Suppressing further warnings'
    assert limiter.record('d') is None
    assert limiter.count == 4
    assert limiter.messages == [ 'a', 'b', 'Suppressing further warnings' ]


def test_bounded_message_list_by_count():
    messages = BoundedMessageList(max_messages=2)
    assert messages.append('one')
    assert messages.append('two')
    assert not messages.append('three')
    assert len(messages) == 2
    assert messages.n_dropped == 1
    assert messages.joined() == "one\ntwo"


def test_bounded_message_list_by_characters():
    messages = BoundedMessageList(max_messages=None, max_characters=10)
    assert messages.append('12345678')
    assert messages.append('abc')
    assert not messages.append('x')
    assert list(messages) == [ '12345678', 'abc' ]
