import time

from licalib.timing import TicToc


def test_toc_measures_sleep_in_milliseconds():
    timer = TicToc()
    time.sleep(0.02)
    assert timer.toc() >= 20.0


def test_toc_is_non_decreasing():
    timer = TicToc()
    first = timer.toc()
    second = timer.toc()
    assert 0.0 <= first <= second


def test_tic_restarts():
    timer = TicToc()
    time.sleep(0.03)
    before = timer.toc()
    timer.tic()
    after = timer.toc()
    assert after < before