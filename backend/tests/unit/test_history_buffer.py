import numpy as np
import pytest

from pfbresampler.dsp.history import HistoryBuffer


def test_extend_and_view_in_order() -> None:
    buf = HistoryBuffer(4, dtype=np.float32)
    buf.extend([1.0, 2.0, 3.0])
    assert len(buf) == 3
    np.testing.assert_array_equal(buf.view(), [1.0, 2.0, 3.0])


def test_view_is_contiguous_after_wrap() -> None:
    buf = HistoryBuffer(4, dtype=np.float32)
    buf.extend([1.0, 2.0, 3.0, 4.0])
    assert buf.pop_front(3) == 3
    buf.extend([5.0, 6.0])
    view = buf.view()
    assert view.flags.c_contiguous
    np.testing.assert_array_equal(view, [4.0, 5.0, 6.0])
    assert buf.capacity == 4


def test_view_is_read_only() -> None:
    buf = HistoryBuffer(4, dtype=np.float32)
    buf.extend([1.0, 2.0])
    with pytest.raises(ValueError):
        buf.view()[0] = 9.0


def test_getitem_relative_to_oldest() -> None:
    buf = HistoryBuffer(4, dtype=np.complex64)
    buf.extend([1 + 1j, 2 + 2j, 3 + 3j])
    buf.pop_front()
    assert buf[0] == 2 + 2j
    assert buf[-1] == 3 + 3j
    with pytest.raises(IndexError):
        buf[2]


def test_push_back_grows_capacity() -> None:
    buf = HistoryBuffer(2, dtype=np.float32)
    for value in range(5):
        buf.push_back(float(value))
    assert buf.capacity >= 5
    np.testing.assert_array_equal(buf.view(), [0.0, 1.0, 2.0, 3.0, 4.0])


def test_pop_front_clamps_to_size() -> None:
    buf = HistoryBuffer(4, dtype=np.float32)
    buf.extend([1.0, 2.0])
    assert buf.pop_front(10) == 2
    assert len(buf) == 0
    assert buf.pop_front(1) == 0


def test_resize_keeps_contents() -> None:
    buf = HistoryBuffer(8, dtype=np.float32)
    buf.extend(np.arange(6, dtype=np.float32))
    buf.pop_front(2)
    buf.resize(3)
    assert buf.capacity == 4
    np.testing.assert_array_equal(buf.view(), [2.0, 3.0, 4.0, 5.0])
    buf.resize(32)
    assert buf.capacity == 32
    np.testing.assert_array_equal(buf.view(), [2.0, 3.0, 4.0, 5.0])


def test_clear() -> None:
    buf = HistoryBuffer(4, dtype=np.float32)
    buf.extend([1.0, 2.0])
    buf.clear()
    assert len(buf) == 0
    assert buf.view().size == 0
