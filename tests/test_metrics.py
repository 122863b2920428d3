import socket

import pytest
from prometheus_client import CollectorRegistry

from circbuf import BufferEmptyError, BufferFullError, BufferMetrics, RingBuffer


@pytest.fixture
def metrics():
    return BufferMetrics(registry=CollectorRegistry())


def sample(metrics, name, **labels):
    return metrics.registry.get_sample_value(name, labels)


def test_all_metrics_registered(metrics):
    assert metrics.validate_metrics() == (True, [])


def test_push_pop_counts(metrics):
    buf = RingBuffer(2, name="q", metrics=metrics)
    assert sample(metrics, "ringbuf_capacity", buffer="q") == 2

    buf.push(1)
    buf.push(2)
    buf.pop()

    assert sample(metrics, "ringbuf_push_total", buffer="q") == 2
    assert sample(metrics, "ringbuf_pop_total", buffer="q") == 1
    assert sample(metrics, "ringbuf_occupancy", buffer="q") == 1


def test_rejections_counted(metrics):
    buf = RingBuffer(1, name="q", metrics=metrics)
    with pytest.raises(BufferEmptyError):
        buf.pop()
    buf.push(1)
    with pytest.raises(BufferFullError):
        buf.push(2)

    assert sample(metrics, "ringbuf_rejected_total", buffer="q", reason="empty") == 1
    assert sample(metrics, "ringbuf_rejected_total", buffer="q", reason="full") == 1


def test_bulk_operations_count_each_element(metrics):
    buf = RingBuffer(4, name="bulk", metrics=metrics)
    buf.fill_from([1, 2, 3])
    buf.drain_into([None] * 2)

    assert sample(metrics, "ringbuf_push_total", buffer="bulk") == 3
    assert sample(metrics, "ringbuf_pop_total", buffer="bulk") == 2
    assert sample(metrics, "ringbuf_occupancy", buffer="bulk") == 1

    buf.clear()
    assert sample(metrics, "ringbuf_occupancy", buffer="bulk") == 0


def test_http_server_port_in_use_is_tolerated(metrics):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("0.0.0.0", 0))
        sock.listen(1)
        port = sock.getsockname()[1]

        metrics.start_http_server(port)

    assert metrics.port is None
