from unittest.mock import MagicMock

from itep_scheduler import slots
from itep_scheduler.errors import RemoteRejection, TransportError
from itep_scheduler.models import Location, Order, TimeSlot

TARGET = "2024-06-10"


def make_order(order_id, location="NATAL"):
    return Order(id=order_id, location=Location(id=order_id, name=location))


def make_client(dates=None, times=None):
    """Fake client answering from per-order dicts; exception values are raised."""
    dates = dates or {}
    times = times or {}

    def answer(table, order_id):
        value = table.get(order_id, [])
        if isinstance(value, Exception):
            raise value
        return value

    client = MagicMock()
    client.list_available_dates.side_effect = lambda order_id: answer(dates, order_id)
    client.list_available_times.side_effect = lambda order_id, date: answer(times, order_id)
    return client


def test_orders_for_location_exact_match():
    orders = [make_order(1, "NATAL"), make_order(2, "OTHER"), make_order(3, "natal"), make_order(4, "NATAL")]
    assert [o.id for o in slots.orders_for_location(orders, "NATAL")] == [1, 4]


def test_collect_and_select_scenario():
    orders = [make_order(1, "NATAL"), make_order(2, "OTHER")]
    target_orders = slots.orders_for_location(orders, "NATAL")
    client = make_client(
        dates={1: [TARGET]},
        times={1: ["09:00:00", "09:00:00", "10:00:00"]},
    )

    collected = slots.collect_time_slots(client, target_orders, TARGET)
    assert len(collected) == 3
    assert all(s.order_id == 1 for s in collected)

    selected = slots.select_unique_slots(collected, 2)
    assert selected == [
        TimeSlot(order_id=1, date=TARGET, time="09:00:00"),
        TimeSlot(order_id=1, date=TARGET, time="10:00:00"),
    ]


def test_collect_sorts_by_time_and_keeps_order_for_ties():
    client = make_client(
        dates={1: [TARGET], 2: [TARGET]},
        times={1: ["10:00:00", "08:00:00"], 2: ["08:00:00", "09:00:00"]},
    )

    collected = slots.collect_time_slots(client, [make_order(1), make_order(2)], TARGET)

    assert [(s.order_id, s.time) for s in collected] == [
        (1, "08:00:00"),
        (2, "08:00:00"),
        (2, "09:00:00"),
        (1, "10:00:00"),
    ]
    assert all(s.date == TARGET for s in collected)


def test_collect_skips_order_when_dates_fail():
    client = make_client(
        dates={1: TransportError("down"), 2: [TARGET]},
        times={2: ["09:00:00"]},
    )

    collected = slots.collect_time_slots(client, [make_order(1), make_order(2)], TARGET)

    assert collected == [TimeSlot(order_id=2, date=TARGET, time="09:00:00")]
    client.list_available_times.assert_called_once_with(2, TARGET)


def test_collect_skips_order_without_target_date():
    client = make_client(dates={1: ["2024-06-11"], 2: [TARGET]}, times={1: ["07:00:00"], 2: ["09:00:00"]})

    collected = slots.collect_time_slots(client, [make_order(1), make_order(2)], TARGET)

    assert [s.order_id for s in collected] == [2]


def test_collect_skips_order_when_times_fail():
    client = make_client(
        dates={1: [TARGET], 2: [TARGET]},
        times={1: RemoteRejection(500, "boom"), 2: ["11:00:00"]},
    )

    collected = slots.collect_time_slots(client, [make_order(1), make_order(2)], TARGET)

    assert [s.order_id for s in collected] == [2]


def test_collect_no_orders():
    assert slots.collect_time_slots(make_client(), [], TARGET) == []


def test_select_respects_limit_and_unique_times():
    collected = [
        TimeSlot(order_id=o, date=TARGET, time=t)
        for o, t in [(1, "08:00"), (2, "08:00"), (1, "09:00"), (3, "09:00"), (2, "10:00"), (1, "11:00")]
    ]

    for limit in range(0, 8):
        selected = slots.select_unique_slots(collected, limit)
        times = [s.time for s in selected]
        assert len(selected) <= limit
        assert len(times) == len(set(times))
        assert all(s in collected for s in selected)

    assert [(s.order_id, s.time) for s in slots.select_unique_slots(collected, 3)] == [
        (1, "08:00"),
        (1, "09:00"),
        (2, "10:00"),
    ]


def test_select_fewer_unique_than_limit():
    collected = [TimeSlot(order_id=1, date=TARGET, time="08:00")] * 3
    assert len(slots.select_unique_slots(collected, 5)) == 1


def test_select_empty():
    assert slots.select_unique_slots([], 3) == []
