"""
Unit Tests for order event messages

Lists embedded in links are joined without spaces; lists shown only as
text are joined with comma-space.
"""

from datetime import timedelta
from urllib.parse import parse_qs

import pytest

from delegation_orders.notify import Color
from delegation_orders.orders.events import (
    DelegationProgress,
    NewOrderCreated,
    NewOrderLink,
    OrderFulfilled,
    build_order_query,
    format_duration,
    join_for_text,
    join_for_url,
    new_order_events,
)


@pytest.mark.unit
def test_joiners():
    assert join_for_url(["a", "b", "c"]) == "a,b,c"
    assert join_for_text(["a", "b", "c"]) == "a, b, c"
    assert join_for_url(["solo"]) == "solo"
    assert join_for_url([]) == ""


@pytest.mark.unit
def test_new_order_message():
    event = NewOrderCreated(
        names=("bob", "erin"), labels=("prod-db", "billing"), uses=2, duration="1h0m0s"
    )

    assert event.message() == (
        "bob,erin has created an order for the label prod-db,billing. "
        "requesting 2 delegations for 1h0m0s"
    )
    assert event.color == Color.RED


@pytest.mark.unit
def test_delegation_message_uses_spaced_label_list():
    event = DelegationProgress(
        owner="alice",
        delegatee="bob",
        order_num="o1",
        labels=("prod-db", "billing"),
        duration="2h",
    )

    assert event.message() == (
        "alice has delegated the label prod-db, billing to bob (per order o1) for 2h"
    )
    assert event.color == Color.YELLOW


@pytest.mark.unit
def test_fulfilled_message():
    event = OrderFulfilled(user="bob", order_num="o1")

    assert event.message() == "bob has had order o1 fulfilled."
    assert event.color == Color.PURPLE


@pytest.mark.unit
def test_order_query_carries_every_parameter():
    query = build_order_query(
        delegator="alice",
        labels="prod-db,billing",
        duration="1h",
        uses=3,
        order_num="o1",
        delegatees="bob,erin",
    )

    assert parse_qs(query) == {
        "delegator": ["alice"],
        "label": ["prod-db,billing"],
        "duration": ["1h"],
        "uses": ["3"],
        "ordernum": ["o1"],
        "delegatee": ["bob,erin"],
    }
    assert [part.split("=")[0] for part in query.split("&")] == [
        "delegatee",
        "delegator",
        "duration",
        "label",
        "ordernum",
        "uses",
    ]


@pytest.mark.unit
def test_new_order_link_message():
    event = NewOrderLink(
        owner="alice",
        chat_name="AliceChat",
        ro_host="ro.example.com",
        order_num="o1",
        names=("bob",),
        labels=("prod-db",),
        uses=1,
        duration="1h",
    )

    assert event.message().startswith("@AliceChat - https://ro.example.com?")
    assert "delegator=alice" in event.message()
    assert event.color == Color.GREEN


@pytest.mark.unit
def test_new_order_events_one_link_per_owner():
    events = new_order_events(
        order_num="o1",
        duration="1h",
        names=["bob"],
        labels=["prod-db"],
        uses=1,
        owners={"alice": "AliceChat", "dave": "DaveChat"},
        ro_host="ro.example.com",
    )

    assert isinstance(events[0], NewOrderCreated)
    assert [e.chat_name for e in events[1:]] == ["AliceChat", "DaveChat"]
    assert all(e.order_num == "o1" for e in events[1:])


@pytest.mark.unit
@pytest.mark.parametrize(
    "duration,expected",
    [
        (timedelta(hours=1), "1h0m0s"),
        (timedelta(minutes=30), "30m0s"),
        (timedelta(hours=2, minutes=5, seconds=7), "2h5m7s"),
        (timedelta(seconds=45), "45s"),
        (timedelta(seconds=1.5), "1.5s"),
        (timedelta(milliseconds=250), "250ms"),
        (timedelta(0), "0s"),
        (timedelta(hours=-1), "-1h0m0s"),
    ],
)
def test_format_duration_matches_delegation_form(duration, expected):
    assert format_duration(duration) == expected
