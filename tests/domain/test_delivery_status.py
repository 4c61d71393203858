"""Tests for combining channel outcomes into the notification status."""

import pytest

from notifyhub.domain.entities import ChannelDelivery, aggregate_delivery_status


def _channel(status: str, enabled: bool = True) -> ChannelDelivery:
    return ChannelDelivery(enabled=enabled, status=status)


@pytest.mark.parametrize(
    ("deliveries", "expected"),
    [
        ([_channel("sent"), _channel("sent")], "delivered"),
        ([_channel("sent"), _channel("failed")], "partial"),
        ([_channel("failed"), _channel("failed")], "failed"),
        ([_channel("sent"), _channel("pending")], "dispatching"),
        ([_channel("sent"), _channel("not_applicable", enabled=False)], "delivered"),
        ([_channel("failed"), _channel("not_applicable", enabled=False)], "failed"),
        ([_channel("not_applicable", enabled=False)], "failed"),
        ([], "failed"),
    ],
)
def test_aggregate_delivery_status(deliveries, expected):
    assert aggregate_delivery_status(deliveries) == expected


def test_requested_channel_initial_state():
    assert ChannelDelivery.requested(True).status == "pending"
    assert ChannelDelivery.requested(False) == ChannelDelivery(
        enabled=False, status="not_applicable"
    )
