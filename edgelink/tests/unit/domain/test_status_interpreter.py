from __future__ import annotations

import pytest

from edgelink.domain.workflows import (
    EthConnectStatus,
    OtaUpdateStatus,
    Outcome,
    WifiConnectStatus,
    WorkflowKind,
    classify,
    interpret,
)


@pytest.mark.parametrize(
    "kind, code, expected",
    [
        (WorkflowKind.WIFI_JOIN, 0, Outcome.CONTINUE),
        (WorkflowKind.WIFI_JOIN, 1, Outcome.CONTINUE),
        (WorkflowKind.WIFI_JOIN, 2, Outcome.FAILURE),
        (WorkflowKind.WIFI_JOIN, 3, Outcome.SUCCESS),
        (WorkflowKind.ETH_JOIN, 0, Outcome.CONTINUE),
        (WorkflowKind.ETH_JOIN, 1, Outcome.CONTINUE),
        (WorkflowKind.ETH_JOIN, 2, Outcome.FAILURE),
        (WorkflowKind.ETH_JOIN, 3, Outcome.SUCCESS),
        (WorkflowKind.ETH_JOIN, 4, Outcome.DISCONNECTED),
        (WorkflowKind.FIRMWARE_UPDATE, 0, Outcome.CONTINUE),
        (WorkflowKind.FIRMWARE_UPDATE, 1, Outcome.SUCCESS),
        (WorkflowKind.FIRMWARE_UPDATE, -1, Outcome.FAILURE),
    ],
)
def test_classify_known_codes(kind: WorkflowKind, code: int, expected: Outcome) -> None:
    assert classify(kind, code) is expected


def test_same_code_means_different_things_per_kind() -> None:
    assert classify(WorkflowKind.WIFI_JOIN, 1) is Outcome.CONTINUE
    assert classify(WorkflowKind.FIRMWARE_UPDATE, 1) is Outcome.SUCCESS
    assert classify(WorkflowKind.ETH_JOIN, 2) is Outcome.FAILURE
    assert classify(WorkflowKind.FIRMWARE_UPDATE, 2) is Outcome.CONTINUE


@pytest.mark.parametrize(
    "kind, code",
    [
        (WorkflowKind.WIFI_JOIN, 4),
        (WorkflowKind.WIFI_JOIN, -1),
        (WorkflowKind.ETH_JOIN, 7),
        (WorkflowKind.FIRMWARE_UPDATE, 2),
        (WorkflowKind.FIRMWARE_UPDATE, 99),
    ],
)
def test_unknown_codes_keep_polling(kind: WorkflowKind, code: int) -> None:
    reading = interpret(kind, code)

    assert reading.outcome is Outcome.CONTINUE
    assert reading.status is None
    assert not reading.is_known
    assert reading.code == code
    assert reading.label


def test_interpret_decodes_into_kind_specific_enum() -> None:
    wifi = interpret(WorkflowKind.WIFI_JOIN, 3)
    eth = interpret(WorkflowKind.ETH_JOIN, 3)
    ota = interpret(WorkflowKind.FIRMWARE_UPDATE, -1)

    assert wifi.status is WifiConnectStatus.CONNECTED
    assert eth.status is EthConnectStatus.CONNECTED
    assert ota.status is OtaUpdateStatus.FAILED
    assert wifi.label == "Connection success!"
    assert eth.label == "Connected"
    assert ota.label == "!!! Upload Error !!!"


def test_wifi_failure_label_mentions_credentials() -> None:
    reading = interpret(WorkflowKind.WIFI_JOIN, 2)

    assert reading.outcome is Outcome.FAILURE
    assert "credentials" in reading.label


def test_interpret_accepts_kind_value_strings() -> None:
    reading = interpret("eth_join", 4)  # type: ignore[arg-type]

    assert reading.kind is WorkflowKind.ETH_JOIN
    assert reading.outcome is Outcome.DISCONNECTED
    assert Outcome.DISCONNECTED.is_terminal
    assert not Outcome.CONTINUE.is_terminal


@pytest.mark.parametrize(
    "kind, code, outcome, label",
    [
        (WorkflowKind.WIFI_JOIN, 0, Outcome.CONTINUE, "Connecting..."),
        (WorkflowKind.WIFI_JOIN, 1, Outcome.CONTINUE, "Connecting..."),
        (WorkflowKind.ETH_JOIN, 0, Outcome.CONTINUE, "Idle"),
        (WorkflowKind.ETH_JOIN, 1, Outcome.CONTINUE, "Connecting..."),
        (WorkflowKind.ETH_JOIN, 2, Outcome.FAILURE, "Failed"),
        (WorkflowKind.ETH_JOIN, 4, Outcome.DISCONNECTED, "Disconnected"),
        (WorkflowKind.FIRMWARE_UPDATE, 0, Outcome.CONTINUE, "Firmware update in progress..."),
        (WorkflowKind.FIRMWARE_UPDATE, 1, Outcome.SUCCESS, "OTA firmware update complete."),
    ],
)
def test_overlapping_codes_keep_their_own_kind_label(
    kind: WorkflowKind, code: int, outcome: Outcome, label: str
) -> None:
    reading = interpret(kind, code)

    assert reading.outcome is outcome
    assert reading.label == label
