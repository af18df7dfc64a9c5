from __future__ import annotations

import pytest

from ticket_analytics.models.aggregates import TechLayer
from ticket_analytics.services.issues import UNSPECIFIED, classify, tokenize


def test_tokenize_drops_empty_and_null_tokens():
    assert tokenize("Bluetooth Issue;; Finish Button Disabled ; null") == [
        "Bluetooth Issue",
        "Finish Button Disabled",
    ]


def test_tokenize_drops_undefined_case_insensitively():
    assert tokenize("UNDEFINED; Pump leak ;NULL;Undefined") == ["Pump leak"]


@pytest.mark.parametrize("value", ["", "   ", ";;;", "null", " ; undefined ; "])
def test_tokenize_empty_field_yields_sentinel(value):
    assert tokenize(value) == [UNSPECIFIED]


def test_tokenize_keeps_duplicates():
    assert tokenize("Sensor Fail;Sensor Fail") == ["Sensor Fail", "Sensor Fail"]


def test_tokenize_none_is_treated_as_empty():
    assert tokenize(None) == [UNSPECIFIED]  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "token, layer",
    [
        ("ATG sensor battery drain", TechLayer.HARDWARE),
        ("data sync mismatch on app screen", TechLayer.APP),
        ("Finish Button Disabled", TechLayer.APP),
        ("OTP not received", TechLayer.APP),
        ("Order stuck in queue", TechLayer.APP),
        ("Pump leak", TechLayer.HARDWARE),
        ("Bluetooth Issue", TechLayer.CONNECTIVITY),
        ("Device offline", TechLayer.CONNECTIVITY),
        ("Backend correction needed", TechLayer.DATA_SYNC),
        ("Quantity mismatch", TechLayer.DATA_SYNC),
        ("Wrong invoice", TechLayer.OTHER),
        (UNSPECIFIED, TechLayer.OTHER),
    ],
)
def test_classify(token, layer):
    assert classify(token) is layer


def test_classify_precedence_hardware_before_connectivity():
    # both "sensor" (Hardware) and "network" (Connectivity) match
    assert classify("sensor lost network") is TechLayer.HARDWARE
