"""Tests for threshold alert evaluation and delivery."""

from unittest.mock import MagicMock

import pytest
import requests

from airwatch.alerts import (
    SEVERITY_ORDER,
    THRESHOLDS,
    Alert,
    HttpAlertSink,
    Measurement,
    classify,
    dispatch_alerts,
    evaluate_alerts,
)


# =============================================================================
# Threshold table
# =============================================================================

def test_tiers_are_ordered_most_severe_first():
    for pollutant, tiers in THRESHOLDS.items():
        thresholds = [tier.threshold for tier in tiers]
        ranks = [SEVERITY_ORDER.index(tier.severity) for tier in tiers]
        assert thresholds == sorted(thresholds, reverse=True), pollutant
        assert ranks == sorted(ranks, reverse=True), pollutant


def test_only_pm25_has_a_moderate_tier():
    assert [t.severity for t in THRESHOLDS["pm25"]][-1] == "moderate"
    assert "moderate" not in {t.severity for t in THRESHOLDS["no2"]}
    assert "moderate" not in {t.severity for t in THRESHOLDS["o3"]}


@pytest.mark.parametrize(
    "pollutant, value, expected",
    [
        ("pm25", 260, ("hazardous", 250)),
        ("pm25", 250, ("very_unhealthy", 150)),
        ("pm25", 151, ("very_unhealthy", 150)),
        ("pm25", 101, ("unhealthy", 100)),
        ("pm25", 56, ("moderate", 55)),
        ("no2", 401, ("hazardous", 400)),
        ("no2", 201, ("very_unhealthy", 200)),
        ("no2", 45, ("unhealthy", 40)),
        ("o3", 900, ("hazardous", 800)),
        ("o3", 401, ("very_unhealthy", 400)),
        ("o3", 220, ("unhealthy", 200)),
    ],
)
def test_classify_picks_highest_exceeded_tier(pollutant, value, expected):
    tier = classify(pollutant, value)

    assert (tier.severity, tier.threshold) == expected


@pytest.mark.parametrize(
    "pollutant, value",
    [("pm25", 55), ("pm25", 50), ("no2", 40), ("no2", 30), ("o3", 200), ("o3", 0)],
)
def test_classify_below_lowest_tier(pollutant, value):
    assert classify(pollutant, value) is None


# =============================================================================
# evaluate_alerts
# =============================================================================

def test_hazardous_pm25():
    result = evaluate_alerts([{"pollutant": "pm25", "value": 260}])

    assert result.triggered is True
    assert len(result.alerts) == 1
    alert = result.alerts[0]
    assert alert.severity == "hazardous"
    assert alert.threshold == 250
    assert alert.message == "Hazardous Air Quality - PM2.5 levels are extremely high"


def test_pm25_below_moderate_triggers_nothing():
    result = evaluate_alerts([{"pollutant": "pm25", "value": 50}])

    assert result.triggered is False
    assert result.alerts == []


def test_no2_skips_straight_to_unhealthy():
    result = evaluate_alerts([Measurement("no2", 45)])

    assert [(a.severity, a.threshold) for a in result.alerts] == [("unhealthy", 40)]
    assert result.alerts[0].message == "Unhealthy Air Quality - NO2 levels exceed safe limits"


def test_alerts_follow_input_order_with_one_per_measurement():
    measurements = [
        Measurement("o3", 450),
        Measurement("pm25", 20),
        Measurement("pm25", 120),
        Measurement("no2", 500),
    ]

    result = evaluate_alerts(measurements)

    assert [(a.pollutant, a.severity) for a in result.alerts] == [
        ("o3", "very_unhealthy"),
        ("pm25", "unhealthy"),
        ("no2", "hazardous"),
    ]
    assert result.alerts[0].message == "Very Unhealthy Air Quality - Ozone levels are very high"


def test_unknown_pollutants_are_ignored():
    result = evaluate_alerts(
        [
            {"pollutant": "so2", "value": 9999},
            {"pollutant": "PM25", "value": 9999},
            {"pollutant": "co", "value": 9999},
        ]
    )

    assert result.to_dict() == {"triggered": False, "alerts": []}


def test_parameter_key_and_missing_value():
    result = evaluate_alerts([{"parameter": "o3", "value": 850}, {"pollutant": "pm25"}])

    assert len(result.alerts) == 1
    assert result.alerts[0].pollutant == "o3"


def test_empty_input():
    assert evaluate_alerts([]).triggered is False


def test_alert_to_dict():
    alert = evaluate_alerts([Measurement("pm25", 180)]).alerts[0]

    assert alert.to_dict() == {
        "pollutant": "pm25",
        "value": 180,
        "threshold": 150,
        "message": "Very Unhealthy Air Quality - PM2.5 levels are very high",
        "severity": "very_unhealthy",
    }


# =============================================================================
# Delivery
# =============================================================================

def _alerts(*values):
    return evaluate_alerts([Measurement("pm25", v) for v in values]).alerts


def test_dispatch_continues_after_a_failed_submission():
    delivered = []

    def flaky_sink(city, alert):
        if alert.value == 120:
            raise ConnectionError("store unavailable")
        delivered.append((city, alert.value))

    count = dispatch_alerts(_alerts(300, 120, 60), flaky_sink, city="Delhi")

    assert count == 2
    assert delivered == [("Delhi", 300), ("Delhi", 60)]


def test_http_sink_posts_alert_payload():
    session = MagicMock(spec=requests.Session)
    sink = HttpAlertSink("http://alerts.local/api/alerts", timeout=3.0, session=session)
    alert = Alert(pollutant="no2", value=55, threshold=40, message="msg", severity="unhealthy")

    sink("London", alert)

    session.post.assert_called_once_with(
        "http://alerts.local/api/alerts",
        json={
            "city": "London",
            "parameter": "no2",
            "value": 55,
            "threshold": 40,
            "message": "msg",
            "severity": "unhealthy",
        },
        timeout=3.0,
    )
    session.post.return_value.raise_for_status.assert_called_once()


def test_http_errors_are_isolated_by_dispatch():
    session = MagicMock(spec=requests.Session)
    failing = MagicMock()
    failing.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    ok = MagicMock()
    session.post.side_effect = [failing, ok]
    sink = HttpAlertSink("http://alerts.local/api/alerts", session=session)

    count = dispatch_alerts(_alerts(300, 200), sink, city="Paris")

    assert count == 1
    assert session.post.call_count == 2
