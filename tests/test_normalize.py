from datetime import date

from fakes import JAN_1_2024, THREE_HOURS, forecast_payload, sample
from weatherlog.normalize import normalize, normalize_payload
from weatherlog.weather_clients import parse_forecast_samples

DAY = 86400


def test_empty_input_gives_empty_output():
    assert normalize([], 5) == []
    assert normalize([], 0) == []


def test_forty_samples_collapse_to_five_days():
    samples = parse_forecast_samples(forecast_payload())
    days = normalize(samples, 5)

    assert [d.calendar_date for d in days] == [
        "2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05",
    ]
    # 8 samples per day; the first of each day is the representative
    for i, entry in enumerate(days):
        assert entry.representative_sample == samples[i * 8]
        assert entry.representative_sample.timestamp == JAN_1_2024 + i * DAY


def test_representative_is_first_in_input_order():
    first = sample(JAN_1_2024 + 15 * 3600, temp=1.0)
    later = sample(JAN_1_2024 + 6 * 3600, temp=2.0)  # earlier timestamp, later position
    days = normalize([first, later], 5)

    assert len(days) == 1
    assert days[0].representative_sample is first


def test_truncates_to_max_days():
    samples = parse_forecast_samples(forecast_payload(count=56))  # 7 days
    assert len(normalize(samples, 5)) == 5
    assert len(normalize(samples, 3)) == 3
    assert normalize(samples, 0) == []


def test_fewer_days_are_not_padded():
    samples = [sample(JAN_1_2024), sample(JAN_1_2024 + DAY)]
    assert len(normalize(samples, 5)) == 2


def test_dates_are_unique_and_ascending():
    # partial first day, as when the forecast starts mid-afternoon
    samples = parse_forecast_samples(forecast_payload(start=JAN_1_2024 + 15 * 3600, count=40))
    days = normalize(samples, 5)
    dates = [d.calendar_date for d in days]

    assert dates == sorted(set(dates))
    assert len(days) <= min(5, len({s.calendar_date for s in samples}))
    assert days[0].representative_sample.timestamp == JAN_1_2024 + 15 * 3600


def test_unordered_input_still_ascending():
    samples = [sample(JAN_1_2024 + 2 * DAY), sample(JAN_1_2024), sample(JAN_1_2024 + DAY)]
    dates = [d.calendar_date for d in normalize(samples, 5)]
    assert dates == ["2024-01-01", "2024-01-02", "2024-01-03"]


def test_calendar_date_is_utc():
    assert sample(JAN_1_2024 - 1).calendar_date == date(2023, 12, 31)
    assert sample(JAN_1_2024).calendar_date == date(2024, 1, 1)
    assert sample(JAN_1_2024 + DAY - 1).calendar_date == date(2024, 1, 1)


def test_normalize_is_idempotent():
    samples = [sample(JAN_1_2024 + i * THREE_HOURS, temp=i) for i in range(20)]
    assert normalize(samples, 5) == normalize(samples, 5)


def test_normalize_payload_reads_raw_forecast():
    days = normalize_payload(forecast_payload(count=16), 5)
    assert [d.calendar_date for d in days] == ["2024-01-01", "2024-01-02"]
    assert days[1].representative_sample.temperature_c == 8.0


def test_truncation_keeps_earliest_dates_for_unordered_input():
    samples = [sample(JAN_1_2024 + 3 * DAY), sample(JAN_1_2024), sample(JAN_1_2024 + DAY)]
    dates = [d.calendar_date for d in normalize(samples, 2)]
    assert dates == ["2024-01-01", "2024-01-02"]
