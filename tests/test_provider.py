from datetime import timedelta

import pytest

from errors import ProviderLoadError
from messages import Clock, SessionType, Weather
from provider import QueueProvider, STREAM_NAMES, load_provider_factory


def test_publish_routes_by_message_type(race_provider) -> None:
    race_provider.publish(Weather(air_temp=19.0))
    race_provider.publish(Clock(remaining=timedelta(minutes=90)))

    assert race_provider.weather().get_nowait().air_temp == 19.0
    assert race_provider.clock().get_nowait().remaining == timedelta(minutes=90)
    assert race_provider.timing().empty()


def test_publish_rejects_unknown_messages(race_provider) -> None:
    with pytest.raises(TypeError):
        race_provider.publish({"stream": "TimingData"})


def test_streams_cover_every_stream_once(race_provider) -> None:
    assert [name for name, _ in race_provider.streams()] == list(STREAM_NAMES)


def test_provider_starts_paused_and_toggles(race_provider) -> None:
    assert race_provider.is_paused()

    race_provider.toggle_pause()

    assert not race_provider.is_paused()
    assert race_provider.controls("toggle_pause") == [False]


def test_metadata(race_provider) -> None:
    assert race_provider.session() is SessionType.RACE
    assert race_provider.name() == "Monaco Grand Prix"
    assert race_provider.circuit_timezone().zone == "Europe/Monaco"


def test_load_provider_factory_resolves_callable() -> None:
    assert load_provider_factory("provider:QueueProvider") is QueueProvider


@pytest.mark.parametrize("path", ["provider", "no_such_module_xyz:factory", "provider:NOT_THERE", "provider:STREAM_NAMES"])
def test_load_provider_factory_errors(path) -> None:
    with pytest.raises(ProviderLoadError):
        load_provider_factory(path)
