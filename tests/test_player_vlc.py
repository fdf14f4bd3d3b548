"""Tests for the VLC sink using fakes."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tapedeck import player_vlc


class FakeEventManager:
    def __init__(self) -> None:
        self.callbacks: list[object] = []

    def event_attach(self, event_type: object, callback) -> None:
        self.callbacks.append(callback)


class FakeMediaPlayer:
    def __init__(self) -> None:
        self.media = None
        self.volume: int | None = None
        self.pause_calls: list[int] = []
        self.played = 0
        self.stopped = 0
        self.time = 65_432
        self.length = 125_000
        self.events = FakeEventManager()

    def event_manager(self) -> FakeEventManager:
        return self.events

    def set_media(self, media: str) -> None:
        self.media = media

    def play(self) -> None:
        self.played += 1

    def stop(self) -> None:
        self.stopped += 1

    def set_pause(self, flag: int) -> None:
        self.pause_calls.append(flag)

    def audio_set_volume(self, volume: int) -> None:
        self.volume = volume

    def get_time(self) -> int:
        return self.time

    def get_length(self) -> int:
        return self.length


class FakeInstance:
    def __init__(self) -> None:
        self.player = FakeMediaPlayer()

    def media_player_new(self) -> FakeMediaPlayer:
        return self.player

    def media_new(self, path: str) -> str:
        return f"media:{path}"


class FakeVlc:
    class EventType:
        MediaPlayerEndReached = "end"

    last_instance: FakeInstance | None = None

    @classmethod
    def Instance(cls) -> FakeInstance:
        cls.last_instance = FakeInstance()
        return cls.last_instance


@pytest.fixture
def fake_vlc(monkeypatch: pytest.MonkeyPatch) -> type[FakeVlc]:
    monkeypatch.setattr(player_vlc, "vlc", FakeVlc)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", None)
    return FakeVlc


def test_play_loads_media_and_applies_volume(fake_vlc) -> None:
    sink = player_vlc.VlcSink(volume=0.42)
    media_player = fake_vlc.last_instance.player
    sink.play("track.mp3")
    assert sink.current_media == "track.mp3"
    assert media_player.media == "media:track.mp3"
    assert media_player.played == 1
    assert media_player.volume == 42
    assert media_player.pause_calls == []


def test_toggle_pause_tracks_flag(fake_vlc) -> None:
    sink = player_vlc.VlcSink()
    media_player = fake_vlc.last_instance.player
    assert sink.is_paused() is False
    sink.toggle_pause()
    assert sink.is_paused() is True
    sink.toggle_pause()
    assert sink.is_paused() is False
    assert media_player.pause_calls == [1, 0]


def test_pause_survives_track_change(fake_vlc) -> None:
    sink = player_vlc.VlcSink()
    media_player = fake_vlc.last_instance.player
    sink.toggle_pause()
    sink.play("next.mp3")
    assert media_player.pause_calls == [1, 1]


def test_volume_is_clamped(fake_vlc) -> None:
    sink = player_vlc.VlcSink(volume=3.0)
    assert sink.volume() == 1.0
    sink.set_volume(-0.2)
    assert sink.volume() == 0.0
    assert fake_vlc.last_instance.player.volume == 0
    sink.set_volume(0.555)
    assert sink.volume_percent == 56


def test_position_and_length(fake_vlc) -> None:
    sink = player_vlc.VlcSink()
    media_player = fake_vlc.last_instance.player
    assert sink.position() == timedelta(milliseconds=65_432)
    assert sink.length() == timedelta(seconds=125)
    media_player.time = -1
    media_player.length = 0
    assert sink.position() == timedelta(0)
    assert sink.length() is None


def test_end_reached_is_consumed_once(fake_vlc) -> None:
    sink = player_vlc.VlcSink()
    [callback] = fake_vlc.last_instance.player.events.callbacks
    assert sink.consume_end_reached() is False
    callback(object())
    assert sink.consume_end_reached() is True
    assert sink.consume_end_reached() is False


def test_stop_forgets_media(fake_vlc) -> None:
    sink = player_vlc.VlcSink()
    sink.play("track.mp3")
    sink.stop()
    assert sink.current_media is None
    assert fake_vlc.last_instance.player.stopped == 1


def test_missing_vlc_raises_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(player_vlc, "vlc", None)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", RuntimeError("missing"))
    with pytest.raises(RuntimeError, match="VLC backend is unavailable"):
        player_vlc.VlcSink()


def test_load_vlc_import_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    import builtins

    original_import = builtins.__import__

    def fake_import(name, *args, **kwargs):
        if name == "vlc":
            raise ModuleNotFoundError("vlc")
        return original_import(name, *args, **kwargs)

    monkeypatch.setattr(builtins, "__import__", fake_import)
    monkeypatch.setattr(player_vlc, "vlc", None)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", None)
    player_vlc._load_vlc()
    assert player_vlc.vlc is None
    assert isinstance(player_vlc._VLC_IMPORT_ERROR, ModuleNotFoundError)


@pytest.mark.vlc
def test_real_vlc_sink_without_media(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(player_vlc, "vlc", None)
    monkeypatch.setattr(player_vlc, "_VLC_IMPORT_ERROR", None)
    try:
        sink = player_vlc.VlcSink(volume=0.3)
    except (RuntimeError, AttributeError) as exc:
        pytest.skip(f"libVLC unavailable: {exc}")
    assert sink.volume() == 0.3
    sink.toggle_pause()
    assert sink.is_paused() is True
    assert sink.position() == timedelta(0)
    assert sink.length() is None
    assert sink.consume_end_reached() is False
    sink.stop()
