"""Tests for the exception hierarchy and handlers."""

import logging

import pytest

from padboard.exceptions import (
    AudioDeviceError,
    AudioDeviceInUseError,
    AudioError,
    DecodeFailureError,
    ErrorContext,
    MissingExternalToolError,
    PadboardError,
    PadNotFoundError,
    PersistenceReadError,
    PersistenceWriteError,
    UnsupportedFormatError,
    collect_errors,
    format_error_for_display,
    wrap_audio_device_error,
)


@pytest.mark.unit
class TestHierarchy:

    def test_audio_errors_share_base(self):
        for error in (
            UnsupportedFormatError("a.xyz", ".xyz"),
            DecodeFailureError("a.wav", "bad header"),
            MissingExternalToolError("ffmpeg", "a.m4a"),
        ):
            assert isinstance(error, AudioError)
            assert isinstance(error, PadboardError)

    def test_missing_tool_and_corrupt_file_read_differently(self):
        missing = MissingExternalToolError("ffmpeg", "a.m4a")
        corrupt = DecodeFailureError("a.wav", "bad header")

        assert "install" in missing.get_full_message().lower()
        assert "corrupted" in corrupt.get_full_message()

    def test_full_message_includes_hint(self):
        error = PersistenceWriteError("/x/sounds.json", "disk full")
        assert error.get_full_message().startswith("Could not save pads.")
        assert "Suggestion:" in error.get_full_message()

    def test_read_error_mentions_backup(self):
        error = PersistenceReadError("/x/sounds.json", "bad json")
        assert "/x/sounds.json.bak" in error.recovery_hint

    def test_pad_not_found(self):
        assert PadNotFoundError("abc").pad_id == "abc"


@pytest.mark.unit
class TestHandlers:

    def test_format_custom_error(self):
        message, hint = format_error_for_display(UnsupportedFormatError("a.xyz", ".xyz"))
        assert ".xyz" in message
        assert hint

    def test_format_plain_error(self):
        message, hint = format_error_for_display(ValueError("nope"))
        assert message == "ValueError: nope"
        assert hint is None

    def test_wrap_device_in_use(self):
        wrapped = wrap_audio_device_error(Exception("Error [PaErrorCode -9985]"), device_id=3)
        assert isinstance(wrapped, AudioDeviceInUseError)
        assert wrapped.device_id == 3

    def test_wrap_other_device_error(self):
        wrapped = wrap_audio_device_error(Exception("Invalid sample rate"))
        assert type(wrapped) is AudioDeviceError
        assert "padboard audio list" in wrapped.recovery_hint

    def test_error_context_logs_and_reraises(self, caplog):
        with caplog.at_level(logging.ERROR):
            with pytest.raises(DecodeFailureError):
                with ErrorContext("decode clip"):
                    raise DecodeFailureError("a.wav", "bad header")

        assert "Failed to decode clip" in caplog.text

    def test_error_context_can_suppress(self):
        with ErrorContext("optional step", re_raise=False) as ctx:
            raise RuntimeError("ignored")
        assert isinstance(ctx.error, RuntimeError)

    def test_collector(self):
        collector = collect_errors("reload pads")

        with collector.try_operation("a.wav"):
            pass
        with collector.try_operation("b.m4a"):
            raise MissingExternalToolError("ffmpeg", "b.m4a")

        assert collector.has_errors
        assert collector.error_count == 1
        assert collector.success_count == 1
        assert "b.m4a" in collector.get_summary()

    def test_collector_lets_keyboard_interrupt_through(self):
        collector = collect_errors("reload pads")
        with pytest.raises(KeyboardInterrupt):
            with collector.try_operation("a.wav"):
                raise KeyboardInterrupt
