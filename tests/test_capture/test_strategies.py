"""Tests for capture strategy selection and iOS device classification."""

from logcast.capture.models import Platform
from logcast.capture.strategies import (
    AndroidLogcatStrategy,
    IosDeviceStrategy,
    IosSimulatorStrategy,
    IosTarget,
    classify_ios_device,
    select_strategy,
)


class TestClassifyIosDevice:
    def test_hyphenated_id_is_simulator(self):
        assert classify_ios_device("00008030-001C2D") == IosTarget.SIMULATOR

    def test_short_id_is_device(self):
        assert classify_ios_device("a1b2c3d4e5f6") == IosTarget.DEVICE

    def test_long_id_is_simulator(self):
        assert classify_ios_device("a" * 26) == IosTarget.SIMULATOR

    def test_exactly_25_chars_is_device(self):
        assert classify_ios_device("a" * 25) == IosTarget.DEVICE

    def test_missing_id_is_device(self):
        assert classify_ios_device(None) == IosTarget.DEVICE


class TestSelectStrategy:
    def test_android(self):
        strategy = select_strategy(Platform.ANDROID, "emulator-5554")
        assert isinstance(strategy, AndroidLogcatStrategy)

    def test_ios_simulator(self):
        strategy = select_strategy(Platform.IOS, "00008030-001C2D")
        assert isinstance(strategy, IosSimulatorStrategy)

    def test_ios_device(self):
        strategy = select_strategy(Platform.IOS, "a1b2c3d4e5f6")
        assert isinstance(strategy, IosDeviceStrategy)

    def test_injected_classifier(self):
        strategy = select_strategy(
            Platform.IOS, "a1b2c3d4e5f6", classifier=lambda _: IosTarget.SIMULATOR
        )
        assert isinstance(strategy, IosSimulatorStrategy)


class TestCommands:
    def test_android_with_device(self):
        cmd = AndroidLogcatStrategy().build_command("emulator-5554")
        assert cmd == "adb -s emulator-5554 logcat -v time"

    def test_android_default_device(self):
        assert AndroidLogcatStrategy().build_command(None) == "adb logcat -v time"

    def test_android_quotes_device_id(self):
        cmd = AndroidLogcatStrategy().build_command("dev; rm -rf /")
        assert cmd == "adb -s 'dev; rm -rf /' logcat -v time"

    def test_simulator_booted_fallback(self):
        cmd = IosSimulatorStrategy().build_command(None)
        assert cmd == [
            "xcrun", "simctl", "spawn", "booted", "log", "stream", "--level", "debug"
        ]

    def test_simulator_display_command(self):
        display = IosSimulatorStrategy().display_command("ABC-123")
        assert display == "xcrun simctl spawn ABC-123 log stream --level debug"

    def test_device_commands(self):
        assert IosDeviceStrategy().build_command("a1b2") == ["idevicesyslog", "-u", "a1b2"]
        assert IosDeviceStrategy().build_command(None) == ["idevicesyslog"]


class TestStderrFiltering:
    def test_android_forwards_everything(self):
        assert AndroidLogcatStrategy().forward_stderr("- waiting for device -")

    def test_ios_forwards_only_errors(self):
        strategy = IosDeviceStrategy()
        assert strategy.forward_stderr("ERROR: Could not connect to lockdownd")
        assert not strategy.forward_stderr("[connected:a1b2]")


class TestFailureHints:
    def test_android_hint_mentions_exit_code(self):
        hint = AndroidLogcatStrategy().failure_hint(1)
        assert "exit code: 1" in hint
        assert "adb devices" in hint

    def test_simulator_hint(self):
        assert "simulator is running" in IosSimulatorStrategy().failure_hint(1)

    def test_device_hint(self):
        assert "libimobiledevice" in IosDeviceStrategy().failure_hint(1)
