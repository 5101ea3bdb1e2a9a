"""Platform-specific capture tool strategies."""

import logging
import shlex
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum

from .models import Platform

logger = logging.getLogger(__name__)


class IosTarget(str, Enum):
    """Kind of iOS target a device id refers to."""

    SIMULATOR = "simulator"
    DEVICE = "device"


def classify_ios_device(device_id: str | None) -> IosTarget:
    """Guess whether an iOS id names a simulator or a physical device.

    Heuristic: simulator UDIDs are hyphenated UUIDs, physical UDIDs are
    shorter. Not guaranteed correct for every UDID format.
    """
    if device_id and ("-" in device_id or len(device_id) > 25):
        return IosTarget.SIMULATOR
    return IosTarget.DEVICE


DeviceClassifier = Callable[[str | None], IosTarget]


class CaptureStrategy(ABC):
    """How to run one capture tool and interpret its output."""

    platform: Platform
    tool_name: str = ""
    use_shell: bool = False

    @abstractmethod
    def build_command(self, device_id: str | None) -> list[str] | str:
        """Command to spawn; a string when ``use_shell`` is set."""

    @abstractmethod
    def failure_hint(self, exit_code: int | None) -> str:
        """Remediation message for a capture process that failed to start."""

    def display_command(self, device_id: str | None) -> str:
        command = self.build_command(device_id)
        if isinstance(command, str):
            return command
        return " ".join(command)

    def forward_stderr(self, line: str) -> bool:
        """Whether a stderr line should reach diagnostics."""
        return True


class AndroidLogcatStrategy(CaptureStrategy):
    platform = Platform.ANDROID
    tool_name = "Android (adb logcat)"
    use_shell = True

    def build_command(self, device_id: str | None) -> str:
        if device_id:
            return f"adb -s {shlex.quote(device_id)} logcat -v time"
        return "adb logcat -v time"

    def failure_hint(self, exit_code: int | None) -> str:
        return (
            f"Failed to start adb logcat (exit code: {exit_code}). "
            "Make sure adb is installed and device is connected. "
            "Try running 'adb devices' to verify."
        )


class IosSimulatorStrategy(CaptureStrategy):
    platform = Platform.IOS
    tool_name = "iOS Simulator (simctl)"

    def build_command(self, device_id: str | None) -> list[str]:
        target = device_id or "booted"
        return ["xcrun", "simctl", "spawn", target, "log", "stream", "--level", "debug"]

    def failure_hint(self, exit_code: int | None) -> str:
        return (
            "Failed to start iOS simulator logs. "
            "Make sure Xcode is installed and simulator is running."
        )

    def forward_stderr(self, line: str) -> bool:
        return "error" in line.lower()


class IosDeviceStrategy(CaptureStrategy):
    platform = Platform.IOS
    tool_name = "iOS Device (idevicesyslog)"

    def build_command(self, device_id: str | None) -> list[str]:
        if device_id:
            return ["idevicesyslog", "-u", device_id]
        return ["idevicesyslog"]

    def failure_hint(self, exit_code: int | None) -> str:
        return (
            "Failed to start iOS device logs. Make sure 'idevicesyslog' is "
            "installed (brew install libimobiledevice) and device is connected."
        )

    def forward_stderr(self, line: str) -> bool:
        return "error" in line.lower()


def select_strategy(
    platform: Platform,
    device_id: str | None,
    classifier: DeviceClassifier = classify_ios_device,
) -> CaptureStrategy:
    """Pick the capture strategy for a platform and device id."""
    if platform == Platform.ANDROID:
        return AndroidLogcatStrategy()
    target = classifier(device_id)
    logger.debug("Classified iOS id %r as %s", device_id, target.value)
    if target == IosTarget.SIMULATOR:
        return IosSimulatorStrategy()
    return IosDeviceStrategy()
