"""Best-effort lookup of the device behind an automation session.

Uses urllib.request (no external dependencies).
"""

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request

logger = logging.getLogger(__name__)

UDID_CAPABILITY = "appium:udid"


class DeviceResolver:
    """Translates a session id to a device identifier via the automation server.

    Queries ``GET {server_url}/session/{session_id}`` and reads
    ``value.capabilities["appium:udid"]``. Failures never propagate; the
    caller falls back to the platform's default device.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

    def resolve(self, server_url: str, session_id: str) -> str | None:
        url = (
            f"{server_url.rstrip('/')}/session/"
            f"{urllib.parse.quote(session_id, safe='')}"
        )
        req = urllib.request.Request(url, headers={"Accept": "application/json"})

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                body = json.loads(response.read())
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            logger.warning("Could not auto-detect device ID from session: %s", e)
            return None
        except ValueError as e:
            logger.warning("Session lookup returned invalid JSON: %s", e)
            return None

        device_id = _extract_udid(body)
        if device_id:
            logger.info("Auto-detected device ID: %s", device_id)
        else:
            logger.info("Session %s does not report a device ID", session_id)
        return device_id


def _extract_udid(body: object) -> str | None:
    if not isinstance(body, dict):
        return None
    value = body.get("value")
    if not isinstance(value, dict):
        return None
    capabilities = value.get("capabilities")
    if not isinstance(capabilities, dict):
        return None
    udid = capabilities.get(UDID_CAPABILITY)
    if isinstance(udid, str) and udid:
        return udid
    return None
