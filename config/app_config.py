"""Centralised application settings (dotenv + env overrides)."""
from __future__ import annotations
import json
import os
from pathlib import Path
from dotenv import load_dotenv

from sensor_gateway.core.exceptions import ConfigurationError

ROOT = Path(__file__).parents[1]
load_dotenv(ROOT / ".env", override=False)

class settings:                            # pylint: disable=too-few-public-methods
    DEVICE_ID                = int(os.getenv("DEVICE_ID", 1234))
    DEVICE_NAME              = os.getenv("DEVICE_NAME", "BACnet IoT Gateway")
    BACNET_ADDRESS           = os.getenv("BACNET_ADDRESS", "10.0.0.232")
    BACNET_SUBNET_PREFIX     = int(os.getenv("BACNET_SUBNET_PREFIX", 24))
    BACNET_PORT              = int(os.getenv("BACNET_PORT", 0xBAC0))
    BRING_UP_RETRIES         = int(os.getenv("BRING_UP_RETRIES", 3))
    PROTOCOL_STACK           = os.getenv("PROTOCOL_STACK", "bacnet_ip")
    VALUE_PROVIDER           = os.getenv("VALUE_PROVIDER", "mock")
    VALUE_PROVIDER_CONFIG    = os.getenv("VALUE_PROVIDER_CONFIG", "")   # JSON object
    SENSOR_CATALOG_FILE      = os.getenv("SENSOR_CATALOG_FILE") or None
    POLL_INTERVAL_SECONDS    = float(os.getenv("POLL_INTERVAL_SECONDS", 120))
    PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", 10))
    LOG_LEVEL                = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def provider_config(cls) -> dict:
        if not cls.VALUE_PROVIDER_CONFIG:
            return {}
        try:
            return json.loads(cls.VALUE_PROVIDER_CONFIG)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"VALUE_PROVIDER_CONFIG is not valid JSON: {e}") from e
