#!/usr/bin/env python3
import asyncio, sys
from config.logging_config import configure
from config.app_config import settings
from sensor_gateway.core.exceptions import GatewayError
from sensor_gateway.orchestration import GatewayLifecycle

async def async_main() -> int:
    configure()
    lifecycle = GatewayLifecycle.from_settings(settings)
    lifecycle.install_signal_handlers()
    try:
        if not await lifecycle.startup():
            return 1
        await lifecycle.run_until_stopped()
    finally:
        await lifecycle.shutdown()
    return 1 if lifecycle.failure else 0

def run():
    try:
        sys.exit(asyncio.run(async_main()))
    except GatewayError as e:
        sys.exit(f"fatal: {e}")
    except KeyboardInterrupt:
        sys.exit("🌙  graceful shutdown")

if __name__ == "__main__":
    run()
