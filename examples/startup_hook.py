"""Gate application startup on server reachability."""

import asyncio
import logging
import sys

from netprobe.application.connectivity_service import ConnectivityChecker
from netprobe.domain.config import AppConfig, EndpointConfig

logging.basicConfig(level=logging.INFO)


async def main() -> int:
    checker = ConnectivityChecker.from_config(
        AppConfig(endpoint=EndpointConfig(host="example.com", port=443))
    )
    if await checker.check_connectivity():
        print("Server reachable, starting up")
        return 0
    print("Server unreachable, starting in offline mode")
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
