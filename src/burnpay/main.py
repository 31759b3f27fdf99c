from __future__ import annotations

import logging
import sys

import uvicorn

from .env import get_settings


def main() -> None:
    """Main entry point for the BurnPay API."""

    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"Starting {settings.app_name} v{settings.app_version}")
    print(
        f"Burn: {settings.burn_percentage * 100}% to {settings.burn_address}, "
        f"price sources: {', '.join(settings.price_sources)}"
    )
    print(f"API will be available at: http://{settings.api_host}:{settings.api_port}")
    print(f"API Documentation: http://{settings.api_host}:{settings.api_port}/docs")

    # The ledger lives in process memory, so a single worker owns all channels.
    uvicorn.run(
        "burnpay.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        workers=1,
        loop="asyncio" if sys.platform == "win32" else "uvloop",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
