#!/usr/bin/env python3
"""Main entry point for the search gateway."""

import sys

import uvicorn
from dotenv import load_dotenv
from pydantic import ValidationError

# Must run before gateway.config builds its settings instance
load_dotenv()

from gateway.config import get_settings, validate_startup_config
from gateway.observability import configure_logging


def main():
    """Main entry point."""
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"❌ Failed to start gateway: {e}")
        sys.exit(1)

    configure_logging(level=settings.log_level, format_type=settings.log_format, log_file=settings.log_file)

    try:
        validate_startup_config()
    except RuntimeError as e:
        print(f"❌ Failed to start gateway: {e}")
        sys.exit(1)

    print(f"🚀 Starting {settings.service_name} on {settings.host}:{settings.port} (patch {settings.patch})")

    uvicorn.run(
        "gateway.web.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
