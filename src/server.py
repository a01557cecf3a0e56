"""Protean Engine runner for the logistics domain.

Starts an Engine that processes events asynchronously when the domain is
configured for async event processing (projectors for the status history and
user lookup then run here instead of inside the unit of work).

Usage:
    python src/server.py
    python src/server.py --test-mode   # Drain pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


async def run(test_mode: bool):
    from logistics.domain import logistics

    logistics.init()
    engine = Engine(logistics, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Fleetdesk Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and stop",
    )
    args = parser.parse_args()

    asyncio.run(run(args.test_mode))


if __name__ == "__main__":
    main()
