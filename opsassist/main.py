"""
Main application entry point - HTTP interface with graceful shutdown handling.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
from typing import Any

from opsassist.api_server import run_api_server
from opsassist.assistants import build_assistants
from opsassist.chat.logging_utils import set_module_features
from opsassist.clients import LLMClient
from opsassist.config import Configuration
from opsassist.domain import (
    InMemoryShiftService,
    InMemoryStaffService,
    InMemoryTableAllocationService,
)

LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# config module name -> logger hierarchies it controls
MODULE_LOGGERS = {
    "chat": ["opsassist.chat", "opsassist.tools", "opsassist.assistants"],
    "history": ["opsassist.history"],
    "clients": ["opsassist.clients"],
    "api": ["opsassist.api_server", "uvicorn"],
}


def configure_logging(logging_config: dict[str, Any]) -> None:
    """
    Apply the ``logging`` config section.

    Sets the root level, a level per module hierarchy (children inherit from
    their parent logger) and registers each module's feature flags for the
    runtime checks in opsassist.chat.logging_utils.
    """
    global_level = logging_config.get("level", "WARNING")
    logging.basicConfig(
        level=LEVEL_MAP.get(global_level, logging.WARNING),
        format=logging_config.get("format", "%(asctime)s - %(levelname)s - %(message)s"),
    )
    logging.getLogger().setLevel(LEVEL_MAP.get(global_level, logging.WARNING))

    for module_name, module_config in logging_config.get("modules", {}).items():
        if not isinstance(module_config, dict):
            continue

        level_value = LEVEL_MAP.get(module_config.get("level", global_level), logging.WARNING)
        for logger_name in MODULE_LOGGERS.get(module_name, []):
            logging.getLogger(logger_name).setLevel(level_value)

        set_module_features(module_name, module_config.get("enable_features", {}))


async def main() -> None:
    """Main entry point - HTTP interface with graceful shutdown handling."""
    config = Configuration()
    configure_logging(config.get_logging_config())

    staff_service = InMemoryStaffService()
    shift_service = InMemoryShiftService(staff_service)
    allocation_service = InMemoryTableAllocationService(shift_service, staff_service)

    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        logging.info("Received shutdown signal, initiating graceful shutdown...")
        shutdown_event.set()

    if sys.platform != "win32":
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, signal_handler)

    async with LLMClient(config) as llm_client:
        assistants = build_assistants(
            llm_client, config, staff_service, shift_service, allocation_service
        )
        try:
            server_task = asyncio.create_task(run_api_server(assistants, config))

            # Wait for either server completion or shutdown signal
            done, pending = await asyncio.wait(
                [server_task, asyncio.create_task(shutdown_event.wait())],
                return_when=asyncio.FIRST_COMPLETED,
            )

            for task in pending:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

            for task in done:
                if task == server_task:
                    exception = task.exception()
                    if exception is not None:
                        raise exception

        except Exception as e:
            logging.error(f"Application error: {e}")
            raise
        finally:
            for controller in assistants.values():
                await controller.store.close()
            logging.info("Application shutdown complete")


def cli_main() -> None:
    """Synchronous CLI entrypoint that runs the async main."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
