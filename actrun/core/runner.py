"""Run command files: decode, execute and collect results."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from actrun.core.decoder import CommandDecoder
from actrun.core.executor import ActionExecutor
from actrun.errors import FatalActionError
from actrun.models.action import ExecutionResult
from actrun.models.command import CommandFile

logger = logging.getLogger("actrun.runner")


@dataclass
class CommandResult:
    """Result of running one command."""

    index: int
    action: str
    status: str  # "passed", "failed", "error"
    duration: float = 0.0
    description: str | None = None
    error: str | None = None
    payload: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "action": self.action,
            "status": self.status,
            "duration": round(self.duration, 3),
            "description": self.description,
            "error": self.error,
            "payload": self.payload,
        }


@dataclass
class RunResult:
    """Result of running a command file."""

    name: str
    status: str  # "passed", "failed", "error"
    duration: float
    commands: list[CommandResult] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "duration": round(self.duration, 3),
            "error": self.error,
            "commands": [c.to_dict() for c in self.commands],
        }


class CommandRunner:
    """Run commands strictly in order on a single event loop."""

    def __init__(
        self,
        decoder: CommandDecoder,
        executor: ActionExecutor,
        timeout: float = 60.0,
        stop_on_failure: bool = True,
    ):
        """Initialize runner.

        Args:
            decoder: Turns command records into actions
            executor: Performs decoded actions
            timeout: Seconds allowed per command, target resolution and scroll loops included
            stop_on_failure: Stop at the first failed command
        """
        self._decoder = decoder
        self._executor = executor
        self._timeout = timeout
        self._stop_on_failure = stop_on_failure

    def run_file(self, command_file: CommandFile) -> RunResult:
        """Run every command of a parsed file."""
        stop_on_failure = command_file.config.stop_on_failure
        if stop_on_failure is not None:
            self._stop_on_failure = stop_on_failure
        return asyncio.run(self.run_commands(command_file.commands, command_file.path or "unknown"))

    async def run_commands(self, commands: list[dict[str, Any]], name: str = "unknown") -> RunResult:
        start = time.time()
        results: list[CommandResult] = []
        status = "passed"
        error = None

        logger.info("Starting run: %s (%d commands)", name, len(commands))

        for index, record in enumerate(commands, 1):
            result = await self.run_command(index, record)
            results.append(result)

            if result.status == "error":
                status = "error"
                error = result.error
                logger.error("Command %d aborted the run: %s", index, result.error)
                break

            if result.status == "failed":
                status = "failed"
                error = error or result.error
                if self._stop_on_failure:
                    logger.debug("Stopping after failed command %d", index)
                    break

        duration = time.time() - start
        logger.info(
            "Run completed: %s - status=%s, duration=%.2fs, commands=%d",
            name, status, duration, len(results),
        )
        return RunResult(name=name, status=status, duration=duration, commands=results, error=error)

    async def run_command(self, index: int, record: dict[str, Any]) -> CommandResult:
        """Decode and execute one command record."""
        start = time.time()
        kind = str(record.get("action", "unknown")) if isinstance(record, dict) else "unknown"
        description = None

        async def decode_and_run() -> ExecutionResult:
            nonlocal description
            # Target resolution polls with blocking sleeps; keep it off the event loop
            action = await asyncio.to_thread(self._decoder.decode, record)
            description = str(action)
            logger.debug("Command %d: %s", index, description)
            return await self._executor.run(action)

        try:
            execution = await asyncio.wait_for(decode_and_run(), self._timeout)

        except FatalActionError as e:
            logger.exception("Command %d: fatal %s", index, type(e).__name__)
            return CommandResult(
                index=index, action=kind, status="error", duration=time.time() - start,
                description=description, error=f"{type(e).__name__}: {e}",
            )

        except asyncio.TimeoutError:
            logger.debug("Command %d: timed out after %.1fs", index, self._timeout)
            return CommandResult(
                index=index, action=kind, status="failed", duration=time.time() - start,
                description=description, error=f"Timed out after {self._timeout:.1f}s",
            )

        except Exception as e:
            # Decode-time rejection (e.g. unresolved target)
            logger.debug("Command %d: rejected: %s", index, e)
            return CommandResult(
                index=index, action=kind, status="failed", duration=time.time() - start,
                description=description, error=str(e),
            )

        elapsed = time.time() - start
        if execution.succeeded:
            logger.debug("Command %d: passed in %.2fs", index, elapsed)
        else:
            logger.debug("Command %d: failed in %.2fs - %s", index, elapsed, execution.error)

        return CommandResult(
            index=index,
            action=kind,
            status="passed" if execution.succeeded else "failed",
            duration=elapsed,
            description=description,
            error=execution.error,
            payload=execution.payload,
        )
