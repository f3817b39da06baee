"""
vsce Statistics Source

Runs `vsce show <extension> --json` and returns the decoded output.
Supports:
- Configurable command (npx, global install, wrapper scripts)
- Timeouts
- Retries with exponential backoff
"""

import asyncio
from dataclasses import dataclass
import json
from typing import Any, Awaitable, Callable, Iterator, Optional, Sequence, Tuple

import structlog

from vscodestat.exceptions import MalformedSourceOutput, SourceFetchError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy applied around a single fetch"""
    max_attempts: int = 3
    backoff_seconds: float = 1.0
    backoff_multiplier: float = 2.0
    max_backoff_seconds: float = 30.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delays(self) -> Iterator[float]:
        """Delay before each retry; yields max_attempts - 1 values"""
        delay = self.backoff_seconds
        for _ in range(self.max_attempts - 1):
            yield min(delay, self.max_backoff_seconds)
            delay *= self.backoff_multiplier


@dataclass
class CommandResult:
    """Outcome of a finished subprocess"""
    returncode: int
    stdout: str
    stderr: str


class VsceStatSource:
    """
    Fetches the current Marketplace statistics of one extension.

    Example:
        source = VsceStatSource("publisher.extension")
        payload = await source.fetch()
    """

    def __init__(
        self,
        extension_name: str,
        command: Sequence[str] = ("npx", "vsce"),
        retry: Optional[RetryPolicy] = None,
        timeout_seconds: float = 120.0,
        fail_on_stderr: bool = True,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.extension_name = extension_name
        self.command = tuple(command)
        self.retry = retry or RetryPolicy()
        self.timeout_seconds = timeout_seconds
        self.fail_on_stderr = fail_on_stderr
        self._sleep = sleep

    @property
    def args(self) -> Tuple[str, ...]:
        return self.command + ("show", self.extension_name, "--json")

    async def _run_command(self) -> CommandResult:
        """Run vsce once and collect its output"""
        try:
            process = await asyncio.create_subprocess_exec(
                *self.args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SourceFetchError(f"Could not start {self.command[0]}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise SourceFetchError(
                f"vsce did not finish within {self.timeout_seconds}s"
            ) from None

        return CommandResult(
            returncode=process.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    def _check(self, result: CommandResult) -> Any:
        """Validate a finished run and decode its JSON output"""
        if result.returncode != 0:
            raise SourceFetchError(
                f"vsce exited with code {result.returncode}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
        if self.fail_on_stderr and result.stderr.strip():
            raise SourceFetchError(
                "vsce wrote to stderr",
                returncode=result.returncode,
                stderr=result.stderr,
            )
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise MalformedSourceOutput(f"vsce output is not valid JSON: {e}") from e

    async def fetch(self) -> Any:
        """
        Fetch the statistics, retrying failed runs.

        Returns:
            Decoded JSON output of vsce

        Raises:
            SourceFetchError: every attempt failed
            MalformedSourceOutput: vsce succeeded but printed something else than JSON
        """
        delays = self.retry.delays()
        attempt = 0
        while True:
            attempt += 1
            try:
                result = await self._run_command()
                payload = self._check(result)
                logger.debug(
                    "Fetched statistics",
                    extension=self.extension_name,
                    attempt=attempt,
                )
                return payload
            except SourceFetchError as e:
                delay = next(delays, None)
                if delay is None:
                    logger.error(
                        "Statistics fetch failed",
                        extension=self.extension_name,
                        attempts=attempt,
                        error=str(e),
                    )
                    raise
                logger.warning(
                    "Statistics fetch failed, retrying",
                    extension=self.extension_name,
                    attempt=attempt,
                    retry_in_seconds=delay,
                    error=str(e),
                )
                await self._sleep(delay)
