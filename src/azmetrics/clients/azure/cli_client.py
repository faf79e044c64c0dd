# src/azmetrics/clients/azure/cli_client.py
"""
Azure CLI runner shared by the resource and monitor clients.

Every az invocation goes through `AzureCliClient.run`, which executes the
tool without a shell, captures stdout/stderr and turns a non-zero exit into
ExternalInvocationError. `run_json` adds JSON output parsing.
"""

import asyncio
import json
import os
import shutil
from typing import Any, Dict, List, Optional, Sequence
import structlog

from azmetrics.core.base_client import BaseClient
from azmetrics.core.exceptions import (
    ConfigurationException,
    ExternalInvocationError,
    MalformedResponseError,
    MetricsCollectorException,
)

logger = structlog.get_logger(__name__)


def clean_env() -> Dict[str, str]:
    """Strip PAGER (breaks az output capture) and return env copy."""
    env = os.environ.copy()
    env.pop("PAGER", None)
    return env


class AzureCliClient(BaseClient):
    """Runs az commands as subprocesses."""

    def __init__(self, cli_path: str = "az", subscription_id: Optional[str] = None,
                 timeout_seconds: Optional[float] = None, config: Optional[Dict[str, Any]] = None):
        super().__init__(config, "AzureCliClient")
        self.cli_path = cli_path
        self.subscription_id = subscription_id
        self.timeout_seconds = timeout_seconds
        self._executable: Optional[str] = None

    async def connect(self) -> None:
        """Resolve the az executable on PATH."""
        executable = shutil.which(self.cli_path)
        if not executable:
            raise ConfigurationException(
                f"Azure CLI '{self.cli_path}' not found on PATH",
                {"cli_path": self.cli_path}
            )
        self._executable = executable
        self._connected = True
        self.logger.debug("Azure CLI resolved", executable=executable)

    async def health_check(self) -> bool:
        """Check that `az version` answers."""
        try:
            await self.run_json(["version"], scoped=False)
            return True
        except MetricsCollectorException as e:
            self.logger.warning("Azure CLI health check failed", error=str(e))
            return False

    def build_command(self, args: Sequence[str], scoped: bool = True) -> List[str]:
        command = [self._executable or self.cli_path, *args]
        if scoped and self.subscription_id:
            command.extend(["--subscription", self.subscription_id])
        return command

    async def run(self, args: Sequence[str], scoped: bool = True) -> str:
        """Run one az command and return its stdout."""
        if not self._connected:
            await self.connect()

        command = self.build_command(args, scoped)
        display = [self.cli_path, *command[1:]]

        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=clean_env(),
            )
        except OSError as e:
            raise ExternalInvocationError(display, -1, "", str(e))

        try:
            raw_stdout, raw_stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            self._kill(proc)
            await proc.wait()
            self.logger.warning("Command timed out", cmd=" ".join(display), timeout=self.timeout_seconds)
            raise ExternalInvocationError(display, -1, "", f"Command timed out after {self.timeout_seconds}s")
        except asyncio.CancelledError:
            self._kill(proc)
            await asyncio.shield(proc.wait())
            raise

        stdout = raw_stdout.decode("utf-8", errors="replace").strip()
        stderr = raw_stderr.decode("utf-8", errors="replace").strip()

        self.logger.debug(
            f"[AZ] cmd={' '.join(display)!r} rc={proc.returncode} "
            f"stdout={len(stdout)}B stderr={len(stderr)}B"
        )

        if proc.returncode != 0:
            raise ExternalInvocationError(display, proc.returncode, stdout, stderr)

        return stdout

    async def run_json(self, args: Sequence[str], scoped: bool = True) -> Any:
        """Run one az command with JSON output and parse it."""
        json_args = [*args, "--output", "json"]
        stdout = await self.run(json_args, scoped)

        if not stdout:
            raise MalformedResponseError([self.cli_path, *json_args], "empty output")
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                [self.cli_path, *json_args], f"invalid JSON ({e.msg})",
                {"stdout": stdout[:400]}
            )

    @staticmethod
    def _kill(proc) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
