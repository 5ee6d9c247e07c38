"""Documentation providers backed by the installed man and tldr tools."""

from __future__ import annotations

import asyncio
import os
import re
from typing import Optional, Protocol

from .constants import MAN_EXIT_NOT_FOUND, MAN_PROGRAM, TLDR_PROGRAM
from .errors import NotFound, ProviderUnavailable
from .models import DocumentKey, SourceKind

_MAN_NOT_FOUND_RE = re.compile(r"no manual entry|no entry for", re.IGNORECASE)
_TLDR_NOT_FOUND_RE = re.compile(
    r"not found|doesn't exist|does not exist|not available|no page",
    re.IGNORECASE,
)


class DocumentProvider(Protocol):
    """Supplies raw documentation text and command listings."""

    async def fetch(self, key: DocumentKey) -> str:
        """Return raw text for key.

        Raises:
            NotFound: No documentation exists for key
            ProviderUnavailable: The tool is missing or failed
        """
        ...

    async def list_man_pages(self) -> str:
        """Return the raw ``man -k .`` listing."""
        ...

    async def list_tldr_pages(self) -> str:
        """Return the raw ``tldr --list`` listing."""
        ...


async def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


class CommandResult:
    __slots__ = ("returncode", "stdout", "stderr")

    def __init__(self, returncode: int, stdout: str, stderr: str) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class SubprocessProvider:
    """Runs ``man``/``tldr`` as child processes without blocking the loop."""

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        man_width: Optional[int] = None,
        man_program: str = MAN_PROGRAM,
        tldr_program: str = TLDR_PROGRAM,
    ) -> None:
        self.timeout = timeout
        self.man_width = man_width
        self.man_program = man_program
        self.tldr_program = tldr_program

    def _man_env(self) -> dict[str, str]:
        env = dict(os.environ)
        env["PAGER"] = "cat"
        env["MANPAGER"] = "cat"
        env["MAN_KEEP_FORMATTING"] = "1"
        if self.man_width is not None:
            env["MANWIDTH"] = str(self.man_width)
        return env

    async def _run(
        self, key: DocumentKey, argv: list[str], env: Optional[dict[str, str]] = None
    ) -> CommandResult:
        program = argv[0]
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except FileNotFoundError as e:
            raise ProviderUnavailable(key, f"{program} is not installed") from e
        except OSError as e:
            raise ProviderUnavailable(key, f"Cannot run {program}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            await _kill(process)
            raise ProviderUnavailable(
                key, f"{program} timed out after {self.timeout}s"
            ) from e
        except asyncio.CancelledError:
            await _kill(process)
            raise

        return CommandResult(
            process.returncode if process.returncode is not None else -1,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def fetch(self, key: DocumentKey) -> str:
        if key.source is SourceKind.TLDR:
            return await self._fetch_tldr(key)
        return await self._fetch_man(key)

    async def _fetch_man(self, key: DocumentKey) -> str:
        argv = [self.man_program, str(key.section), key.command]
        result = await self._run(key, argv, env=self._man_env())
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout
        if result.returncode == MAN_EXIT_NOT_FOUND or _MAN_NOT_FOUND_RE.search(
            result.stderr
        ):
            raise NotFound(key, f"No manual entry for {key.describe()}")
        if result.returncode == 0:
            raise NotFound(key, f"Empty manual page for {key.describe()}")
        raise ProviderUnavailable(
            key, _failure_message(self.man_program, result)
        )

    async def _fetch_tldr(self, key: DocumentKey) -> str:
        result = await self._run(key, [self.tldr_program, key.command])
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout
        if _TLDR_NOT_FOUND_RE.search(result.stderr) or _TLDR_NOT_FOUND_RE.search(
            result.stdout
        ):
            raise NotFound(key, f"No tldr page for {key.command}")
        if result.returncode == 0:
            raise NotFound(key, f"Empty tldr page for {key.command}")
        raise ProviderUnavailable(
            key, _failure_message(self.tldr_program, result)
        )

    async def list_man_pages(self) -> str:
        key = DocumentKey("", 0, SourceKind.MAN)
        result = await self._run(
            key, [self.man_program, "-k", "."], env=self._man_env()
        )
        if result.returncode != 0:
            raise ProviderUnavailable(key, _failure_message(self.man_program, result))
        return result.stdout

    async def list_tldr_pages(self) -> str:
        key = DocumentKey("", 0, SourceKind.TLDR)
        result = await self._run(key, [self.tldr_program, "--list"])
        if result.returncode != 0:
            raise ProviderUnavailable(key, _failure_message(self.tldr_program, result))
        return result.stdout


def _failure_message(program: str, result: CommandResult) -> str:
    detail = result.stderr.strip().splitlines()
    suffix = f": {detail[0]}" if detail else ""
    return f"{program} exited with status {result.returncode}{suffix}"
