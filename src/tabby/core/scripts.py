"""Scripts — named shell commands and callables run from hooks or the CLI."""

from __future__ import annotations

import asyncio
import inspect
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from tabby._errors import ScriptError

if TYPE_CHECKING:
    from tabby._types import ScriptAction


@dataclass(frozen=True, slots=True)
class ScriptOptions:
    """Options for running scripts.

    Attributes:
        cwd: Working directory of shell commands.
        quiet: Do not echo commands.

    """

    cwd: Path | None = None
    quiet: bool = False


class Scripts:
    """Registry of named scripts.

    A script is a sequence of actions run one after another; it stops at the
    first failing action. An action is:

    - the name of another script,
    - a shell command,
    - a callable (sync or async) — returning ``False`` marks a failure,
    - a list of actions, run concurrently.

    Args:
        options: Default run options.

    """

    def __init__(self, options: ScriptOptions | None = None) -> None:
        self._options = options or ScriptOptions()
        self._scripts: dict[str, tuple[ScriptAction, ...]] = {}

    def set(self, name: str, *actions: ScriptAction) -> None:
        self._scripts[name] = actions

    def __contains__(self, name: object) -> bool:
        return name in self._scripts

    async def run(self, options: ScriptOptions | None, name: str) -> bool:
        """Run the script *name*.

        Returns:
            True if every action succeeded.

        Raises:
            ScriptError: No script is registered under *name*.

        """
        if name not in self._scripts:
            msg = f"Unknown script: {name!r}"
            raise ScriptError(msg)
        return await self._run_actions(options or self._options, self._scripts[name], (name,))

    async def _run_actions(
        self,
        options: ScriptOptions,
        actions: tuple[ScriptAction, ...],
        stack: tuple[str, ...],
    ) -> bool:
        for action in actions:
            if not await self._run_action(options, action, stack):
                return False
        return True

    async def _run_action(self, options: ScriptOptions, action: ScriptAction, stack: tuple[str, ...]) -> bool:
        if isinstance(action, list):
            results = await asyncio.gather(
                *(self._run_action(options, item, stack) for item in action)
            )
            return all(results)

        if isinstance(action, str):
            if action in self._scripts:
                if action in stack:
                    msg = f"Recursive script: {' -> '.join([*stack, action])}"
                    raise ScriptError(msg)
                return await self._run_actions(options, self._scripts[action], (*stack, action))
            return await self._run_shell(options, action)

        result = action()
        if inspect.isawaitable(result):
            result = await result
        return result is not False

    async def _run_shell(self, options: ScriptOptions, command: str) -> bool:
        if not options.quiet:
            print(f"  ⚡ {command}", file=sys.stderr)
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(options.cwd) if options.cwd is not None else None,
        )
        return await process.wait() == 0
