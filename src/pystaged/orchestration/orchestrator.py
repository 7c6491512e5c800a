# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""High level orchestration: configuration, staged files, dispatch."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..config.models import RunSettings
from ..config.sources import LoadedConfig, load_config
from ..core.logging import ConsoleLogger
from ..core.runtime.process import CommandRunner
from ..discovery.git import StagedFileLocator
from ..errors import EmptyStagedSet, ExitCode
from ..execution.dispatcher import DispatchReport, Dispatcher
from ..patterns import PatternSet

ConfigLoaderFn = Callable[..., LoadedConfig]


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Final state of one orchestrated run."""

    exit_code: int
    staged: tuple[Path, ...] = ()
    report: DispatchReport | None = None
    config_source: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS


class Orchestrator:
    """Wire configuration, staged file discovery, and dispatch together."""

    def __init__(
        self,
        settings: RunSettings,
        *,
        logger: ConsoleLogger,
        locator: StagedFileLocator | None = None,
        runner: CommandRunner | None = None,
        config_loader: ConfigLoaderFn | None = None,
    ) -> None:
        """Create an orchestrator.

        Args:
            settings: Validated run settings.
            logger: Logging handle shared with the dispatcher.
            locator: Staged file locator; defaults to one running git.
            runner: Process runner forwarded to the dispatcher.
            config_loader: Callable returning the rule mapping; defaults to
                :func:`load_config`.
        """

        self._settings = settings
        self._logger = logger
        self._locator = locator or StagedFileLocator()
        self._runner = runner
        self._config_loader: ConfigLoaderFn = config_loader or load_config

    def run(self) -> RunOutcome:
        """Execute the full pipeline.

        Returns:
            RunOutcome: Exit status and dispatch report.

        Raises:
            ConfigError: If configuration is missing or malformed.
            NotAGitRepository: If the working directory is not a work tree.
            VcsQueryError: If the index cannot be queried.
            EmptyStagedSet: If nothing is staged and quiet mode is off.
        """

        settings = self._settings
        self._logger.debug(
            f"settings cwd={settings.cwd} jobs={settings.jobs} quiet={settings.quiet} timeout={settings.timeout}",
        )
        loaded = self._config_loader(settings.cwd, config_path=settings.config_path)
        self._logger.debug(f"config source={loaded.source.describe()!r}")
        pattern_set = PatternSet.compile(loaded.rules)
        self._logger.debug(f"config rules={len(pattern_set)}")

        repo = self._locator.open(settings.cwd)
        self._logger.debug(f"repository root={repo.root}")
        staged = self._locator.staged_files(repo)
        self._logger.debug(f"staged count={len(staged)} files={[str(path) for path in staged]}")
        covered = pattern_set.matching_files(staged, root=repo.root)
        self._logger.debug(f"covered count={len(covered)}")

        dispatcher = Dispatcher(
            runner=self._runner,
            logger=self._logger,
            jobs=settings.jobs,
            timeout=settings.timeout,
        )
        try:
            report = dispatcher.run(pattern_set, staged, settings.cwd, root=repo.root)
        except EmptyStagedSet:
            if not settings.quiet:
                raise
            self._logger.debug("staged count=0 quiet=True")
            return RunOutcome(exit_code=int(ExitCode.SUCCESS), config_source=loaded.source.describe())

        return RunOutcome(
            exit_code=report.exit_code,
            staged=staged,
            report=report,
            config_source=loaded.source.describe(),
        )


__all__ = ["ConfigLoaderFn", "Orchestrator", "RunOutcome"]
