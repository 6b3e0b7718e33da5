"""Collaborators shared by every workflow."""

from pathlib import Path
from typing import Optional, Union

from .git import GitRepository
from .shell import CommandRunner
from ..llm import LLMProvider, create_provider
from ..llm.generator import ContentGenerator
from ..models.types import Settings
from ..tracker.linear import LinearClient
from ..ui.prompts import Prompter
from ..utils.config import ConfigManager
from ..utils.errors import LLMError
from ..utils.logger import Logger


class FlowContext:
    """Wires the shell runner, prompts, settings, AI generator and issue tracker.

    Built once at the CLI boundary and handed to each workflow, so tests can
    pass fakes for any collaborator.
    """

    def __init__(
        self,
        runner: CommandRunner,
        prompter: Prompter,
        config: ConfigManager,
        provider: Optional[LLMProvider] = None,
        tracker: Optional[LinearClient] = None
    ):
        self.runner = runner
        self.prompter = prompter
        self.config = config
        self.git = GitRepository(runner)
        self.settings: Settings = config.get_config()
        self.generator: Optional[ContentGenerator] = (
            ContentGenerator(provider, runner) if provider else None
        )
        self._tracker = tracker

    @classmethod
    def create(
        cls,
        repo_path: Union[str, Path] = ".",
        config: Optional[ConfigManager] = None,
        provider_name: str = "gemini"
    ) -> 'FlowContext':
        """Build a context for a real terminal session."""
        config = config or ConfigManager()
        settings = config.get_config()

        provider = None
        if settings.googleAiKey or provider_name == "mock":
            try:
                provider = create_provider(provider_name, api_key=settings.googleAiKey)
            except LLMError as e:
                Logger.warning(f"AI generation unavailable: {e}")

        ctx = cls(CommandRunner(cwd=Path(repo_path).absolute()), Prompter(), config, provider)
        Logger.debug(f"FlowContext initialized for {Path(repo_path).absolute()}")
        return ctx

    @property
    def linear_enabled(self) -> bool:
        return self.settings.linearEnabled is not False

    @property
    def tracker(self) -> Optional[LinearClient]:
        """Linear client when the integration is enabled and a key is set."""
        if not self.linear_enabled or not self.settings.linearApiKey:
            return None
        if self._tracker is None:
            self._tracker = LinearClient(self.settings.linearApiKey)
        return self._tracker

    def reload_settings(self) -> Settings:
        """Re-read settings after they were edited, enabling AI once a key appears."""
        self.settings = self.config.get_config()
        self._tracker = None
        if self.generator is None and self.settings.googleAiKey:
            try:
                provider = create_provider("gemini", api_key=self.settings.googleAiKey)
                self.generator = ContentGenerator(provider, self.runner)
            except LLMError as e:
                Logger.warning(f"AI generation unavailable: {e}")
        return self.settings
