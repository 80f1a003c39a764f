"""Template renderer capability backed by the helm CLI."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from kubepolicy.config import RendererConfig
from kubepolicy.errors import RenderError

from .process import CommandTimeout, run_command

logger = logging.getLogger(__name__)


class TemplateRenderer(ABC):
    """Capability that turns a template document into a plain manifest."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Renderer name for log and report lines."""
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Cheap check whether rendering can be attempted."""
        pass

    @abstractmethod
    async def render(self, document_path: Path) -> Path:
        """Render the template and return the path of the rendered document.

        Raises:
            RenderError: If rendering fails
        """
        pass


class UnavailableRenderer(TemplateRenderer):
    """Renderer used when template rendering is switched off."""

    @property
    def name(self) -> str:
        return "unavailable"

    async def is_available(self) -> bool:
        return False

    async def render(self, document_path: Path) -> Path:
        raise RenderError("No template renderer is available", str(document_path))


class HelmRenderer(TemplateRenderer):
    """Renders templates with ``helm template``."""

    def __init__(self, config: RendererConfig | None = None):
        self.config = config or RendererConfig()

    @property
    def name(self) -> str:
        return "helm"

    def rendered_path(self, document_path: Path) -> Path:
        """Deterministic location of the rendered manifest for a document."""
        return self.output_dir(document_path) / self.config.rendered_file

    def output_dir(self, document_path: Path) -> Path:
        return Path(document_path).parent / self.config.output_dir

    def build_command(self, document_path: Path) -> list[str]:
        document_path = Path(document_path)
        values_file = document_path.parent / self.config.values_file
        return [
            self.config.command, "template", str(document_path),
            "--values", str(values_file),
            "--output-dir", str(self.output_dir(document_path)),
        ]

    async def is_available(self) -> bool:
        try:
            result = await run_command(
                [self.config.command, "version"], timeout=self.config.timeout_seconds
            )
        except (OSError, CommandTimeout) as e:
            logger.info(f"{self.config.command} is not available: {e}")
            return False

        if result.returncode != 0 or "not recognized" in result.stderr:
            logger.info(f"{self.config.command} version check failed: {result.diagnostic}")
            return False

        logger.debug(f"{self.config.command} available: {result.stdout.strip()}")
        return True

    async def render(self, document_path: Path) -> Path:
        command = self.build_command(document_path)
        try:
            result = await run_command(command, timeout=self.config.timeout_seconds)
        except OSError as e:
            raise RenderError(f"Failed to run {self.config.command}", str(e))
        except CommandTimeout as e:
            raise RenderError(f"Rendering {Path(document_path).name} timed out", str(e))

        if result.failed:
            raise RenderError(f"{self.config.command} template failed", result.diagnostic)

        rendered = self.rendered_path(document_path)
        logger.info(f"Rendered template {document_path} to {rendered}")
        return rendered


def create_renderer(config: RendererConfig) -> TemplateRenderer:
    """Build the renderer capability for a configuration."""
    if not config.enabled:
        return UnavailableRenderer()
    return HelmRenderer(config)
