import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from issuegate.baseline import load_baseline_file
from issuegate.engine import PipelineConfig
from issuegate.models import ValidationWarning
from issuegate.policy import FailOn

from .models import GateSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(".issuegate.toml")


class GateConfig:
    """Handles loading and validation of .issuegate.toml configuration"""

    def __init__(self, config_path: Path | None = None):
        self.settings = GateSettings()
        self.warnings: list[ValidationWarning] = []

        if config_path and config_path.exists():
            self._load_from_file(config_path)

    def _load_from_file(self, path: Path):
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            # Fall back to defaults; a broken config must not block the gate
            self._warn(f"Cannot load {path}: {e}; using defaults")
            return

        tool = data.get("tool", {})
        if not isinstance(tool, dict):
            self._warn(f"[tool] in {path} must be a table; using defaults")
            return

        section = tool.get("issuegate", {})
        if not isinstance(section, dict):
            self._warn(f"[tool.issuegate] in {path} must be a table; using defaults")
            return

        unknown = sorted(set(section) - set(GateSettings.model_fields))
        if unknown:
            self._warn(f"Unknown settings ignored: {', '.join(unknown)}")

        self.settings = self._validate(section)

    def _validate(self, section: dict[str, Any]) -> GateSettings:
        try:
            return GateSettings.model_validate(section)
        except ValidationError as e:
            invalid = set()
            for error in e.errors():
                key = error["loc"][0] if error["loc"] else "?"
                invalid.add(key)
                self._warn(f"Invalid value for '{key}': {error['msg']}; using default")
            return GateSettings.model_validate({k: v for k, v in section.items() if k not in invalid})

    def _warn(self, message: str):
        warning = ValidationWarning("config", message)
        logger.warning("%s", warning)
        self.warnings.append(warning)

    def to_pipeline_config(
        self,
        use_baseline: bool = False,
        baseline_file: Path | None = None,
        fail_on: FailOn | None = None,
        fail_threshold: int | None = None,
    ) -> PipelineConfig:
        """Assemble the pipeline's configuration, letting CLI options override the file"""
        settings = self.settings
        baseline = None
        baseline_warnings: list[ValidationWarning] = []

        if use_baseline:
            path = baseline_file or settings.baseline_file
            baseline, baseline_warnings = load_baseline_file(path)

        return PipelineConfig(
            ignore_errors=settings.ignore_errors,
            dont_report=tuple(settings.dont_report),
            fail_on=fail_on or settings.fail_on,
            fail_threshold=settings.fail_threshold if fail_threshold is None else fail_threshold,
            use_baseline=use_baseline,
            baseline=baseline,
            baseline_warnings=tuple(baseline_warnings),
            marker=settings.marker,
            base_path=Path(settings.base_path) if settings.base_path else None,
        )
