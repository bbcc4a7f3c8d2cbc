"""Editor configuration with JSON persistence and environment overrides."""

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from ..errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
    """Tunable timings and collaborator endpoints for the editor."""

    # Inline text editing
    debounce_ms: int = 300
    toolbar_offset: int = 50  # Toolbar sits this far above the selection
    toolbar_min_top: int = 8  # Never render above the viewport top

    # Drag activation, high enough that a click is never a drag
    drag_activation_distance: int = 8
    drag_activation_delay_ms: int = 150

    # Collaborators
    persistence_url: Optional[str] = None
    upload_url: Optional[str] = None
    request_timeout: int = 30
    max_retries: int = 3

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


ENV_OVERRIDES = {
    "FUNNEL_STUDIO_DEBOUNCE_MS": ("debounce_ms", int),
    "FUNNEL_STUDIO_PERSISTENCE_URL": ("persistence_url", str),
    "FUNNEL_STUDIO_UPLOAD_URL": ("upload_url", str),
}


class EditorConfigManager:
    """Load, persist and override the editor configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager."""
        self.config_path = config_path or Path.home() / ".funnel-studio" / "editor_config.json"
        self.config = self._load_config()
        self._apply_env_overrides()

    def _load_config(self) -> EditorConfig:
        """Load configuration from file."""
        defaults = EditorConfig()
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                known = {k: v for k, v in data.items() if hasattr(defaults, k)}
                return EditorConfig(**known)
            except (OSError, ValueError, TypeError) as e:
                logger.error(f"Error loading editor config: {e}")

        return defaults

    def _apply_env_overrides(self):
        """Apply FUNNEL_STUDIO_* environment variables on top of file values."""
        for env_name, (attr, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw == "":
                continue
            try:
                setattr(self.config, attr, cast(raw))
            except ValueError as e:
                raise ConfigError(f"Invalid value for {env_name}: {raw!r}") from e

    def save_config(self):
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(asdict(self.config), f, indent=2)

    def update(self, **values):
        """Update named settings and persist them."""
        for key, value in values.items():
            if not hasattr(self.config, key):
                raise ConfigError(f"Unknown editor setting: {key}")
            setattr(self.config, key, value)
        self.save_config()
