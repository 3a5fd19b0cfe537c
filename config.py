"""
Central configuration for the back-office document service.

All paths and branding defaults are defined here.
Override via environment variables or by passing a Config instance directly.

Settings priority (highest wins):
  1. Environment variables
  2. config/render_settings.json  (admin-editable, persisted)
  3. Hardcoded defaults in this file

The rendering engine itself reads none of this: everything it needs arrives
per call through models.RenderOptions.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# Project root (directory containing this file)
PROJECT_ROOT = Path(__file__).parent

DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "output"
DEFAULT_DB_PATH    = DEFAULT_OUTPUT_DIR / "backoffice.db"


@dataclass
class Config:
    # --- Storage ---
    db_path: Path = field(
        default_factory=lambda: Path(os.getenv("DB_PATH", str(DEFAULT_DB_PATH)))
    )
    output_dir: Path = field(
        default_factory=lambda: Path(os.getenv("OUTPUT_DIR", str(DEFAULT_OUTPUT_DIR)))
    )

    # --- Branding ---
    # Used when the business profile has no colour of its own.
    primary_color: str = field(
        default_factory=lambda: os.getenv("BRAND_COLOR", "#1e40af")
    )

    # --- Export ---
    default_format: str = field(
        default_factory=lambda: os.getenv("DEFAULT_FORMAT", "pdf")
    )   # pdf | word

    def __post_init__(self) -> None:
        """Overlay runtime-tunable settings from render_settings.json if present."""
        config_dir = Path(os.getenv("CONFIG_DIR", str(PROJECT_ROOT / "config")))
        settings_file = config_dir / "render_settings.json"
        if not settings_file.exists():
            return
        _type_map: dict[str, type] = {
            "primary_color":  str,
            "default_format": str,
            "output_dir":     Path,
        }
        try:
            with open(settings_file, encoding="utf-8") as f:
                overrides = {k: v for k, v in json.load(f).items() if not k.startswith("_")}
            for key, val in overrides.items():
                if key in _type_map and hasattr(self, key):
                    setattr(self, key, _type_map[key](val))
        except Exception as exc:
            logger.warning("Failed to load render_settings.json: %s", exc)

    def ensure_output_dir(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
