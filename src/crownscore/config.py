"""crownscore configuration loader.

Reads config/default.yaml and exposes typed settings via Pydantic models.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ── Sub-models ──────────────────────────────────────────────────────────────
class PathsConfig(BaseModel):
    input_csv: str = "data/labeled_points.csv"


class SegmentationConfig(BaseModel):
    noise_label: int = -1


class ScoringConfig(BaseModel):
    k_neighbors: int = Field(default=10, ge=1)
    min_points: int = Field(default=5, ge=0)
    min_score: float = 0.5


# ── Root config ─────────────────────────────────────────────────────────────
class PipelineConfig(BaseModel):
    """Full pipeline configuration, loaded from YAML."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


class EnvSettings(BaseSettings):
    """Environment overrides (CROWNSCORE_CONFIG=/path/to/config.yaml)."""

    model_config = SettingsConfigDict(env_prefix="CROWNSCORE_")

    config: Optional[str] = None


_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent  # src/crownscore -> repo root


def load_config(config_path: Optional[str | Path] = None) -> PipelineConfig:
    """Load pipeline config from a YAML file, falling back to defaults."""
    if config_path is None:
        config_path = EnvSettings().config

    if config_path is None:
        config_path = _PROJECT_ROOT / "config" / "default.yaml"
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        return PipelineConfig(**raw)

    return PipelineConfig()
