"""
Evaluation configuration.

Supports YAML-based configuration with overrides.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Union
import yaml


@dataclass
class EvaluationConfig:
    """Configuration for the quality pass."""
    metric: Optional[Union[int, str]] = None  # 1/2/3 or a metric name; None = no coloring
    workers: int = 1
    chunk_size: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "metric": self.metric,
            "workers": self.workers,
            "chunk_size": self.chunk_size,
        }


@dataclass
class OutputConfig:
    """Configuration for written results."""
    output_dir: str = "quality_results"
    report_format: str = "json"  # json, yaml
    color_mesh: bool = False
    color_mesh_format: str = "ply"

    def to_dict(self) -> dict:
        return {
            "output_dir": self.output_dir,
            "report_format": self.report_format,
            "color_mesh": self.color_mesh,
            "color_mesh_format": self.color_mesh_format,
        }


@dataclass
class QualityConfig:
    """Full configuration of a quality run over one or more element files."""
    name: str = "quality"
    description: str = ""

    inputs: list[str] = field(default_factory=list)

    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    log_level: str = "WARNING"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputs": self.inputs,
            "evaluation": self.evaluation.to_dict(),
            "output": self.output.to_dict(),
            "log_level": self.log_level,
        }

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def load(cls, path: Union[str, Path]) -> QualityConfig:
        """Load configuration from YAML file."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> QualityConfig:
        """Create config from dictionary."""
        evaluation = EvaluationConfig(**(data.get("evaluation") or {}))
        output = OutputConfig(**(data.get("output") or {}))

        if evaluation.workers < 1:
            raise ValueError(f"evaluation.workers must be >= 1, got {evaluation.workers}")
        if output.report_format not in ("json", "yaml"):
            raise ValueError(f"Unknown report format: {output.report_format}")

        return cls(
            name=data.get("name", "quality"),
            description=data.get("description", ""),
            inputs=list(data.get("inputs") or []),
            evaluation=evaluation,
            output=output,
            log_level=str(data.get("log_level", "WARNING")).upper(),
        )

    def with_overrides(self, **kwargs) -> QualityConfig:
        """
        Create new config with overrides.

        Dotted keys reach into the sections, e.g.
        ``with_overrides(**{"evaluation.workers": 4})``. A whole section
        may be given as a section object or a dict of its fields, and
        dotted keys are applied on top of it.
        """
        top = {}
        base = {"evaluation": self.evaluation, "output": self.output}
        sections: dict[str, dict] = {"evaluation": {}, "output": {}}
        for key, value in kwargs.items():
            section, _, name = key.partition(".")
            if name:
                if section not in sections:
                    raise KeyError(f"Unknown config section: {section}")
                sections[section][name] = value
            elif key in base:
                base[key] = replace(base[key], **value) if isinstance(value, dict) else value
            else:
                top[key] = value

        return replace(
            self,
            evaluation=replace(base["evaluation"], **sections["evaluation"]),
            output=replace(base["output"], **sections["output"]),
            **top,
        )


def create_default_config() -> QualityConfig:
    """Create a default configuration."""
    return QualityConfig(
        name="quality",
        description="Mesh element quality evaluation",
        evaluation=EvaluationConfig(metric=3, workers=1),
    )
