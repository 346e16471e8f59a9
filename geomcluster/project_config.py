"""
JSON-based project configuration for geomcluster.

Allows overriding default tool parameters through:
1. .geomcluster.json in the input file's directory
2. .geomcluster.json in the current directory
3. ~/.geomcluster.json
4. Explicit config file path via CLI

Configuration hierarchy (later overrides earlier):
1. Built-in defaults
2. Config file found by `find_config_file`
3. CLI arguments

Example .geomcluster.json:
{
    "clustering": {
        "default_tolerance": 0.001,
        "sample_count": 20
    },
    "modules": {
        "decimal_places": 4,
        "area_scale": 1e-6,
        "reference_point": [0, 0, 0]
    },
    "output": {
        "indent": 2,
        "output_dir": "results"
    }
}
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from geomcluster.tolerance import (
    DEFAULT_CURVE_SAMPLES,
    DEFAULT_DIRECTION_TOLERANCE,
    DEFAULT_TOLERANCE,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".geomcluster.json"


@dataclass
class ClusteringConfig:
    """Tolerance clustering settings."""
    # Used whenever a tool is given a tolerance <= 0 (the "document" tolerance)
    default_tolerance: float = DEFAULT_TOLERANCE
    tolerance: float = DEFAULT_TOLERANCE
    sample_count: int = DEFAULT_CURVE_SAMPLES
    use_kdtree: bool = True


@dataclass
class ModulesConfig:
    """Unique module grouping settings."""
    decimal_places: int = 6
    area_scale: float = 1e-6
    label_prefix: str = "Plane_"
    reference_point: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    tolerance: Optional[float] = None  # None = clustering.default_tolerance


@dataclass
class SortingConfig:
    """Spatial sort settings."""
    method: str = "x"
    reference_point: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])


@dataclass
class DirectionsConfig:
    """Segment direction split settings."""
    tolerance: float = DEFAULT_DIRECTION_TOLERANCE


@dataclass
class LengthFilterConfig:
    """Curve length filter settings."""
    threshold: float = 10.0


@dataclass
class OutputConfig:
    """Output file configuration."""
    indent: int = 2
    prefix: str = ""
    suffix: str = ""
    output_dir: str = ""


_SECTIONS = {
    'clustering': ClusteringConfig,
    'modules': ModulesConfig,
    'sorting': SortingConfig,
    'directions': DirectionsConfig,
    'length_filter': LengthFilterConfig,
    'output': OutputConfig,
}


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    modules: ModulesConfig = field(default_factory=ModulesConfig)
    sorting: SortingConfig = field(default_factory=SortingConfig)
    directions: DirectionsConfig = field(default_factory=DirectionsConfig)
    length_filter: LengthFilterConfig = field(default_factory=LengthFilterConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from dictionary.

        Unknown sections and keys (including "_comment") are ignored.
        """
        config = cls()
        for section_name in _SECTIONS:
            section_data = data.get(section_name)
            if not isinstance(section_data, dict):
                continue
            section = getattr(config, section_name)
            for key, value in section_data.items():
                if not key.startswith('_') and hasattr(section, key):
                    setattr(section, key, value)
        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    input_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Find configuration file using search hierarchy.

    Search order:
    1. Explicit config path (if provided)
    2. .geomcluster.json in the input file's directory
    3. .geomcluster.json in current working directory
    4. ~/.geomcluster.json in user's home directory

    Returns:
        Path to config file if found, None otherwise
    """
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    candidates = []
    if input_path:
        candidates.append(Path(input_path).parent / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    candidates.append(Path.home() / CONFIG_FILENAME)

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_config(
    input_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration with fallback to defaults.

    A config file that exists but cannot be parsed is logged and ignored.
    """
    config_path = find_config_file(input_path, explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def merge_configs(base: ProjectConfig, override: ProjectConfig) -> ProjectConfig:
    """Merge two configurations, with override taking precedence.

    Only values of `override` that differ from the built-in defaults are
    applied.
    """
    merged = ProjectConfig.from_dict(base.to_dict())

    for section_name, section_cls in _SECTIONS.items():
        defaults = section_cls()
        override_section = getattr(override, section_name)
        merged_section = getattr(merged, section_name)
        for f in fields(section_cls):
            value = getattr(override_section, f.name)
            if value != getattr(defaults, f.name):
                setattr(merged_section, f.name, value)

    return merged


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> Path:
    """Create a sample configuration file with documentation.

    Returns:
        Path of the written file.
    """
    sample: Dict[str, Any] = {
        "_comment": "geomcluster configuration",
        "_version": "1.0",
    }
    notes = {
        'clustering': "Tolerances; default_tolerance replaces any tolerance <= 0",
        'modules': "Unique module grouping by plane family and rounded area",
        'sorting': "Spatial sort method: x, y, z, distance, grid, grid-bt-lr, angle",
        'directions': "Horizontal/vertical ratio tolerance",
        'length_filter': "Curves >= threshold are long",
        'output': "Result file settings",
    }
    defaults = ProjectConfig().to_dict()
    for section_name in _SECTIONS:
        sample[section_name] = {"_comment": notes[section_name], **defaults[section_name]}

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
    return path
