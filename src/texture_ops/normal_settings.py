"""Normal map export settings"""

import json
from dataclasses import dataclass, asdict, fields
from multiprocessing import cpu_count
from pathlib import Path
from typing import Optional, Tuple

from .operations import NORMALIZE_MODES, NORMALIZE_TRUNCATE


@dataclass
class NormalMapSettings:
    """Which operations to run on a normal map before it is written out"""

    # Channel corrections
    invert_x: bool = False  # Invert red
    invert_y: bool = False  # Invert green (DirectX <-> OpenGL convention)
    swap_channels: Optional[Tuple[int, int]] = None

    # Orientation
    flip_vertical: bool = False

    # Renormalization
    normalize: bool = False
    normalize_mode: str = NORMALIZE_TRUNCATE

    # Performance settings
    enable_parallel: bool = True
    max_workers: int = max(1, cpu_count() - 1)

    def __post_init__(self):
        """
        Coerce swap_channels from a JSON list to a tuple and validate settings.

        Raises:
            ValueError: If swap_channels is not a pair, normalize_mode is unknown,
                        or max_workers is below 1
        """
        if self.swap_channels is not None:
            self.swap_channels = tuple(self.swap_channels)
            if len(self.swap_channels) != 2:
                raise ValueError(f"swap_channels needs two channel indices, got {self.swap_channels}")
        if self.normalize_mode not in NORMALIZE_MODES:
            raise ValueError(f"Unknown normalize mode: {self.normalize_mode!r}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    def to_dict(self) -> dict:
        """Convert settings to a JSON-friendly dictionary"""
        settings_dict = asdict(self)
        if self.swap_channels is not None:
            settings_dict['swap_channels'] = list(self.swap_channels)
        return settings_dict

    @classmethod
    def from_dict(cls, settings_dict: dict) -> "NormalMapSettings":
        """Load settings from a dictionary. Missing keys keep their defaults, unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in settings_dict.items() if key in known})

    def save_json(self, path: Path):
        """Write settings to a JSON file"""
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_json(cls, path: Path) -> "NormalMapSettings":
        """Read settings previously written by save_json"""
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))
