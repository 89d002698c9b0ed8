"""
Engine Settings
===============

Runtime settings for a deduplication run. A settings object is handed to the
grouper and aggregator at construction; nothing is read from module globals
once a run has started.

The settings can be persisted between runs with
`vaultdedup.utils.config_manager`.
"""

from dataclasses import dataclass

from vaultdedup.core import config


@dataclass
class DedupSettings:
    """
    Tunable parameters of the deduplication engine.

    Attributes:
        perceptual_threshold: Bit-match ratio an image pair must exceed to be
            grouped as visually similar (0-1).
        name_threshold: Minimum normalized name similarity for two files to
            be grouped as confusingly named (0-1).
        grid_size: Side length N of the perceptual hash grid (N*N bits).
        clustering: 'greedy' (representative partition) or 'connected'.
        max_workers: Worker threads used for per-file hashing.
        default_strategy: Keep strategy used when none is given explicitly.
    """
    perceptual_threshold: float = config.DEFAULT_PERCEPTUAL_THRESHOLD
    name_threshold: float = config.DEFAULT_NAME_THRESHOLD
    grid_size: int = config.DEFAULT_GRID_SIZE
    clustering: str = config.DEFAULT_CLUSTERING
    max_workers: int = config.DEFAULT_MAX_WORKERS
    default_strategy: str = config.DEFAULT_KEEP_STRATEGY

    def validate(self) -> "DedupSettings":
        """Raise ValueError if any setting is out of range. Returns self."""
        for name in ("perceptual_threshold", "name_threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")

        if isinstance(self.grid_size, bool) or not isinstance(self.grid_size, int):
            raise ValueError(f"grid_size must be an integer, got {self.grid_size!r}")
        if not config.MIN_GRID_SIZE <= self.grid_size <= config.MAX_GRID_SIZE:
            raise ValueError(
                f"grid_size must be between {config.MIN_GRID_SIZE} and "
                f"{config.MAX_GRID_SIZE}, got {self.grid_size}"
            )

        if self.clustering not in config.CLUSTERING_MODES:
            raise ValueError(
                f"clustering must be one of {', '.join(config.CLUSTERING_MODES)}, "
                f"got {self.clustering!r}"
            )

        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int):
            raise ValueError(f"max_workers must be an integer, got {self.max_workers!r}")
        if not 1 <= self.max_workers <= config.MAX_WORKERS_LIMIT:
            raise ValueError(
                f"max_workers must be between 1 and {config.MAX_WORKERS_LIMIT}, "
                f"got {self.max_workers}"
            )

        # Imported here to keep settings importable without the dedup package
        from vaultdedup.core.dedup.dedup_strategies import KeepStrategy
        KeepStrategy.coerce(self.default_strategy)

        return self
