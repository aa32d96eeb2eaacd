"""Loading of classifier training sets from JSON files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple, Union

from utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class TrainingSet:
    """Field label -> exemplar phrases, in label discovery order."""

    labels: Mapping[str, Tuple[str, ...]]

    @classmethod
    def from_mapping(cls, data: Mapping[str, List[str]]) -> "TrainingSet":
        frozen = {label: tuple(phrases) for label, phrases in data.items()}
        return cls(MappingProxyType(frozen))

    def __iter__(self):
        return iter(self.labels.items())

    def __len__(self) -> int:
        return len(self.labels)

    def __contains__(self, label: object) -> bool:
        return label in self.labels


def _load_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in training file {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error reading training file {path}: {e}") from e


def _phrases(value: Any, path: Path) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"'training' in {path} must be a list of strings")
    return value


def load_extraction_training(directory: PathLike) -> TrainingSet:
    """Load ``{"name": ..., "training": [...]}`` files from ``directory``.

    Files are read in filename order, which fixes the label order used for
    classifier tie-breaks.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ConfigurationError(f"Training directory not found: {directory}")

    data: Dict[str, List[str]] = {}
    for path in sorted(directory.iterdir(), key=lambda p: p.name):
        if path.suffix != ".json" or not path.is_file():
            continue

        training = _load_json(path)
        if not isinstance(training, dict) or "name" not in training or "training" not in training:
            raise ConfigurationError(
                f"Training file {path} must define 'name' and 'training'"
            )

        label = str(training["name"])
        data[label] = _phrases(training["training"], path)
        logger.debug("Loaded %d exemplars for '%s' from %s", len(data[label]), label, path.name)

    if not data:
        raise ConfigurationError(f"No training files found in {directory}")

    return TrainingSet.from_mapping(data)


def load_validation_training(path: PathLike) -> TrainingSet:
    """Load ``{"validation": [{"key": ..., "training": [...]}, ...]}``."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Validation training file not found: {path}")

    training = _load_json(path)
    entries = training.get("validation") if isinstance(training, dict) else None
    if not isinstance(entries, list) or not entries:
        raise ConfigurationError(f"Validation training {path} has no 'validation' entries")

    data: Dict[str, List[str]] = {}
    for entry in entries:
        if not isinstance(entry, dict) or "key" not in entry or "training" not in entry:
            raise ConfigurationError(
                f"Validation entries in {path} must define 'key' and 'training'"
            )
        data[str(entry["key"])] = _phrases(entry["training"], path)

    return TrainingSet.from_mapping(data)
