"""Experiment definitions loaded from a JSON config file.

The file is read on every access, so an edited config takes effect on the
next request without a restart. A missing or unreadable file is treated as
"no experiments": assignment, exposure and aggregation all degrade to no-ops.
"""
import json
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import ValidationError

from splitlab.middleware.logging import get_logger
from splitlab.schemas.experiment import ExperimentConfig, ExperimentDefinition

logger = get_logger()


class ExperimentConfigStore:
    """File-backed, read-only source of active experiments."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> ExperimentConfig:
        """Read and validate the config file; invalid entries are skipped."""
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except FileNotFoundError:
            logger.warning("experiment_config_missing", path=str(self.path))
            return ExperimentConfig()
        except (OSError, ValueError) as e:
            logger.warning("experiment_config_unreadable", path=str(self.path), error=str(e))
            return ExperimentConfig()

        entries = raw.get("experiments") if isinstance(raw, dict) else None
        if not isinstance(entries, list):
            logger.warning(
                "experiment_config_unreadable",
                path=str(self.path),
                error="\"experiments\" must be a list"
            )
            return ExperimentConfig()
        return ExperimentConfig(experiments=self._parse(entries))

    def _parse(self, entries: Iterable) -> List[ExperimentDefinition]:
        experiments = []
        seen = set()
        for entry in entries:
            try:
                definition = ExperimentDefinition.model_validate(entry)
            except ValidationError as e:
                logger.warning(
                    "experiment_definition_invalid",
                    path=str(self.path),
                    test_id=entry.get("test_id") if isinstance(entry, dict) else None,
                    error=str(e)
                )
                continue

            if definition.test_id in seen:
                logger.warning("experiment_definition_duplicate", test_id=definition.test_id)
                continue
            seen.add(definition.test_id)
            experiments.append(definition)
        return experiments

    def get_experiments(self) -> List[ExperimentDefinition]:
        return self.load().experiments

    def get_experiment(self, test_id: str) -> Optional[ExperimentDefinition]:
        return self.load().get(test_id)


class StaticConfigStore(ExperimentConfigStore):
    """In-memory config store, for tests and embedding."""

    def __init__(self, experiments: Iterable = ()):
        self._config = ExperimentConfig(experiments=list(experiments))

    def load(self) -> ExperimentConfig:
        return self._config
