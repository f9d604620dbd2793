"""Resources a run allocated, persisted in its run directory.

Every CLI command is its own process. The record lets `down` release the
state-store bucket that `up` created and lets every command find the
cluster's state.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from kopsdeployer.core.exceptions import ConfigurationError
from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

RUN_RECORD_FILE = "run.yaml"


class RunRecord(BaseModel):
    """State-store allocation of a run."""

    state_bucket: str = ""
    state_store: str = ""

    @classmethod
    def load(cls, run_dir: str | Path) -> "RunRecord":
        """Load the record of a run directory; empty when none was saved.

        Raises:
            ConfigurationError: If the record exists but cannot be read
        """
        path = Path(run_dir) / RUN_RECORD_FILE
        if not path.exists():
            return cls()

        try:
            with path.open() as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except (OSError, yaml.YAMLError, TypeError, ValidationError) as e:
            raise ConfigurationError(f"Failed to load run record {path}: {e}") from e

    def save(self, run_dir: str | Path) -> None:
        path = Path(run_dir) / RUN_RECORD_FILE
        with path.open("w") as f:
            yaml.safe_dump(self.model_dump(), f)
        logger.debug("run_record_saved", path=str(path), state_bucket=self.state_bucket)

    @staticmethod
    def remove(run_dir: str | Path) -> None:
        """Forget the allocation once its resources are released."""
        path = Path(run_dir) / RUN_RECORD_FILE
        path.unlink(missing_ok=True)
        logger.debug("run_record_removed", path=str(path))
