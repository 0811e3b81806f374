"""Persistence of pipeline definitions."""

from logging import Logger
from pathlib import Path
from typing import Any

import orjson
from atomicwrites import atomic_write
from pydantic import BaseModel, Field

from filestream.operations.base import OperationContext
from filestream.operations.registry import OperationRegistry
from filestream.pipeline import Pipeline

logger = Logger(__file__)


class StepDocument(BaseModel):
    """One stored pipeline step: an operation identifier and its configuration."""

    operation_id: str
    configuration: dict[str, Any] = Field(default_factory=dict)


class PipelineDocument(BaseModel):
    """Serializable form of a pipeline."""

    steps: list[StepDocument] = Field(default_factory=list)

    @classmethod
    def from_pipeline(cls, pipeline: Pipeline) -> "PipelineDocument":
        """Capture the identifiers and configurations of a pipeline's steps."""
        return cls(
            steps=[
                StepDocument(
                    operation_id=operation.operation_id,
                    configuration=operation.configuration.model_dump(mode="json"),
                )
                for operation in pipeline
            ]
        )

    def build(self, registry: OperationRegistry, context: OperationContext) -> Pipeline:
        """Recreate the pipeline through the registry.

        Args:
            registry: Registry resolving operation identifiers
            context: Context for the rebuilt pipeline

        Returns:
            Pipeline with one freshly created operation per step

        Raises:
            ValueError: If a step names an unknown operation or carries an
                invalid configuration
        """
        pipeline = Pipeline(context)
        for step in self.steps:
            operation = registry.create(step.operation_id)
            operation.configuration = step.configuration
            pipeline.add(operation)
        return pipeline


class PipelineStore:
    """Context manager for a pipeline definition stored as JSON.

    The document is loaded on enter and written back atomically on a clean
    exit, so an exception inside the block leaves the file untouched.

    Example:
        with PipelineStore("pipeline.json") as store:
            store.add_step("filter", {"extensions": [".pdf"]})
    """

    def __init__(self, path: str | Path):
        """Initialize the store.

        Args:
            path: Path to the pipeline JSON file
        """
        self.path = Path(path)
        self.data: PipelineDocument = PipelineDocument()

    def __enter__(self) -> "PipelineStore":
        """Enter context manager, loading the stored pipeline if available."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        if self.path.exists():
            try:
                content = self.path.read_bytes()
                json_data = orjson.loads(content)
                self.data = PipelineDocument.model_validate(self._sanitize_raw_document(json_data))
            except orjson.JSONDecodeError as e:
                logger.error(f"Failed to parse pipeline file {self.path}: {e}")
                raise
            except OSError as e:
                logger.error(f"Failed to read pipeline file {self.path}: {e}")
                raise
        else:
            logger.debug(f"No pipeline file at {self.path}, starting empty")

        return self

    @property
    def steps(self) -> list[StepDocument]:
        """Return the stored steps."""
        return self.data.steps

    def add_step(self, operation_id: str, configuration: dict[str, Any] | None = None) -> None:
        """Append a step to the stored pipeline."""
        self.data.steps.append(
            StepDocument(operation_id=operation_id, configuration=configuration or {})
        )

    def clear(self) -> None:
        """Remove every stored step."""
        self.data.steps.clear()

    def save_pipeline(self, pipeline: Pipeline) -> None:
        """Replace the stored document with the given pipeline."""
        self.data = PipelineDocument.from_pipeline(pipeline)

    def __exit__(self, exc_type, _exc_value, _traceback) -> bool:
        """Exit context manager, saving the document if no exception occurred.

        Returns:
            False to propagate any exceptions
        """
        if exc_type is None:
            try:
                payload = orjson.dumps(
                    self.data.model_dump(mode="json"),
                    option=orjson.OPT_INDENT_2,
                )
                with atomic_write(self.path, mode="wb", overwrite=True) as f:
                    f.write(payload)
                    f.write(b"\n")
            except OSError as e:
                logger.error(f"Failed to write pipeline file {self.path}: {e}")
                raise

        return False

    @classmethod
    def _sanitize_raw_document(_cls, payload: Any) -> dict[str, Any]:
        """Drop anything that cannot be a list of steps."""
        if not isinstance(payload, dict):
            return {"steps": []}

        steps = payload.get("steps")
        if not isinstance(steps, list):
            steps = []

        return {
            "steps": [
                step
                for step in steps
                if isinstance(step, dict)
                and isinstance(step.get("operation_id"), str)
                and isinstance(step.get("configuration", {}), dict)
            ]
        }
