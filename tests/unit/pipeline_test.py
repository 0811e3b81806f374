"""Unit tests for pipeline composition and execution."""

import asyncio
import threading

import pytest

from filestream.domain.models import ExecutionMode, ValidationErrorKind
from filestream.operations import (
    FilterOperation,
    MoveOperation,
    RenameOperation,
    SourceOperation,
)
from filestream.pipeline import Pipeline


class ExplodingOperation(FilterOperation):
    """Operation whose execute raises instead of returning a result."""

    async def execute(self, entries, cancellation=None, mode=ExecutionMode.EXECUTE):
        raise RuntimeError("boom")


class BrokenValidationOperation(FilterOperation):
    """Operation whose validate raises instead of returning a result."""

    async def validate(self, entries, cancellation=None):
        raise RuntimeError("cannot validate")


def colliding_rename(context):
    return RenameOperation(
        context, {"keep_core_name": False, "prefix": "same", "preserve_extension": False}
    )


class TestPipelineComposition:
    """Test step management."""

    def test_add_insert_len_iter(self, context):
        """Steps keep their order."""
        filter_step = FilterOperation(context)
        rename_step = RenameOperation(context)
        move_step = MoveOperation(context)
        pipeline = Pipeline(context, [filter_step, move_step])

        pipeline.insert(1, rename_step)

        assert len(pipeline) == 3
        assert list(pipeline) == [filter_step, rename_step, move_step]

    def test_insert_out_of_range(self, context):
        """Insert positions outside 0..len raise IndexError."""
        pipeline = Pipeline(context)
        with pytest.raises(IndexError):
            pipeline.insert(1, FilterOperation(context))

    def test_add_rejects_non_operations(self, context):
        """Only operations can be steps."""
        with pytest.raises(TypeError):
            Pipeline(context).add("rename")

    def test_remove_is_identity_based(self, context):
        """remove drops the first identical instance only."""
        step = FilterOperation(context)
        lookalike = FilterOperation(context)
        pipeline = Pipeline(context, [step, step])

        assert pipeline.remove(lookalike) is False
        assert pipeline.remove(step) is True
        assert len(pipeline) == 1

    def test_clear(self, context):
        """clear removes every step."""
        pipeline = Pipeline(context, [FilterOperation(context)])
        pipeline.clear()
        assert len(pipeline) == 0

    def test_duplicate_is_independent(self, context):
        """A duplicated step can be reconfigured without touching the original."""
        original = RenameOperation(context, {"prefix": "a_"})
        pipeline = Pipeline(context, [original])

        copy = pipeline.duplicate(0)
        copy.configuration.prefix = "b_"

        assert pipeline.operations == (original, copy)
        assert original.configuration.prefix == "a_"


class TestPipelineValidation:
    """Test pipeline-level validation."""

    def test_empty_pipeline(self, context, sample_entries):
        """An empty pipeline validates with a warning."""
        result = asyncio.run(Pipeline(context).validate(sample_entries))
        assert result.is_valid
        assert result.warnings == ["No operations in pipeline"]

    def test_stop_on_error_controls_accumulation(self, context, sample_entries):
        """With stop-on-error only the first failing step is reported."""
        pipeline = Pipeline(
            context,
            [
                FilterOperation(context, {"name_pattern": "(", "use_regex": True}),
                colliding_rename(context),
            ],
        )

        stopped = asyncio.run(pipeline.validate(sample_entries))
        accumulated = asyncio.run(pipeline.validate(sample_entries, stop_on_error=False))

        assert not stopped.errors_of(ValidationErrorKind.NAME_COLLISION)
        assert stopped.errors_of(ValidationErrorKind.INVALID_PATTERN)
        assert accumulated.errors_of(ValidationErrorKind.NAME_COLLISION)
        assert accumulated.errors_of(ValidationErrorKind.INVALID_PATTERN)

    def test_validation_fault_becomes_error(self, context, sample_entries):
        """A step whose validation raises is reported as an invalid result."""
        pipeline = Pipeline(
            context, [BrokenValidationOperation(context), colliding_rename(context)]
        )

        stopped = asyncio.run(pipeline.validate(sample_entries))
        accumulated = asyncio.run(pipeline.validate(sample_entries, stop_on_error=False))

        [error] = stopped.errors
        assert error.kind == ValidationErrorKind.GENERAL
        assert error.message == "Exception validating step 1 (Filter Files): cannot validate"
        assert accumulated.errors_of(ValidationErrorKind.NAME_COLLISION)


class TestPipelineExecution:
    """Test running steps and threading the working set."""

    def test_empty_pipeline(self, context, sample_entries):
        """Executing nothing is unsuccessful."""
        result = asyncio.run(Pipeline(context).execute(sample_entries))
        assert result.success is False
        assert result.summary == "No operations to execute"

    def test_filter_then_rename(self, context, memory_fs, sample_entries):
        """Only entries that survive the filter are renamed."""
        pipeline = Pipeline(
            context,
            [
                FilterOperation(context, {"extensions": [".txt"]}),
                RenameOperation(context, {"prefix": "note_"}),
            ],
        )

        result = asyncio.run(pipeline.execute(sample_entries))

        assert result.success
        assert sorted(memory_fs.files) == [
            "C:/src/note_a.txt",
            "C:/src/note_b.txt",
            "C:/src/note_notes.txt",
            "C:/src/photo.jpg",
            "C:/src/report.pdf",
        ]
        assert result.summary == "Pipeline completed: 6 files processed, 0 failed"

    def test_filtered_out_entry_gets_no_rename(self, context, memory_fs, entry_factory):
        """Execution renames only what the filter kept; a preview passes the set through."""
        entries = [entry_factory("C:/src/a.txt"), entry_factory("C:/src/b.jpg")]
        memory_fs.add_file(entries[1])
        pipeline = Pipeline(
            context,
            [
                FilterOperation(context, {"extensions": [".txt"]}),
                RenameOperation(context, {"prefix": "x_"}),
            ],
        )

        result = asyncio.run(pipeline.preview(entries))
        executed = asyncio.run(pipeline.execute(entries))

        assert [c.new_path for c in result.step_results[1].result.changes] == [
            "C:/src/x_a.txt",
            "C:/src/x_b.jpg",
        ]
        assert [c.new_path for c in executed.step_results[1].result.changes] == [
            "C:/src/x_a.txt"
        ]
        assert "C:/src/b.jpg" in memory_fs.files

    def test_rename_then_move_uses_new_paths(self, context, memory_fs, entry_factory):
        """A later step sees the paths produced by the earlier one."""
        entries = [entry_factory("C:/src/a.txt"), entry_factory("C:/src/b.txt")]
        pipeline = Pipeline(
            context,
            [
                RenameOperation(context, {"use_sequential_numbering": True}),
                MoveOperation(context, {"destination_directory": "C:/out"}),
            ],
        )

        result = asyncio.run(pipeline.execute(entries))

        assert result.success
        assert [change.original_path for change in result.step_results[1].result.changes] == [
            "C:/src/a_001.txt",
            "C:/src/b_002.txt",
        ]
        assert "C:/out/a_001.txt" in memory_fs.files

    def test_failed_entry_stays_in_working_set(self, context, memory_fs, entry_factory):
        """An entry whose rename failed continues under its old path."""
        memory_fs.fail_on.add("C:/src/a.txt")
        entries = [entry_factory("C:/src/a.txt"), entry_factory("C:/src/b.txt")]
        pipeline = Pipeline(
            context,
            [
                RenameOperation(context, {"suffix": "_x"}),
                MoveOperation(context, {"destination_directory": "C:/out"}),
            ],
        )

        def heal_before_move(step_number, total_steps, display_name):
            if step_number == 2:
                memory_fs.fail_on.clear()

        result = asyncio.run(
            pipeline.execute(entries, stop_on_error=False, progress_hook=heal_before_move)
        )

        moved_from = [change.original_path for change in result.step_results[1].result.changes]
        assert moved_from == ["C:/src/a.txt", "C:/src/b_x.txt"]
        assert result.total_failed == 1
        assert result.summary == "Pipeline completed with errors: 4 files processed, 1 failed"

    def test_preview_never_mutates(self, context, memory_fs, sample_entries):
        """A preview of a mutating pipeline leaves the filesystem untouched."""
        pipeline = Pipeline(
            context,
            [
                RenameOperation(context, {"case_transform": "uppercase"}),
                MoveOperation(
                    context, {"destination_directory": "C:/out", "organize_by_extension": True}
                ),
            ],
        )

        result = asyncio.run(pipeline.preview(sample_entries))

        assert result.success
        assert result.summary == "Preview completed: 10 files would be processed"
        assert memory_fs.mutation_count == 0
        assert not any(change.applied for change in result.changes)

    def test_stop_on_error(self, context, sample_entries):
        """A failing step stops the run by default."""
        pipeline = Pipeline(
            context, [colliding_rename(context), FilterOperation(context)]
        )

        result = asyncio.run(pipeline.execute(sample_entries))

        assert result.success is False
        assert len(result.step_results) == 1
        assert result.summary == "Pipeline stopped at step 1 due to error"

    def test_keep_going_override(self, context, sample_entries):
        """stop_on_error=False runs the remaining steps on the unchanged set."""
        pipeline = Pipeline(
            context, [colliding_rename(context), FilterOperation(context)]
        )

        result = asyncio.run(pipeline.execute(sample_entries, stop_on_error=False))

        assert result.success is False
        assert len(result.step_results) == 2
        assert result.step_results[1].result.processed_count == 5
        assert result.summary.startswith("Pipeline completed with errors")

    def test_step_exception(self, context, sample_entries):
        """An exception escaping a step is captured as a failed step."""
        pipeline = Pipeline(context, [ExplodingOperation(context), FilterOperation(context)])

        result = asyncio.run(pipeline.execute(sample_entries))

        [step] = result.step_results
        assert step.result.message == "Exception in step 1: boom"
        assert isinstance(step.result.fault, RuntimeError)
        assert result.summary == "Pipeline stopped at step 1 due to exception"

    def test_cancelled_before_start(self, context, memory_fs, sample_entries):
        """A fired cancellation stops the run before the first step."""
        cancelled = threading.Event()
        cancelled.set()
        pipeline = Pipeline(context, [RenameOperation(context, {"prefix": "x"})])

        result = asyncio.run(pipeline.execute(sample_entries, cancelled))

        assert result.success is False
        assert result.summary == "Pipeline execution cancelled"
        assert result.step_results == []
        assert memory_fs.mutation_count == 0

    def test_progress_hook(self, context, sample_entries):
        """The hook is called at the start of every step."""
        calls = []
        pipeline = Pipeline(context, [FilterOperation(context), FilterOperation(context)])

        asyncio.run(
            pipeline.execute(sample_entries, progress_hook=lambda *args: calls.append(args))
        )

        assert calls == [(1, 2, "Filter Files"), (2, 2, "Filter Files")]

    def test_totals_match_steps(self, context, sample_entries):
        """Pipeline totals equal the sum of the step counts."""
        pipeline = Pipeline(
            context,
            [FilterOperation(context, {"extensions": [".txt"]}), FilterOperation(context)],
        )

        result = asyncio.run(pipeline.execute(sample_entries))

        assert result.total_processed == sum(
            step.result.processed_count for step in result.step_results
        )
        assert result.total_processed == 6

    def test_filter_is_idempotent(self, context, sample_entries):
        """Filtering a filtered set changes nothing."""
        criteria = {"extensions": [".txt"], "max_size": 100}
        pipeline = Pipeline(
            context, [FilterOperation(context, criteria), FilterOperation(context, criteria)]
        )

        result = asyncio.run(pipeline.execute(sample_entries))

        first, second = (step.result.changes for step in result.step_results)
        assert [c.original_path for c in first] == [c.original_path for c in second]

    def test_source_output_becomes_working_set(self, context, memory_fs, entry_factory):
        """A source step feeds its loaded files to the next step."""
        memory_fs.add_file(entry_factory("C:/inbox/a.txt"))
        memory_fs.add_file(entry_factory("C:/inbox/b.pdf"))
        pipeline = Pipeline(
            context,
            [
                SourceOperation(
                    context, {"source_directory": "C:/inbox", "merge_with_existing": False}
                ),
                FilterOperation(context, {"extensions": [".pdf"]}),
            ],
        )

        result = asyncio.run(pipeline.preview([]))

        assert result.success
        assert [c.original_path for c in result.step_results[1].result.changes] == [
            "C:/inbox/b.pdf"
        ]
