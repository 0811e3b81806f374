"""Unit tests for table rendering utilities."""

from filestream.domain.models import (
    Change,
    ChangeKind,
    OperationResult,
    PipelineResult,
    ValidationErrorKind,
    ValidationResult,
)
from filestream.ui.tables import (
    create_change_table,
    create_operations_table,
    create_step_table,
    create_validation_table,
    format_change_summary,
)


def make_change(kind, original="C:/src/a.txt", new="C:/src/b.txt", applied=False):
    return Change(original_path=original, new_path=new, kind=kind, applied=applied)


class TestStepTable:
    """Test step table creation."""

    def test_columns_and_rows(self):
        """One row per step."""
        result = PipelineResult()
        result.add_step_result(1, "Filter Files", OperationResult(processed_count=3))

        table = create_step_table(result)

        column_headers = [col.header for col in table.columns]
        assert column_headers == ["#", "Operation", "Status", "Processed", "Failed", "Message"]
        assert table.row_count == 1
        assert "1 run" in table.title

    def test_totals_row_for_multiple_steps(self):
        """A totals row is added when several steps ran."""
        result = PipelineResult()
        result.add_step_result(1, "Filter Files", OperationResult(processed_count=3))
        result.add_step_result(2, "Rename Files", OperationResult(processed_count=2))

        assert create_step_table(result).row_count == 3


class TestChangeTable:
    """Test change table creation."""

    def test_title_includes_count(self):
        """Table title should include the change count."""
        changes = [make_change(ChangeKind.RENAME), make_change(ChangeKind.MOVE)]

        table = create_change_table(changes, title_suffix=" [preview]")

        assert "2 total" in table.title
        assert table.title.endswith("[preview]")
        assert table.row_count == 2


class TestValidationTable:
    """Test validation table creation."""

    def test_errors_and_warnings(self):
        """Errors and warnings each get a row."""
        validation = ValidationResult()
        validation.add_error("collision", ValidationErrorKind.NAME_COLLISION, "C:/out/a.txt")
        validation.add_warning("Destination directory will be created: C:/out")

        assert create_validation_table(validation).row_count == 2


class TestOperationsTable:
    """Test operations table creation."""

    def test_lists_registered_operations(self, registry):
        """One row per registered operation."""
        assert create_operations_table(registry).row_count == 4


class TestChangeSummary:
    """Test change summary formatting."""

    def test_counts_by_kind(self):
        """Summary lists counts by kind in name order."""
        changes = [
            make_change(ChangeKind.RENAME),
            make_change(ChangeKind.RENAME),
            make_change(ChangeKind.MOVE),
        ]
        assert format_change_summary(changes) == "1 move, 2 rename"

    def test_empty(self):
        """No changes, empty summary."""
        assert format_change_summary([]) == ""
