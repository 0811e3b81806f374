"""Rename operation: build new names from prefix, numbering, replace and case rules."""

import re
from enum import Enum
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict

from filestream.domain.models import (
    Change,
    ChangeKind,
    ExecutionMode,
    FileEntry,
    OperationResult,
    ValidationErrorKind,
    ValidationResult,
)
from filestream.domain.types import CancellationSignal
from filestream.operations.base import Operation

_WHITESPACE = re.compile(r"\s+")
_WORD_START = re.compile(r"(?:^|(?<=[\s_\-]))([^\W\d_])")


class CaseTransform(str, Enum):
    """Case applied to the core of the new name."""

    NONE = "none"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    TITLE_CASE = "title_case"


class RenameConfiguration(BaseModel):
    """Parameters of a rename."""

    model_config = ConfigDict(extra="forbid")

    prefix: str = ""
    suffix: str = ""
    find_text: str = ""
    replace_text: str = ""
    use_regex: bool = False  # Treat find_text as a regular expression
    use_sequential_numbering: bool = False
    start_number: int = 1
    number_padding: int = 3
    preserve_extension: bool = True
    keep_core_name: bool = True  # False builds the name from prefix/number/suffix only
    normalize_spaces: bool = False
    case_transform: CaseTransform = CaseTransform.NONE


def title_case(text: str) -> str:
    """Lowercase ``text`` and capitalize the first letter of every word."""
    return _WORD_START.sub(lambda match: match.group(1).upper(), text.lower())


class RenameOperation(Operation):
    """Rename entries in place.

    Entries are processed in ascending name order so sequence numbers are
    deterministic. The whole batch is checked for collisions before anything
    is renamed; renaming itself is best effort per entry.
    """

    operation_id = "rename"
    display_name = "Rename Files"
    description = "Rename files using templates and patterns"
    configuration_model = RenameConfiguration

    def validate_configuration(self) -> ValidationResult:
        """Check prefix, suffix, numbering and regex settings."""
        config = self.configuration
        validator = self.context.validator
        result = ValidationResult()

        if config.prefix and not validator.validate_filename(f"{config.prefix}test.txt").is_valid:
            result.add_error(
                f"Prefix contains invalid characters: {config.prefix}",
                ValidationErrorKind.INVALID_CHARACTERS,
            )

        if config.suffix and not validator.validate_filename(f"test{config.suffix}.txt").is_valid:
            result.add_error(
                f"Suffix contains invalid characters: {config.suffix}",
                ValidationErrorKind.INVALID_CHARACTERS,
            )

        if config.use_sequential_numbering and config.start_number < 0:
            result.add_error("Start number must be non-negative")

        if config.use_sequential_numbering and config.number_padding < 1:
            result.add_error("Number padding must be at least 1")

        if config.use_regex and config.find_text:
            try:
                re.compile(config.find_text)
            except re.error as e:
                result.add_error(
                    f"Invalid regex pattern: {config.find_text} ({e})",
                    ValidationErrorKind.INVALID_PATTERN,
                )

        return result

    def build_name(self, entry: FileEntry, sequence_number: int) -> str:
        """Return the new basename for ``entry``."""
        config = self.configuration

        if config.preserve_extension:
            core, extension = entry.stem, entry.extension
        else:
            # The old extension becomes part of the core and no extension is reattached
            core, extension = entry.name, ""

        name = core if config.keep_core_name else ""
        name = self._replace(name)

        if config.normalize_spaces:
            name = _WHITESPACE.sub(" ", name).strip()

        if config.case_transform == CaseTransform.UPPERCASE:
            name = name.upper()
        elif config.case_transform == CaseTransform.LOWERCASE:
            name = name.lower()
        elif config.case_transform == CaseTransform.TITLE_CASE:
            name = title_case(name)

        name = config.prefix + name

        if config.use_sequential_numbering:
            name = f"{name}_{str(sequence_number).zfill(config.number_padding)}"

        return name + config.suffix + extension

    def generate_changes(self, entries: list[FileEntry]) -> list[Change]:
        """Compute the rename change of every entry, in name order."""
        changes = []
        sequence_number = self.configuration.start_number

        for entry in sorted(entries, key=lambda e: e.name):
            new_name = self.build_name(entry, sequence_number)
            changes.append(
                Change(
                    original_path=entry.full_path,
                    new_path=str(PurePath(entry.full_path).parent / new_name),
                    kind=ChangeKind.RENAME,
                    description=f"{entry.name} → {new_name}",
                )
            )
            if self.configuration.use_sequential_numbering:
                sequence_number += 1

        return changes

    def _replace(self, text: str) -> str:
        config = self.configuration
        if not config.find_text:
            return text

        if config.use_regex:
            try:
                return re.sub(config.find_text, config.replace_text, text, flags=re.IGNORECASE)
            except re.error:
                # Bad pattern or replacement template: fall back to a literal replace
                pass

        return re.sub(
            re.escape(config.find_text),
            lambda _match: config.replace_text,
            text,
            flags=re.IGNORECASE,
        )

    async def _validate_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
    ) -> ValidationResult:
        result = self.validate_configuration()
        if not result.is_valid:
            return result

        changes = self.generate_changes(entries)
        for change in changes:
            new_path = PurePath(change.new_path)
            # An empty name or one containing a separator leaves the source directory
            if new_path.parent != PurePath(change.original_path).parent:
                result.add_error(
                    f"Generated name is not a plain file name: {change.description}",
                    ValidationErrorKind.INVALID_PATH,
                    change.original_path,
                )
                continue
            result.merge(self.context.validator.validate_filename(new_path.name, change.new_path))

        result.merge(await self.context.validator.validate_no_collisions(changes))
        return result

    async def _execute_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
        mode: ExecutionMode,
    ) -> OperationResult:
        filesystem = self.context.filesystem

        async def rename(change: Change) -> bool:
            return await filesystem.rename(change.original_path, PurePath(change.new_path).name)

        return await self._apply_changes(
            self.generate_changes(entries), rename, "rename", cancellation, mode
        )
