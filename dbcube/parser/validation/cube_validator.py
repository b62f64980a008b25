"""
Validation of cube files.

A cube file is checked line by line with six independent rules, followed by
file-level structural checks. Every problem becomes a ValidationError; the
validator never raises for problems in the file itself.
"""

import logging
import re
from pathlib import Path

from dbcube.parser.shared.constants import (
    KNOWN_ANNOTATIONS,
    OPTION_TYPE_COMPATIBILITY,
    TABLE_FILE_MARKER,
    TYPELESS_BLOCKS,
    VALID_COLUMN_PROPERTIES,
    VALID_FOREIGN_KEY_PROPERTIES,
    VALID_OPTIONS,
    VALID_TYPES,
    VARCHAR_LENGTH_WINDOW,
)
from dbcube.parser.shared.file_utils import item_name_for, read_cube_file
from dbcube.parser.shared.types import FilePath, ValidationError, ValidationResult

from .line_scanner import (
    ANNOTATION_PATTERN,
    BLOCK_OPENER_PATTERN,
    CLOSING_BRACE_PATTERN,
    EMPTY_PROPERTY_PATTERN,
    LENGTH_PROPERTY,
    OPTIONS_PATTERN,
    PROPERTY_PATTERN,
    TYPE_ASSIGNMENT_PATTERN,
    VARCHAR_DECLARATION,
    CubeSource,
    count_quotes,
    is_skippable,
    tokenize_options,
)

logger = logging.getLogger(__name__)

STRING_ANNOTATION_PATTERN = re.compile(r'@(database|table)\s*\(\s*"([^"]*)"\s*\)')
META_ANNOTATION_PATTERN = re.compile(r"@meta\s*\(\s*\{")


class _FileReport:
    """Collects errors for one file."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self.item_name = item_name_for(file_path)
        self.errors: list[ValidationError] = []

    def add(self, message: str, line_number: int = 1) -> None:
        self.errors.append(
            ValidationError(
                item_name=self.item_name,
                message=message,
                file_path=self.file_path,
                line_number=line_number,
            )
        )


class CubeValidator:
    """Checks cube files for syntax, semantic and structural errors."""

    def __init__(self) -> None:
        self._line_rules = (
            self._check_annotations,
            self._check_data_types,
            self._check_options,
            self._check_column_properties,
            self._check_required_properties,
            self._check_general_syntax,
        )

    def validate(self, file_path: FilePath) -> ValidationResult:
        """
        Validate a cube file.

        Args:
            file_path: Path to the cube file

        Returns:
            ValidationResult with errors in line order, then file-level errors
        """
        report = _FileReport(str(file_path))
        try:
            content = read_cube_file(file_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Could not read {file_path}: {e}")
            report.add(f"Failed to read cube file: {e}")
            return ValidationResult(errors=report.errors)

        return self.validate_content(content, file_path, report)

    def validate_content(
        self, content: str, file_path: FilePath, report: _FileReport | None = None
    ) -> ValidationResult:
        """Validate cube text that has already been read from ``file_path``."""
        report = report or _FileReport(str(file_path))
        source = CubeSource(content)

        for index, line in enumerate(source.lines):
            if is_skippable(line):
                continue
            for rule in self._line_rules:
                rule(source, index, line, report)

        self._check_structure(source, str(file_path), report)

        if report.errors:
            logger.debug(f"{file_path}: {len(report.errors)} validation error(s)")
        return ValidationResult(errors=report.errors)

    def _check_annotations(
        self, source: CubeSource, index: int, line: str, report: _FileReport
    ) -> None:
        for annotation in ANNOTATION_PATTERN.findall(line):
            if annotation not in KNOWN_ANNOTATIONS:
                report.add(
                    f"Unknown annotation '@{annotation}'. "
                    f"Valid annotations: {', '.join(KNOWN_ANNOTATIONS)}",
                    index + 1,
                )

    def _check_data_types(
        self, source: CubeSource, index: int, line: str, report: _FileReport
    ) -> None:
        for data_type in TYPE_ASSIGNMENT_PATTERN.findall(line):
            if data_type not in VALID_TYPES:
                report.add(
                    f"Invalid data type '{data_type}'. Valid types: {', '.join(VALID_TYPES)}",
                    index + 1,
                )

        if VARCHAR_DECLARATION in line:
            window = source.window(index, VARCHAR_LENGTH_WINDOW)
            if not any(LENGTH_PROPERTY in nearby for nearby in window):
                report.add("VARCHAR type requires a length specification", index + 1)

    def _check_options(
        self, source: CubeSource, index: int, line: str, report: _FileReport
    ) -> None:
        match = OPTIONS_PATTERN.match(line)
        if not match:
            return

        tokens = tokenize_options(match.group(1).strip())
        bare = next((token for token in tokens if not token.quoted), None)
        if bare is not None:
            report.add(
                f"Invalid syntax '{bare.value}' in options array. "
                "All values must be quoted strings",
                index + 1,
            )
            return

        if not tokens:
            return

        column_type = source.column_type_above(index)
        for token in tokens:
            option = token.value
            if option.strip() == "":
                report.add(
                    "Empty option found in options array. All options must have a value",
                    index + 1,
                )
            elif option not in VALID_OPTIONS:
                report.add(
                    f"Invalid option '{option}'. Valid options: {', '.join(VALID_OPTIONS)}",
                    index + 1,
                )
            elif column_type is not None and not is_option_compatible(option, column_type):
                report.add(
                    f"Option '{option}' is not compatible with type '{column_type}'",
                    index + 1,
                )

    def _check_column_properties(
        self, source: CubeSource, index: int, line: str, report: _FileReport
    ) -> None:
        match = PROPERTY_PATTERN.match(line)
        if not match or BLOCK_OPENER_PATTERN.match(line):
            return

        name = match.group(1)
        if source.inside_foreign_object(index):
            if name not in VALID_FOREIGN_KEY_PROPERTIES:
                report.add(
                    f"Invalid foreign key property '{name}'. "
                    f"Valid foreign key properties: {', '.join(VALID_FOREIGN_KEY_PROPERTIES)}",
                    index + 1,
                )
        elif source.inside_columns_block(index) and name not in VALID_COLUMN_PROPERTIES:
            report.add(
                f"Invalid property '{name}'. Valid properties: {', '.join(VALID_COLUMN_PROPERTIES)}",
                index + 1,
            )

        if EMPTY_PROPERTY_PATTERN.match(line):
            report.add(f"Property '{name}' is missing a value", index + 1)

    def _check_required_properties(
        self, source: CubeSource, index: int, line: str, report: _FileReport
    ) -> None:
        if not CLOSING_BRACE_PATTERN.match(line):
            return

        opening = source.opening_block(index)
        if opening is None:
            return

        opening_index, block_name = opening
        if block_name in TYPELESS_BLOCKS:
            return
        if not source.block_declares_type(opening_index, index):
            report.add(
                f"Column '{block_name}' is missing required 'type' property",
                opening_index + 1,
            )

    def _check_general_syntax(
        self, source: CubeSource, index: int, line: str, report: _FileReport
    ) -> None:
        if count_quotes(line) % 2 != 0:
            report.add("Mismatched quotes detected", index + 1)

        if ("@database" in line or "@table" in line) and not STRING_ANNOTATION_PATTERN.search(line):
            report.add(
                'Invalid annotation syntax. Expected format: @annotation("value")',
                index + 1,
            )

        if "@meta" in line and not META_ANNOTATION_PATTERN.search(line):
            report.add("Invalid @meta syntax. Expected format: @meta({ ... })", index + 1)

    def _check_structure(self, source: CubeSource, file_path: str, report: _FileReport) -> None:
        if not source.contains("@database"):
            report.add("Missing required @database annotation")

        if TABLE_FILE_MARKER in Path(file_path).name and not source.contains("@columns"):
            report.add("Table cube files require @columns annotation")


def is_option_compatible(option: str, column_type: str) -> bool:
    """Check an option against the column type it is applied to."""
    compatible_types = OPTION_TYPE_COMPATIBILITY.get(option)
    if compatible_types is None:
        return True
    return column_type in compatible_types
