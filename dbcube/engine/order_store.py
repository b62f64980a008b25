"""
Persistence of the last computed execution order.

The order is written to ``<project root>/.dbcube/orderexecute.json`` after
every dependency resolution and read back to sequence later runs.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from dbcube.parser.shared.constants import EXECUTION_ORDER_FILE, STATE_FOLDER
from dbcube.parser.shared.file_utils import resolve_table_name
from dbcube.parser.shared.types import ExecutionOrder, FilePath

from .exceptions import OrderStoreError

logger = logging.getLogger(__name__)


class ExecutionOrderStore:
    """
    Single-owner store for the persisted ExecutionOrder.

    Every save overwrites the previous content. A missing or unreadable file
    means there is no prior order.
    """

    def __init__(self, project_root: FilePath = "."):
        """
        Initialize the store.

        Args:
            project_root: Project folder; the order lives in its ``.dbcube`` folder
        """
        self.project_root = Path(project_root)
        self.order_file = self.project_root / STATE_FOLDER / EXECUTION_ORDER_FILE

    def save(self, order: ExecutionOrder) -> Path:
        """
        Write the execution order, replacing any previous one.

        Raises:
            OrderStoreError: If the file cannot be written
        """
        try:
            self.order_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.order_file, "w", encoding="utf-8") as f:
                json.dump(order.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise OrderStoreError(f"Failed to save execution order to {self.order_file}: {e}") from e

        logger.debug(f"Execution order saved to {self.order_file}")
        return self.order_file

    def load(self) -> ExecutionOrder | None:
        """Read the saved execution order; None when there is none or it is unreadable."""
        if not self.order_file.exists():
            return None

        try:
            with open(self.order_file, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            return ExecutionOrder.from_dict(data)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable execution order {self.order_file}: {e}")
            return None

    def reorder(
        self, cube_files: Iterable[FilePath], category: str, order: ExecutionOrder | None = None
    ) -> list[Path]:
        """
        Order cube files following the saved table order.

        Seeders reuse the table order so that seed data respects foreign keys.
        Files whose table is not in the saved order, and later files repeating
        an already-seen table name, keep their relative order at the end.

        Args:
            cube_files: Cube files in discovery order
            category: Cube category, used for the file-name fallback
            order: Order to follow instead of the saved one

        Returns:
            The reordered files; the input order when nothing is saved
        """
        files = [Path(file_path) for file_path in cube_files]
        saved = order if order is not None else self.load()
        if saved is None:
            return files

        by_table: dict[str, int] = {}
        for index, file_path in enumerate(files):
            table_name = resolve_table_name(file_path, category)
            if table_name in by_table:
                logger.warning(
                    f"Table '{table_name}' is declared by both {files[by_table[table_name]]} and {file_path}"
                )
                continue
            by_table[table_name] = index

        placed: list[int] = []
        for table_name in saved.tables:
            index = by_table.get(table_name)
            if index is not None and index not in placed:
                placed.append(index)

        remaining = [index for index in range(len(files)) if index not in placed]
        return [files[index] for index in placed + remaining]
