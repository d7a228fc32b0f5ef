"""Excel export for the workbook model.

The spreadsheet library is an injected collaborator: callers hand a
:class:`WorkbookSerializer` to the export step, which first makes sure the
serializer is ready and then turns the workbook model into ``.xlsx`` bytes.
:class:`OpenpyxlSerializer` is the default implementation.
"""

from __future__ import annotations

import importlib
import logging
import re
from datetime import date
from io import BytesIO
from pathlib import Path
from types import ModuleType
from typing import Protocol

from plan_comparator.model import Workbook

logger = logging.getLogger(__name__)

EXPORT_FAILURE_MESSAGE = (
    "Unable to build Excel report. Please check your installation and try again."
)
DEFAULT_PROJECT_NAME = "Project"

_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')
_WHITESPACE_RUN = re.compile(r"\s+")


class ExportUnavailableError(RuntimeError):
    """Raised when the spreadsheet serializer cannot be made ready."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(EXPORT_FAILURE_MESSAGE)
        self.detail = detail


class WorkbookSerializer(Protocol):
    def ensure_available(self) -> None:
        """Prepare the serializer; safe to call repeatedly."""

    def serialize(self, workbook: Workbook) -> bytes:
        """Return the workbook encoded as spreadsheet bytes."""


class OpenpyxlSerializer:
    """Serialize workbook models to ``.xlsx`` using ``openpyxl``."""

    def __init__(self, module_name: str = "openpyxl") -> None:
        self._module_name = module_name
        self._module: ModuleType | None = None
        self._illegal_chars: re.Pattern[str] | None = None

    @property
    def available(self) -> bool:
        return self._module is not None

    def ensure_available(self) -> None:
        if self._module is not None:
            return
        try:
            module = importlib.import_module(self._module_name)
            cell_module = importlib.import_module(f"{self._module_name}.cell.cell")
        except ImportError as exc:
            logger.error("Spreadsheet library %s unavailable: %s", self._module_name, exc)
            raise ExportUnavailableError(str(exc)) from exc
        self._illegal_chars = cell_module.ILLEGAL_CHARACTERS_RE
        self._module = module

    def _clean(self, value: str) -> str:
        # Control characters cannot be stored in worksheet XML
        return self._illegal_chars.sub("", value)

    def serialize(self, workbook: Workbook) -> bytes:
        if self._module is None:
            raise ExportUnavailableError("serializer used before ensure_available()")

        book = self._module.Workbook()
        book.remove(book.active)  # Drop the default empty sheet
        for sheet in workbook:
            worksheet = book.create_sheet(title=self._clean(sheet.name))
            for row_idx, row in enumerate(sheet.grid, start=1):
                for col_idx, value in enumerate(row, start=1):
                    cell = worksheet.cell(
                        row=row_idx, column=col_idx, value=self._clean(value)
                    )
                    cell.data_type = "s"  # Keep "=..." names as text, not formulas

        buffer = BytesIO()
        book.save(buffer)
        return buffer.getvalue()


def format_project_filename(project_name: str | None, today: date) -> str:
    """Return ``{Project}_Audit_{YYYY-MM-DD}.xlsx`` for the download."""

    cleaned = _ILLEGAL_FILENAME_CHARS.sub("", project_name or "").strip()
    safe_name = _WHITESPACE_RUN.sub("-", cleaned) or DEFAULT_PROJECT_NAME
    return f"{safe_name}_Audit_{today.isoformat()}.xlsx"


def write_workbook(
    workbook: Workbook,
    output_dir: Path,
    serializer: WorkbookSerializer,
    *,
    project_name: str | None = None,
    today: date | None = None,
) -> Path:
    """Serialize ``workbook`` and write it under ``output_dir``.

    Raises :class:`ExportUnavailableError` when the serializer cannot be made
    ready; nothing is written in that case.
    """

    serializer.ensure_available()
    payload = serializer.serialize(workbook)

    output_path = Path(output_dir) / format_project_filename(
        project_name, today or date.today()
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(payload)
    logger.info("Workbook written to %s (%d sheets)", output_path, len(workbook))
    return output_path


__all__ = [
    "EXPORT_FAILURE_MESSAGE",
    "ExportUnavailableError",
    "OpenpyxlSerializer",
    "WorkbookSerializer",
    "format_project_filename",
    "write_workbook",
]
