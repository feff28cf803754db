from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class RuleDefaultDTO(BaseModel):
    # Property defaults ride along as extra fields, e.g. ``maxSteps``.
    model_config = ConfigDict(extra="allow")

    enabled: bool
    severity: str


class DiagnosticDTO(BaseModel):
    path: str
    line: int
    column: int
    end_line: int
    end_column: int
    severity: str
    code: Optional[Union[str, int]] = None
    message: str


class FileReportDTO(BaseModel):
    path: str
    uri: str
    diagnostics: List[DiagnosticDTO] = []


class CheckReportDTO(BaseModel):
    files: List[FileReportDTO]
    counts: Dict[str, int] = {}
    exit_code: int = 0
