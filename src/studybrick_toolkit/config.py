"""
Module: config

Purpose:
    Engine configuration. Immutable dataclass validated on construction,
    optionally loaded from a JSON settings file. A missing or malformed
    settings file falls back to defaults and never stops the tool from
    starting; an explicit but invalid value raises ConfigError.

Key Classes:
    - EngineConfig: Paper builder settings
    - ConfigError: Invalid configuration value

Key Functions:
    - load_config(): Read settings JSON with graceful fallback

Dependencies:
    - dataclasses (std)
    - json (std)

Used By:
    - session.PaperBuilderSession
    - cli
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from .paper.config import PaginationMode, PaperConfig
from .utils.paths import get_app_data_dir

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Invalid configuration value."""
    pass


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for the paper builder (immutable).

    Attributes:
        data_dir: Per-device state directory (drafts, export history)
        draft_name: Draft the interactive session works on
        max_questions_per_paper: Selection cap
        max_exports_per_hour: Export rate limit, 0 disables
        export_filename: File name of exported papers
        default_institute_name: Header default for new drafts
        default_exam_title: Title default for new drafts
        pagination: SINGLE (one tall page) or PAGED
        paper: Print layout settings

    Example:
        >>> config = EngineConfig(data_dir=Path("/tmp/sb"))
        >>> config.max_questions_per_paper
        100
    """

    data_dir: Path = field(default_factory=get_app_data_dir)
    draft_name: str = "default"
    max_questions_per_paper: int = 100
    max_exports_per_hour: int = 5
    export_filename: str = "studybrick-paper.pdf"
    default_institute_name: str = "StudyBrick Institute"
    default_exam_title: str = "Mock Test 1"
    pagination: PaginationMode = PaginationMode.SINGLE
    paper: PaperConfig = field(default_factory=PaperConfig)

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.max_questions_per_paper <= 0:
            raise ConfigError(
                f"max_questions_per_paper must be positive: {self.max_questions_per_paper}"
            )
        if self.max_exports_per_hour < 0:
            raise ConfigError(
                f"max_exports_per_hour must be non-negative: {self.max_exports_per_hour}"
            )
        if not self.draft_name.strip():
            raise ConfigError("draft_name must be non-empty")
        if not self.export_filename.lower().endswith(".pdf"):
            raise ConfigError(f"export_filename must end in .pdf: {self.export_filename!r}")


def load_config(path: Optional[Path] = None, **overrides: Any) -> EngineConfig:
    """
    Load engine configuration from a JSON file.

    Unknown keys are ignored. A missing or unreadable file yields defaults
    (plus ``overrides``) with a warning.

    Args:
        path: Settings JSON path, or None for defaults
        **overrides: Field values that win over the file

    Returns:
        EngineConfig

    Raises:
        ConfigError: If a provided value is invalid
    """
    values: dict[str, Any] = {}

    if path is not None:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(raw, dict):
                values.update(raw)
            else:
                logger.warning(f"Settings file {path} is not an object, using defaults")
        except FileNotFoundError:
            logger.info(f"No settings file at {path}, using defaults")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Settings file {path} could not be read ({e}), using defaults")

    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(EngineConfig)}
    ignored = sorted(set(values) - known)
    if ignored:
        logger.debug(f"Ignoring unknown settings: {ignored}")

    kwargs = {k: v for k, v in values.items() if k in known}
    try:
        if "data_dir" in kwargs:
            kwargs["data_dir"] = Path(kwargs["data_dir"]).expanduser()
        if "pagination" in kwargs and not isinstance(kwargs["pagination"], PaginationMode):
            kwargs["pagination"] = PaginationMode(str(kwargs["pagination"]).lower())
        if "paper" in kwargs and isinstance(kwargs["paper"], dict):
            paper = dict(kwargs["paper"])
            if "instructions" in paper:
                paper["instructions"] = tuple(paper["instructions"])
            kwargs["paper"] = PaperConfig(**paper)
        for key in ("max_questions_per_paper", "max_exports_per_hour"):
            if key in kwargs:
                kwargs[key] = int(kwargs[key])
        return EngineConfig(**kwargs)
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid settings: {e}") from e
