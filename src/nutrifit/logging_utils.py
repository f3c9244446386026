# logging_utils.py
"""
Shared structured logging utilities.

Goal:
- One place to define:
  * Run / execution ID
  * Log line format
  * Module "purposes" in human language

Format (one line per log entry):
<RunId>|<Date>|<Time>|<Level>|<File:Line>|<Module.Func>|<ModulePurpose>|
<InvokingFunc>|<InvokingFuncPurpose>|<Detail>|<NextStep>|<Resolution>|<END>
"""

from __future__ import annotations

import datetime
import logging
import uuid
from typing import Dict, Optional, Union

RUN_ID: str = uuid.uuid4().hex[:8]


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter that emits a single '|' separated line conforming
    to the log template above.
    """

    # High-level purposes by module name
    MODULE_PURPOSES: Dict[str, str] = {
        "vectorizer": "Validate user profile fields and encode the model feature row",
        "predictor": "Reduce classifier scores to a single cluster id",
        "scorers": "Own the lifetime of the serialized cluster classifier",
        "recipe_catalog": "Load and cache the cluster-tagged recipe CSV",
        "engine": "Run the profile -> cluster -> meal plan pipeline",
        "recommendation_example": "Command-line recommendation for one profile",
        "dump_catalog": "Diagnostic dump of every recipe in the catalog",
        "concurrency": "Time-bounded execution of in-process calls",
        "config": "Read recommender settings from environment variables",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        """Format log record into structured pipe-delimited format."""
        dt = datetime.datetime.fromtimestamp(record.created)
        date_str = dt.strftime("%Y-%m-%d")
        time_str = dt.strftime("%H:%M:%S")

        run_id = getattr(record, "run_id", RUN_ID)

        level = record.levelname
        code_location = f"{record.filename}:{record.lineno}"
        func_name = record.funcName
        module_name = record.module
        module_purpose = self.MODULE_PURPOSES.get(module_name, "")

        # Optional extra context supplied via logger calls
        invoking_func = getattr(record, "invoking_func", "")
        invoking_purpose = getattr(record, "invoking_purpose", "")
        next_step = getattr(record, "next_step", "")
        resolution = getattr(record, "resolution", "")

        detail = record.getMessage()
        if record.exc_info:
            detail = f"{detail} | EXC={record.exc_info[1]!r}"

        return (
            f"{run_id}|{date_str}|{time_str}|{level}|{code_location}|"
            f"{module_name}.{func_name}|{module_purpose}|"
            f"{invoking_func}|{invoking_purpose}|"
            f"{detail}|{next_step}|{resolution}|<END>"
        )


def init_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Initialize root logger once with our StructuredFormatter.

    Call get_logger() from modules instead of calling logging.basicConfig()
    everywhere, so configuration stays central. When no level is given the
    NUTRIFIT_LOG_LEVEL setting is used.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured – avoid double handlers in REPL / notebooks / pytest
        return

    if level is None:
        from nutrifit.config import get_settings

        level = get_settings().log_level

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger configured with structured formatting.

    Usage:
        logger = get_logger(__name__)
        logger.info(
            "Something happened",
            extra={
                "invoking_func": "some_function",
                "invoking_purpose": "High-level purpose",
                "next_step": "What happens next",
                "resolution": "How to fix if error",
            },
        )
    """
    init_logging()
    return logging.getLogger(name)
