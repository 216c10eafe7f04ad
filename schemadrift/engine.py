"""Main analysis engine for SchemaDrift."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from .differ import diff_schemas
from .exceptions import (
    ConfigError,
    MaxDepthExceededError,
    PayloadSizeError,
    UnsupportedValueError,
    ValidationError,
)
from .jsonpath_utils import resolve_change_values
from .models import (
    AnalysisResult,
    EngineConfig,
    ErrorResponse,
    ExecutionInfo,
    LogLevel,
)
from .scorer import risk_level, score_breakdown
from .utils import check_depth, get_json_size_mb


logger = logging.getLogger(__name__)

LOG_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class SchemaDriftEngine:
    """
    Analysis engine that guards, diffs and scores two documents:

    1. Input Guards: JSON-only values, payload size and nesting depth limits
    2. Diffing: Lock-step structural walk producing a DiffReport
    3. Scoring: Severity-weighted, saturating 0-100 risk score
    """

    VERSION = "1.0.0"

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Engine configuration (uses defaults if not provided)
        """
        self.config = config or EngineConfig()

    def analyze(self, old_json: Any, new_json: Any) -> AnalysisResult | ErrorResponse:
        """
        Compare two JSON documents and assess the migration risk.

        Args:
            old_json: The baseline API response
            new_json: The response of the new API version

        Returns:
            AnalysisResult on success, ErrorResponse on validation/processing errors
        """
        start_time = time.time()

        try:
            self._validate_inputs(old_json, new_json)

            report = diff_schemas(old_json, new_json)
            breakdown = score_breakdown(report, self.config.scoring)
            level = risk_level(breakdown.score, self.config.scoring)

            values = None
            if self.config.include_values:
                values = resolve_change_values(report.changes, old_json, new_json)

            duration_ms = int((time.time() - start_time) * 1000)
            logger.debug(
                "Analyzed documents: %d changes (added=%d removed=%d risky=%d), score=%d in %dms",
                len(report), report.summary.added, report.summary.removed,
                report.summary.risky, breakdown.score, duration_ms
            )

            return AnalysisResult(
                report=report,
                breakdown=breakdown,
                risk_level=level,
                execution=ExecutionInfo(
                    duration_ms=duration_ms,
                    timestamp=datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
                    engine_version=self.VERSION
                ),
                values=values,
            )

        except ValidationError as e:
            return self._create_error_response("VALIDATION_ERROR", e.message, e.details)
        except PayloadSizeError as e:
            return self._create_error_response(
                "PAYLOAD_SIZE_ERROR",
                str(e),
                {"size_mb": e.size_mb, "limit_mb": e.limit_mb}
            )
        except MaxDepthExceededError as e:
            return self._create_error_response(
                "MAX_DEPTH_ERROR",
                str(e),
                {"depth": e.depth, "path": e.path}
            )
        except ConfigError as e:
            return self._create_error_response(
                "CONFIG_ERROR",
                str(e),
                {"key": e.key}
            )
        except Exception as e:
            logger.exception("Unexpected failure while analyzing documents")
            return self._create_error_response(
                "PROCESSING_ERROR",
                str(e),
                {"type": type(e).__name__}
            )

    def _validate_inputs(self, old_json: Any, new_json: Any):
        """Validate input documents before diffing."""
        for name, document in (("old_json", old_json), ("new_json", new_json)):
            try:
                check_depth(document, self.config.max_depth)
            except UnsupportedValueError as e:
                raise ValidationError(
                    f"{name} is not a JSON document: {e.message}",
                    dict(e.details, document=name)
                )

        # Check payload sizes
        old_size = get_json_size_mb(old_json)
        new_size = get_json_size_mb(new_json)

        if old_size > self.config.max_payload_size_mb:
            raise PayloadSizeError(old_size, self.config.max_payload_size_mb)
        if new_size > self.config.max_payload_size_mb:
            raise PayloadSizeError(new_size, self.config.max_payload_size_mb)

    def _create_error_response(self, code: str, message: str, details: dict) -> ErrorResponse:
        """Create an error response."""
        logger.warning("Analysis failed [%s]: %s", code, message)
        return ErrorResponse(
            success=False,
            error={
                "code": code,
                "message": message,
                "details": details
            }
        )


def analyze(
    old_json: Any,
    new_json: Any,
    config: Optional[EngineConfig] = None
) -> AnalysisResult | ErrorResponse:
    """
    Convenience function to analyze two JSON documents.

    Args:
        old_json: The baseline API response
        new_json: The response of the new API version
        config: Optional engine configuration

    Returns:
        AnalysisResult on success, ErrorResponse on errors
    """
    engine = SchemaDriftEngine(config)
    return engine.analyze(old_json, new_json)


def configure_logging(level: LogLevel = LogLevel.INFO) -> None:
    """Attach a console handler to the package logger at the given level."""
    package_logger = logging.getLogger("schemadrift")
    package_logger.setLevel(LOG_LEVELS[level])
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)
