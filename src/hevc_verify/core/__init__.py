"""Core / service layer: pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No subprocess calls; external tools are reached only through the
  protocols in :mod:`hevc_verify.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from hevc_verify.core.analyzer import QualityAnalysisService
from hevc_verify.core.batch_service import BatchVerifier
from hevc_verify.core.config import VerificationConfig
from hevc_verify.core.models import (
    CheckName,
    CheckResult,
    FilePair,
    MediaDescriptor,
    QualityMetrics,
    QualityRecord,
    RunReport,
    Verdict,
    VerdictStatus,
    VerificationMode,
)
from hevc_verify.core.verification_engine import VerificationEngine

__all__: list[str] = [
    "BatchVerifier",
    "CheckName",
    "CheckResult",
    "FilePair",
    "MediaDescriptor",
    "QualityAnalysisService",
    "QualityMetrics",
    "QualityRecord",
    "RunReport",
    "Verdict",
    "VerdictStatus",
    "VerificationConfig",
    "VerificationEngine",
    "VerificationMode",
]
