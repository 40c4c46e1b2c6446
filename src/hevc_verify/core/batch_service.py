"""Sequential batch driver over discovered file pairs.

Owns the run's result accumulator.  Files are verified one at a time in
discovery order and the verdict tuple preserves that order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from hevc_verify.core.models import FilePair, RunReport, RunSummary, Verdict, VerdictStatus
from hevc_verify.core.protocols import CancelToken
from hevc_verify.core.verification_engine import VerificationEngine

logger = logging.getLogger(__name__)

VerdictCallback = Callable[[int, int, Verdict], None]
"""``(index, total, verdict)``: *index* is 1-based."""

CANCELLED_MESSAGE: str = "Verification cancelled"


class BatchVerifier:
    """Drive :class:`VerificationEngine` over an ordered list of pairs.

    Parameters
    ----------
    engine:
        The per-file verification engine.
    """

    def __init__(self, engine: VerificationEngine) -> None:
        self._engine = engine

    def run(
        self,
        pairs: Sequence[FilePair],
        *,
        cancel: CancelToken | None = None,
        on_verdict: VerdictCallback | None = None,
    ) -> RunReport:
        """Verify every pair and return the ordered :class:`RunReport`.

        *cancel* is checked between files.  Once it is set, every
        remaining pair gets an ``Error`` verdict so the report still
        covers all discovered files.
        """
        total = len(pairs)
        verdicts: list[Verdict] = []
        cancelled = False
        logger.info("Verifying %d file(s) in %s mode", total, self._engine.config.mode.label)

        for index, pair in enumerate(pairs, start=1):
            if not cancelled and cancel is not None and cancel.is_set():
                cancelled = True
                logger.warning("Run cancelled; %d file(s) left unverified", total - index + 1)
            if cancelled:
                verdict = self._cancelled_verdict(pair)
            else:
                verdict = self._engine.verify(pair)
            verdicts.append(verdict)
            if on_verdict is not None:
                self._notify(on_verdict, index, total, verdict)

        summary = RunSummary.from_verdicts(verdicts)
        logger.info(
            "Done: %d succeeded, %d failed, %d errored",
            summary.succeeded,
            summary.failed,
            summary.errored,
        )
        return RunReport(verdicts=tuple(verdicts), summary=summary, cancelled=cancelled)

    def _cancelled_verdict(self, pair: FilePair) -> Verdict:
        return Verdict(
            converted_path=pair.converted,
            source_path=pair.source,
            mode=self._engine.config.mode,
            status=VerdictStatus.ERROR,
            errors=(CANCELLED_MESSAGE,),
        )

    @staticmethod
    def _notify(callback: VerdictCallback, index: int, total: int, verdict: Verdict) -> None:
        """Report progress; a broken observer never affects the run."""
        try:
            callback(index, total, verdict)
        except Exception:  # noqa: BLE001
            logger.warning("Progress callback failed for %s", verdict.name, exc_info=True)
