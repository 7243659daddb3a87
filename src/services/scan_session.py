"""
Gate-side scanner state.

A camera keeps reporting the same QR code many times a second. Once a
payload is accepted the session ignores further frames until the operator
presses "scan next", so one physical ticket is submitted once per session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from models.verification import VerificationKind, VerificationResult
from services.verification_service import RawPayload, TicketVerifier
from utils.logging_config import get_logger

logger = get_logger(__name__)


class ScanState(str, Enum):
    AWAITING_SCAN = "awaiting_scan"
    VERIFYING = "verifying"
    SHOWING_RESULT = "showing_result"


class Tone(str, Enum):
    """Visual treatment of a result card."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ResultDisplay:
    """What the result card shows."""

    tone: Tone
    title: str
    holder_name: Optional[str]
    initials: str
    time_label: Optional[str]
    pass_type: Optional[str] = None


def initials(name: Optional[str]) -> str:
    if not name:
        return "?"
    return "".join(part[0] for part in name.split() if part)[:2].upper() or "?"


def describe(result: VerificationResult) -> ResultDisplay:
    """Map a verification result to its on-screen treatment."""
    time_label = result.check_time.strftime("%H:%M") if result.check_time else None
    if result.kind is VerificationKind.VALID:
        return ResultDisplay(
            Tone.SUCCESS, "Ticket Valid", result.holder_name,
            initials(result.holder_name), time_label, "General Admission",
        )
    if result.kind is VerificationKind.ALREADY_USED:
        return ResultDisplay(
            Tone.WARNING, "Ticket Already Used", result.holder_name,
            initials(result.holder_name), time_label, "General Admission",
        )
    return ResultDisplay(Tone.ERROR, result.reason or "Invalid Ticket", None, "?", None)


class ScanSession:
    """One scanner screen: awaiting scan -> verifying -> showing result -> (scan next) awaiting."""

    def __init__(self, verifier: TicketVerifier):
        self._verifier = verifier
        self.state = ScanState.AWAITING_SCAN
        self.result: Optional[VerificationResult] = None

    @property
    def display(self) -> Optional[ResultDisplay]:
        return describe(self.result) if self.result is not None else None

    def on_scan(self, raw: RawPayload) -> Optional[VerificationResult]:
        """Handle a camera frame; returns None when the frame is ignored."""
        if self.state is not ScanState.AWAITING_SCAN:
            logger.debug("Scan ignored", extra={"state": self.state.value})
            return None
        return self._submit(raw)

    def submit_manual(self, code: str) -> Optional[VerificationResult]:
        """Handle an operator-typed code; blank input is ignored."""
        if not code or not code.strip() or self.state is not ScanState.AWAITING_SCAN:
            return None
        self.state = ScanState.VERIFYING
        return self._submit_result(self._verifier.verify_manual(code))

    def scan_next(self) -> None:
        """Dismiss the result card and resume scanning."""
        self.state = ScanState.AWAITING_SCAN
        self.result = None

    def _submit(self, raw: RawPayload) -> VerificationResult:
        self.state = ScanState.VERIFYING
        return self._submit_result(self._verifier.verify(raw))

    def _submit_result(self, result: VerificationResult) -> VerificationResult:
        self.state = ScanState.SHOWING_RESULT
        self.result = result
        return result
