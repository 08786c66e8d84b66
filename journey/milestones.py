"""Sanction and disbursal progress, derived from elapsed time."""

import math
from typing import List, TypedDict

SANCTION_DELAY_SECONDS = 3.0
DISBURSAL_STEP_SECONDS = 2.5

DISBURSAL_STATUSES: List[tuple[str, str]] = [
    ("Your loan is under process", "We have received your request."),
    ("Loan Sanctioned", "Your loan agreement is finalized."),
    ("Funds being transferred", "Payment is being processed."),
    ("Disbursed to University", "The funds are with your institute."),
]

SANCTION_NEXT_STEPS: List[str] = [
    "Download your sanction letter for your visa/admission process.",
    "Wait for disbursal confirmation. We'll notify you!",
]


class DisbursalEntry(TypedDict):
    stage: int
    title: str
    detail: str
    reached: bool


def sanction_approved(elapsed_seconds: float) -> bool:
    return elapsed_seconds >= SANCTION_DELAY_SECONDS


def disbursal_stage(elapsed_seconds: float) -> int:
    """1-based stage: starts at 1, one step per interval, stops at the last."""
    advanced = math.floor(max(elapsed_seconds, 0) / DISBURSAL_STEP_SECONDS)
    return min(1 + advanced, len(DISBURSAL_STATUSES))


def disbursal_complete(elapsed_seconds: float) -> bool:
    return disbursal_stage(elapsed_seconds) == len(DISBURSAL_STATUSES)


def disbursal_timeline(elapsed_seconds: float) -> List[DisbursalEntry]:
    stage = disbursal_stage(elapsed_seconds)
    return [
        DisbursalEntry(stage=i, title=title, detail=detail, reached=i <= stage)
        for i, (title, detail) in enumerate(DISBURSAL_STATUSES, start=1)
    ]
