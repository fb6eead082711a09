"""Puntuación 0-100 de un conjunto de hallazgos consolidados."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from formcheck.config.settings import (
    MAX_SCORE,
    MIN_SCORE,
    MODERATE_DEDUCTION,
    NO_ISSUES_SCORE,
    SEVERE_DEDUCTION,
)
from formcheck.core.types import Severity
from formcheck.pipeline_data import Finding

SEVERITY_DEDUCTION = {
    Severity.GOOD: 0.0,
    Severity.MODERATE: MODERATE_DEDUCTION,
    Severity.SEVERE: SEVERE_DEDUCTION,
}


def score_findings(findings: Iterable[Finding]) -> float:
    """Sin hallazgos devuelve 85.0; si no, 100 menos las deducciones, acotado a [0, 100]."""

    findings = list(findings)
    if not findings:
        return NO_ISSUES_SCORE
    deduction = sum(SEVERITY_DEDUCTION[f.severity] for f in findings)
    return float(np.clip(MAX_SCORE - deduction, MIN_SCORE, MAX_SCORE))


__all__ = ["score_findings", "SEVERITY_DEDUCTION"]
