"""Consolidación de hallazgos de todos los fotogramas en un informe sin duplicados."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple, Union

from formcheck.core.types import FeedbackCategory
from formcheck.pipeline_data import Finding, FrameFinding


def consolidate(findings: Iterable[Union[Finding, FrameFinding]]) -> List[Finding]:
    """Agrupar por ``(category, message)`` conservando la peor gravedad.

    El resultado no depende del orden de entrada: se ordena por categoría y
    mensaje para que los informes sean reproducibles. A igual gravedad se
    conserva el primero visto; dentro de un grupo la sugerencia es la misma."""

    worst: Dict[Tuple[FeedbackCategory, str], Finding] = {}
    for item in findings:
        finding = item.finding if isinstance(item, FrameFinding) else item
        key = (finding.category, finding.message)
        current = worst.get(key)
        if current is None or finding.severity.rank > current.severity.rank:
            worst[key] = finding
    return sorted(worst.values(), key=lambda f: (f.category.value, f.message))


__all__ = ["consolidate"]
