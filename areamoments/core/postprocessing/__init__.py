
from areamoments.core.postprocessing.report import (
    DerivedQuantityCalculator, ReportRecord
)


__all__ = [
    'DerivedQuantityCalculator',
    'ReportRecord',
]
