
from areamoments.core import postprocessing, preprocessing, solution
from areamoments.core.config import Settings
from areamoments.core.face import (
    FaceSource, FacetFace, calculate_face, calculate_mesh
)
from areamoments.core.postprocessing import *  # noqa: F401, F403
from areamoments.core.preprocessing import *  # noqa: F401, F403
from areamoments.core.session import (
    ComputeWorker, MomentsSession, SelectionItem
)
from areamoments.core.solution import *  # noqa: F401, F403

__all__ = [
    'calculate_face',
    'calculate_mesh',
    'ComputeWorker',
    'FaceSource',
    'FacetFace',
    'MomentsSession',
    'postprocessing',
    'preprocessing',
    'SelectionItem',
    'Settings',
    'solution',
]
