"""
curvecloud - a point cloud engine that morphs between parametric 3D curves.

Curve buffers, staggered transitions and hand-gesture control signals.
"""

from curvecloud.config import EngineConfig
from curvecloud.core.curves import CurveId, CurveLibrary, generate, generate_library
from curvecloud.core.gesture import GestureMapper, GestureTargets, HandFeatures
from curvecloud.core.handoff import LandmarkMailbox
from curvecloud.core.smoother import ControlSignals, ParameterSmoother
from curvecloud.engine import FrameState, ParticleEngine
from curvecloud.errors import CurveCloudError, InvalidArgumentError, InvalidInputError

__version__ = "0.1.0"

__all__ = [
    "ControlSignals",
    "CurveCloudError",
    "CurveId",
    "CurveLibrary",
    "EngineConfig",
    "FrameState",
    "GestureMapper",
    "GestureTargets",
    "HandFeatures",
    "InvalidArgumentError",
    "InvalidInputError",
    "LandmarkMailbox",
    "ParameterSmoother",
    "ParticleEngine",
    "generate",
    "generate_library",
]
