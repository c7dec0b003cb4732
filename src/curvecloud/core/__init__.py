"""Core computation modules for curvecloud."""

from curvecloud.core.curves import CurveId, CurveLibrary, ParticleAuxData
from curvecloud.core.gesture import GestureMapper
from curvecloud.core.handoff import LandmarkMailbox
from curvecloud.core.smoother import ControlSignals, ParameterSmoother

__all__ = [
    "ControlSignals",
    "CurveId",
    "CurveLibrary",
    "GestureMapper",
    "LandmarkMailbox",
    "ParameterSmoother",
    "ParticleAuxData",
]
