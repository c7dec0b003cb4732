"""
Hand-landmark feature extraction and gesture-to-control mapping.

A landmark frame is 21 normalized (x, y) image points in the MediaPipe
hand topology. Three scalar features are read from it:

  openness  - how far the fingertips reach relative to their bases [0, 1]
  distance  - apparent palm size, a proxy for distance to the camera [0, 1]
  rotation  - angle of the wrist -> middle-finger-base vector from "up"

and turned into target values for the spread / scale / rotation signals.
"""

import enum
import logging
import math
from typing import NamedTuple, Optional

import numpy as np

from curvecloud.config import validate_sensitivity
from curvecloud.core.smoother import REST_ROTATION, REST_SCALE, REST_SPREAD
from curvecloud.errors import InvalidInputError

logger = logging.getLogger(__name__)

NUM_LANDMARKS: int = 21

DEFAULT_SENSITIVITY: float = 5.0

# Palm-size calibration: sizes in [0.08, 0.43] map linearly onto [0, 1]
PALM_SIZE_MIN: float = 0.08
PALM_SIZE_SPAN: float = 0.35

# Target mapping
SPREAD_BASE, SPREAD_SPAN = 0.2, 3.8
SCALE_BASE, SCALE_SPAN = 0.3, 2.0
ROTATION_GAIN: float = 0.3


class HandLandmark(enum.IntEnum):
    """Landmark indices of the 21-point hand model."""

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


FINGER_TIPS = (
    HandLandmark.THUMB_TIP,
    HandLandmark.INDEX_FINGER_TIP,
    HandLandmark.MIDDLE_FINGER_TIP,
    HandLandmark.RING_FINGER_TIP,
    HandLandmark.PINKY_TIP,
)
FINGER_BASES = (
    HandLandmark.THUMB_MCP,
    HandLandmark.INDEX_FINGER_MCP,
    HandLandmark.MIDDLE_FINGER_MCP,
    HandLandmark.RING_FINGER_MCP,
    HandLandmark.PINKY_MCP,
)


class HandFeatures(NamedTuple):
    openness: float
    distance: float
    rotation: float  # radians


class GestureTargets(NamedTuple):
    spread: float
    scale: float
    rotation: float


REST_TARGETS = GestureTargets(REST_SPREAD, REST_SCALE, REST_ROTATION)


# ---------------------------------------------------------------------------
# Input normalisation
# ---------------------------------------------------------------------------

def _as_points(frame) -> np.ndarray:
    # MediaPipe NormalizedLandmarkList carries its points in .landmark
    points = getattr(frame, "landmark", frame)
    if isinstance(points, np.ndarray):
        return points
    points = list(points)
    if points and hasattr(points[0], "x"):
        return np.array([(p.x, p.y) for p in points], dtype=np.float64)
    return np.asarray(points, dtype=np.float64)


def validate_landmarks(frame) -> np.ndarray:
    """
    Coerce a landmark frame into a (21, 2) float array.

    Accepts an array-like of shape (21, 2) or (21, 3) (z is dropped), a
    sequence of objects with .x/.y attributes, or an object exposing such
    a sequence as .landmark.

    Raises:
        InvalidInputError: wrong count or shape, non-numeric, non-finite,
            or coordinates outside [0, 1].
    """
    try:
        points = np.asarray(_as_points(frame), dtype=np.float64)
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidInputError(f"landmark frame is not numeric: {e}") from e

    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise InvalidInputError(f"landmark frame must be (21, 2) or (21, 3), got {points.shape}")
    if points.shape[0] != NUM_LANDMARKS:
        raise InvalidInputError(f"expected {NUM_LANDMARKS} landmarks, got {points.shape[0]}")

    xy = points[:, :2]
    if not np.all(np.isfinite(xy)):
        raise InvalidInputError("landmark coordinates must be finite")
    if np.any(xy < 0.0) or np.any(xy > 1.0):
        raise InvalidInputError("landmark coordinates must lie in [0, 1]")
    return xy


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------

def hand_openness(landmarks: np.ndarray) -> float:
    """Mean over five fingers of min(tip_dist / (2 * base_dist), 1)."""
    wrist = landmarks[HandLandmark.WRIST]
    tip_dist = np.linalg.norm(landmarks[list(FINGER_TIPS)] - wrist, axis=1)
    base_dist = np.linalg.norm(landmarks[list(FINGER_BASES)] - wrist, axis=1)

    ratios = np.empty(len(FINGER_TIPS), dtype=np.float64)
    degenerate = base_dist == 0.0
    ratios[~degenerate] = tip_dist[~degenerate] / (2.0 * base_dist[~degenerate])
    # A base on top of the wrist gives no scale; any reach counts as open
    ratios[degenerate] = np.where(tip_dist[degenerate] > 0.0, 1.0, 0.0)
    return float(np.minimum(ratios, 1.0).mean())


def hand_distance(landmarks: np.ndarray) -> float:
    """Palm size mapped onto [0, 1]; larger means closer to the camera."""
    width = np.linalg.norm(
        landmarks[HandLandmark.INDEX_FINGER_MCP] - landmarks[HandLandmark.PINKY_MCP]
    )
    height = np.linalg.norm(
        landmarks[HandLandmark.WRIST] - landmarks[HandLandmark.MIDDLE_FINGER_MCP]
    )
    palm_size = (width + height) / 2.0
    return float(np.clip((palm_size - PALM_SIZE_MIN) / PALM_SIZE_SPAN, 0.0, 1.0))


def hand_rotation(landmarks: np.ndarray) -> float:
    """Angle of wrist -> middle base from image "up" (y grows downward)."""
    dx, dy = landmarks[HandLandmark.MIDDLE_FINGER_MCP] - landmarks[HandLandmark.WRIST]
    return math.atan2(dx, -dy)


def extract_features(landmarks: np.ndarray) -> HandFeatures:
    return HandFeatures(
        openness=hand_openness(landmarks),
        distance=hand_distance(landmarks),
        rotation=hand_rotation(landmarks),
    )


def gesture_targets(features: HandFeatures, sensitivity: float = DEFAULT_SENSITIVITY) -> GestureTargets:
    """
    Apply the sensitivity response and map features to control targets.

    The power law f ** (1 / s) keeps small gestures responsive while
    compressing near saturation; distance uses half the sensitivity.
    """
    s = validate_sensitivity(sensitivity)
    openness = min(max(features.openness, 0.0), 1.0) ** (1.0 / s)
    distance = min(max(features.distance, 0.0), 1.0) ** (1.0 / (s * 0.5))
    return GestureTargets(
        spread=SPREAD_BASE + openness * SPREAD_SPAN,
        scale=SCALE_BASE + distance * SCALE_SPAN,
        rotation=features.rotation * s * ROTATION_GAIN,
    )


class GestureMapper:
    """
    Turns landmark frames into control targets.

    Stateless apart from the user sensitivity. A missing or malformed
    frame maps to REST_TARGETS.
    """

    def __init__(self, sensitivity: float = DEFAULT_SENSITIVITY):
        self.sensitivity = sensitivity

    @property
    def sensitivity(self) -> float:
        return self._sensitivity

    @sensitivity.setter
    def sensitivity(self, value: float):
        self._sensitivity = validate_sensitivity(value)

    def features(self, frame) -> Optional[HandFeatures]:
        """Raw features for a frame, or None for no hand / malformed input."""
        if frame is None:
            return None
        try:
            landmarks = validate_landmarks(frame)
        except InvalidInputError as e:
            logger.debug("Dropping malformed landmark frame: %s", e)
            return None
        return extract_features(landmarks)

    def map_frame(self, frame) -> GestureTargets:
        features = self.features(frame)
        if features is None:
            return REST_TARGETS
        return gesture_targets(features, self._sensitivity)
