"""
CLI entry point for headless engine runs.

Usage:
    curvecloud-sim [options]

Drives a ParticleEngine on a synthetic frame clock, optionally with a
scripted hand, and reports curve switches, control signals and tick
throughput.
"""

import argparse
import logging
import math
import sys
import time

import numpy as np

from curvecloud.config import EngineConfig
from curvecloud.core.curves import CURVE_ORDER
from curvecloud.core.gesture import FINGER_BASES, FINGER_TIPS, HandLandmark
from curvecloud.engine import ParticleEngine
from curvecloud.errors import CurveCloudError

# Finger fan angles from "up", thumb through pinky
_FINGER_FAN = (-0.9, -0.25, 0.0, 0.25, 0.5)


def _progress_bar(current: int, total: int, curve_name: str, tick_ms: float, width: int = 30):
    """Print frame progress with the active curve and mean tick cost."""
    done = current / max(total, 1)
    bar = "=" * int(width * done) + " " * (width - int(width * done))
    status = f"frame {current:>6}/{total}  {tick_ms:6.3f} ms/tick  {curve_name}"
    if sys.stdout.isatty():
        # Pad so a shorter curve name fully overwrites the previous line
        sys.stdout.write(f"\r|{bar}| {status:<60}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    elif current % max(1, total // 10) == 0 or current >= total:
        print(status, flush=True)


def synthetic_hand(
    openness: float,
    palm: float = 0.15,
    angle: float = 0.0,
    center=(0.5, 0.65),
) -> np.ndarray:
    """A (21, 2) landmark frame with the given openness, palm length and tilt."""
    center = np.asarray(center, dtype=np.float64)
    lm = np.tile(center, (21, 1))
    for fan, base, tip in zip(_FINGER_FAN, FINGER_BASES, FINGER_TIPS):
        a = angle + fan
        direction = np.array([math.sin(a), -math.cos(a)])
        base_pt = center + direction * palm
        tip_pt = center + direction * palm * 2.0 * openness
        joints = range(base, tip + 1)
        for k, idx in enumerate(joints):
            frac = k / (len(joints) - 1)
            lm[idx] = base_pt + (tip_pt - base_pt) * frac
        if base == HandLandmark.THUMB_MCP:
            lm[HandLandmark.THUMB_CMC] = center + direction * palm * 0.5
    return np.clip(lm, 0.0, 1.0)


def _describe(engine: ParticleEngine):
    print(f"Curve bounds at {engine.count} particles:")
    for curve in CURVE_ORDER:
        b = engine.library.bounds(curve)
        print(
            f"  {curve.value:<12} "
            f"x [{b[0, 0]:8.1f}, {b[0, 1]:8.1f}]  "
            f"y [{b[1, 0]:8.1f}, {b[1, 1]:8.1f}]  "
            f"z [{b[2, 0]:8.1f}, {b[2, 1]:8.1f}]"
        )


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="curvecloud-sim",
        description="Run the curve morphing engine headless on a synthetic clock",
    )
    parser.add_argument("-n", "--particles", type=int, default=30000, help="Particle count (default: 30000)")
    parser.add_argument("--frames", type=int, default=1200, help="Frames to simulate (default: 1200)")
    parser.add_argument("-f", "--fps", type=int, default=60, help="Frames per second (default: 60)")
    parser.add_argument(
        "--interval", type=float, default=8000.0,
        help="Auto-switch interval in ms (default: 8000)",
    )
    parser.add_argument("--no-auto-switch", action="store_true", help="Disable automatic curve switching")
    parser.add_argument(
        "--curve", type=str, default=None,
        choices=[c.value for c in CURVE_ORDER],
        help="Initial curve (default: lissajous)",
    )
    parser.add_argument("-s", "--sensitivity", type=float, default=5.0, help="Gesture sensitivity (default: 5.0)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--gesture", action="store_true", help="Drive the engine with a scripted hand")
    parser.add_argument("--describe", action="store_true", help="Print per-curve bounding boxes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine events")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.fps <= 0 or args.frames < 0:
        print("Error: --fps must be positive and --frames non-negative", file=sys.stderr)
        return 1

    initial = 0
    if args.curve is not None:
        initial = [c.value for c in CURVE_ORDER].index(args.curve)

    try:
        config = EngineConfig(
            particle_count=args.particles,
            seed=args.seed,
            initial_curve=initial,
            auto_switch=not args.no_auto_switch,
            switch_interval_ms=args.interval,
            gesture_sensitivity=args.sensitivity,
        )
        print(f"Generating {len(CURVE_ORDER)} curves x {args.particles} particles")
        t0 = time.time()
        engine = ParticleEngine(config, clock=lambda: 0.0)
    except CurveCloudError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"  Generation took {time.time() - t0:.2f}s")

    if args.describe:
        _describe(engine)

    frame_ms = 1000.0 / args.fps
    print(f"\nSimulating {args.frames} frames @ {args.fps}fps, starting on {engine.current_curve.display_name}")

    switches = []
    tick_time = 0.0
    for frame in range(args.frames):
        now = frame * frame_ms
        if args.gesture:
            phase = now / 1000.0
            # Hand leaves the frame for part of each cycle
            if math.sin(phase * 0.7) > -0.8:
                engine.submit_landmarks(
                    synthetic_hand(
                        openness=0.5 + 0.5 * math.sin(phase * 2.0),
                        palm=0.08 + 0.06 * (1.0 + math.sin(phase * 0.5)),
                        angle=0.6 * math.sin(phase),
                    )
                )
            else:
                engine.submit_landmarks(None)

        t1 = time.perf_counter()
        state = engine.tick(now)
        tick_time += time.perf_counter() - t1

        if state.switched:
            switches.append((now, state.curve))
        _progress_bar(
            frame + 1, args.frames, state.curve.display_name,
            tick_time / (frame + 1) * 1000.0,
        )

    for at_ms, curve in switches:
        print(f"  {at_ms / 1000.0:7.2f}s  -> {curve.display_name}")

    signals = engine.signals.as_dict()
    print("\nDone!")
    print(f"  Curve: {engine.current_curve.display_name} ({engine.settled_fraction() * 100:.1f}% settled)")
    print(
        f"  Signals: spread={signals['spread']:.3f} scale={signals['scale']:.3f} "
        f"rotation={signals['rotation']:.3f}"
    )
    if args.frames:
        print(
            f"  Tick took {tick_time / args.frames * 1000.0:.3f} ms/frame "
            f"({args.frames / max(tick_time, 1e-9):.0f} ticks/s)"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
