"""
Motion Fusion - Main Entry Point
Drives the dual-sensor pipeline from the built-in simulator:
  1. Build the orchestrator
  2. Calibrate on a resting stream (optional)
  3. Feed the chosen scenario sample pair by sample pair
  4. Log detected patterns, final orientations and stream status

Usage:
    python run.py --scenario tap
    python run.py --scenario rotation --duration 3 --rate 100
    python run.py --scenario hand --no-calibration --verbose
"""

import argparse
import logging
import sys

from motion_fusion import FusionOrchestrator
from motion_fusion.simulator import SCENARIOS, DualSensorSimulator

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger('motion_fusion')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Hand + finger IMU fusion demo (simulated sensors)'
    )
    parser.add_argument(
        '--scenario',
        choices=SCENARIOS,
        default='tap',
        help='Simulated motion scenario (default: tap)'
    )
    parser.add_argument(
        '--duration',
        type=float,
        default=2.0,
        help='Scenario length in seconds (default: 2.0)'
    )
    parser.add_argument(
        '--rate',
        type=float,
        default=50.0,
        help='Sample rate per sensor in Hz (default: 50)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='RNG seed for reproducible noise'
    )
    parser.add_argument(
        '--calibration-seconds',
        type=float,
        default=1.0,
        help='Length of the resting calibration phase (default: 1.0)'
    )
    parser.add_argument(
        '--no-calibration',
        action='store_true',
        help='Skip calibration; sensors then report raw gravity'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    return parser.parse_args(argv)


def calibrate(orchestrator: FusionOrchestrator, simulator: DualSensorSimulator, seconds: float) -> bool:
    """Collect a resting stream and compute offsets."""
    orchestrator.start_calibration()
    for hand, finger in simulator.generate('rest', seconds):
        orchestrator.add_calibration_sample(hand, finger)
    return orchestrator.finish_calibration()


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Sensors lie flat, so both report 1 g on z until calibrated
    simulator = DualSensorSimulator(rate_hz=args.rate, seed=args.seed, gravity=1.0)
    orchestrator = FusionOrchestrator()

    if not args.no_calibration:
        if calibrate(orchestrator, simulator, args.calibration_seconds):
            logger.info("✓ Calibration applied")
        else:
            logger.warning("Calibration failed - continuing uncalibrated")

    start_ms = args.calibration_seconds * 1000.0
    for hand, finger in simulator.generate(args.scenario, args.duration, start_ms=start_ms):
        result = orchestrator.process(hand=hand, finger=finger)
        for pattern in result.patterns:
            logger.info(
                f"[{pattern.timestamp:8.1f} ms] {pattern.name:<28} "
                f"confidence={pattern.confidence:.2f} ({pattern.kind.value})"
            )

    quaternions = orchestrator.get_quaternions()
    for stream, q in quaternions.items():
        if q is None:
            logger.info(f"  {stream:<12} no data")
            continue
        roll, pitch, yaw = q.to_euler()
        logger.info(
            f"  {stream:<12} q=({q.w:+.3f}, {q.x:+.3f}, {q.y:+.3f}, {q.z:+.3f}) "
            f"rpy=({roll:+.1f}, {pitch:+.1f}, {yaw:+.1f})"
        )

    status = orchestrator.get_status()
    logger.info(f"Status: {status}")

    current = orchestrator.current_pattern
    if current is not None:
        logger.info(f"Current pattern: {current.name} ({current.confidence:.2f})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
