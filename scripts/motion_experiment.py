"""
Replay captured frames through the sampler, motion detector and stability tracker
to tune MOTION_THRESHOLD and the sample resolution offline.

Usage:
  python scripts/motion_capture.py --source 0 --count 60 --interval 0.1
  python scripts/motion_experiment.py --threshold 30 --width 64 --height 48
Prints one CSV row per frame and the frame index where the countdown would start.
"""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path

from TailoT_processor.capture.video_source import ImageFolderSource
from TailoT_processor.detector.frame_sampler import FrameSampler
from TailoT_processor.detector.motion_detector import MotionDetector
from TailoT_processor.pipeline.stability import StabilityTracker

# Keep read paths aligned with the capture script.
FRAME_ROOT = Path("scripts/motion_lab/frames")


def run_experiment(
    frames_dir: Path,
    threshold: float,
    width: int,
    height: int,
    interval_ms: int,
    stability_required_ms: int,
) -> int | None:
    source = ImageFolderSource(frames_dir)
    source.open()
    frame_count = source.frame_count
    sampler = FrameSampler(source, width, height)
    detector = MotionDetector(threshold)
    tracker = StabilityTracker()
    writer = csv.writer(sys.stdout)
    writer.writerow(["frame", "time_ms", "magnitude", "classification", "stable_ms"])
    trigger_idx = None
    try:
        for idx in range(frame_count):
            now = idx * interval_ms
            sample = sampler.sample(now)
            if sample is None:
                continue
            reading = detector.detect(sample)
            if reading is None:
                writer.writerow([idx, now, "", "", 0])
                continue
            state = tracker.update(reading, now)
            writer.writerow(
                [idx, now, f"{reading.magnitude:.3f}", reading.classification.value, state.continuous_stable_ms]
            )
            if trigger_idx is None and state.continuous_stable_ms > stability_required_ms:
                trigger_idx = idx
    finally:
        source.release()
    return trigger_idx


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay frames through the motion pipeline.")
    parser.add_argument("--frames", default=str(FRAME_ROOT), help="Directory of captured frames.")
    parser.add_argument("--threshold", type=float, default=30.0, help="Motion threshold (0-255 scale).")
    parser.add_argument("--width", type=int, default=64, help="Sample width.")
    parser.add_argument("--height", type=int, default=48, help="Sample height.")
    parser.add_argument("--interval-ms", type=int, default=100, help="Assumed time between frames.")
    parser.add_argument("--stability-ms", type=int, default=2000, help="Required stable window.")
    args = parser.parse_args()

    frames_dir = Path(args.frames)
    if not frames_dir.exists():
        raise SystemExit(f"No frames found in {frames_dir}. Capture frames first (scripts/motion_capture.py).")

    trigger_idx = run_experiment(
        frames_dir=frames_dir,
        threshold=args.threshold,
        width=args.width,
        height=args.height,
        interval_ms=args.interval_ms,
        stability_required_ms=args.stability_ms,
    )
    if trigger_idx is None:
        print("Countdown would never start with these parameters.", file=sys.stderr)
    else:
        print(f"Countdown would start at frame {trigger_idx}.", file=sys.stderr)


if __name__ == "__main__":
    main()
