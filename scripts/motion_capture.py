"""
Capture raw frames from a camera for offline motion tuning.

Usage:
  python scripts/motion_capture.py --source 0 --count 60 --interval 0.1
Frames are written to scripts/motion_lab/frames/frame_0000.jpg, etc.
"""

from __future__ import annotations

import argparse
import time
from pathlib import Path

import cv2

from TailoT_processor.capture.video_source import OpenCVVideoSource

# Keep capture outputs under scripts/motion_lab to stay consistent with the experiment runner.
FRAME_ROOT = Path("scripts/motion_lab/frames")


def capture_frames(source: str, frames_dir: Path, count: int, interval: float) -> None:
    frames_dir.mkdir(parents=True, exist_ok=True)
    captured = 0
    with OpenCVVideoSource(source) as camera:
        while captured < count:
            frame = camera.read()
            if frame is None:
                time.sleep(interval)
                continue
            out_path = frames_dir / f"frame_{captured:04d}.jpg"
            cv2.imwrite(str(out_path), frame)
            captured += 1
            time.sleep(interval)


def main() -> None:
    parser = argparse.ArgumentParser(description="Capture frames for motion tuning.")
    parser.add_argument("--source", default="0", help="Camera index or stream URL (default: 0)")
    parser.add_argument("--count", type=int, default=60, help="Number of frames to capture (default: 60)")
    parser.add_argument("--interval", type=float, default=0.1, help="Seconds between frames (default: 0.1)")
    parser.add_argument("--out", default=str(FRAME_ROOT), help="Output directory for frames")
    args = parser.parse_args()

    frames_dir = Path(args.out)
    print(f"Capturing {args.count} frames from {args.source} into {frames_dir} ...")
    capture_frames(args.source, frames_dir, args.count, args.interval)
    print("Capture complete.")


if __name__ == "__main__":
    main()
