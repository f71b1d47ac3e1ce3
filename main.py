#!/usr/bin/env python3
"""
Main entry point for the asymmetry screening demo.

Runs the webcam (or a recorded video) through the screening pipeline:
1. Frame capture (OpenCV)
2. Landmark detection (MediaPipe FaceLandmarker, first face only)
3. Per-frame asymmetry features
4. Fixed-duration capture window, reduced to a 0-100 score and a tier
5. Report export (text or JSON)

Usage:
    python main.py --source 0
    python main.py --source recording.mp4 --auto-start --no-display

Keys in the preview window:
    s  start an 8 second capture window
    x  stop the capture window early
    d  export the last report
    q  quit

This is a demo and NOT a medical device.
"""

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

import cv2

from scoring import ScoringConstants, ScreeningReport, explain_report
from session import CaptureController, SessionListener
from utils.config_loader import get_nested_config, load_screening_config
from utils.video_io import CameraReader, parse_source
from video_pipeline import FaceMeshLandmarkSource, LandmarkIndexMap
from visualization import draw_landmark_overlay, draw_status, export_report

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('stroke_screen.log'),
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

WINDOW_NAME = 'Stroke Screen (demo)'


class ConsoleListener(SessionListener):
    """Prints capture events and keeps the status lines for the preview."""

    def __init__(self, constants: ScoringConstants):
        self.constants = constants
        self.status_lines: List[str] = ["Press 's' to start, 'q' to quit"]
        self.finished = False

    def _show(self, *lines: str):
        self.status_lines = list(lines)
        for line in lines:
            print(line)

    def on_collection_started(self, session_id: int, duration_sec: float) -> None:
        self.finished = False
        self._show(
            f"Collecting {duration_sec:g} seconds of data...",
            "Please face camera straight on and keep neutral expression."
        )

    def on_report(self, session_id: int, report: ScreeningReport) -> None:
        self.finished = True
        self._show(
            f"Screening score: {report.score} / 100",
            report.advisory,
            explain_report(report, self.constants),
            "Press 'd' to save the report"
        )

    def on_insufficient_data(self, session_id: int, frames_processed: int) -> None:
        self.finished = True
        self._show("No face detected. Try again with better lighting and face the camera.")


def handle_key(key: int, controller: CaptureController, save_report: Callable[[], None]) -> bool:
    """
    Apply one preview-window key press.

    Quitting cancels an open capture window without scoring it.

    Returns:
        False when the loop should exit
    """
    if key == ord('q'):
        if controller.is_collecting:
            logger.info("Quit during collection, discarding capture window")
            controller.cancel()
        return False
    elif key == ord('s'):
        controller.start()
    elif key == ord('x'):
        controller.stop()
    elif key == ord('d'):
        save_report()
    return True


def run_screening(
    source: str,
    config: Dict,
    output_dir: str,
    report_format: str = 'txt',
    auto_start: bool = False,
    display: bool = True
) -> Optional[ScreeningReport]:
    """
    Run the capture loop until the user quits or the source runs out.

    Args:
        source: Camera index or video file path
        config: Configuration dictionary
        output_dir: Directory for exported reports
        report_format: 'txt' or 'json'
        auto_start: Start a capture window immediately and exit after it
        display: Show the preview window

    Returns:
        The last screening report, or None
    """
    logger.info("=" * 80)
    logger.info("STROKE SCREEN - Facial asymmetry screening demo (NOT a medical device)")
    logger.info("=" * 80)

    constants = ScoringConstants.from_config(config.get('scoring'))
    index_map = LandmarkIndexMap.from_config(config.get('landmarks'))
    duration_sec = float(get_nested_config(config, 'capture.duration_sec', 8.0))
    frame_size = (
        int(get_nested_config(config, 'capture.frame_width', 640)),
        int(get_nested_config(config, 'capture.frame_height', 480))
    )

    listener = ConsoleListener(constants)
    controller = CaptureController(
        listener=listener,
        duration_sec=duration_sec,
        constants=constants,
        index_map=index_map
    )

    def save_last_report():
        if controller.last_report is None:
            print("No report to save yet.")
            return
        path = export_report(controller.last_report, output_dir, fmt=report_format)
        print(f"Report saved to {path}")

    detector_config = config.get('detector', {})

    with CameraReader(parse_source(source), frame_size=frame_size) as reader, \
            FaceMeshLandmarkSource(
                model_path=detector_config.get('model_path', 'models/face_landmarker.task'),
                index_map=index_map,
                min_detection_confidence=detector_config.get('min_detection_confidence', 0.6),
                min_presence_confidence=detector_config.get('min_presence_confidence', 0.6),
                min_tracking_confidence=detector_config.get('min_tracking_confidence', 0.6)
            ) as landmark_source:

        if auto_start:
            controller.start()

        for timestamp_ms, frame in reader.iter_frames():
            landmarks = landmark_source.process_frame(frame, timestamp_ms)
            controller.on_frame(landmarks)

            if auto_start and listener.finished:
                break

            if not display:
                continue

            draw_landmark_overlay(frame, landmarks, index_map)
            draw_status(frame, listener.status_lines)
            cv2.imshow(WINDOW_NAME, frame)

            key = cv2.waitKey(1) & 0xFF
            if not handle_key(key, controller, save_last_report):
                break

        # Source ran out while collecting
        if controller.is_collecting:
            logger.info("Capture loop ended during collection, sealing session")
            controller.stop()

    if display:
        cv2.destroyAllWindows()

    if auto_start and controller.last_report is not None:
        save_last_report()

    return controller.last_report


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Stroke Screen - facial asymmetry screening demo (NOT a medical device)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Webcam with preview window
  python main.py --source 0

  # Headless run over a recording, report written automatically
  python main.py --source session.mp4 --auto-start --no-display --output reports/
        """
    )

    parser.add_argument(
        '--source',
        type=str,
        default='0',
        help='Camera index or path to a video file (default: 0)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration YAML file (default: built-in defaults)'
    )

    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Output directory for reports (default: report.output_dir from config)'
    )

    parser.add_argument(
        '--duration',
        type=float,
        default=None,
        help='Capture window length in seconds (default: capture.duration_sec from config)'
    )

    parser.add_argument(
        '--format',
        choices=['txt', 'json'],
        default=None,
        help='Report format (default: report.format from config)'
    )

    parser.add_argument(
        '--auto-start',
        action='store_true',
        help='Start capturing immediately and exit after one window'
    )

    parser.add_argument(
        '--no-display',
        action='store_true',
        help='Do not open a preview window'
    )

    args = parser.parse_args()

    if args.no_display and not args.auto_start:
        parser.error("--no-display requires --auto-start (there is no window to press keys in)")

    try:
        config = load_screening_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    if args.duration is not None:
        if args.duration <= 0:
            parser.error("--duration must be positive")
        config['capture']['duration_sec'] = args.duration

    output_dir = args.output or get_nested_config(config, 'report.output_dir', 'data/reports')
    report_format = args.format or get_nested_config(config, 'report.format', 'txt')

    try:
        report = run_screening(
            source=args.source,
            config=config,
            output_dir=output_dir,
            report_format=report_format,
            auto_start=args.auto_start,
            display=not args.no_display
        )

        if args.auto_start and report is None:
            logger.warning("Capture finished without usable frames")
            sys.exit(2)

        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("\nScreening interrupted by user")
        sys.exit(1)

    except Exception as e:
        logger.error(f"\n✗ ERROR: Screening failed with exception:")
        logger.error(f"  {type(e).__name__}: {str(e)}")
        logger.exception("Full traceback:")
        sys.exit(1)


if __name__ == '__main__':
    main()
