#!/usr/bin/env python3
"""
GESTURE SIGNAL - stabilized open/closed hand + pointer from a webcam
Main Application

Runs the detection loop on the default webcam with the MediaPipe hand model
and publishes the stabilized signal. With debug output enabled every signal
is printed; the optional preview window shows the tracked hand and state.
"""

import argparse
import asyncio
import os
import sys
from typing import Optional

import cv2

from gesture_signal.app.frame_source import CameraFrameSource
from gesture_signal.app.gesture_controller import GestureController
from gesture_signal.app.hand_estimator import MediaPipeHandEstimator
from gesture_signal.config.config_manager import Config, config
from gesture_signal.detectors.gesture_detectors import GestureSignal
from gesture_signal.utils.visual_feedback import VisualFeedback


class GestureSignalApplication:
    """Main GESTURE SIGNAL application controller."""

    def __init__(self, camera_idx: Optional[int] = None, show_preview: Optional[bool] = None,
                 show_debug: Optional[bool] = None):
        """
        Initialize the application.

        Args:
            camera_idx: Camera device index (config camera.index when None)
            show_preview: Open the preview window (config display.show_preview when None)
            show_debug: Print every signal (config performance.show_debug_info when None)
        """
        print("\n" + "=" * 60)
        print("GESTURE SIGNAL - Stabilized Hand Gesture Tracking")
        print("=" * 60 + "\n")

        print("Loading configuration...")
        self.config = config
        self.config_path = config.path
        try:
            self.last_config_mtime = os.path.getmtime(self.config_path)
        except OSError:
            self.last_config_mtime = 0

        self.frame_source = CameraFrameSource.from_config(self.config, device=camera_idx)
        self.controller = GestureController.from_config(self.frame_source, cfg=self.config)
        self.controller.on_gesture(self._on_signal)
        print("✓ Gesture pipeline initialized")

        self.show_preview = show_preview if show_preview is not None else \
            config.get('display', 'show_preview', default=True)
        self.show_debug = show_debug if show_debug is not None else \
            config.get('performance', 'show_debug_info', default=False)
        self.window_name = config.get('display', 'window_name', default="GESTURE SIGNAL")
        self.poll_interval = config.get('display', 'config_poll_interval_s', default=1.0)
        self.visual = VisualFeedback(mirror=config.get('display', 'mirror_preview', default=True))

        # Runtime control flags; only transitions after startup count
        self.paused = False
        self._exit_flag = config.get('app_control', 'exit', default=False)

        self.last_signal: Optional[GestureSignal] = None

    def _on_signal(self, signal: GestureSignal):
        self.last_signal = signal
        if self.show_debug:
            state = "OPEN" if signal.is_open else "CLOSED"
            if signal.is_detected:
                print(f"[gesture] {state:6s} x={signal.position[0]:+.3f} y={signal.position[1]:+.3f}")
            else:
                print("[gesture] NO HAND")

    async def _load_model(self):
        await self.controller.adapter.load(lambda: MediaPipeHandEstimator.from_config(self.config))

    def check_config_update(self):
        """Reload config.json when it changed on disk and apply app_control flags."""
        try:
            current_mtime = os.path.getmtime(self.config_path)
        except OSError as e:
            print(f"⚠ Error checking config update: {e}")
            return
        if current_mtime == self.last_config_mtime:
            return

        print("\n🔄 Config change detected, reloading...")
        self.last_config_mtime = current_mtime
        self.config.reload()

        config_pause = self.config.get('app_control', 'pause', default=False)
        config_exit = self.config.get('app_control', 'exit', default=False)

        if config_pause != self.paused:
            self.paused = config_pause
            self.controller.emitter.paused = self.paused
            print(f"{'⏸ PAUSED (via config)' if self.paused else '▶ RESUMED (via config)'}")

        if config_exit and not self._exit_flag:
            print("\n🛑 Exit signal received via config")
            self.controller.stop()
        self._exit_flag = config_exit

    async def _watch_config(self):
        while not self.controller.scheduler.stopped:
            await asyncio.sleep(self.poll_interval)
            self.check_config_update()

    async def _preview_loop(self):
        while not self.controller.scheduler.stopped:
            frame = self.frame_source.read()
            if frame is not None:
                view = self.visual.render(
                    frame,
                    observation=self.controller.last_observation,
                    signal=self.last_signal,
                    label=self.controller.stabilizer.status_label,
                )
                cv2.imshow(self.window_name, view)
            key = cv2.waitKey(1) & 0xFF
            if key in (ord('q'), ord('Q')):
                print("\n🛑 Quit key pressed")
                self.controller.stop()
            await asyncio.sleep(self.controller.scheduler.frame_interval)

    async def run(self):
        """Main application loop."""
        print("\nControls: press Q in the preview window or Ctrl+C to quit\n")
        self.frame_source.start()
        loop_task = self.controller.start()
        helpers = [
            asyncio.create_task(self._load_model()),
            asyncio.create_task(self._watch_config()),
        ]
        if self.show_preview:
            helpers.append(asyncio.create_task(self._preview_loop()))

        try:
            await loop_task
        finally:
            self.controller.stop()
            for task in helpers:
                task.cancel()
            await asyncio.gather(*helpers, return_exceptions=True)
            self.cleanup()

    def cleanup(self):
        estimator = self.controller.adapter.estimator
        if estimator is not None:
            estimator.close()
        self.frame_source.close()
        if self.show_preview:
            cv2.destroyAllWindows()
        print("✓ GESTURE SIGNAL stopped")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Stabilized hand open/closed + pointer signal from a webcam")
    parser.add_argument('--camera', type=int, default=None, help='Camera device index')
    parser.add_argument('--config', type=str, default=None, help='Path to config.json')
    parser.add_argument('--no-preview', action='store_true', help='Do not open the preview window')
    parser.add_argument('--debug', action='store_true', help='Print every emitted gesture signal')
    args = parser.parse_args(argv)

    if args.config:
        Config(args.config)

    try:
        app = GestureSignalApplication(
            camera_idx=args.camera,
            show_preview=False if args.no_preview else None,
            show_debug=True if args.debug else None,
        )
    except RuntimeError as e:
        print(e)
        return 1

    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        print("\n🛑 Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
