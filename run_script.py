"""
Small CLI to record, list and replay macros without a GUI.

Usage:
    python run_script.py path/to/script.json       play an exported script document
    python run_script.py --id <script-id> [settings.json]
    python run_script.py --list [settings.json]
    python run_script.py --record [settings.json]  capture mouse actions until Enter
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from click_capture import ClickCaptureService
from desktop_controller import DesktopDeviceController
from hotkey_manager import HotkeyManager
from logger import StatusLogger
from macro import MacroPlayer, MacroRecorder, MacroRepository, PlaybackState, Script
from macro.script_model import describe_script
from models import ApplicationSettings
from settings_manager import SettingsManager


def _load_settings(args: List[str]) -> tuple[SettingsManager, ApplicationSettings]:
    manager = SettingsManager(Path(args[0]) if args else None)
    return manager, manager.load()


def play(script: Script, settings: ApplicationSettings) -> int:
    status = StatusLogger(max_entries=settings.log_max_entries)
    player = MacroPlayer(
        DesktopDeviceController(),
        tick_ms=settings.pause_tick_ms,
        action_gap_ms=settings.action_gap_ms,
    )
    # status lines reach the console through the logging handler set up in main()
    status.attach(player)

    hotkeys = HotkeyManager(settings.pause_hotkey, settings.stop_hotkey)
    hotkeys.bind_player(player)
    if hotkeys.enable_hotkeys():
        print(f"{settings.pause_hotkey}: pause/resume, {settings.stop_hotkey}: stop")

    print(describe_script(script))
    if not player.play(script):
        return 1
    try:
        player.wait()
    except KeyboardInterrupt:
        player.stop()
    finally:
        hotkeys.disable_hotkeys()

    progress = player.progress
    if progress.error_message:
        print(f"DONE: failed - {progress.error_message}")
    else:
        print(f"DONE: {progress.state.value}")
    return 0 if progress.state == PlaybackState.IDLE else 1


def record(repository: MacroRepository, settings: ApplicationSettings) -> int:
    recorder = MacroRecorder()
    capture = ClickCaptureService(
        recorder,
        long_press_ms=settings.capture_long_press_ms,
        swipe_threshold_px=settings.capture_swipe_threshold_px,
    )
    recorder.start_recording()
    if not capture.start(on_error=lambda e: print(f"Capture error: {e}")):
        recorder.cancel_recording()
        return 1
    try:
        input("Recording... press Enter to finish.\n")
    except (KeyboardInterrupt, EOFError):
        capture.stop()
        recorder.cancel_recording()
        print("Recording cancelled")
        return 1
    capture.stop()

    script = recorder.stop_recording()
    if script is None:
        print("Nothing recorded")
        return 1
    stored = repository.save(script)
    if stored is None:
        print(f"Could not save recording to {repository.storage_path}")
        return 1
    print(f"Saved {stored.id}: {describe_script(stored)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(__doc__)
        return 2
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    command = args.pop(0)
    if command == "--id":
        if not args:
            print("Provide a script id.")
            return 2
        script_id = args.pop(0)
        manager, settings = _load_settings(args)
        script = MacroRepository(manager.macros_path(settings)).get(script_id)
        if script is None:
            print(f"Script not found: {script_id}")
            return 2
        return play(script, settings)

    if command == "--list":
        manager, settings = _load_settings(args)
        for script in MacroRepository(manager.macros_path(settings)).get_all():
            print(f"{script.id}  {describe_script(script)}")
        return 0

    if command == "--record":
        manager, settings = _load_settings(args)
        return record(MacroRepository(manager.macros_path(settings)), settings)

    path = Path(command)
    if not path.exists():
        print(f"File not found: {path}")
        return 2
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        print(f"Not a script document: {path}")
        return 2
    _manager, settings = _load_settings(args)
    return play(Script.from_dict(data), settings)


if __name__ == "__main__":
    raise SystemExit(main())
