import argparse
import logging
import sys
from pathlib import Path
import os
os.environ['PYGAME_HIDE_SUPPORT_PROMPT'] = "hide"

# Ensure repo root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.app.loop import run_game


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reaction Time Test")
    parser.add_argument("--game", default="reaction-time", help="Game folder name under games/")
    parser.add_argument("--screen", default="1280x720", help="Screen size WxH, e.g. 1280x720")
    parser.add_argument("--fps", type=int, default=120, help="Frame rate cap (higher = finer tap timing)")
    parser.add_argument("--fullscreen", action="store_true", help="Open a fullscreen window")
    parser.add_argument("--mirror", action="store_true", help="Mirror the game window horizontally")
    parser.add_argument("--export", dest="export_path", help="Where 'Export Data to JSON' writes")
    parser.add_argument("--delay-min", dest="delay_min_sec", type=float, help="Shortest wait before the stimulus (s)")
    parser.add_argument("--delay-max", dest="delay_max_sec", type=float, help="Longest wait before the stimulus (s)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    for name, value in (("--delay-min", args.delay_min_sec), ("--delay-max", args.delay_max_sec)):
        if value is not None and value < 0:
            parser.error(f"{name} must be >= 0")
    if (args.delay_min_sec is not None and args.delay_max_sec is not None
            and args.delay_min_sec > args.delay_max_sec):
        parser.error("--delay-min must not be greater than --delay-max")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    w, h = map(int, args.screen.lower().split("x"))

    run_game(
        game_id=args.game,
        screen_size=(w, h),
        fps=args.fps,
        mirror=args.mirror,
        fullscreen=args.fullscreen,
        option_overrides={
            "export_path": args.export_path,
            "delay_min_sec": args.delay_min_sec,
            "delay_max_sec": args.delay_max_sec,
        },
    )


if __name__ == "__main__":
    main()
