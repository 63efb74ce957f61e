from __future__ import annotations

import argparse
import logging

from lesson_gestures.tracking.app import run_tracking_app


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the hand-gesture lesson viewer.")
    parser.add_argument("--config", default=None, help="Path to yaml tracking config.")
    parser.add_argument("--gestures", default=None, help="Path to a lesson gesture config json.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, ...).")
    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_tracking_app(config_path=args.config, gesture_config_path=args.gestures)


if __name__ == "__main__":
    main()
