from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from .config import Settings, load_settings
from .steps import aggregation, detail_playback, distributions, loader, profiles


@dataclass(frozen=True)
class Step:
    """Executable unit within the pipeline."""

    name: str
    runner: Callable[[Settings], None]
    description: str


# Validation runs first so malformed tables stop the run before any output is written.
ORDERED_STEPS: tuple[Step, ...] = (
    Step("validate", loader.main, "Load all four datasets and check their calendars"),
    Step("profiles", profiles.main, "Write average daily-cycle profiles per group and subject"),
    Step("distributions", distributions.main, "Write male/female temperature bin counts"),
    Step("day_summaries", aggregation.main, "Write per-subject per-day min/max/mean"),
    Step("playback", detail_playback.main, "Play the detail view headlessly and save its narrative"),
)

STEP_REGISTRY = {step.name: step for step in ORDERED_STEPS}


def run_steps(step_names: Iterable[str], config_path: str | Path) -> None:
    cfg = load_settings(config_path)
    for name in step_names:
        step = STEP_REGISTRY[name]
        logging.getLogger("micepipe.pipeline").info("Running step %s", name)
        step.runner(cfg)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mouse temperature/activity pipeline")
    parser.add_argument("--config", default="config.yaml", help="Path to pipeline configuration")
    parser.add_argument(
        "steps",
        nargs="*",
        metavar="STEP",
        help="Subset of steps to run. Use 'list' to display available steps.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.steps or args.steps == ["all"]:
        run_steps((step.name for step in ORDERED_STEPS), args.config)
        return

    if args.steps == ["list"]:
        for step in ORDERED_STEPS:
            print(f"{step.name:>15}  - {step.description}")
        return

    unknown = [name for name in args.steps if name not in STEP_REGISTRY]
    if unknown:
        raise SystemExit(f"Unknown step(s): {', '.join(unknown)}")

    run_steps(args.steps, args.config)


if __name__ == "__main__":
    main()
