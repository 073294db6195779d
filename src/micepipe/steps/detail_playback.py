"""Run the detail playback headlessly and keep its narrative."""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import Settings
from ..playback.bridge import NarrativeBridge
from ..playback.scheduler import ManualScheduler
from ..playback.view import DetailView
from .loader import DatasetKind, load_dataset

log = logging.getLogger("micepipe.detail_playback")


def run_playback(cfg: Settings, mouse_number: int | None = None) -> NarrativeBridge:
    number = cfg.playback.mouse_id if mouse_number is None else mouse_number
    kind = DatasetKind(cfg.playback.mode)
    dataset = load_dataset(cfg, kind)
    male, female = dataset.pair(number)

    narrative = NarrativeBridge(
        male.label, female.label, dataset.calendar.start, dataset.calendar.days, kind.unit
    )
    scheduler = ManualScheduler()
    view = DetailView(
        male,
        female,
        calendar=dataset.calendar,
        scheduler=scheduler,
        settings=cfg.playback,
        smoothing_window=cfg.smoothing.detail_window,
        bridges=[narrative],
    )
    view.start()
    scheduler.run_until_idle()
    view.close()
    log.info(
        "Played %s/%s through %d ticks (%.1f s at %d ms per tick)",
        male.label, female.label, view.ticks, scheduler.now, cfg.playback.tick_interval_ms,
    )
    return narrative


def main(cfg: Settings) -> None:
    narrative = run_playback(cfg)
    out_dir = Path(cfg.output_directory).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"playback_{narrative.male_label}_{narrative.female_label}_{cfg.playback.mode}.txt"
    out_path.write_text("\n".join(narrative.lines) + "\n", encoding="utf-8")
    log.info("Wrote %d narrative lines → %s", len(narrative.lines), out_path)
