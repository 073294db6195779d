
from __future__ import annotations
import os, yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict
from dotenv import load_dotenv

from .utils.calendar import DEFAULT_EXPERIMENT_DAYS, ExperimentCalendar

MODES = ("temperature", "activity")
WINDOWING_POLICIES = ("trailing_edge", "offset_fraction", "full_range")


def _as_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


@dataclass
class ExperimentSettings:
    start: str = "2023-01-01T00:00:00"
    days: int = DEFAULT_EXPERIMENT_DAYS


@dataclass
class DatasetFiles:
    male_temperature: str = "male_temp.csv"
    female_temperature: str = "fem_temp.csv"
    male_activity: str = "male_act.csv"
    female_activity: str = "fem_act.csv"


@dataclass
class SmoothingSettings:
    detail_window: int = 15
    profile_window: int = 5


@dataclass
class PlaybackSettings:
    mouse_id: int = 1
    mode: str = "temperature"
    step_minutes: int = 20
    tick_interval_ms: int = 50
    window_duration_minutes: int = 3 * 1440
    windowing: str = "trailing_edge"
    offset_fraction: float = 0.6  # current time sits at 60% of the window width


@dataclass
class DistributionSettings:
    low: float = 35.0
    high: float = 40.0
    bin_width: float = 0.5


@dataclass
class Settings:
    data_directory: str = "data"
    output_directory: str = "outputs"
    validate_calendar: bool = True
    experiment: ExperimentSettings = field(default_factory=ExperimentSettings)
    files: DatasetFiles = field(default_factory=DatasetFiles)
    smoothing: SmoothingSettings = field(default_factory=SmoothingSettings)
    playback: PlaybackSettings = field(default_factory=PlaybackSettings)
    distribution: DistributionSettings = field(default_factory=DistributionSettings)

    def calendar(self) -> ExperimentCalendar:
        return ExperimentCalendar(start=self.experiment.start, days=self.experiment.days)


def _check_choice(name: str, value: str, choices) -> str:
    value = str(value).strip().lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}; got {value!r}")
    return value


def load_settings(config_path: str | Path) -> Settings:
    load_dotenv(dotenv_path=Path(".env"))  # optional
    p = Path(config_path)
    data: Dict[str, Any] = {}
    if p.exists():
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    experiment_cfg = _section(data, "experiment")
    files_cfg = _section(data, "files")
    smoothing_cfg = _section(data, "smoothing")
    playback_cfg = _section(data, "playback")
    distribution_cfg = _section(data, "distribution")

    experiment = ExperimentSettings(
        start=str(os.getenv("EXPERIMENT_START", experiment_cfg.get("start", ExperimentSettings.start))),
        days=int(os.getenv("EXPERIMENT_DAYS", experiment_cfg.get("days", DEFAULT_EXPERIMENT_DAYS))),
    )

    defaults = DatasetFiles()
    files = DatasetFiles(
        male_temperature=str(files_cfg.get("male_temperature", defaults.male_temperature)),
        female_temperature=str(files_cfg.get("female_temperature", defaults.female_temperature)),
        male_activity=str(files_cfg.get("male_activity", defaults.male_activity)),
        female_activity=str(files_cfg.get("female_activity", defaults.female_activity)),
    )

    smoothing = SmoothingSettings(
        detail_window=int(os.getenv("DETAIL_SMOOTH_WINDOW", smoothing_cfg.get("detail_window", 15))),
        profile_window=int(os.getenv("PROFILE_SMOOTH_WINDOW", smoothing_cfg.get("profile_window", 5))),
    )

    playback = PlaybackSettings(
        mouse_id=int(os.getenv("PLAYBACK_MOUSE_ID", playback_cfg.get("mouse_id", 1))),
        mode=_check_choice(
            "playback.mode", os.getenv("PLAYBACK_MODE", playback_cfg.get("mode", "temperature")), MODES
        ),
        step_minutes=int(os.getenv("PLAYBACK_STEP_MINUTES", playback_cfg.get("step_minutes", 20))),
        tick_interval_ms=int(
            os.getenv("PLAYBACK_TICK_INTERVAL_MS", playback_cfg.get("tick_interval_ms", 50))
        ),
        window_duration_minutes=int(
            os.getenv("PLAYBACK_WINDOW_MINUTES", playback_cfg.get("window_duration_minutes", 3 * 1440))
        ),
        windowing=_check_choice(
            "playback.windowing",
            os.getenv("PLAYBACK_WINDOWING", playback_cfg.get("windowing", "trailing_edge")),
            WINDOWING_POLICIES,
        ),
        offset_fraction=float(
            os.getenv("PLAYBACK_OFFSET_FRACTION", playback_cfg.get("offset_fraction", 0.6))
        ),
    )
    if playback.step_minutes <= 0:
        raise ValueError("playback.step_minutes must be positive")
    if playback.window_duration_minutes <= 0:
        raise ValueError("playback.window_duration_minutes must be positive")

    distribution = DistributionSettings(
        low=float(distribution_cfg.get("low", 35.0)),
        high=float(distribution_cfg.get("high", 40.0)),
        bin_width=float(distribution_cfg.get("bin_width", 0.5)),
    )

    return Settings(
        data_directory=str(os.getenv("DATA_DIRECTORY", data.get("data_directory", "data"))),
        output_directory=str(os.getenv("OUTPUT_DIRECTORY", data.get("output_directory", "outputs"))),
        validate_calendar=_as_bool(
            os.getenv("VALIDATE_CALENDAR", data.get("validate_calendar")), True
        ),
        experiment=experiment,
        files=files,
        smoothing=smoothing,
        playback=playback,
        distribution=distribution,
    )
