import json
from pathlib import Path

import pandas as pd
import pytest
import yaml

from helper import write_datasets
from micepipe import pipeline
from micepipe.config import load_settings
from micepipe.steps.detail_playback import run_playback


def _config(tmp_path: Path, days: int = 2, **playback) -> Path:
    data_dir = write_datasets(tmp_path / "data", days=days, subjects=2, temperature=37.2, activity=3.0)
    cfg = {
        "data_directory": str(data_dir),
        "output_directory": str(tmp_path / "out"),
        "experiment": {"start": "2023-01-01T00:00:00", "days": days},
        "playback": {"mouse_id": 2, **playback},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


def test_list_prints_steps(capsys):
    pipeline.main(["list"])
    out = capsys.readouterr().out
    for name in ("validate", "profiles", "distributions", "day_summaries", "playback"):
        assert name in out


def test_unknown_step_exits(tmp_path):
    with pytest.raises(SystemExit):
        pipeline.main(["--config", str(_config(tmp_path)), "bogus"])


def test_all_steps_write_outputs(tmp_path):
    pipeline.main(["--config", str(_config(tmp_path))])
    out = tmp_path / "out"

    profiles = pd.read_csv(out / "daily_profiles_temperature.csv")
    assert len(profiles) == 1440
    assert {"male-avg", "estrus-avg", "non-estrus-avg", "m1", "f2-estrus"} <= set(profiles.columns)
    assert profiles["male-avg"].round(6).eq(37.2).all()
    assert (out / "daily_profiles_activity.csv").exists()

    dist = json.loads((out / "temperature_distribution.json").read_text())
    assert dist["male"]["counts"]["37.0-37.5"] == 2 * 2 * 1440
    assert dist["female"]["fractions"]["37.0-37.5"] == pytest.approx(1.0)

    days = pd.read_csv(out / "day_summaries.csv")
    assert len(days) == 4 * 2
    assert set(days["subject"]) == {"m1", "m2", "f1", "f2"}
    assert days["activity_mean"].eq(3.0).all()
    assert list(days.loc[days["subject"] == "f1", "estrus"]) == [False, True]

    narrative = (out / "playback_m2_f2_temperature.txt").read_text().splitlines()
    assert [line.split(" | ")[0] for line in narrative] == ["Day 01", "Day 02", "All data"]


def test_validate_stops_on_calendar_mismatch(tmp_path):
    config = _config(tmp_path)
    data = yaml.safe_load(config.read_text())
    data["experiment"]["days"] = 14
    config.write_text(yaml.safe_dump(data))

    with pytest.raises(Exception, match="configured for 14"):
        pipeline.main(["--config", str(config), "validate"])
    assert not (tmp_path / "out").exists()


def test_run_playback_activity_mode(tmp_path):
    cfg = load_settings(_config(tmp_path, mode="activity", step_minutes=60))

    narrative = run_playback(cfg, mouse_number=1)

    assert narrative.male_label == "m1"
    assert narrative.lines[0].startswith("Day 01 | male m1: max 3.00, min 3.00")
    assert len(narrative.lines) == 3
