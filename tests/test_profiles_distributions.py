import numpy as np
import pytest

from micepipe.series import Aggregate, EstrusType, Individual, Series, Sex
from micepipe.steps.distributions import (
    bin_edges,
    bin_fractions,
    sex_distributions,
    temperature_bins,
)
from micepipe.steps.profiles import (
    ProfileGroup,
    ProfileSelection,
    daily_profile,
    group_profiles,
    profile_table,
    subject_profiles,
)


def _series(values, subject, sex):
    values = np.asarray(values, dtype=float)
    return Series(kind=Individual(subject), minutes=np.arange(values.size), values=values, sex=sex)


def _by_day(day_values, subject="f1", sex=Sex.FEMALE):
    return _series(np.repeat(day_values, 1440), subject, sex)


def test_daily_profile_averages_each_minute_of_day():
    minutes = np.arange(2 * 1440)
    values = (minutes % 1440) + 100.0 * (minutes // 1440)
    profile = daily_profile(_series(values, "m1", Sex.MALE))

    assert len(profile) == 1440
    assert profile.values[0] == pytest.approx(50.0)
    assert profile.values[1439] == pytest.approx(1489.0)


def test_female_gets_estrus_and_non_estrus_profiles():
    female = _by_day([36.0, 38.0, 36.0, 36.0, 36.0, 38.0])
    profiles = subject_profiles(female)

    assert [p.label for p in profiles] == ["f1-estrus", "f1-non-estrus"]
    estrus, other = profiles
    assert estrus.estrus_type is EstrusType.ESTRUS
    assert np.allclose(estrus.values, 38.0)
    assert np.allclose(other.values, 36.0)


def test_single_day_female_has_only_non_estrus_profile():
    profiles = subject_profiles(_by_day([36.5]))
    assert [p.estrus_type for p in profiles] == [EstrusType.NON_ESTRUS]


def test_male_profile_keeps_subject_id():
    (profile,) = subject_profiles(_by_day([37.0, 37.2], "m4", Sex.MALE))
    assert profile.label == "m4" and profile.sex is Sex.MALE


def test_group_averages():
    profiles = [
        *subject_profiles(_by_day([37.0, 37.0], "m1", Sex.MALE)),
        *subject_profiles(_by_day([38.0, 38.0], "m2", Sex.MALE)),
        *subject_profiles(_by_day([36.0, 39.0], "f1")),
    ]
    averages = group_profiles(profiles)

    assert set(averages) == {ProfileGroup.MALE, ProfileGroup.ESTRUS, ProfileGroup.NON_ESTRUS}
    assert np.allclose(averages[ProfileGroup.MALE].values, 37.5)
    assert averages[ProfileGroup.ESTRUS].kind == Aggregate("estrus-avg")
    assert np.allclose(averages[ProfileGroup.ESTRUS].values, 39.0)


def test_selection_expands_group_on_average_click():
    profiles = [
        *subject_profiles(_by_day([37.0, 37.0], "m1", Sex.MALE)),
        *subject_profiles(_by_day([38.0, 38.0], "m2", Sex.MALE)),
    ]
    averages = group_profiles(profiles)
    selection = ProfileSelection()

    assert [s.label for s in selection.chart_data(profiles, averages)] == ["male-avg"]
    assert selection.activate(averages[ProfileGroup.MALE]) is None
    assert [s.label for s in selection.chart_data(profiles, averages)] == ["m1", "m2"]

    selection.activate(averages[ProfileGroup.MALE])
    assert [s.label for s in selection.chart_data(profiles, averages)] == ["male-avg"]


def test_selection_individual_click_names_subject():
    profiles = subject_profiles(_by_day([36.0, 38.0], "f7"))
    assert ProfileSelection().activate(profiles[0]) == "f7"


def test_disabled_group_is_hidden():
    profiles = subject_profiles(_by_day([37.0], "m1", Sex.MALE))
    averages = group_profiles(profiles)
    selection = ProfileSelection()
    selection.enabled[ProfileGroup.MALE] = False

    assert selection.chart_data(profiles, averages) == []


def test_profile_table_has_column_per_line():
    profiles = subject_profiles(_by_day([37.0, 37.0], "m1", Sex.MALE))
    table = profile_table(profiles, window=5)

    assert list(table.columns) == ["minute_of_day", "m1"]
    assert len(table) == 1440
    assert np.allclose(table["m1"], 37.0)


def test_bin_edges_cover_range():
    edges = bin_edges(35.0, 40.0, 0.5)
    assert len(edges) == 11
    assert edges[0] == 35.0 and edges[-1] == pytest.approx(40.0)


def test_bins_are_half_open():
    bins = temperature_bins([35.0, 35.49, 35.5, 39.99, 40.0, 34.9, np.nan])

    assert len(bins) == 10
    assert bins["35.0-35.5"] == 2
    assert bins["35.5-36.0"] == 1
    assert bins["39.5-40.0"] == 1
    assert sum(bins.values()) == 4


def test_fractions_sum_to_one():
    fractions = bin_fractions(temperature_bins([36.1, 36.2, 37.7, 38.0]))
    assert sum(fractions.values()) == pytest.approx(1.0)
    assert fractions["36.0-36.5"] == pytest.approx(0.5)


def test_fractions_of_empty_bins_are_zero():
    assert set(bin_fractions(temperature_bins([])).values()) == {0.0}


def test_distributions_split_by_sex():
    male = [_series([36.2, 36.3], "m1", Sex.MALE)]
    female = [_series([37.6], "f1", Sex.FEMALE), _series([37.7], "f2", Sex.FEMALE)]

    dist = sex_distributions(male, female)

    assert dist["male"]["36.0-36.5"] == 2
    assert dist["female"]["37.5-38.0"] == 2
    assert sum(dist["female"].values()) == 2
