"""
Unit tests for the series model.

Tests cover:
- Date and value extents over the union of all series
- force_zero_min behaviour, including negative data
- Empty series detection and legend membership
- Series ordering and color assignment
- Fatal input errors, including non-finite counts
- Date ordering of samples
"""

import json
from datetime import date

import pytest

from statschart.paths import render_line
from statschart.scales import LinearScale, TimeScale
from statschart.series_model import CATEGORY10, assign_colors, build_model
from statschart.validators import PayloadError


class TestExtents:
    """Test domain computation."""

    def test_scenario_single_series_with_gap(self, scenario_payload):
        model = build_model(scenario_payload, force_zero_min=True)

        assert model.date_extent == (date(2020, 1, 1), date(2020, 1, 3))
        assert model.value_extent == (0, 7)
        assert [e.name for e in model.legend_entries] == ['A']
        assert model.is_empty is False

    def test_date_extent_spans_union_of_series(self):
        payload = {
            'early': [{'date': '2019-12-30', 'count': 1}],
            'late': [{'date': '2020-02-01', 'count': 2}],
            'middle': [{'date': '2020-01-15', 'count': 3}],
        }
        model = build_model(payload)
        assert model.date_extent == (date(2019, 12, 30), date(2020, 2, 1))

    def test_null_samples_still_count_for_date_extent(self):
        payload = {
            'A': [{'date': '2020-01-05', 'count': 1}],
            'B': [{'date': '2020-01-01', 'count': None}, {'date': '2020-01-09', 'count': None}],
        }
        model = build_model(payload)
        assert model.date_extent == (date(2020, 1, 1), date(2020, 1, 9))

    def test_value_extent_without_forced_zero(self):
        payload = {
            'A': [{'date': '2020-01-01', 'count': 12}, {'date': '2020-01-02', 'count': 40}],
            'B': [{'date': '2020-01-01', 'count': 8}, {'date': '2020-01-02', 'count': None}],
        }
        model = build_model(payload, force_zero_min=False)
        assert model.value_extent == (8, 40)

    def test_forced_zero_ignores_negative_minimum(self):
        payload = {'A': [{'date': '2020-01-01', 'count': -20}, {'date': '2020-01-02', 'count': 4}]}
        model = build_model(payload, force_zero_min=True)
        assert model.value_extent == (0, 4)

    def test_negative_minimum_kept_without_forced_zero(self):
        payload = {'A': [{'date': '2020-01-01', 'count': -20}, {'date': '2020-01-02', 'count': 4}]}
        model = build_model(payload, force_zero_min=False)
        assert model.value_extent == (-20, 4)


class TestEmptySeries:
    """Test empty series handling."""

    def test_all_null_series_excluded_from_legend_and_extent(self, two_series_payload):
        model = build_model(two_series_payload, force_zero_min=False)

        assert [e.name for e in model.legend_entries] == ['Visits']
        assert model.value_extent == (3, 9)
        assert model.empty_count == 1
        assert model.is_empty is False

    def test_series_without_samples_is_empty(self):
        model = build_model({'A': [], 'B': [{'date': '2020-01-01', 'count': 2}]})
        assert model.get('A').is_empty
        assert [e.name for e in model.legend_entries] == ['B']

    def test_all_empty_payload(self):
        payload = {
            'A': [],
            'B': [{'date': '2020-01-01', 'count': None}],
        }
        model = build_model(payload)

        assert model.legend_entries == []
        assert model.value_extent is None
        assert model.empty_count == 2
        assert model.is_empty is True
        assert model.date_extent == (date(2020, 1, 1), date(2020, 1, 1))

    def test_payload_without_series(self):
        model = build_model({})

        assert model.series == ()
        assert model.date_extent is None
        assert model.value_extent is None
        assert model.is_empty is True

    def test_zero_counts_are_not_empty(self):
        model = build_model({'A': [{'date': '2020-01-01', 'count': 0}]})
        assert model.is_empty is False
        assert model.value_extent == (0, 0)


class TestOrderingAndColors:
    """Test series order and color assignment."""

    def test_series_follow_payload_key_order(self):
        payload = {
            'Zeta': [{'date': '2020-01-01', 'count': 1}],
            'Alpha': [{'date': '2020-01-01', 'count': 1}],
        }
        model = build_model(payload)
        assert [s.name for s in model.series] == ['Zeta', 'Alpha']

    def test_colors_assigned_by_order(self):
        payload = {
            'first': [{'date': '2020-01-01', 'count': 1}],
            'second': [{'date': '2020-01-01', 'count': 1}],
        }
        model = build_model(payload)
        assert model.colors == {'first': CATEGORY10[0], 'second': CATEGORY10[1]}

    def test_empty_series_keeps_its_color_slot(self, two_series_payload):
        model = build_model(two_series_payload)

        assert model.get('Nothing').color == CATEGORY10[1]
        assert model.legend_entries[0].color == CATEGORY10[0]

    def test_colors_stable_across_rebuilds(self, two_series_payload):
        first = build_model(two_series_payload)
        second = build_model(two_series_payload)
        assert first.colors == second.colors

    def test_palette_wraps_around(self):
        names = [f's{i}' for i in range(12)]
        colors = assign_colors(names)
        assert colors['s10'] == CATEGORY10[0]
        assert colors['s11'] == CATEGORY10[1]


class TestInputErrors:
    """Test fatal input errors."""

    def test_malformed_date_is_fatal(self):
        payload = {'A': [{'date': '01/02/2020', 'count': 1}]}
        with pytest.raises(PayloadError, match="Invalid sample date"):
            build_model(payload)

    def test_non_numeric_count_is_fatal(self):
        payload = {'A': [{'date': '2020-01-01', 'count': 'lots'}]}
        with pytest.raises(PayloadError):
            build_model(payload)

    def test_missing_count_key_is_a_null_sample(self):
        model = build_model({'A': [{'date': '2020-01-01'}]})
        assert model.get('A').values[0].count is None
        assert model.is_empty

    def test_series_data_is_immutable(self, scenario_payload):
        model = build_model(scenario_payload)
        with pytest.raises(AttributeError):
            model.series[0].name = 'B'

    def test_json_infinity_literal_is_fatal(self):
        payload = json.loads('{"A": [{"date": "2020-01-01", "count": 1},'
                             ' {"date": "2020-01-02", "count": Infinity}]}')
        with pytest.raises(PayloadError, match="not a finite number"):
            build_model(payload)

    def test_nan_count_is_fatal(self):
        payload = {'A': [{'date': '2020-01-01', 'count': float('nan')},
                         {'date': '2020-01-02', 'count': 1}]}
        with pytest.raises(PayloadError, match="not a finite number"):
            build_model(payload)


class TestSampleOrder:
    """Test that samples are kept in date order."""

    def test_out_of_order_samples_are_sorted(self):
        payload = {'A': [
            {'date': '2020-01-03', 'count': 7},
            {'date': '2020-01-01', 'count': 5},
            {'date': '2020-01-02', 'count': None},
        ]}
        model = build_model(payload)

        values = model.get('A').values
        assert [s.date for s in values] == [date(2020, 1, 1), date(2020, 1, 2), date(2020, 1, 3)]
        assert [s.count for s in values] == [5, None, 7]

    def test_repeated_dates_keep_payload_order(self):
        payload = {'A': [
            {'date': '2020-01-02', 'count': 1},
            {'date': '2020-01-01', 'count': 2},
            {'date': '2020-01-02', 'count': 3},
        ]}
        model = build_model(payload)
        assert [s.count for s in model.get('A').values] == [2, 1, 3]

    def test_out_of_order_path_does_not_backtrack(self):
        payload = {'A': [
            {'date': '2020-01-03', 'count': 3},
            {'date': '2020-01-01', 'count': 1},
        ]}
        model = build_model(payload)
        x = TimeScale(model.date_extent, (0, 100))
        y = LinearScale(model.value_extent, (100, 0))

        assert render_line(model.get('A'), x, y) == 'M0,66.667L100,0'
