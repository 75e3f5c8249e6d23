"""
Unit tests for dates module.
"""

import operator
from datetime import date

import numpy as np
import pytest

from ratesens.dates import accum_offset, policy_year, years_between

ISSUE = date(2018, 9, 30)


class TestYearsBetween:
    """Tests for anniversary counting."""

    def test_anniversary_overlap(self):
        assert years_between(ISSUE, date(2019, 9, 30)) == 1
        assert years_between(ISSUE, date(2019, 9, 30), overlap=False) == 0

    def test_later_month(self):
        assert years_between(ISSUE, date(2019, 10, 1)) == 1
        assert years_between(ISSUE, date(2019, 10, 1), overlap=False) == 1

    def test_same_day(self):
        assert years_between(ISSUE, ISSUE) == 0
        assert years_between(ISSUE, ISSUE, overlap=False) == -1

    def test_before_start(self):
        assert years_between(ISSUE, date(2018, 6, 30)) == -1


class TestPolicyYear:
    """First year after issue is policy year 1."""

    @pytest.mark.parametrize("projection,expected", [
        (date(2019, 9, 30), 2),
        (date(2018, 9, 30), 1),
        (date(2018, 10, 1), 1),
        (date(2019, 10, 1), 2),
        (date(2018, 6, 30), 0),
        (date(2017, 6, 30), -1),
    ])
    def test_examples(self, projection, expected):
        assert policy_year(ISSUE, projection) == expected


class TestAccumOffset:
    """Tests for lagged accumulation."""

    def test_survivorship(self):
        np.testing.assert_allclose(accum_offset([0.9, 0.8, 0.7]), [1.0, 0.9, 0.72])

    def test_product(self):
        np.testing.assert_array_equal(accum_offset(range(1, 6)), [1, 1, 2, 6, 24])

    def test_sum(self):
        np.testing.assert_array_equal(accum_offset(range(1, 6), op=operator.add), [1, 2, 4, 7, 11])

    def test_init(self):
        np.testing.assert_array_equal(accum_offset([2, 3], init=5.0), [5.0, 10.0])

    def test_empty(self):
        assert accum_offset([]).shape == (0,)
