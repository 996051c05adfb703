"""Tests for file ID list normalization on the share endpoints."""

import pytest

from pan123 import ExplicitIds, JoinedIds
from pan123.share import normalize_id_list


def test_explicit_ids_are_joined():
    assert normalize_id_list(ExplicitIds([1, "2", 3])) == "1,2,3"


def test_joined_ids_are_cleaned():
    assert normalize_id_list(JoinedIds(" 4, 5,,6 ")) == "4,5,6"


def test_plain_inputs_are_wrapped_at_the_edge():
    assert normalize_id_list([7, 8]) == "7,8"
    assert normalize_id_list("9,10") == "9,10"


def test_more_than_one_hundred_ids_is_rejected():
    with pytest.raises(ValueError, match="at most 100"):
        normalize_id_list(ExplicitIds(list(range(101))))
    with pytest.raises(ValueError, match="at most 100"):
        normalize_id_list(JoinedIds(",".join(str(i) for i in range(101))))


def test_exactly_one_hundred_ids_is_allowed():
    assert normalize_id_list(list(range(100))).count(",") == 99


def test_empty_list_is_rejected():
    with pytest.raises(ValueError):
        normalize_id_list(JoinedIds(" , "))
