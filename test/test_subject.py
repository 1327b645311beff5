"""Unit tests for subject counters."""

import pytest

from common.encoding import EncodingError
from common.subject import Subject, optional_list_of


@pytest.mark.unit
class TestOptionalListOf:
    """Tests for optional_list_of."""

    def test_sorted_by_name(self) -> None:
        subjects = optional_list_of('{"orders.new": 3, "alerts": 10, "orders.done": 7}')
        assert subjects == [
            Subject("alerts", 10),
            Subject("orders.done", 7),
            Subject("orders.new", 3),
        ]
        assert [s.count for s in subjects] == [10, 7, 3]

    def test_none_input(self) -> None:
        assert optional_list_of(None) is None

    def test_empty_text(self) -> None:
        assert optional_list_of("") is None

    def test_empty_mapping(self) -> None:
        assert optional_list_of("{}") is None

    def test_not_a_mapping(self) -> None:
        with pytest.raises(EncodingError):
            optional_list_of("[1, 2, 3]")

    def test_invalid_json(self) -> None:
        with pytest.raises(EncodingError):
            optional_list_of('{"a": ')

    @pytest.mark.parametrize("count", ['"5"', "1.5", "true", "null"])
    def test_non_integer_count(self, count: str) -> None:
        with pytest.raises(EncodingError):
            optional_list_of(f'{{"a": {count}}}')


@pytest.mark.unit
class TestSubject:
    """Tests for Subject ordering."""

    def test_orders_by_name_only(self) -> None:
        assert Subject("a", 100) < Subject("b", 1)
        assert sorted([Subject("z", 1), Subject("m", 2)])[0].name == "m"
