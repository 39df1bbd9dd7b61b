"""Tests for item_view, value_view and slice_view."""

from reactive_collections import (
    item_view,
    reactive_dict_of,
    reactive_list_of,
    slice_view,
    value_view,
)


def _record(stream):
    log = []
    dispose = stream.subscribe(log.append)
    return log, dispose


class TestItemView:
    def test_emits_initial_and_changes(self):
        fruits = reactive_list_of("A", "B", "C")
        log, _ = _record(item_view(fruits, 1))
        assert log == ["B"]

        fruits[1] = "B"
        assert log == ["B"]  # unchanged, suppressed

        fruits[1] = "X"
        assert log == ["B", "X"]

        fruits.pop(0)
        assert log == ["B", "X", "C"]

    def test_insert_and_remove_shift(self):
        fruits = reactive_list_of("A", "B", "C")
        log, _ = _record(item_view(fruits, 1))
        fruits[1] = "X"
        fruits.insert(1, "Y")
        fruits.pop(1)
        assert log == ["B", "X", "Y", "X"]

    def test_out_of_bounds_emits_default(self):
        fruits = reactive_list_of("A")
        log, _ = _record(item_view(fruits, 2))
        assert log == [None]
        fruits.append("B")
        assert log == [None]
        fruits.append("C")
        fruits.clear()
        assert log == [None, "C", None]

    def test_custom_default(self):
        fruits = reactive_list_of()
        log, _ = _record(item_view(fruits, 0, default="-"))
        fruits.append("A")
        assert log == ["-", "A"]

    def test_negative_index_is_out_of_range(self):
        fruits = reactive_list_of("A", "B")
        log, _ = _record(item_view(fruits, -1, default="-"))
        fruits.append("C")
        fruits.clear()
        assert log == ["-"]
        assert item_view(fruits, -1).value is None

    def test_none_element_is_distinct_from_never_emitted(self):
        values = reactive_list_of(None)
        log, _ = _record(item_view(values, 0))
        values.clear()
        assert log == [None]

    def test_value_property(self):
        fruits = reactive_list_of("A", "B")
        view = item_view(fruits, 1)
        assert view.value == "B"
        fruits.pop()
        assert view.value is None

    def test_dispose(self):
        fruits = reactive_list_of("A")
        log, dispose = _record(item_view(fruits, 0))
        dispose()
        fruits[0] = "Z"
        assert log == ["A"]
        assert fruits.as_stream().subscriber_count == 0

    def test_batch_emits_once(self):
        fruits = reactive_list_of("A", "B")
        log, _ = _record(item_view(fruits, 0))

        def edit(items):
            items[0] = "X"
            items[0] = "Y"

        fruits.batch_update(edit)
        assert log == ["A", "Y"]


class TestValueView:
    def test_absent_present_absent(self):
        data = reactive_dict_of()
        log, _ = _record(value_view(data, "X"))
        assert log == [None]
        data.put("X", 1)
        assert log == [None, 1]
        data.pop("X")
        assert log == [None, 1, None]

    def test_unrelated_keys_are_suppressed(self):
        data = reactive_dict_of(("a", 1))
        log, _ = _record(value_view(data, "a"))
        data["b"] = 2
        data.put("a", 1)
        data["a"] = 3
        assert log == [1, 3]

    def test_custom_default(self):
        data = reactive_dict_of()
        log, _ = _record(value_view(data, "k", default=0))
        data["k"] = 5
        data.clear()
        assert log == [0, 5, 0]

    def test_subscribers_have_independent_state(self):
        data = reactive_dict_of(("k", 1))
        view = value_view(data, "k")
        first, _ = _record(view)
        data["k"] = 2
        second, _ = _record(view)
        data["k"] = 2
        assert first == [1, 2]
        assert second == [2]


class TestSliceView:
    def test_strict_valid_range(self):
        numbers = reactive_list_of(0, 1, 2, 3, 4, 5)
        log, _ = _record(slice_view(numbers, 2, 5))
        numbers.pop(0)
        numbers.retain_all([2, 3, 4])
        assert log == [(2, 3, 4), (3, 4, 5), ()]

    def test_lenient_clamps(self):
        numbers = reactive_list_of(0, 1, 2, 3, 4, 5)
        log, _ = _record(slice_view(numbers, 2, 5, strict=False))
        numbers.pop(0)
        numbers.retain_all([2, 3, 4])
        assert log == [(2, 3, 4), (3, 4, 5), (4,)]

    def test_strict_out_of_range_becomes_valid(self):
        letters = reactive_list_of("A", "B", "C")
        log, _ = _record(slice_view(letters, 5, 7))
        assert log == [()]
        letters.append("D")
        letters.append("E")
        assert log == [()]
        letters.extend(["F", "G"])
        assert log == [(), ("F", "G")]

    def test_strict_inverted_or_negative_bounds(self):
        letters = reactive_list_of("A", "B", "C")
        inverted, _ = _record(slice_view(letters, 2, 1))
        negative, _ = _record(slice_view(letters, -1, 2))
        assert inverted == [()]
        assert negative == [()]

    def test_lenient_inverted_bounds(self):
        letters = reactive_list_of("A", "B", "C")
        log, _ = _record(slice_view(letters, 2, 1, strict=False))
        assert log == [()]

    def test_lenient_negative_start(self):
        letters = reactive_list_of("A", "B", "C")
        log, _ = _record(slice_view(letters, -5, 2, strict=False))
        assert log == [("A", "B")]

    def test_lenient_past_end(self):
        letters = reactive_list_of("A", "B", "C")
        log, _ = _record(slice_view(letters, 1, 10, strict=False))
        letters.append("D")
        assert log == [("B", "C"), ("B", "C", "D")]

    def test_unchanged_slice_is_suppressed(self):
        letters = reactive_list_of("A", "B", "C")
        log, _ = _record(slice_view(letters, 0, 2))
        letters.append("D")
        letters[2] = "Z"
        letters[0] = "A"
        assert log == [("A", "B")]

    def test_modes_are_independent(self):
        letters = reactive_list_of("A", "B", "C")
        strict, _ = _record(slice_view(letters, 1, 4))
        lenient, _ = _record(slice_view(letters, 1, 4, strict=False))
        letters.append("D")
        assert strict == [(), ("B", "C", "D")]
        assert lenient == [("B", "C"), ("B", "C", "D")]


class TestNestedBatchThroughViews:
    def test_nested_batch_single_emission(self):
        letters = reactive_list_of("A")
        full = []
        letters.as_stream().subscribe(full.append)
        tail, _ = _record(item_view(letters, 4))

        def edit(items):
            items.append("B")
            letters.batch_update(lambda inner: inner.extend(["C", "D"]))
            items.append("E")

        letters.batch_update(edit)
        assert full == [("A",), ("A", "B", "C", "D", "E")]
        assert tail == [None, "E"]
