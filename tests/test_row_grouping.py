import random

import pytest

from services.row_grouping import build_row, cluster_rows, group_fragments, row_threshold


def summary(rows):
    return [(r.text, r.price, r.non_linguistic) for r in rows]


def test_item_and_price_on_same_line(frag):
    rows = group_fragments([frag("Margherita Pizza", x=0.1), frag("$12.50", x=0.7, w=0.1)])

    assert len(rows) == 1
    row = rows[0]
    assert row.text == "Margherita Pizza"
    assert row.price == "$12.50"
    assert row.translatable_text == "Margherita Pizza"
    assert row.display_text == "Margherita Pizza  $12.50"


def test_price_only_row_is_not_translatable(frag):
    rows = group_fragments([frag("¥1,200")])

    assert summary(rows) == [("¥1,200", None, True)]
    assert rows[0].translatable_text == ""
    assert rows[0].display_text == "¥1,200"


def test_rows_ordered_top_to_bottom_then_left_to_right(frag):
    fragments = [
        frag("$4.00", x=0.7, top=0.5, w=0.1),
        frag("Espresso", x=0.1, top=0.5),
        frag("Drinks", x=0.1, top=0.1),
        frag("Tea", x=0.1, top=0.3),
        frag("$3.00", x=0.7, top=0.3, w=0.1),
    ]
    rows = group_fragments(fragments)

    assert summary(rows) == [
        ("Drinks", None, False),
        ("Tea", "$3.00", False),
        ("Espresso", "$4.00", False),
    ]
    assert [f.text for f in rows[2].fragments] == ["Espresso", "$4.00"]


def test_every_fragment_in_exactly_one_row(frag):
    fragments = [frag(f"item {i}", x=(i % 3) * 0.3, top=0.05 * i) for i in range(12)]
    rows = group_fragments(fragments)

    grouped = [f for row in rows for f in row.fragments]
    assert sorted(grouped, key=id) == sorted(fragments, key=id)
    assert len(grouped) == len(fragments)


def test_grouping_is_independent_of_input_order(frag):
    fragments = [
        frag("Pasta", x=0.1, top=0.2),
        frag("$9", x=0.7, top=0.205, w=0.05),
        frag("Salad", x=0.1, top=0.3),
        frag("$7", x=0.7, top=0.298, w=0.05),
        frag("Mains", x=0.4, top=0.1),
    ]
    expected = summary(group_fragments(fragments))

    shuffled = list(fragments)
    random.Random(7).shuffle(shuffled)
    assert summary(group_fragments(shuffled)) == expected
    assert summary(group_fragments(list(reversed(fragments)))) == expected


def test_grouping_is_idempotent_on_flattened_rows(frag):
    fragments = [
        frag("Soup", x=0.1, top=0.1),
        frag("$5", x=0.8, top=0.11, w=0.05),
        frag("Bread", x=0.1, top=0.2),
    ]
    rows = group_fragments(fragments)
    flattened = [f for row in rows for f in row.fragments]

    assert summary(group_fragments(flattened)) == summary(rows)


def test_threshold_uses_row_anchor_not_running_average(frag):
    # centers 0.115, 0.130, 0.145, 0.160 with threshold 0.018
    fragments = [frag(f"line {i}", top=0.1 + 0.015 * i) for i in range(4)]
    lines = cluster_rows(fragments)

    assert [[f.text for f in line] for line in lines] == [["line 0", "line 1"], ["line 2", "line 3"]]


def test_threshold_has_floor_for_tiny_fragments(frag):
    assert row_threshold([frag("a", h=0.001), frag("b", h=0.002)]) == pytest.approx(0.008)
    assert row_threshold([frag("a", h=0.05)]) == pytest.approx(0.03)


def test_threshold_uses_upper_median_height(frag):
    fragments = [frag("a", h=0.02), frag("b", h=0.04), frag("c", h=0.10), frag("d", h=0.06)]
    assert row_threshold(fragments) == pytest.approx(0.06 * 0.6)


def test_threshold_constants_are_configurable(frag):
    fragments = [frag("Pizza", top=0.1), frag("Calzone", top=0.14)]

    assert len(group_fragments(fragments)) == 2
    assert len(group_fragments(fragments, factor=2.0)) == 1
    assert len(group_fragments(fragments, factor=0.0, floor=0.05)) == 1


def test_multiple_prices_and_words_are_split(frag):
    row = build_row([
        frag("Pizza", x=0.1),
        frag("small", x=0.3),
        frag("$8", x=0.6, w=0.05),
        frag("$12", x=0.8, w=0.05),
    ])

    assert row.text == "Pizza small"
    assert row.price == "$8 $12"


def test_row_classified_on_joined_text(frag):
    rows = group_fragments([frag("12", x=0.1, w=0.1), frag("USD", x=0.3, w=0.1)])

    assert summary(rows) == [("12 USD", None, True)]
    assert rows[0].translatable_text == ""
    assert rows[0].display_text == "12 USD"


def test_split_price_range_stays_one_non_linguistic_row(frag):
    row = build_row([frag("$7", x=0.1, w=0.05), frag("-", x=0.2, w=0.02), frag("$9", x=0.3, w=0.05)])

    assert (row.text, row.price, row.non_linguistic) == ("$7 - $9", None, True)


def test_blank_fragments_stay_in_row_without_text(frag):
    rows = group_fragments([frag("   ")])

    assert len(rows) == 1
    assert rows[0].fragments[0].text == "   "
    assert rows[0].translatable_text == ""


def test_empty_input():
    assert group_fragments([]) == []
