import pytest

from covid_eda.dataframe import DataFrame, SchemaError, concat


@pytest.fixture
def df():
    return DataFrame({
        "continent": ["Europe", "Asia", "Europe", "Asia", None],
        "location": ["A", "B", "C", "D", "E"],
        "cases": [10, 30, 30, None, 5],
    })


def test_constructor_rejects_ragged_columns():
    with pytest.raises(ValueError):
        DataFrame({"a": [1, 2], "b": [1]})


def test_select_is_strict(df):
    assert df.select(["location"]).columns == ["location"]
    with pytest.raises(SchemaError, match="deaths"):
        df.select(["location", "deaths"])


def test_select_keeps_columns_on_empty_frame():
    empty = DataFrame({"a": [], "b": []})
    assert empty.select(["b"]).columns == ["b"]
    assert empty.filter([]).columns == ["a", "b"]


def test_filter_and_take(df):
    out = df.filter([True, False, True, False, False])
    assert out["location"] == ["A", "C"]
    assert df.take([4, 0])["location"] == ["E", "A"]


def test_sort_values_descending_is_stable_with_nulls_last(df):
    out = df.sort_values("cases", ascending=False)
    assert out["location"] == ["B", "C", "A", "E", "D"]
    out = df.sort_values("cases")
    assert out["location"] == ["E", "A", "B", "C", "D"]


def test_fillna_and_dropna(df):
    filled = df.fillna(["cases"], 0)
    assert filled["cases"] == [10, 30, 30, 0, 5]
    assert df["cases"][3] is None
    assert df.dropna()["location"] == ["A", "B", "C"]
    assert df.dropna(["continent"])["location"] == ["A", "B", "C", "D"]


def test_groupby_agg_sorted_keys(df):
    out = df.groupby("continent", sort=True).agg({"cases": ["max", "sum", "count"]})
    assert out["continent"] == ["Asia", "Europe", None]
    assert out["max_cases"] == [30, 30, 5]
    assert out["sum_cases"] == [30, 40, 5]
    assert out["count_cases"] == [2, 2, 1]


def test_groupby_unknown_key_raises(df):
    with pytest.raises(SchemaError):
        df.groupby("country")


def test_groupby_empty_frame_keeps_columns():
    out = DataFrame({"k": [], "v": []}).groupby("k").agg({"v": ["sum"]})
    assert out.columns == ["k", "sum_v"]
    assert len(out) == 0


def test_idxmax_picks_first_maximum():
    df = DataFrame({"k": ["x", "x", "x", "y"], "v": [1, 5, 5, None]})
    assert df.groupby("k").idxmax("v") == [1]


def test_join_pair_keys_prefixes_right(df):
    meta = DataFrame({"location": ["A", "B"], "iso": ["AAA", "BBB"]})
    out = df.join(meta, on=("location", "location"), how="inner")
    assert out.columns == ["continent", "location", "cases", "r_location", "r_iso"]
    assert out["r_iso"] == ["AAA", "BBB"]


def test_join_shared_keys_outer():
    left = DataFrame({"k1": ["a", "b"], "k2": [1, 1], "x": [10, 20]})
    right = DataFrame({"k1": ["b", "c"], "k2": [1, 1], "y": [200, 300]})
    out = left.join(right, on=["k1", "k2"], how="outer")
    assert out.columns == ["k1", "k2", "x", "y"]
    assert out["k1"] == ["a", "b", "c"]
    assert out["x"] == [10, 20, None]
    assert out["y"] == [None, 200, 300]


def test_join_rejects_unknown_how(df):
    with pytest.raises(NotImplementedError):
        df.join(df, on=["location"], how="cross")


def test_concat_and_records():
    a = DataFrame({"k": [1], "v": ["x"]})
    b = DataFrame({"k": [2], "v": ["y"]})
    out = concat([a, b])
    assert out.to_records() == [{"k": 1, "v": "x"}, {"k": 2, "v": "y"}]
    with pytest.raises(SchemaError):
        concat([a, DataFrame({"z": [1]})])


def test_join_shared_keys_match_null_keys():
    left = DataFrame({"k1": ["a", "a"], "k2": [None, "x"], "v": [1, 2]})
    right = DataFrame({"k1": ["a"], "k2": [None], "w": [10]})
    out = left.join(right, on=["k1", "k2"], how="outer")
    assert out.to_records() == [
        {"k1": "a", "k2": None, "v": 1, "w": 10},
        {"k1": "a", "k2": "x", "v": 2, "w": None},
    ]


def test_join_pair_keys_skip_null_keys():
    left = DataFrame({"k": [None], "v": [1]})
    right = DataFrame({"k": [None], "w": [2]})
    assert len(left.join(right, on=("k", "k"))) == 0


def test_groupby_sort_mixed_key_types():
    df = DataFrame({"location": ["Niue", 1234, None, "Aruba"], "v": [1, 2, 3, 4]})
    out = df.groupby("location", sort=True).agg({"v": ["sum"]})
    assert out["location"] == [1234, "Aruba", "Niue", None]


def test_agg_rejects_unsupported_function(df):
    with pytest.raises(ValueError, match="median"):
        df.groupby("continent").agg({"cases": ["median"]})
