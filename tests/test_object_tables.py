import pandas as pd
import pytest

from conftest import FEATURES, make_geometry
from obialandcover.object_tables import (attach_features, load_object_table, load_table,
                                         load_training_table, select_feature_columns, split_training)


def test_load_table_csv(tmp_path, objects):
    path = tmp_path / "objects.csv"
    objects.to_csv(path, index=False)
    table = load_table(path)
    assert list(table.columns) == list(objects.columns)
    assert len(table) == len(objects)


def test_load_table_vector_drops_geometry(tmp_path, objects):
    gdf = make_geometry(objects["ID"]).merge(objects, on="ID")
    path = tmp_path / "objects.gpkg"
    gdf.to_file(path, driver="GPKG")
    table = load_table(path)
    assert "geometry" not in table.columns
    assert isinstance(table, pd.DataFrame)
    assert set(FEATURES) <= set(table.columns)


def test_load_object_table_rejects_duplicate_ids(tmp_path, objects):
    path = tmp_path / "objects.csv"
    pd.concat([objects, objects.head(2)]).to_csv(path, index=False)
    with pytest.raises(ValueError, match="Duplicated identifiers"):
        load_object_table(path, "ID")


def test_load_object_table_missing_id(tmp_path, objects):
    path = tmp_path / "objects.csv"
    objects.to_csv(path, index=False)
    with pytest.raises(KeyError):
        load_object_table(path, "SEGMENT_ID")


def test_training_features_attached_from_objects(tmp_path, objects, training):
    path = tmp_path / "training.csv"
    training[["ID", "class"]].to_csv(path, index=False)
    loaded = load_training_table(path, "ID", "class", objects=objects)
    assert len(loaded) == len(training)
    assert set(FEATURES) <= set(loaded.columns)
    first = loaded.iloc[0]
    expected = objects.set_index("ID").loc[first["ID"], "NDVI"]
    assert first["NDVI"] == pytest.approx(expected)


def test_training_unknown_ids(tmp_path, objects, training):
    path = tmp_path / "training.csv"
    extra = pd.DataFrame({"ID": [9999], "class": ["water"]})
    pd.concat([training[["ID", "class"]], extra]).to_csv(path, index=False)
    with pytest.raises(ValueError, match="9999"):
        load_training_table(path, "ID", "class", objects=objects)


def test_training_missing_label_column(tmp_path, training):
    path = tmp_path / "training.csv"
    training.drop(columns="class").to_csv(path, index=False)
    with pytest.raises(KeyError):
        load_training_table(path, "ID", "class")


def test_training_unlabeled_rows_dropped(tmp_path, training):
    training = training.copy()
    training.loc[0, "class"] = None
    path = tmp_path / "training.csv"
    training.to_csv(path, index=False)
    loaded = load_training_table(path, "ID", "class")
    assert len(loaded) == len(training) - 1
    assert loaded["class"].notna().all()


def test_attach_features_keeps_existing_columns(objects, training):
    merged = attach_features(training, objects, "ID")
    assert list(merged.columns) == list(training.columns)

    merged = attach_features(training[["ID", "class"]], objects, "ID")
    assert len(merged) == len(training)


def test_select_feature_columns_numeric_default(training):
    training = training.assign(site="north")
    assert select_feature_columns(training, "ID", "class") == FEATURES


def test_select_feature_columns_exclude_and_explicit(training):
    assert select_feature_columns(training, "ID", "class", exclude=["NDWI"]) == FEATURES[:3]
    assert select_feature_columns(training, "ID", columns=["NDVI", "NDWI"]) == ["NDVI", "NDWI"]
    with pytest.raises(KeyError):
        select_feature_columns(training, "ID", columns=["Mean_SWIR"])


def test_select_feature_columns_nothing_left():
    df = pd.DataFrame({"ID": [1, 2], "class": ["a", "b"]})
    with pytest.raises(ValueError):
        select_feature_columns(df, "ID", "class")


def test_split_training_stratified(training):
    train, holdout = split_training(training, "class", test_size=0.3, random_state=0)
    assert len(train) + len(holdout) == len(training)
    assert set(holdout["class"]) == set(training["class"])
    assert set(train["ID"]).isdisjoint(holdout["ID"])


def test_split_training_disabled(training):
    train, holdout = split_training(training, "class", test_size=0.0)
    assert holdout is None
    assert train is training
