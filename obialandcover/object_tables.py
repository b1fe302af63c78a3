# -*- coding: utf-8 -*-
"""
Created on Mon Oct 12 10:02:51 2026

Loading of image-object feature tables exported from the segmentation software.
"""

from pathlib import Path

import geopandas as gpd
import pandas as pd
from loguru import logger
from pandas.api.types import is_numeric_dtype
from sklearn.model_selection import train_test_split


def load_table(path):
    """Read a feature table. CSV goes through pandas, anything else through geopandas
    with the geometry column dropped."""
    path = Path(path)
    if path.suffix.lower() == '.csv':
        return pd.read_csv(path)
    gdf = gpd.read_file(path)
    return pd.DataFrame(gdf.drop(columns=gdf.geometry.name))


def _check_ids(df, id_field, table_name):
    if id_field not in df.columns:
        raise KeyError(f"Identifier column '{id_field}' not found in {table_name} table")
    duplicated = df[id_field][df[id_field].duplicated()].unique().tolist()
    if duplicated:
        raise ValueError(f"Duplicated identifiers in {table_name} table: {duplicated[:10]}")


def load_object_table(path, id_field):
    """
    Load the full set of image objects.

    Parameters
    ----------
    path : str or Path
        CSV or vector file with one row per image object.
    id_field : str
        Name of the unique object identifier column.

    Returns
    -------
    pandas.DataFrame

    Raises
    ------
    KeyError
        If `id_field` is missing.
    ValueError
        If identifiers are not unique.
    """
    objects = load_table(path)
    _check_ids(objects, id_field, "object")
    logger.info(f"Loaded {len(objects)} image objects from {path}")
    return objects


def attach_features(training, objects, id_field):
    """Add to `training` the object columns it does not already carry, matched by id."""
    missing_cols = [c for c in objects.columns if c not in training.columns]
    if not missing_cols:
        return training
    merged = training.merge(objects[[id_field] + missing_cols], on=id_field, how='left', validate='one_to_one')
    logger.info(f"Attached {len(missing_cols)} feature columns to training objects")
    return merged


def load_training_table(path, id_field, label_field, objects=None):
    """
    Load the manually labeled training objects.

    Parameters
    ----------
    path : str or Path
        CSV or vector file of training objects.
    id_field : str
        Identifier shared with the object table.
    label_field : str
        Column holding the class label.
    objects : pandas.DataFrame, optional
        Full object table. When given, training ids are checked against it and
        feature columns the training table lacks are copied over.

    Returns
    -------
    pandas.DataFrame
    """
    training = load_table(path)
    _check_ids(training, id_field, "training")
    if label_field not in training.columns:
        raise KeyError(f"Label column '{label_field}' not found in training table")

    unlabeled = training[label_field].isna()
    if unlabeled.any():
        logger.warning(f"Dropping {int(unlabeled.sum())} training objects without a label")
        training = training.loc[~unlabeled].reset_index(drop=True)

    if objects is not None:
        unknown = sorted(set(training[id_field]) - set(objects[id_field]))
        if unknown:
            raise ValueError(f"Training identifiers not present in object table: {unknown[:10]}")
        training = attach_features(training, objects, id_field)

    counts = training[label_field].value_counts()
    logger.info(f"Loaded {len(training)} training objects in {len(counts)} classes")
    for label, count in counts.items():
        logger.debug(f"  {label}: {count}")
    return training


def select_feature_columns(df, id_field, label_field=None, columns=None, exclude=()):
    """
    Pick the columns used as classifier features.

    With an explicit `columns` list every entry must exist. Otherwise every numeric
    column except the identifier, the label and `exclude` is used.
    """
    if columns:
        if missing := [c for c in columns if c not in df.columns]:
            raise KeyError(f"Feature columns not found: {missing}")
        return list(columns)

    skip = {id_field, label_field, *exclude}
    selected = [c for c in df.columns if c not in skip and is_numeric_dtype(df[c])]
    if not selected:
        raise ValueError("No numeric feature columns found")
    return selected


def split_training(training, label_field, test_size=0.0, random_state=42):
    """Stratified holdout split. Returns (train, holdout); holdout is None when test_size is 0."""
    if not test_size:
        return training, None
    train, holdout = train_test_split(
        training,
        test_size=test_size,
        random_state=random_state,
        stratify=training[label_field])
    logger.info(f"Holdout split: {len(train)} training / {len(holdout)} validation objects")
    return train.reset_index(drop=True), holdout.reset_index(drop=True)
