import matplotlib

matplotlib.use("Agg")

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import box

CLASS_CENTERS = {
    # Brightness, Mean_NIR, NDVI, NDWI
    "closed_canopy": (70.0, 0.45, 0.80, -0.55),
    "water": (25.0, 0.03, -0.30, 0.60),
    "built_up": (160.0, 0.25, 0.05, -0.05),
}
FEATURES = ["Brightness", "Mean_NIR", "NDVI", "NDWI"]


def make_objects(n_per_class=20, seed=0):
    rng = np.random.default_rng(seed)
    rows = []
    object_id = 1
    for label, center in CLASS_CENTERS.items():
        scale = np.array([5.0, 0.02, 0.05, 0.05])
        for values in rng.normal(center, scale, size=(n_per_class, len(center))):
            rows.append({"ID": object_id, **dict(zip(FEATURES, values)), "truth": label})
            object_id += 1
    return pd.DataFrame(rows)


def make_geometry(ids, crs="EPSG:32633", size=100.0):
    ncols = 10
    polys = []
    for i, _ in enumerate(ids):
        x0 = 500000 + (i % ncols) * size
        y0 = 5000000 + (i // ncols) * size
        polys.append(box(x0, y0, x0 + size, y0 + size))
    return gpd.GeoDataFrame({"ID": list(ids)}, geometry=polys, crs=crs)


@pytest.fixture
def objects_with_truth():
    return make_objects()


@pytest.fixture
def objects(objects_with_truth):
    return objects_with_truth.drop(columns="truth")


@pytest.fixture
def training(objects_with_truth):
    subset = objects_with_truth.iloc[::2]
    return subset.rename(columns={"truth": "class"}).reset_index(drop=True)


@pytest.fixture
def geometry(objects):
    return make_geometry(objects["ID"])
