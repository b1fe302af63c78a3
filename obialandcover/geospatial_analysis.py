# -*- coding: utf-8 -*-
"""
Created on Tue Oct 13 14:21:30 2026

Joining object predictions back to polygon geometry and summarising classified maps.
"""

from pathlib import Path

import geopandas as gpd
import pandas as pd
from loguru import logger
from pyproj import CRS


def load_geometry(path):
    gdf = gpd.read_file(path)
    logger.info(f"Loaded {len(gdf)} polygons from {path}")
    return gdf


class ProjectionHandler:

    def _validate_crs(self, crs1_input, crs2_input):
        """
        Compare two CRS definitions for equivalence.

        Parameters
        ----------
        crs1_input, crs2_input : any
            CRS representations (EPSG code, WKT string, PROJ string,
            geopandas CRS, etc.)

        Returns
        -------
        bool
            True if CRSes are equivalent, False otherwise.
        """
        crs1 = CRS.from_user_input(crs1_input)
        crs2 = CRS.from_user_input(crs2_input)

        # Check EPSG codes first
        epsg1 = crs1.to_epsg()
        epsg2 = crs2.to_epsg()

        if epsg1 is not None and epsg2 is not None:
            return epsg1 == epsg2

        # Fallback: compare normalized proj4 strings
        norm_proj4_1 = " ".join(sorted(crs1.to_proj4().strip().split()))
        norm_proj4_2 = " ".join(sorted(crs2.to_proj4().strip().split()))

        return norm_proj4_1 == norm_proj4_2

    def check_same_crs(self, gdf1, gdf2):
        """Raise ValueError if both layers carry a CRS and they differ."""
        if gdf1.crs is None or gdf2.crs is None:
            return
        if not self._validate_crs(gdf1.crs, gdf2.crs):
            raise ValueError(f"CRS mismatch: {gdf1.crs} vs {gdf2.crs}")

    def reproj_to_equalarea(self, gdf):
        return gdf.to_crs("ESRI:54009") #Mollweide Equal-Area Projection


def join_predictions(geometry, predictions, id_field, extra=None):
    """
    Attach predicted classes to polygons by identifier.

    Parameters
    ----------
    geometry : geopandas.GeoDataFrame
        Polygons with an `id_field` column.
    predictions : pandas.Series
        Predicted class indexed by object identifier.
    id_field : str
        Identifier column shared by polygons and predictions.
    extra : pandas.Series or pandas.DataFrame, optional
        More per-object values indexed the same way (e.g. confidence).

    Returns
    -------
    geopandas.GeoDataFrame
        Same rows, in the same order, as `geometry`, plus the prediction column(s).

    Raises
    ------
    KeyError
        If `id_field` is not a column of `geometry`.
    ValueError
        If prediction identifiers are not unique.
    """
    if id_field not in geometry.columns:
        raise KeyError(f"Identifier column '{id_field}' not found in geometry layer")
    if not predictions.index.is_unique:
        raise ValueError("Prediction identifiers must be unique")

    values = predictions.to_frame()
    if extra is not None:
        values = values.join(extra)
    values.index.name = id_field
    values = values.reset_index()

    # values from an earlier classification of the same layer are replaced
    if stale := [c for c in values.columns if c != id_field and c in geometry.columns]:
        logger.info(f"Replacing existing columns {stale}")
        geometry = geometry.drop(columns=stale)

    joined = geometry.merge(values, on=id_field, how='left', validate='many_to_one')

    unmatched = int(joined[predictions.name].isna().sum())
    if unmatched:
        logger.warning(f"{unmatched} polygons have no prediction")
    logger.info(f"Joined predictions onto {len(joined)} polygons")
    return joined


def class_area_summary(gdf, class_field, projection_handler=None):
    """
    Per-class object count and area of a classified polygon layer.

    Areas are measured in the Mollweide equal-area projection. Returns a DataFrame
    indexed by class with `n_objects`, `area_m2` and `pct_area` (fraction of the
    total area, summing to 1).
    """
    if gdf.crs is None:
        raise ValueError("Cannot compute areas for a layer without CRS")
    projection_handler = projection_handler or ProjectionHandler()
    areas = projection_handler.reproj_to_equalarea(gdf).geometry.area

    frame = pd.DataFrame({class_field: gdf[class_field].to_numpy(), "area_m2": areas.to_numpy()})
    summary = frame.groupby(class_field).agg(
        n_objects=("area_m2", "size"),
        area_m2=("area_m2", "sum"))
    total = summary["area_m2"].sum()
    summary["pct_area"] = summary["area_m2"] / total if total else 0.0
    return summary.sort_values("area_m2", ascending=False)


def export_classified(gdf, path, driver=None):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if driver:
        gdf.to_file(path, driver=driver)
    else:
        gdf.to_file(path)
    logger.info(f"Classified polygons written to {path}")
    return path
