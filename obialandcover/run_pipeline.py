# -*- coding: utf-8 -*-
"""
Created on Thu Oct 15 09:30:58 2026

Level 1 land cover classification: train on labeled objects, predict every
object, join to polygons, relabel and map.
"""

import argparse
import json
from pathlib import Path

import geopandas as gpd
import matplotlib
import matplotlib.pyplot as plt
from loguru import logger

from obialandcover.classification import ObjectClassifier
from obialandcover.geospatial_analysis import (ProjectionHandler, class_area_summary,
                                               export_classified, join_predictions, load_geometry)
from obialandcover.legend import ClassLegend
from obialandcover.object_tables import (load_object_table, load_training_table,
                                         select_feature_columns, split_training)
from obialandcover.rendering import plot_classified_map, plot_feature_importance
from obialandcover.utils import configure_logging, load_config


def run_pipeline(cfg):
    """Run the whole Level 1 classification from a validated config dict."""
    log_cfg = cfg.get("logging") or {}
    configure_logging(log_cfg.get("level", "INFO"), log_cfg.get("file"))

    objects_cfg = cfg["objects_input"]
    training_cfg = cfg["training_input"]
    geometry_cfg = cfg["geometry_input"]
    features_cfg = cfg.get("features") or {}
    clf_cfg = dict(cfg.get("classifier") or {})
    legend_cfg = cfg.get("legend") or {}
    out_cfg = cfg["output"]
    prediction_field = out_cfg.get("prediction_field", "pred_class")
    label_field = out_cfg.get("label_field", "pred_label")

    # Load objects & training samples
    objects = load_object_table(Path(objects_cfg["file_path"]), objects_cfg["id_field"])
    if training_cfg["id_field"] != objects_cfg["id_field"]:
        objects = objects.rename(columns={objects_cfg["id_field"]: training_cfg["id_field"]})
    id_field = training_cfg["id_field"]
    training = load_training_table(Path(training_cfg["file_path"]), id_field,
                                   training_cfg["label_field"], objects=objects)

    feature_columns = select_feature_columns(
        objects, id_field, training_cfg["label_field"],
        columns=features_cfg.get("columns"),
        exclude=features_cfg.get("exclude") or ())
    logger.info(f"Using {len(feature_columns)} features: {feature_columns}")

    # Train
    test_size = clf_cfg.pop("test_size", 0.0)
    random_state = clf_cfg.get("random_state", 42)
    train, holdout = split_training(training, training_cfg["label_field"], test_size, random_state)
    classifier = ObjectClassifier(feature_columns, **clf_cfg).fit(train, training_cfg["label_field"])
    for name, value in classifier.feature_importances.items():
        logger.debug(f"  {name}: {value:.4f}")
    evaluation = classifier.evaluate(holdout) if holdout is not None else None

    # Predict & join
    predictions = classifier.predict(objects, id_field, name=prediction_field)
    confidence = classifier.predict_confidence(objects, id_field)

    geometry = load_geometry(Path(geometry_cfg["file_path"]))
    if geometry_cfg["id_field"] != id_field:
        geometry = geometry.rename(columns={geometry_cfg["id_field"]: id_field})
    projection_handler = ProjectionHandler()
    if Path(training_cfg["file_path"]).suffix.lower() != '.csv':
        # training polygons must come from the same segmentation as the geometry layer
        projection_handler.check_same_crs(gpd.read_file(training_cfg["file_path"], rows=1), geometry)
    classified = join_predictions(geometry, predictions, id_field, extra=confidence)

    # Relabel & summarise
    legend = ClassLegend(legend_cfg.get("labels"), legend_cfg.get("colors"))
    classified[label_field] = legend.relabel_series(classified[prediction_field])
    area_summary = class_area_summary(classified, label_field, projection_handler) if classified.crs else None

    # Outputs
    map_ax = plot_classified_map(classified, legend, label_field,
                                 title=out_cfg.get("title", "Level 1 land cover"),
                                 output_path=out_cfg.get("map_path"))
    if out_cfg.get("importance_plot_path"):
        plot_feature_importance(classifier.feature_importances, output_path=out_cfg["importance_plot_path"])
    if out_cfg.get("vector_path"):
        export_classified(classified, out_cfg["vector_path"], driver=out_cfg.get("vector_driver"))
    if out_cfg.get("area_summary_path") and area_summary is not None:
        Path(out_cfg["area_summary_path"]).parent.mkdir(parents=True, exist_ok=True)
        area_summary.to_csv(out_cfg["area_summary_path"])
    if out_cfg.get("model_path"):
        classifier.save(out_cfg["model_path"])
    if out_cfg.get("summary_path"):
        report = {"classifier": classifier.summary(), "n_objects": int(len(objects))}
        if evaluation is not None:
            report["evaluation"] = {k: evaluation[k] for k in ("accuracy", "kappa", "n_samples")}
            report["evaluation"]["confusion_matrix"] = {
                str(ref): {str(pred): int(n) for pred, n in row.items()}
                for ref, row in evaluation["confusion_matrix"].iterrows()}
        Path(out_cfg["summary_path"]).parent.mkdir(parents=True, exist_ok=True)
        with open(out_cfg["summary_path"], 'w') as f:
            json.dump(report, f, indent=2, default=str)

    logger.info("Level 1 classification complete")
    return {
        "classifier": classifier,
        "predictions": predictions,
        "classified": classified,
        "area_summary": area_summary,
        "evaluation": evaluation,
        "map_ax": map_ax,
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Level 1 object-based land cover classification")
    parser.add_argument("--config", required=True, help="Path to YAML config file")
    parser.add_argument("--no-show", action="store_true", help="Do not open the map window")
    args = parser.parse_args(argv)

    if args.no_show:
        matplotlib.use("Agg")
    cfg = load_config(args.config)
    run_pipeline(cfg)
    if not args.no_show:
        plt.show()


if __name__ == "__main__":
    main()
