# -*- coding: utf-8 -*-
"""
Created on Mon Oct 12 09:14:27 2026

Configuration loading and logging setup.
"""

import sys
from collections.abc import Mapping

import yaml
from loguru import logger


def load_config(config_path, validate=True):
    """
    Load and validate YAML config file.

    Args:
        config_path: Path to YAML config file
        validate: If True (default), runs config validation

    Returns:
        dict: Parsed configuration

    Raises:
        ValueError: If validation fails
    """
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if validate:
        _validate_config(config)
    return config


def configure_logging(level="INFO", log_file=None):
    """Reset loguru sinks: stderr at `level`, plus an optional plain-text log file."""
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        logger.add(log_file, level=level, colorize=False, mode='a')
    return logger


def _validate_input_section(config, section, extra_fields=()):
    if not isinstance(config[section], Mapping):
        raise ValueError(f"Section '{section}' must be a mapping")
    for field in ("file_path", "id_field") + tuple(extra_fields):
        if not isinstance(config[section].get(field), str):
            raise ValueError(f"{section}.{field} must be a string")


def _validate_config(config):
    """Internal validation logic."""
    if not isinstance(config, Mapping):
        raise ValueError("Config must be a mapping")

    # 1. Top-level sections
    required_sections = ["objects_input", "training_input", "geometry_input", "output"]
    if missing := [s for s in required_sections if s not in config]:
        raise ValueError(f"Missing required sections: {missing}")

    # 2. Inputs
    _validate_input_section(config, "objects_input")
    _validate_input_section(config, "training_input", extra_fields=("label_field",))
    _validate_input_section(config, "geometry_input")

    # 3. Features
    features = config.get("features") or {}
    columns = features.get("columns")
    if columns is not None and not (isinstance(columns, list) and all(isinstance(c, str) for c in columns)):
        raise ValueError("features.columns must be a list of column names")

    # 4. Classifier
    clf = config.get("classifier") or {}
    n_estimators = clf.get("n_estimators", 500)
    if not isinstance(n_estimators, int) or isinstance(n_estimators, bool) or n_estimators < 1:
        raise ValueError("classifier.n_estimators must be a positive integer")
    if reserved := [k for k in ("bootstrap", "oob_score") if k in clf]:
        raise ValueError(f"classifier.{reserved[0]} cannot be set, the OOB error estimate needs it")
    test_size = clf.get("test_size", 0.0)
    if not isinstance(test_size, (int, float)) or not 0 <= test_size < 1:
        raise ValueError("classifier.test_size must be a number in [0, 1)")

    # 5. Legend
    legend = config.get("legend") or {}
    if "colors" in legend and legend["colors"] is not None and not isinstance(legend["colors"], Mapping):
        raise ValueError("legend.colors must be a mapping of class to color")
    labels = legend.get("labels")
    if labels is not None and not isinstance(labels, (Mapping, str)):
        raise ValueError("legend.labels must be a mapping or a path to a .qml file")
    if isinstance(labels, str) and not labels.endswith('.qml'):
        raise ValueError(f"legend.labels is not a QML file: {labels}")

    # 6. Outputs
    if not isinstance(config["output"], Mapping):
        raise ValueError("Section 'output' must be a mapping")
