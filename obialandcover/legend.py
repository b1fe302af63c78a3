# -*- coding: utf-8 -*-
"""
Created on Wed Oct 14 10:05:12 2026

Display names and fixed colors for land-cover classes.
"""

import xml.etree.ElementTree as ET

import numpy as np
import pandas as pd
from matplotlib import colormaps
from matplotlib.colors import to_hex
from matplotlib.patches import Patch


def class_key(value):
    """Lookup key for a class code. Integral floats (1.0 from a column with blanks) become '1'."""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def default_label(value):
    """'closed_canopy' -> 'Closed canopy'. Leaves the rest of the string untouched."""
    text = str(value).replace('_', ' ').strip()
    return text[:1].upper() + text[1:]


def _qml_color(value):
    """QGIS colors are 'r,g,b,a' (newer versions append ',rgb:...')."""
    if value.startswith('#'):
        return value
    r, g, b = (int(v) for v in value.split(',')[:3])
    return to_hex((r / 255, g / 255, b / 255))


class ClassLegend:
    def __init__(self, labels=None, colors=None, no_data_label="No data", no_data_color="#000000"):
        """
        Initialize land cover legend.

        Args:
            labels: Either:
                - Dictionary mapping class codes to display names
                - Path to QML file (string ending with '.qml')
            colors: Dictionary mapping class codes or display names to colors (overrides QML)
            no_data_label: Display name for objects without a class
            no_data_color: Color for objects without a class
        """
        self.labels = {}
        self.colors = {}
        self.no_data_label = no_data_label
        self.no_data_color = no_data_color
        self._fallback = colormaps['tab20']
        self._n_fallback = 0

        if isinstance(labels, str) and labels.endswith('.qml'):
            self._parse_qml(labels)
        elif isinstance(labels, dict):
            self.labels = {class_key(k): str(v) for k, v in labels.items()}

        if chained := sorted(k for k, v in self.labels.items() if v in self.labels and self.labels[v] != v):
            raise ValueError(f"Display names that are also class codes with another name: {chained}")

        for key, color in (colors or {}).items():
            self.colors[self.relabel(key)] = to_hex(color)
        self.colors[no_data_label] = to_hex(no_data_color)

    def _parse_qml(self, qml_path):
        """Read categories from a QGIS style: categorized vector renderer or raster palette."""
        root = ET.parse(qml_path).getroot()

        symbol_colors = {}
        for symbol in root.findall(".//symbols/symbol"):
            layer = symbol.find("layer")
            if layer is None:
                continue
            prop = layer.find("prop[@k='color']")
            if prop is not None:
                symbol_colors[symbol.get('name')] = _qml_color(prop.get('v'))
                continue
            option = layer.find(".//Option[@name='color']")
            if option is not None:
                symbol_colors[symbol.get('name')] = _qml_color(option.get('value'))

        for category in root.findall(".//categories/category"):
            value = class_key(category.get('value'))
            label = category.get('label') or default_label(value)
            self.labels[value] = label
            if category.get('symbol') in symbol_colors:
                self.colors[label] = symbol_colors[category.get('symbol')]

        for element in root.findall(".//paletteEntry"):
            value = class_key(element.get('value'))
            label = element.get('label') or default_label(value)
            self.labels[value] = label
            self.colors[label] = _qml_color(element.get('color'))

    def relabel(self, value):
        """Display name for a class code. Display names map to themselves."""
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return self.no_data_label
        key = class_key(value)
        if key in self.labels:
            return self.labels[key]
        if key in self.labels.values() or key == self.no_data_label:
            return key
        return default_label(key)

    def relabel_series(self, series):
        return series.map(self.relabel)

    def color_for(self, value):
        label = self.relabel(value)
        if label not in self.colors:
            # fixed for the lifetime of the legend, in order of first request
            self.colors[label] = to_hex(self._fallback(self._n_fallback % self._fallback.N))
            self._n_fallback += 1
        return self.colors[label]

    def handles(self, values):
        """Legend patches for the distinct display names among `values`."""
        labels = []
        for value in values:
            label = self.relabel(value)
            if label not in labels:
                labels.append(label)
        return [Patch(facecolor=self.color_for(label), edgecolor='none', label=label) for label in labels]
