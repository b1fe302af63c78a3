# -*- coding: utf-8 -*-
"""
Created on Mon Oct 12 11:40:03 2026

Random Forest classification of image objects.
"""

import joblib
import numpy as np
import pandas as pd
from loguru import logger
from sklearn.ensemble import RandomForestClassifier
from sklearn.metrics import accuracy_score, classification_report, cohen_kappa_score, confusion_matrix


class ObjectClassifier:
    def __init__(self, feature_columns, n_estimators=500, max_features="sqrt",
                 random_state=42, n_jobs=-1, **rf_kwargs):
        """
        Random Forest over per-object feature vectors.

        Args:
            feature_columns: Names of the feature columns, in model order
            n_estimators: Number of trees
            max_features: Features tried at each split
            random_state: Seed for bootstrap and split sampling
            n_jobs: Parallel jobs passed to scikit-learn
            **rf_kwargs: Any other RandomForestClassifier parameter
        """
        if reserved := [k for k in ("bootstrap", "oob_score") if k in rf_kwargs]:
            raise ValueError(f"{reserved} cannot be set: the OOB error needs bootstrap=True and oob_score=True")
        self.feature_columns = list(feature_columns)
        self.model = RandomForestClassifier(
            n_estimators=n_estimators,
            max_features=max_features,
            random_state=random_state,
            n_jobs=n_jobs,
            bootstrap=True,
            oob_score=True,
            **rf_kwargs)
        self.label_field = None
        self._fitted = False

    def _require_fitted(self):
        if not self._fitted:
            raise RuntimeError("ObjectClassifier has not been trained yet.")

    def _feature_matrix(self, df):
        if missing := [c for c in self.feature_columns if c not in df.columns]:
            raise KeyError(f"Feature columns not found: {missing}")
        # NaN and inf from empty or degenerate objects; trees work in float32
        f32 = np.finfo(np.float32)
        return np.nan_to_num(df[self.feature_columns].to_numpy(dtype=float), nan=0.0, posinf=f32.max, neginf=f32.min)

    def fit(self, training, label_field):
        """Train once on the labeled objects. The fitted model is not retrained."""
        if self._fitted:
            raise RuntimeError("ObjectClassifier is already trained; create a new one to retrain.")
        y = training[label_field].to_numpy()
        n_classes = len(np.unique(y))
        if n_classes < 2:
            raise ValueError(f"At least two classes are needed to train, got {n_classes}")

        logger.info(f"Training Random Forest on {len(training)} objects, "
                    f"{len(self.feature_columns)} features, {n_classes} classes")
        self.model.fit(self._feature_matrix(training), y)
        self.label_field = label_field
        self._fitted = True
        logger.info(f"OOB error: {self.oob_error:.4f}")
        return self

    @property
    def classes_(self):
        self._require_fitted()
        return self.model.classes_

    @property
    def oob_error(self):
        self._require_fitted()
        return 1.0 - self.model.oob_score_

    @property
    def feature_importances(self):
        self._require_fitted()
        importances = pd.Series(self.model.feature_importances_, index=self.feature_columns, name="importance")
        return importances.sort_values(ascending=False)

    def predict(self, objects, id_field, name="pred_class"):
        """One predicted label per object, indexed by object identifier."""
        self._require_fitted()
        if objects.empty:
            return pd.Series([], index=pd.Index(objects[id_field], name=id_field), name=name, dtype=object)
        labels = self.model.predict(self._feature_matrix(objects))
        predictions = pd.Series(labels, index=pd.Index(objects[id_field], name=id_field), name=name)
        logger.info(f"Predicted {len(predictions)} objects")
        for label, count in predictions.value_counts().items():
            logger.debug(f"  {label}: {count}")
        return predictions

    def predict_proba(self, objects, id_field):
        self._require_fitted()
        if objects.empty:
            return pd.DataFrame(columns=self.model.classes_, index=pd.Index(objects[id_field], name=id_field), dtype=float)
        proba = self.model.predict_proba(self._feature_matrix(objects))
        return pd.DataFrame(proba, columns=self.model.classes_, index=pd.Index(objects[id_field], name=id_field))

    def predict_confidence(self, objects, id_field, name="confidence"):
        """Highest class probability for each object."""
        return self.predict_proba(objects, id_field).max(axis=1).rename(name)

    def evaluate(self, holdout, label_field=None):
        """
        Accuracy assessment against labeled objects not used for training.

        Returns
        -------
        dict
            accuracy, kappa, n_samples, confusion_matrix (DataFrame, reference rows
            and predicted columns) and the classification_report dict.
        """
        self._require_fitted()
        label_field = label_field or self.label_field
        y_true = holdout[label_field].to_numpy()
        y_pred = self.model.predict(self._feature_matrix(holdout))
        labels = list(self.model.classes_)
        cm = confusion_matrix(y_true, y_pred, labels=labels)
        results = {
            "accuracy": float(accuracy_score(y_true, y_pred)),
            "kappa": float(cohen_kappa_score(y_true, y_pred)),
            "n_samples": int(len(y_true)),
            "confusion_matrix": pd.DataFrame(cm, index=pd.Index(labels, name="reference"),
                                             columns=pd.Index(labels, name="predicted")),
            "report": classification_report(y_true, y_pred, labels=labels, output_dict=True, zero_division=0),
        }
        logger.info(f"Holdout accuracy: {results['accuracy']:.4f}, kappa: {results['kappa']:.4f}")
        return results

    def summary(self):
        """JSON-serializable description of the trained model."""
        self._require_fitted()
        params = self.model.get_params()
        return {
            "label_field": self.label_field,
            "classes": [str(c) for c in self.classes_],
            "n_estimators": int(params["n_estimators"]),
            "max_features": params["max_features"],
            "random_state": params["random_state"],
            "oob_error": float(self.oob_error),
            "feature_importances": {k: float(v) for k, v in self.feature_importances.items()},
        }

    def save(self, path):
        self._require_fitted()
        joblib.dump(self, path)
        logger.info(f"Classifier saved to {path}")

    @classmethod
    def load(cls, path):
        obj = joblib.load(path)
        if not isinstance(obj, cls):
            raise TypeError(f"{path} does not contain an {cls.__name__}")
        return obj
