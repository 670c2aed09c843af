"""Unit tests for optional MLflow tracking.

Tests run without a tracking server: MLflow is either made unavailable or
replaced by a recording stand-in module.
"""

import sys
import types

import pytest

from ontoschema.logging import mlflow_integration


class RecordingMlflow(types.ModuleType):
    """Module object recording the MLflow calls made on it."""

    def __init__(self):
        super().__init__("mlflow")
        self.calls = []
        self._active = None

    def set_tracking_uri(self, uri):
        self.calls.append(("set_tracking_uri", uri))

    def set_experiment(self, name):
        self.calls.append(("set_experiment", name))

    def start_run(self, run_name=None):
        self.calls.append(("start_run", run_name))
        self._active = types.SimpleNamespace(info=types.SimpleNamespace(run_id="run-1"))
        return self._active

    def active_run(self):
        return self._active

    def end_run(self):
        self.calls.append(("end_run",))
        self._active = None

    def log_params(self, params):
        self.calls.append(("log_params", params))

    def log_metrics(self, metrics):
        self.calls.append(("log_metrics", metrics))


@pytest.fixture
def no_mlflow(monkeypatch):
    monkeypatch.setitem(sys.modules, "mlflow", None)


@pytest.fixture
def recording_mlflow(monkeypatch):
    module = RecordingMlflow()
    monkeypatch.setitem(sys.modules, "mlflow", module)
    return module


class TestWithoutMlflow:
    """Test graceful degradation when MLflow is not installed."""

    def test_setup_returns_false(self, no_mlflow):
        with pytest.warns(UserWarning, match="MLflow not installed"):
            assert mlflow_integration.setup_mlflow_tracking("ontology-cache") == (False, None)

    def test_logging_only_warns(self, no_mlflow):
        with pytest.warns(UserWarning):
            mlflow_integration.log_build_params("sqlite:x.db", {"max_depth": 30})
        with pytest.warns(UserWarning):
            mlflow_integration.log_build_metrics({"classes": 1}, 0.1)


class TestWithMlflow:
    """Test the calls made on an available MLflow module."""

    def test_setup(self, recording_mlflow):
        success, run_id = mlflow_integration.setup_mlflow_tracking(
            experiment_name="ontology-cache",
            run_name="cache-ontology",
            tracking_uri="sqlite:///mlflow.db",
        )

        assert (success, run_id) == (True, "run-1")
        assert recording_mlflow.calls[:2] == [
            ("set_tracking_uri", "sqlite:///mlflow.db"),
            ("set_experiment", "ontology-cache"),
        ]

    def test_params_and_metrics(self, recording_mlflow, sqlite_ontology):
        mlflow_integration.log_build_params(
            "sqlite:ontology.db", sqlite_ontology.config.to_dict(), "cache.json", 3600
        )
        mlflow_integration.log_build_metrics(sqlite_ontology.stats(), 0.25, cache_hit=True)

        params = dict(recording_mlflow.calls)["log_params"]
        metrics = dict(recording_mlflow.calls)["log_metrics"]
        assert params["source"] == "sqlite:ontology.db"
        assert params["ttl"] == 3600
        assert metrics["classes"] == 6.0
        assert metrics["cache_hit"] == 1

    def test_end_run(self, recording_mlflow):
        mlflow_integration.setup_mlflow_tracking()
        mlflow_integration.end_mlflow_run()

        assert recording_mlflow.calls[-1] == ("end_run",)
        assert recording_mlflow.active_run() is None
