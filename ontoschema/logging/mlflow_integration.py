"""MLflow integration for ontology build tracking.

Logs build parameters and model statistics with graceful degradation when
MLflow is unavailable.

Requirements:
    - mlflow (optional dependency, `pip install ontoschema[tracking]`)
"""

from __future__ import annotations

from typing import Optional
import warnings


def setup_mlflow_tracking(
    experiment_name: Optional[str] = None,
    run_name: Optional[str] = None,
    tracking_uri: Optional[str] = None,
) -> tuple[bool, Optional[str]]:
    """Start an MLflow run for an ontology build.

    Args:
        experiment_name: Name of MLflow experiment (creates if doesn't exist)
        run_name: Optional name for this run
        tracking_uri: Optional tracking URI (e.g., "sqlite:///path/to/mlflow.db")

    Returns:
        (success, run_id) - Whether setup succeeded and the active run ID

    Example:
        success, run_id = setup_mlflow_tracking(
            experiment_name="ontology-cache",
            tracking_uri="sqlite:///experiments/mlflow.db"
        )
    """
    try:
        import mlflow

        if tracking_uri:
            mlflow.set_tracking_uri(tracking_uri)
        if experiment_name:
            mlflow.set_experiment(experiment_name)

        mlflow.start_run(run_name=run_name)
        run_id = mlflow.active_run().info.run_id

        return True, run_id

    except ImportError:
        warnings.warn("MLflow not installed, skipping tracking", UserWarning)
        return False, None
    except Exception as e:
        warnings.warn(f"MLflow setup failed: {e}", UserWarning)
        try:
            import mlflow
            if mlflow.active_run():
                mlflow.end_run()
        except Exception:
            pass
        return False, None


def log_build_params(
    source: str,
    config: dict,
    cache_path: Optional[str] = None,
    ttl: Optional[float] = None,
) -> None:
    """Log build parameters (searchable, comparable).

    Args:
        source: Source type or location the ontology was read from
        config: SchemaConfig.to_dict() of the build
        cache_path: Cache snapshot path, if any
        ttl: Cache time-to-live in seconds, if any
    """
    try:
        import mlflow

        params = {
            "source": source,
            "ontology_namespace": config.get("ontology_namespace", ""),
            "parent": config.get("parent", ""),
            "max_depth": config.get("max_depth"),
        }
        if cache_path:
            params["cache_path"] = cache_path
        if ttl is not None:
            params["ttl"] = ttl
        mlflow.log_params(params)

    except Exception as e:
        warnings.warn(f"Failed to log MLflow params: {e}", UserWarning)


def log_build_metrics(
    stats: dict[str, int],
    seconds: float,
    cache_hit: Optional[bool] = None,
) -> None:
    """Log model statistics and build duration (aggregatable, plottable).

    Args:
        stats: Ontology.stats() of the built model
        seconds: Wall-clock build or load duration
        cache_hit: Whether the model was restored from cache
    """
    try:
        import mlflow

        metrics = {key: float(value) for key, value in stats.items()}
        metrics["build_seconds"] = seconds
        if cache_hit is not None:
            metrics["cache_hit"] = 1 if cache_hit else 0
        mlflow.log_metrics(metrics)

    except Exception as e:
        warnings.warn(f"Failed to log MLflow metrics: {e}", UserWarning)


def end_mlflow_run() -> None:
    """Cleanly end the current MLflow run."""
    try:
        import mlflow

        if mlflow.active_run():
            mlflow.end_run()

    except Exception as e:
        warnings.warn(f"Failed to end MLflow run: {e}", UserWarning)
