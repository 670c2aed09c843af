#!/usr/bin/env python3
"""Build (or refresh) an ontology cache snapshot.

Usage:
    python scripts/build_ontology_cache.py \\
        --sqlite ontology.db \\
        --cache cache/ontology.json

    python scripts/build_ontology_cache.py \\
        --graph-file ontology/acdh-schema.ttl \\
        --import-into ontology.db \\
        --namespace https://vocabs.acdh.oeaw.ac.at/schema# \\
        --cache cache/ontology.json --ttl 3600
"""

import sys
import time
import argparse
from pathlib import Path

# Ensure we're in the project root
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def main():
    parser = argparse.ArgumentParser(
        description="Build an ontology cache snapshot from a triple source",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build from an existing SQLite store
  python scripts/build_ontology_cache.py --sqlite ontology.db --cache cache/ontology.json

  # Build from a Turtle file, keeping a SQLite copy of the triples
  python scripts/build_ontology_cache.py \\
      --graph-file ontology.ttl --import-into ontology.db --cache cache/ontology.json

  # Build from a SPARQL endpoint and track the build in MLflow
  python scripts/build_ontology_cache.py \\
      --endpoint https://example.org/sparql --cache cache/ontology.json \\
      --mlflow --mlflow-experiment ontology-cache
        """
    )

    source_group = parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument(
        '--sqlite',
        help='Path to an existing SQLite ontology store'
    )
    source_group.add_argument(
        '--graph-file',
        type=Path,
        help='RDF file to read the ontology from'
    )
    source_group.add_argument(
        '--endpoint',
        help='SPARQL endpoint to bulk-read the ontology from'
    )

    parser.add_argument(
        '--import-into',
        help='Import --graph-file/--endpoint triples into this SQLite store and build from it'
    )
    parser.add_argument(
        '--cache',
        required=True,
        help='Cache snapshot path'
    )
    parser.add_argument(
        '--ttl',
        type=float,
        default=None,
        help='Reuse a snapshot younger than TTL seconds (default: always rebuild)'
    )
    parser.add_argument(
        '--config',
        type=Path,
        help='JSON file with SchemaConfig fields'
    )
    parser.add_argument(
        '--namespace',
        help='Ontology namespace; annotation predicates are looked up inside it'
    )
    parser.add_argument(
        '--events',
        type=Path,
        help='Append JSONL build events to this file'
    )
    parser.add_argument(
        '--mlflow',
        action='store_true',
        help='Track the build in MLflow'
    )
    parser.add_argument(
        '--mlflow-experiment',
        default='ontology-cache',
        help='MLflow experiment name (default: "ontology-cache")'
    )
    parser.add_argument(
        '--mlflow-tracking-uri',
        help='MLflow tracking URI'
    )

    args = parser.parse_args()

    from ontoschema import Ontology, OntologyCache, SchemaConfig, OntologyError
    from ontoschema.source import GraphOntologySource, SQLiteOntologySource
    from ontoschema.logging import BuildEventLogger, mlflow_integration

    if args.config:
        config = SchemaConfig.from_json_file(args.config)
    elif args.namespace:
        config = SchemaConfig.for_namespace(args.namespace)
    else:
        config = SchemaConfig()

    events = BuildEventLogger(args.events) if args.events else None

    try:
        if args.sqlite:
            print(f"Connecting to ontology store: {args.sqlite}")
            source = SQLiteOntologySource(args.sqlite)
            source_label = f"sqlite:{args.sqlite}"
        else:
            if args.graph_file:
                print(f"Reading ontology file: {args.graph_file}")
                source = GraphOntologySource.from_file(args.graph_file)
                source_label = f"file:{args.graph_file}"
            else:
                print(f"Querying SPARQL endpoint: {args.endpoint}")
                source = GraphOntologySource.from_endpoint(args.endpoint)
                source_label = f"endpoint:{args.endpoint}"
            print(f"Loaded {len(source.graph)} triples")
            if args.import_into:
                print(f"Importing triples into: {args.import_into}")
                source = SQLiteOntologySource.from_graph(source.graph, args.import_into)
    except OntologyError as e:
        print(f"\n✗ Error opening ontology source: {e}", file=sys.stderr)
        sys.exit(1)

    tracking = False
    if args.mlflow:
        tracking, run_id = mlflow_integration.setup_mlflow_tracking(
            experiment_name=args.mlflow_experiment,
            run_name=f"cache-{Path(args.cache).stem}",
            tracking_uri=args.mlflow_tracking_uri,
        )
        if tracking:
            print(f"MLflow tracking active: {run_id}")
            mlflow_integration.log_build_params(source_label, config.to_dict(), args.cache, args.ttl)

    cache = OntologyCache(events=events)
    cache_hit = args.ttl is not None and cache.is_fresh(args.cache, args.ttl)
    started = time.perf_counter()
    try:
        ontology = cache.load_or_build(
            args.cache,
            args.ttl if args.ttl is not None else -1,
            lambda: Ontology.build(source, config, events),
            source,
        )
    except OntologyError as e:
        print(f"\n✗ Error building ontology: {e}", file=sys.stderr)
        if tracking:
            mlflow_integration.end_mlflow_run()
        sys.exit(1)
    seconds = time.perf_counter() - started

    stats = ontology.stats()
    if tracking:
        mlflow_integration.log_build_metrics(stats, seconds, cache_hit)
        mlflow_integration.end_mlflow_run()
    if events:
        events.close()

    print("\n" + "="*60)
    print("ONTOLOGY STATISTICS")
    print("="*60)
    for key, value in stats.items():
        print(f"  {key}: {value}")
    print(f"\n{'Loaded' if cache_hit else 'Built'} in {seconds:.2f}s")
    print(f"\n✓ Cache snapshot: {args.cache}")


if __name__ == '__main__':
    main()
