"""CDR Extract Ingestion DAG.

Runs the extract loader on a schedule:
1. Loads the loader configuration (``CDR_CONFIG_PATH`` or environment)
2. Ingests every ``cdr``/``cmr`` extract in the scan directory, one file per
   transaction, archiving each committed file
3. Publishes the run summary to XCom

Runs never overlap, and the task is not retried: a failed file stays in the
scan directory and is picked up again by the next scheduled run.
"""

from datetime import datetime, timedelta

from airflow import DAG
from airflow.operators.python import PythonOperator

from cdr_pipelines.utils.alerting import task_failure_callback

default_args = {
    "owner": "data-platform",
    "retries": 0,
    "execution_timeout": timedelta(hours=2),
}


def _ingest_extracts(**context):
    """Run one ingestion pass over the configured scan directory."""
    from cdr_pipelines.config.pipeline_config import get_config
    from cdr_pipelines.ingestion import run_ingestion
    from cdr_pipelines.utils.postgres_client import get_postgres_connection

    config = get_config()
    engine = get_postgres_connection(config.postgres.connection_string)
    try:
        summary = run_ingestion(config, engine)
    finally:
        engine.dispose()

    print(
        f"Inserted {summary.total_entries} entries from {summary.parsed_files} files "
        f"in {summary.elapsed_seconds:.3f} seconds"
    )
    context["ti"].xcom_push(key="total_entries", value=summary.total_entries)
    context["ti"].xcom_push(key="parsed_files", value=summary.parsed_files)
    return {
        "total_entries": summary.total_entries,
        "parsed_files": summary.parsed_files,
        "elapsed_seconds": summary.elapsed_seconds,
    }


with DAG(
    dag_id="cdr_extract_ingestion",
    default_args=default_args,
    description="Load call detail / call management extract files into PostgreSQL",
    schedule="@hourly",
    start_date=datetime(2024, 1, 1),
    catchup=False,
    max_active_runs=1,
    tags=["ingestion", "cdr"],
    on_failure_callback=task_failure_callback,
) as dag:

    ingest_extracts = PythonOperator(
        task_id="ingest_extracts",
        python_callable=_ingest_extracts,
    )
