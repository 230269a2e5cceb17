# symflow_workflow.py
# Example graph: one ingest job fans out to three shard jobs, a report waits on all of them.
from __future__ import annotations

from symflow import wf, job, matrix, In, Out, InOut


def workflow():
    return wf(
        # Ingest - produces the raw dataset
        job(1, Out("raw"), name="ingest"),

        # Normalize - rewrites raw in place, so it runs after ingest
        job(2, InOut("raw"), name="normalize"),

        # Shards - each reads raw and contributes to "shards"
        matrix("shard", range(3)).jobs(
            lambda i: job(10 + i, In("raw"), Out("shards"), name=f"shard-{i}")
        ),

        # Report - waits for every shard producer
        job(20, In("shards"), name="report"),

        # Docs - unrelated scope, never linked to the data pipeline
        job(30, Out("raw", scope="docs"), name="docs-build"),
    )
