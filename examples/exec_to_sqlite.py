"""Example agent: run a command every few seconds and store its metrics in SQLite.

Run with:
    python examples/exec_to_sqlite.py

The stored datums are printed at the end; they can also be inspected with:
    sqlite3 metrics.db "SELECT metric_name, value, dimensions FROM datums"
"""

import logging
import shlex
import sys
import time

from metricshipper import parse_config
from metricshipper.adapters.outputs.sqlite import SQLiteTransport
from metricshipper.plugins import build_agent

# Collector: a Python one-liner printing JSON
SNIPPET = 'import json, os; print(json.dumps({"load": os.getloadavg()[0]}))'
COLLECTOR = shlex.join([sys.executable, "-c", SNIPPET])

CONFIG = f"""
[[inputs.exec]]
command = '''{COLLECTOR}'''
data_format = "json"
name_suffix = "_host"

[[outputs.sqlite]]
db_path = "metrics.db"
namespace = "example"
"""


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    agent = build_agent(parse_config(CONFIG))
    agent.connect()
    try:
        for _ in range(3):
            result = agent.run_once()
            print(f"sent={result.sent} errors={result.errors}")
            time.sleep(2)
    finally:
        agent.close()

    for stored in SQLiteTransport("metrics.db").read_sync():
        datum = stored.datum
        print(f"{datum.timestamp:%H:%M:%S} {datum.metric_name}={datum.value}")


if __name__ == "__main__":
    main()
