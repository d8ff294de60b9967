"""Example: send records to Kafka, keyed by their host tag.

Requires a broker on localhost:9092. Run with:
    python examples/kafka_routing.py
"""

import logging
from datetime import UTC, datetime

from metricshipper import MetricRecord
from metricshipper.adapters.outputs import kafka_output

records = [
    MetricRecord(
        name="cpu",
        tags={"host": "web-1", "region": "eu"},
        fields={"usage_user": 12.5, "usage_system": 3.0},
        timestamp=datetime.now(UTC),
    ),
    # No host tag: sent without a key
    MetricRecord(name="queue", fields={"depth": 42}),
]


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    with kafka_output(brokers=["localhost:9092"], topic="telegraf") as exporter:
        sent = exporter.write(records)
    print(f"sent {sent} messages")


if __name__ == "__main__":
    main()
