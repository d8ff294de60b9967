"""Step definitions for the export feature."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from metricshipper.adapters.outputs.in_memory import (
    InMemoryBatchTransport,
    InMemoryKeyedTransport,
)
from metricshipper.core.config import ExportConfig
from metricshipper.core.errors import ExportError, TransportError
from metricshipper.core.exporter import BatchExporter, RoutedExporter
from metricshipper.core.models import Datum, MetricRecord

T0 = datetime(2021, 1, 1, tzinfo=UTC)


@dataclass
class ExportScenarioContext:
    """Shared state between steps in an export scenario."""

    records: list[MetricRecord] = field(default_factory=list)
    batch_transport: InMemoryBatchTransport = field(
        default_factory=InMemoryBatchTransport
    )
    keyed_transport: InMemoryKeyedTransport | None = None
    config: ExportConfig = field(default_factory=ExportConfig)
    routed: bool = False
    error: ExportError | None = None
    sent: int = 0


@pytest.fixture
def ctx() -> ExportScenarioContext:
    """Fresh scenario context for each test."""
    return ExportScenarioContext()


def _pairs(text: str) -> dict[str, str]:
    """Parse "a=1, b=2" into a dict."""
    return dict(item.strip().split("=", 1) for item in text.split(","))


def _field_value(text: str) -> Any:
    if text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return float(text)


# === Transports ===
@given("an in-memory batch transport")
def step_batch_transport(ctx: ExportScenarioContext) -> None:
    ctx.batch_transport = InMemoryBatchTransport()


@given("an in-memory keyed transport")
def step_keyed_transport(ctx: ExportScenarioContext) -> None:
    ctx.keyed_transport = InMemoryKeyedTransport()


@given(parsers.parse("the transport fails on call {call:d}"))
def step_transport_fails(ctx: ExportScenarioContext, call: int) -> None:
    ctx.batch_transport = InMemoryBatchTransport(fail_on_call=call)


# === Records ===
@given(parsers.parse('a record "{name}" with tags {tags}'))
def step_record_with_tags(ctx: ExportScenarioContext, name: str, tags: str) -> None:
    ctx.records.append(
        MetricRecord(name=name, tags=_pairs(tags), fields={"value": 1.0}, timestamp=T0)
    )


@given(parsers.parse('a record "{name}" with {count:d} numeric fields'))
def step_wide_record(ctx: ExportScenarioContext, name: str, count: int) -> None:
    fields = {f"f{i:02d}": float(i) for i in range(count)}
    ctx.records.append(MetricRecord(name=name, fields=fields, timestamp=T0))


@given(parsers.parse("the record has fields {fields}"))
def step_record_fields(ctx: ExportScenarioContext, fields: str) -> None:
    parsed = {}
    for item in fields.split(" and "):
        name, value = item.split("=", 1)
        parsed[name] = _field_value(value)
    ctx.records[-1] = replace(ctx.records[-1], fields=parsed)


# === Exporters ===
@given(parsers.parse("a batch exporter with at most {count:d} dimensions"))
def step_exporter_dimensions(ctx: ExportScenarioContext, count: int) -> None:
    ctx.config = ExportConfig(max_dimensions=count, namespace="test")


@given(parsers.parse("a batch exporter with batches of {size:d}"))
def step_exporter_batch_size(ctx: ExportScenarioContext, size: int) -> None:
    ctx.config = ExportConfig(max_batch_size=size, namespace="test")


@given(parsers.parse('a routed exporter on topic "{topic}" keyed by "{tag}"'))
def step_routed_exporter(ctx: ExportScenarioContext, topic: str, tag: str) -> None:
    ctx.config = ExportConfig(namespace=topic, routing_tag=tag)
    ctx.routed = True


# === Actions ===
@when("the records are written")
def step_write(ctx: ExportScenarioContext) -> None:
    exporter: BatchExporter | RoutedExporter
    if ctx.routed:
        assert ctx.keyed_transport is not None
        exporter = RoutedExporter(ctx.keyed_transport, ctx.config)
    else:
        exporter = BatchExporter(ctx.batch_transport, ctx.config)
    with exporter:
        try:
            ctx.sent = exporter.write(ctx.records)
        except ExportError as e:
            ctx.error = e


# === Outcomes ===
def _single_datum(ctx: ExportScenarioContext) -> Datum:
    (batch,) = ctx.batch_transport.batches
    (datum,) = batch.datums
    return datum


@then(parsers.parse("{count:d} batch is sent"))
def step_one_batch(ctx: ExportScenarioContext, count: int) -> None:
    assert len(ctx.batch_transport.batches) == count


@then(parsers.parse("{count:d} batches are sent with sizes {sizes}"))
def step_batch_sizes(ctx: ExportScenarioContext, count: int, sizes: str) -> None:
    assert ctx.sent == count
    expected = [int(size) for size in sizes.split(",")]
    assert [len(b.datums) for b in ctx.batch_transport.batches] == expected


@then(parsers.parse('the batch holds the datum "{name}" with value {value:f}'))
def step_datum(ctx: ExportScenarioContext, name: str, value: float) -> None:
    datum = _single_datum(ctx)
    assert datum.metric_name == name
    assert datum.value == value
    assert datum.timestamp == T0


@then(parsers.parse("the datum has dimensions {dimensions}"))
def step_dimensions(ctx: ExportScenarioContext, dimensions: str) -> None:
    datum = _single_datum(ctx)
    assert [(d.name, d.value) for d in datum.dimensions] == list(
        _pairs(dimensions).items()
    )


@then(parsers.parse("the write fails after {count:d} batch"))
def step_write_fails(ctx: ExportScenarioContext, count: int) -> None:
    assert isinstance(ctx.error, TransportError)
    assert ctx.error.partitions_sent == count


@then(parsers.parse('{count:d} messages are sent to "{topic}"'))
def step_messages(ctx: ExportScenarioContext, count: int, topic: str) -> None:
    assert ctx.keyed_transport is not None
    assert ctx.sent == count
    assert [m.topic for m in ctx.keyed_transport.messages] == [topic] * count


@then(parsers.parse("the message keys are {keys}"))
def step_message_keys(ctx: ExportScenarioContext, keys: str) -> None:
    assert ctx.keyed_transport is not None
    expected = [None if k.strip() == "none" else k.strip() for k in keys.split(",")]
    assert [m.key for m in ctx.keyed_transport.messages] == expected
