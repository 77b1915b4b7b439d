from typer.testing import CliRunner

from fooswap.ingestion import cli_ingest
from fooswap.ingestion.context import IngestionContext
from fooswap.ingestion.runner import IndexerLoop
from fooswap.sources.sui.events import SWAP_TYPE

runner = CliRunner()


def _wire(monkeypatch, engine, indexer):
    monkeypatch.setattr(cli_ingest, "engine", engine)
    monkeypatch.setattr(cli_ingest, "build_indexer", lambda: indexer)


def test_tick_exits_1_when_the_tick_fails(monkeypatch, engine, session_factory, fake_source):
    indexer = IndexerLoop(fake_source({}, fail_on_call=1), session_factory, context=IngestionContext())
    _wire(monkeypatch, engine, indexer)

    result = runner.invoke(cli_ingest.app, ["tick"])

    assert result.exit_code == 1
    assert indexer.context.failed_ticks == 1


def test_tick_exits_0_after_a_good_tick(monkeypatch, engine, session_factory, fake_source, make_swap):
    source = fake_source({SWAP_TYPE: [make_swap("tx-1", "0xpool", 1, 1, 10, 10, 1)]})
    indexer = IndexerLoop(source, session_factory, context=IngestionContext())
    _wire(monkeypatch, engine, indexer)

    result = runner.invoke(cli_ingest.app, ["tick"])

    assert result.exit_code == 0
    assert indexer.context.ticks == 1
    assert indexer.context.failed_ticks == 0
