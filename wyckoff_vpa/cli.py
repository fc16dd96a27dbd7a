"""
Wyckoff + VPA CLI - Command-line interface.

Fetches candles (OANDA when configured, samples otherwise) and prints the
signal or confluence analysis for a pair.
"""
import json

import typer

from wyckoff_vpa.shared.config.pairs import FX_PAIRS, format_price, is_supported_pair, normalize_pair

app = typer.Typer(help="📈 Wyckoff + VPA - FX signal engine")


def _build_feed():
    from wyckoff_vpa.data.adapters.oanda import OandaAdapter
    from wyckoff_vpa.data.candle_feed import CandleFeed

    return CandleFeed(OandaAdapter.from_env())


def _require_pair(pair: str) -> str:
    normalized = normalize_pair(pair)
    if not is_supported_pair(normalized):
        typer.echo(f"❌ Unknown pair: {pair}")
        raise typer.Exit(code=1)
    return normalized


@app.command()
def signal(
    pair: str = typer.Argument(..., help="Currency pair (e.g. EUR_USD)"),
    timeframe: str = typer.Option("M5", "--timeframe", "-t", help="OANDA granularity (M1/M5/M15/H1/...)"),
    count: int = typer.Option(120, "--count", "-c", min=1, max=5000, help="Candles to fetch"),
    as_json: bool = typer.Option(False, "--json", help="Print the signal as JSON"),
):
    """
    🎯 Derive the Wyckoff signal for a pair.

    Runs the full pipeline:
    - Fibonacci quarter-point confluence
    - Wyckoff phase classification
    - Spring / upthrust / test detection
    - Volume-gated signal synthesis
    """
    from wyckoff_vpa.services.signal_service import SignalService
    from wyckoff_vpa.shared.utils.logging_utils import format_signal_summary

    pair = _require_pair(pair)
    service = SignalService(feed=_build_feed())
    feed_result, result = service.analyze_pair(pair, timeframe, count)

    if feed_result.sample and not as_json:
        typer.echo(f"⚠️  Using sample candles ({feed_result.error})")

    if result is None:
        typer.echo(f"📭 Not enough candles for {pair}: {len(feed_result.candles)} received")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo(format_signal_summary(result))


@app.command()
def confluence(
    pair: str = typer.Argument(..., help="Currency pair (e.g. EUR_USD)"),
    timeframe: str = typer.Option("M5", "--timeframe", "-t", help="OANDA granularity"),
    count: int = typer.Option(100, "--count", "-c", min=1, max=5000, help="Candles to fetch"),
):
    """📐 Show Fibonacci quarter-point confluence for a pair."""
    from wyckoff_vpa.analysis.quarter_points import analyze_confluence

    pair = _require_pair(pair)
    feed_result = _build_feed().fetch(pair, timeframe, count)
    analysis = analyze_confluence(feed_result.candles)

    typer.echo(f"📐 {pair} [{feed_result.timeframe}] confluence: {analysis.strength.value.upper()}")
    typer.echo(f"Range: {format_price(analysis.range_low, pair)} - {format_price(analysis.range_high, pair)}")
    typer.echo(f"Tolerance: {format_price(analysis.tolerance, pair)}")
    typer.echo("Fibonacci levels:")
    for level in analysis.fib_levels:
        typer.echo(f"  {format_price(level, pair)}")
    typer.echo(f"Aligned quarter points ({analysis.aligned_count}):")
    for point in analysis.aligned_points:
        typer.echo(f"  ✅ {format_price(point, pair)}")


@app.command()
def pairs():
    """List supported currency pairs."""
    for name in FX_PAIRS:
        typer.echo(name)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(3001, help="Port"),
):
    """🚀 Run the HTTP API server."""
    import uvicorn

    typer.echo(f"🚀 Serving Wyckoff + VPA API on http://{host}:{port}")
    uvicorn.run("wyckoff_vpa.api_server:app", host=host, port=port)


if __name__ == "__main__":
    app()
