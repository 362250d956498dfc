"""CLI to exercise the quote pipeline API and chart series.

Usage:
  poetry run quote-cli health
  poetry run quote-cli quote BINANCE:BTCUSDT crypto
  poetry run quote-cli batch "BINANCE:BTCUSDT|crypto" "BMFBOVESPA:VALE3|equity_br"
  poetry run quote-cli hours index --symbol INDEX:SPX
  poetry run quote-cli series BINANCE:ETHUSDT crypto --messages 5
"""
import argparse
import asyncio
import json
import sys

import httpx
import websockets


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def _parse_item(raw: str) -> dict[str, str]:
    symbol, _, label = raw.partition("|")
    if not label:
        raise argparse.ArgumentTypeError(f"expected SYMBOL|TYPE, got '{raw}'")
    return {"symbol": symbol, "type": label}


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_quote(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/market-data", params={"symbol": args.symbol, "type": args.type})
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_batch(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.post("/market-data", json={"symbols": args.items})
    r.raise_for_status()
    data = r.json()
    print(f"Got {data['count']}/{len(args.items)} quotes", file=sys.stderr)
    print_json(data["data"])
    return 0


def cmd_hours(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/markets/hours", params={"type": args.type, "symbol": args.symbol})
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_interval(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/markets/interval", params={"type": args.type, "symbol": args.symbol})
    r.raise_for_status()
    print_json(r.json())
    return 0


def _summary(snapshot: dict) -> dict:
    points = snapshot.get("points") or []
    return {
        "symbol": snapshot.get("symbol"),
        "source": snapshot.get("last_source"),
        "price": snapshot.get("current_price"),
        "change_percent": round(snapshot.get("change_percent") or 0.0, 4),
        "points": len(points),
        "time": points[-1]["time"] if points else None,
    }


def _stream_series(
    ws_url: str,
    duration: float | None,
    max_messages: int | None,
) -> int:
    """Print one summary line per snapshot pushed on the series WebSocket."""
    count = 0

    async def run() -> None:
        nonlocal count
        async with websockets.connect(ws_url) as ws:
            async for raw in ws:
                print_json(_summary(json.loads(raw)))
                count += 1
                if max_messages and count >= max_messages:
                    return

    async def run_with_timeout() -> None:
        if duration and duration > 0:
            try:
                await asyncio.wait_for(run(), timeout=duration)
            except asyncio.TimeoutError:
                print(f"Stopped after {duration}s ({count} messages)", file=sys.stderr)
        else:
            await run()

    try:
        asyncio.run(run_with_timeout())
    except KeyboardInterrupt:
        print(f"\nStopped by user ({count} messages)", file=sys.stderr)
        return 130
    except websockets.ConnectionClosed as e:
        print(f"Stream closed: {e}", file=sys.stderr)
    return 0


def cmd_series(client: httpx.Client, args: argparse.Namespace) -> int:
    """Subscribe, stream snapshots over the WebSocket, then unsubscribe."""
    r = client.post(
        "/series",
        json={"symbol": args.symbol, "type": args.type, "interval": args.interval},
    )
    r.raise_for_status()
    handle_id = r.json()["handle_id"]
    print(
        f"Series {args.symbol} -> {handle_id} (max_messages={args.messages or '∞'})",
        file=sys.stderr,
    )
    ws_url = str(client.base_url).replace("http", "ws", 1).rstrip("/")
    try:
        return _stream_series(f"{ws_url}/series/{handle_id}/stream", args.duration, args.messages)
    finally:
        client.delete(f"/series/{handle_id}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Exercise the quote pipeline API and chart series.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8001",
        help="API base URL (default: http://localhost:8001)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    subparsers.add_parser("health", help="GET / health check")

    p = subparsers.add_parser("quote", help="GET /market-data")
    p.add_argument("symbol", help="Canonical symbol (e.g. BINANCE:BTCUSDT, NASDAQ:AAPL)")
    p.add_argument("type", help="crypto | equity | equity_br | index")

    p = subparsers.add_parser("batch", help="POST /market-data")
    p.add_argument("items", nargs="+", type=_parse_item, help="SYMBOL|TYPE pairs")

    for name, help_text in [("hours", "GET /markets/hours"), ("interval", "GET /markets/interval")]:
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("type", help="crypto | equity | equity_br | index")
        p.add_argument("--symbol", default="", help="Symbol (needed for indices)")

    p = subparsers.add_parser("series", help="POST /series, then stream /series/{id}/stream")
    p.add_argument("symbol", help="Canonical symbol")
    p.add_argument("type", help="crypto | equity | equity_br | index")
    p.add_argument("--interval", default="15", help="Chart interval: 1, 5, 15, 60, 240, 1D")
    p.add_argument(
        "--duration",
        type=float,
        default=None,
        metavar="SECS",
        help="Stop after SECS seconds (default: run until Ctrl+C)",
    )
    p.add_argument(
        "--messages",
        type=int,
        default=None,
        metavar="N",
        help="Stop after N updates (default: no limit)",
    )

    args = parser.parse_args()
    base_url = args.base_url.rstrip("/")

    handlers = {
        "health": cmd_health,
        "quote": cmd_quote,
        "batch": cmd_batch,
        "hours": cmd_hours,
        "interval": cmd_interval,
        "series": cmd_series,
    }

    try:
        with httpx.Client(base_url=base_url, timeout=args.timeout) as client:
            return handlers[args.command](client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
