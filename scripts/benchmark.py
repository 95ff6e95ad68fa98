"""
HTTP benchmark for blog API endpoints.

Compares offset listings, whose cost grows with the offset, against
cursor listings, whose cost stays flat however deep the page is.
"""
import argparse
import asyncio
import statistics
import time

import httpx

BASE_URL = "http://localhost:8000"

ENDPOINTS = [
    ("offset page 1", "/api/v1/articles?limit=50", False),
    ("offset deep (offset=5000)", "/api/v1/articles?offset=5000&limit=50", False),
    ("cursor page 1", "/api/v1/articles/cursor?limit=50&direction=NEXT", False),
    ("cursor deep", "/api/v1/articles/cursor?limit=50&direction=NEXT&cursor={cursor}", False),
    ("cursor deep, signed in", "/api/v1/articles/cursor?limit=50&direction=NEXT&cursor={cursor}", True),
    ("feed offset", "/api/v1/articles/feed?limit=50", True),
    ("feed cursor", "/api/v1/articles/feed/cursor?limit=50&direction=NEXT", True),
    ("tags", "/api/v1/tags", False),
    ("metrics", "/api/v1/metrics", False),
    ("health", "/health", False),
]


async def deep_cursor(client: httpx.AsyncClient, base_url: str, depth: int = 5000) -> str | None:
    """Cursor sitting roughly *depth* articles into the forward ordering."""
    resp = await client.get(
        f"{base_url}/api/v1/articles/cursor",
        params={"limit": depth, "direction": "NEXT"},
    )
    resp.raise_for_status()
    return resp.json()["page_info"]["end_cursor"]


async def benchmark_endpoint(
    client: httpx.AsyncClient, base_url: str, name: str, path: str, headers: dict, iterations: int = 50
):
    times = []
    query_counts = []
    errors = 0

    # Warmup
    for _ in range(3):
        try:
            await client.get(f"{base_url}{path}", headers=headers)
        except httpx.HTTPError:
            pass

    for _ in range(iterations):
        try:
            start = time.perf_counter()
            resp = await client.get(f"{base_url}{path}", headers=headers)
            elapsed = (time.perf_counter() - start) * 1000
        except httpx.HTTPError:
            errors += 1
            continue

        if resp.status_code == 200:
            times.append(elapsed)
            qc = resp.headers.get("X-Query-Count")
            if qc is not None:
                query_counts.append(int(qc))
        else:
            errors += 1

    if not times:
        return {"name": name, "error": f"All {iterations} requests failed"}

    return {
        "name": name,
        "avg_ms": round(statistics.mean(times), 2),
        "p50_ms": round(sorted(times)[len(times) // 2], 2),
        "p95_ms": round(sorted(times)[int(len(times) * 0.95)], 2),
        "p99_ms": round(sorted(times)[int(len(times) * 0.99)], 2),
        "min_ms": round(min(times), 2),
        "max_ms": round(max(times), 2),
        "queries": round(statistics.mean(query_counts), 1) if query_counts else "N/A",
        "errors": errors,
        "iterations": len(times),
    }


async def run_benchmark(base_url: str, viewer_id: int, iterations: int = 50):
    print("=" * 80)
    print(f"Blog API Benchmark — {iterations} iterations per endpoint")
    print(f"Target: {base_url} (viewer {viewer_id})")
    print("=" * 80)

    async with httpx.AsyncClient(timeout=30) as client:
        try:
            resp = await client.get(f"{base_url}/health")
            if resp.status_code != 200:
                print(f"ERROR: Health check failed ({resp.status_code})")
                return
            print(f"Health: {resp.json()}")
        except httpx.HTTPError as e:
            print(f"ERROR: Cannot connect to {base_url} — {e}")
            return

        cursor = await deep_cursor(client, base_url)
        if cursor is None:
            print("ERROR: No articles; run scripts/seed.py first")
            return

        print()
        print(f"{'Endpoint':<45} {'Avg':>8} {'P50':>8} {'P95':>8} {'P99':>8} {'Queries':>8} {'Err':>4}")
        print("-" * 80)

        for name, path, signed_in in ENDPOINTS:
            headers = {"X-Viewer-Id": str(viewer_id)} if signed_in else {}
            result = await benchmark_endpoint(
                client, base_url, name, path.format(cursor=cursor), headers, iterations
            )

            if "error" in result:
                print(f"{result['name']:<45} {'ERROR':>8}")
            else:
                print(
                    f"{result['name']:<45} "
                    f"{result['avg_ms']:>7.1f}ms "
                    f"{result['p50_ms']:>7.1f}ms "
                    f"{result['p95_ms']:>7.1f}ms "
                    f"{result['p99_ms']:>7.1f}ms "
                    f"{str(result['queries']):>8} "
                    f"{result['errors']:>4}"
                )

        print("-" * 80)
        print("\nBenchmark complete.")


def main():
    parser = argparse.ArgumentParser(description="Benchmark blog API")
    parser.add_argument("-n", "--iterations", type=int, default=50, help="Iterations per endpoint")
    parser.add_argument("--base-url", default=BASE_URL, help="API base URL")
    parser.add_argument("--viewer-id", type=int, default=1, help="User id sent as X-Viewer-Id")
    args = parser.parse_args()
    asyncio.run(run_benchmark(args.base_url, args.viewer_id, args.iterations))


if __name__ == "__main__":
    main()
