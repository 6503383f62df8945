"""
write_load.py — simple async load script to create (and optionally delete) short links

Usage:
  python write_load.py --base http://127.0.0.1:8080 --count 2000 --concurrency 100 --out tokens_created.jsonl
  python write_load.py --batch-size 50 --delete-fraction 0.1

Each created link is written as {"token": ..., "url": ..., "deleted": ...} for read_load.py.
A 409 (URL already shortened) still counts as success and yields the existing token.
With --batch-size N, links are created through /api/shorten/batch, N per request.
With --delete-fraction F, that share of the created tokens is then deleted through
DELETE /api/user/urls (same cookie, so the same owner) and marked "deleted": true.
"""
import argparse
import asyncio
import json
import random
import string
import time
from datetime import datetime, timezone

import httpx


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _rand_host():
    tlds = ["com", "net", "org", "io", "ai"]
    names = ["example", "sample", "demo", "test", "alpha", "beta", "gamma"]
    return f"{random.choice(names)}.{random.choice(tlds)}"


def _rand_path(n=6):
    alphabet = string.ascii_letters + string.digits
    return "".join(random.choice(alphabet) for _ in range(n))


def _rand_url(idx: int) -> str:
    return f"https://{_rand_host()}/{_rand_path(8)}?q={idx}"


def _token_of(short_url: str) -> str:
    return short_url.rsplit("/", 1)[-1]


async def _create_one(client: httpx.AsyncClient, base: str, idx: int):
    url = _rand_url(idx)
    try:
        r = await client.post(f"{base}/api/shorten", json={"url": url}, timeout=10)
        if r.status_code not in (201, 409):
            return []
        return [(_token_of(r.json()["result"]), url)]
    except (httpx.HTTPError, ValueError, KeyError):
        return []


async def _create_batch(client: httpx.AsyncClient, base: str, start: int, size: int):
    urls = {str(i): _rand_url(i) for i in range(start, start + size)}
    payload = [{"correlation_id": cid, "original_url": url} for cid, url in urls.items()]
    try:
        r = await client.post(f"{base}/api/shorten/batch", json=payload, timeout=30)
        if r.status_code != 201:
            return []
        return [(_token_of(item["short_url"]), urls[item["correlation_id"]]) for item in r.json()]
    except (httpx.HTTPError, ValueError, KeyError):
        return []


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8080")
    parser.add_argument("--count", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--batch-size", type=int, default=0)
    parser.add_argument("--delete-fraction", type=float, default=0.0)
    parser.add_argument("--out", default="tokens_created.jsonl")
    args = parser.parse_args()

    start_iso = _now_iso()
    t0 = time.perf_counter()
    created = []
    requests_sent = 0

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    # one client = one cookie jar = one user for the whole run
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task(start):
            nonlocal requests_sent
            async with sem:
                if args.batch_size > 0:
                    size = min(args.batch_size, args.count - start)
                    pairs = await _create_batch(client, args.base, start, size)
                else:
                    pairs = await _create_one(client, args.base, start)
                requests_sent += 1
                created.extend(pairs)

        step = args.batch_size if args.batch_size > 0 else 1
        await asyncio.gather(*(_task(i) for i in range(0, args.count, step)))
        t_created = time.perf_counter()

        doomed = set()
        if args.delete_fraction > 0 and created:
            k = max(1, int(len(created) * min(args.delete_fraction, 1.0)))
            doomed = {token for token, _ in random.sample(created, k)}
            r = await client.request("DELETE", f"{args.base}/api/user/urls", json=sorted(doomed), timeout=30)
            if r.status_code != 202:
                print(f"WARN:  delete answered {r.status_code}; nothing marked deleted")
                doomed = set()

    with open(args.out, "w", encoding="utf-8") as out_f:
        for token, url in created:
            out_f.write(json.dumps({"token": token, "url": url, "deleted": token in doomed}) + "\n")

    dt = t_created - t0
    end_iso = _now_iso()
    print(f"START: {start_iso}")
    print(f"END:   {end_iso}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   links={args.count}, requests={requests_sent}, ok={len(created)}, fail={args.count - len(created)}")
    if doomed:
        print(f"DEL:   {len(doomed)} tokens queued for deletion")
    if dt > 0:
        print(f"TPS:   {len(created)/dt:.1f} links/s")

if __name__ == "__main__":
    asyncio.run(main())
