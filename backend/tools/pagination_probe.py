"""
Walk every page of GET /api/products concurrently and check that the pages
stitch back together: no product twice, none missing, totals that agree.

Run against a quiet dataset; concurrent writes legitimately shift pages.

    python tools/pagination_probe.py --page-size 7 --sort price --order desc
    python tools/pagination_probe.py --is-active true --q boot
"""
import argparse
import concurrent.futures
import math
import os

import requests

BASE = os.environ.get("STOREFRONT_BASE", "http://127.0.0.1:8000")


def fetch_page(page, params):
    query = dict(params, page=page)
    try:
        r = requests.get(f"{BASE}/api/products", params=query, timeout=10)
        r.raise_for_status()
        return page, r.json()
    except requests.RequestException as e:
        return page, {"error": str(e)}


def run_probe(workers, params):
    _, first = fetch_page(1, params)
    if "error" in first:
        print("First page failed:", first["error"])
        return False
    total = first["total"]
    pages = max(1, math.ceil(total / int(params["pageSize"])))
    print(f"total={total} pages={pages} params={params}")

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(fetch_page, p, params) for p in range(2, pages + 1)]
        results = dict(f.result() for f in futures)
    results[1] = first

    ok = True
    seen = []
    for page in range(1, pages + 1):
        body = results[page]
        if "error" in body:
            print(f"page {page}: ERR {body['error']}")
            ok = False
            continue
        if body["total"] != total:
            print(f"page {page}: total drifted {total} -> {body['total']}")
            ok = False
        seen.extend(item["product_id"] for item in body["data"])

    dupes = {pid for pid in seen if seen.count(pid) > 1}
    if dupes:
        print("Duplicated product ids:", sorted(dupes))
        ok = False
    if len(set(seen)) != total:
        print(f"Expected {total} distinct products, saw {len(set(seen))}")
        ok = False
    print("OK" if ok else "FAILED")
    return ok


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Pagination coherence probe for /api/products.")
    parser.add_argument("--workers", type=int, default=8)
    parser.add_argument("--page-size", type=int, default=5)
    parser.add_argument("--sort", default=None, help="sortBy field")
    parser.add_argument("--order", default=None)
    parser.add_argument("--is-active", default=None)
    parser.add_argument("--q", default=None)
    args = parser.parse_args()

    params = {"pageSize": args.page_size}
    for key, value in (("sortBy", args.sort), ("order", args.order), ("is_active", args.is_active), ("q", args.q)):
        if value is not None:
            params[key] = value
    raise SystemExit(0 if run_probe(args.workers, params) else 1)
