import json
import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "dev.db"

conn = sqlite3.connect(DB)
cur = conn.cursor()

print("=== Products ===")
cur.execute("SELECT is_active, COUNT(*) FROM products GROUP BY is_active")
for active, count in cur.fetchall():
    print({"is_active": bool(active), "count": count})

print("\n=== Products per category ===")
cur.execute(
    "SELECT c.slug, COUNT(p.product_id) FROM categories c "
    "LEFT JOIN products p ON p.category_id = c.category_id GROUP BY c.slug ORDER BY c.slug"
)
for slug, count in cur.fetchall():
    print(slug, count)

print("\n=== image_url / images mismatches ===")
cur.execute("SELECT product_id, slug, image_url, images FROM products")
bad = 0
for pid, slug, image_url, images in cur.fetchall():
    try:
        imgs = json.loads(images) if images else None
    except ValueError:
        print({"product_id": pid, "slug": slug, "problem": "images is not JSON"})
        bad += 1
        continue
    expected = imgs[0] if imgs else None
    if image_url != expected or imgs == []:
        print({"product_id": pid, "slug": slug, "image_url": image_url, "images": imgs})
        bad += 1
print("mismatches:", bad)

conn.close()
