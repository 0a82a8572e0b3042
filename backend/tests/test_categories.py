# backend/tests/test_categories.py
from conftest import API, create_product

TREE = {
    "segment": "tools",
    "name": "Tools",
    "categories": [
        {"segment": "power", "name": "Power tools", "categories": [
            {"segment": "drills", "name": "Drills"},
            {"segment": "saws", "name": "Saws"},
        ]},
        {"segment": "hand", "name": "Hand tools"},
    ],
}


async def put_tree(client, headers, tree=TREE):
    response = await client.put(f"{API}/categories-tree", headers=headers, json=tree)
    assert response.status_code == 200, response.text
    return response.json()


async def category_ids(client, headers):
    response = await client.get(f"{API}/categories", headers=headers)
    return {c["path"]: c["id"] for c in response.json()["data"]}


# ========================================
# ÁRBOL
# ========================================

async def test_get_tree_when_empty(client, anon):
    response = await client.get(f"{API}/categories-tree", headers=anon)
    assert response.status_code == 404
    assert response.json()["code"] == "categories/categories-empty"


async def test_replace_and_read_tree(client, admin, anon):
    body = await put_tree(client, admin)
    assert body["object"] == "category_tree"
    assert body["path"] == "tools"
    assert [c["segment"] for c in body["categories"]] == ["power", "hand"]

    response = await client.get(f"{API}/categories-tree", headers=anon)
    assert response.status_code == 200
    tree = response.json()
    drills = tree["categories"][0]["categories"][0]
    assert drills["path"] == "tools/power/drills"
    assert drills["products"] == []
    assert "products" not in tree["categories"][0]


async def test_flat_list_in_preorder(client, admin, anon):
    await put_tree(client, admin)
    response = await client.get(f"{API}/categories", headers=anon)
    assert response.status_code == 200
    data = response.json()["data"]
    assert [c["path"] for c in data] == [
        "tools", "tools/power", "tools/power/drills", "tools/power/saws", "tools/hand",
    ]
    assert [(c["lft"], c["rgt"]) for c in data][0] == (1, 10)


async def test_replace_tree_requires_admin(client, anon):
    response = await client.put(f"{API}/categories-tree", headers=anon, json=TREE)
    assert response.status_code == 403
    assert response.json()["code"] == "auth/forbidden"


async def test_duplicate_sibling_segment_is_bad_request(client, admin):
    tree = {"segment": "a", "name": "A", "categories": [
        {"segment": "x", "name": "X"}, {"segment": "x", "name": "X again"},
    ]}
    response = await client.put(f"{API}/categories-tree", headers=admin, json=tree)
    assert response.status_code == 400
    assert response.json()["code"] == "bad-request"


async def test_tree_locked_while_products_attached(client, admin):
    await put_tree(client, admin)
    ids = await category_ids(client, admin)
    product = await create_product(client, admin, "DRL-1")
    response = await client.post(f"{API}/products-categories", headers=admin, json={
        "product_id": product["id"], "category_id": ids["tools/power/drills"],
    })
    assert response.status_code == 201

    response = await client.put(f"{API}/categories-tree", headers=admin, json=TREE)
    assert response.status_code == 409
    assert response.json()["code"] == "categories/assocs-exist"
    response = await client.delete(f"{API}/categories-tree", headers=admin)
    assert response.status_code == 409

    response = await client.delete(f"{API}/products-categories", headers=admin)
    assert response.status_code == 204
    response = await client.delete(f"{API}/categories-tree", headers=admin)
    assert response.status_code == 204
    response = await client.get(f"{API}/categories", headers=admin)
    assert response.json()["data"] == []


# ========================================
# PRODUCTOS EN CATEGORÍAS HOJA
# ========================================

async def test_attach_requires_leaf(client, admin):
    await put_tree(client, admin)
    ids = await category_ids(client, admin)
    product = await create_product(client, admin, "DRL-1")
    response = await client.post(f"{API}/products-categories", headers=admin, json={
        "product_id": product["id"], "category_id": ids["tools/power"],
    })
    assert response.status_code == 409
    assert response.json()["code"] == "categories/category-not-leaf"


async def test_attach_priorities_and_duplicates(client, admin, anon):
    await put_tree(client, admin)
    ids = await category_ids(client, admin)
    first = await create_product(client, admin, "SAW-1")
    second = await create_product(client, admin, "SAW-2")
    saws = ids["tools/power/saws"]

    r1 = await client.post(f"{API}/products-categories", headers=admin,
                           json={"product_id": first["id"], "category_id": saws})
    r2 = await client.post(f"{API}/products-categories", headers=admin,
                           json={"product_id": second["id"], "category_id": saws})
    assert r1.json()["pri"] == 10
    assert r2.json()["pri"] == 20

    again = await client.post(f"{API}/products-categories", headers=admin,
                              json={"product_id": first["id"], "category_id": saws})
    assert again.status_code == 409
    assert again.json()["code"] == "products-categories/product-category-exists"

    tree = (await client.get(f"{API}/categories-tree", headers=anon)).json()
    saws_node = tree["categories"][0]["categories"][1]
    assert [p["sku"] for p in saws_node["products"]] == ["SAW-1", "SAW-2"]

    response = await client.delete(f"{API}/products-categories/{r1.json()['id']}", headers=admin)
    assert response.status_code == 204
    response = await client.get(f"{API}/products-categories/{r1.json()['id']}", headers=admin)
    assert response.status_code == 404


async def test_bulk_rewrite_replaces_only_named_paths(client, admin, anon):
    await put_tree(client, admin)
    a = await create_product(client, admin, "A-1")
    b = await create_product(client, admin, "B-1")
    c = await create_product(client, admin, "C-1")

    response = await client.put(f"{API}/products-categories", headers=admin, json={
        "tools/power/drills": [a["id"], b["id"]],
        "tools/hand": [c["id"]],
    })
    assert response.status_code == 200, response.text

    response = await client.put(f"{API}/products-categories", headers=admin, json={
        "tools/power/drills": [b["id"]],
    })
    assert response.status_code == 200
    listing = response.json()["data"]
    assert sorted((r["category_path"], r["product_sku"]) for r in listing) == [
        ("tools/hand", "C-1"), ("tools/power/drills", "B-1"),
    ]

    response = await client.get(f"{API}/products-categories:by-key", headers=anon, params={"key": "path"})
    assert response.status_code == 200
    by_path = response.json()
    assert [p["sku"] for p in by_path["tools/power/drills"]["products"]["data"]] == ["B-1"]


async def test_bulk_rewrite_conflict_report_writes_nothing(client, admin):
    await put_tree(client, admin)
    a = await create_product(client, admin, "A-1")
    missing_product = "0b6ae4a4-2d2e-4d1c-9a55-5d4f8c1f2b3a"

    response = await client.put(f"{API}/products-categories", headers=admin, json={
        "tools/power/drills": [a["id"]],
        "tools/power": [a["id"]],
        "tools/nowhere": [missing_product],
    })
    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "products-categories/missing-paths-leafs-products"
    assert body["data"] == {
        "missing_paths": ["tools/nowhere"],
        "non_leaf_paths": ["tools/power"],
        "missing_product_ids": [missing_product],
    }

    response = await client.get(f"{API}/products-categories", headers=admin)
    assert response.json()["data"] == []


async def test_by_key_rejects_unknown_key(client, anon):
    response = await client.get(f"{API}/products-categories:by-key", headers=anon, params={"key": "sku"})
    assert response.status_code == 400
