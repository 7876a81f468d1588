import json

import pytest


@pytest.fixture
def catalog_file(tmp_path):
    """Catalog export with a table, a view, a sequence and a function"""
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "acl": {
                    "table": {"acl": ["a", "r", "w", "d"]},
                    "sequence": {"acl": ["U", "r"]},
                    "function": {"acl": ["X"]},
                },
                "objects": [
                    {"oid": 16400, "object_type": "Table", "nspname": "public", "name": "orders"},
                    {"oid": 16410, "object_type": "View", "nspname": "sales", "name": "Totals"},
                    {"oid": 16420, "object_type": "Sequence", "nspname": "public", "name": "orders_id_seq"},
                    {
                        "oid": 16430,
                        "object_type": "Function",
                        "nspname": "public",
                        "name": "calc",
                        "proargs": "integer, text",
                    },
                ],
            }
        )
    )
    return path
