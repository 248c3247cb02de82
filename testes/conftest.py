import copy
import json
import os
import re
import sys

import pytest
import requests

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from shopify_migration.migrators.drivers import ShopifyMigrator  # noqa: E402

_OPERATION = re.compile(r"^\s*(query|mutation)\s+(\w+)")


def http_error(status=422, text='{"errors": "invalid"}'):
    resp = requests.Response()
    resp.status_code = status
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    return requests.HTTPError(f"{status} Client Error", response=resp)


def operation_name(query):
    match = _OPERATION.match(query)
    if match:
        return match.group(2)
    if "currentAppInstallation" in query:
        return "accessScopes"
    if "shop" in query:
        return "shop"
    return "unknown"


class FakeStore:
    """In-memory stand-in for :class:`ShopifyStore`."""

    def __init__(self, name="fake"):
        self.name = name
        self.rest = {}
        self.connections = {}
        self.scopes = [
            "read_content", "write_content", "read_products", "write_products",
            "read_files", "write_files", "read_themes", "write_themes",
        ]
        self.calls = []
        self.failures = {}
        self.overrides = {}
        self._next_id = 1000

    def __repr__(self):
        return f"FakeStore({self.name!r})"

    def _new_id(self):
        self._next_id += 1
        return self._next_id

    def add(self, path, *items):
        self.rest.setdefault(path, []).extend(copy.deepcopy(list(items)))
        return self

    def add_nodes(self, connection, *nodes):
        self.connections.setdefault(connection, []).extend(copy.deepcopy(list(nodes)))
        return self

    def fail(self, op, path, times=1, exc=None):
        self.failures.setdefault((op, path), []).extend([exc or http_error()] * times)
        return self

    def _maybe_fail(self, op, path):
        queue = self.failures.get((op, path))
        if queue:
            raise queue.pop(0)

    def calls_of(self, op, path=None):
        return [c for c in self.calls if c[0] == op and (path is None or c[1] == path)]

    # REST ---------------------------------------------------------------

    def list(self, path, params=None):
        params = dict(params or {})
        self.calls.append(("list", path, params))
        self._maybe_fail("list", path)
        limit = int(params.get("limit", 250))
        if "page_info" in params:
            cursor = json.loads(params["page_info"])
            offset, filters = cursor["offset"], cursor["filters"]
        else:
            offset = 0
            filters = {k[len("metafield["):-1]: v for k, v in params.items() if k.startswith("metafield[")}
        items = self.rest.get(path, [])
        if path == "metafields":
            if filters:
                items = [m for m in items if all(m.get(k) == v for k, v in filters.items())]
            else:
                items = [m for m in items if m.get("owner_resource") in (None, "shop")]
        page = items[offset:offset + limit]
        next_params = None
        if offset + limit < len(items):
            next_params = {"limit": limit, "page_info": json.dumps({"offset": offset + limit, "filters": filters})}
        return copy.deepcopy(page), next_params

    def get(self, path, key):
        self.calls.append(("get", path, None))
        parent, _, record_id = path.rpartition("/")
        for record in self.rest.get(parent, []):
            if str(record.get("id")) == record_id:
                return copy.deepcopy(record)
        return None

    def create(self, path, key, payload):
        self.calls.append(("create", path, copy.deepcopy(payload)))
        self._maybe_fail("create", path)
        record = copy.deepcopy(payload)
        record["id"] = self._new_id()
        if key == "product":
            for variant in record.get("variants") or []:
                variant["id"] = self._new_id()
        self.rest.setdefault(path, []).append(record)
        return copy.deepcopy(record)

    def delete(self, path):
        self.calls.append(("delete", path, None))
        self._maybe_fail("delete", path)
        parent, _, record_id = path.rpartition("/")
        self.rest[parent] = [r for r in self.rest.get(parent, []) if str(r.get("id")) != record_id]

    # GraphQL ------------------------------------------------------------

    def graphql(self, query, variables=None):
        variables = variables or {}
        name = operation_name(query)
        self.calls.append(("graphql", name, copy.deepcopy(variables)))
        self._maybe_fail("graphql", name)
        if name in self.overrides:
            return copy.deepcopy(self.overrides[name])
        if name == "shop":
            return {"data": {"shop": {"name": self.name}}}
        if name == "accessScopes":
            return {"data": {"currentAppInstallation": {"accessScopes": [{"handle": s} for s in self.scopes]}}}
        if name in ("files", "menus"):
            return self._connection(name, variables)
        if name == "fileCreate":
            created = []
            for file_input in variables["files"]:
                node = {
                    "id": f"gid://shopify/GenericFile/{self._new_id()}",
                    "__typename": "GenericFile",
                    "url": file_input["originalSource"],
                    "alt": file_input.get("alt"),
                }
                self.connections.setdefault("files", []).append(node)
                created.append({"id": node["id"], "alt": node["alt"]})
            return {"data": {"fileCreate": {"files": created, "userErrors": []}}}
        if name == "fileDelete":
            ids = set(variables["fileIds"])
            self.connections["files"] = [n for n in self.connections.get("files", []) if n["id"] not in ids]
            return {"data": {"fileDelete": {"deletedFileIds": list(ids), "userErrors": []}}}
        if name == "menuCreate":
            menu = {"id": f"gid://shopify/Menu/{self._new_id()}", "handle": variables["handle"], "title": variables["title"]}
            self.connections.setdefault("menus", []).append(dict(menu, items=variables["items"]))
            return {"data": {"menuCreate": {"menu": menu, "userErrors": []}}}
        if name == "menuDelete":
            self.connections["menus"] = [n for n in self.connections.get("menus", []) if n["id"] != variables["id"]]
            return {"data": {"menuDelete": {"deletedMenuId": variables["id"], "userErrors": []}}}
        return {"errors": [{"message": f"unknown operation {name}"}]}

    def _connection(self, name, variables):
        first = variables.get("first", 250)
        offset = int(variables.get("after") or 0)
        nodes = self.connections.get(name, [])
        page = nodes[offset:offset + first]
        end = offset + len(page)
        return {
            "data": {
                name: {
                    "edges": [{"node": copy.deepcopy(n)} for n in page],
                    "pageInfo": {"hasNextPage": end < len(nodes), "endCursor": str(end)},
                }
            }
        }


@pytest.fixture
def source():
    return FakeStore("source")


@pytest.fixture
def destination():
    return FakeStore("destination")


@pytest.fixture
def logs():
    return []


@pytest.fixture
def migrator(source, destination, logs, tmp_path):
    def log(message, level="INFO"):
        logs.append((level, message))

    return ShopifyMigrator(source, destination, log=log, report_dir=str(tmp_path / "reports"))
