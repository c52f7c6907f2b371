import httpx
import pytest
import pytest_asyncio
from loguru import logger

from phonebook.contacts.sqlite_store import SqliteContactStore
from phonebook.contacts.store import MemoryContactStore
from phonebook.web.server import WebServer


@pytest_asyncio.fixture
async def client():
    server = WebServer(store=MemoryContactStore())
    transport = httpx.ASGITransport(app=server.fastapi)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_create_list_get_delete(client):
    r = await client.get("/api/contacts")
    assert r.status_code == 200
    assert r.json() == []

    r2 = await client.post("/api/contacts", json={"name": "Ada Lovelace", "number": "09-1234567"})
    assert r2.status_code == 200
    created = r2.json()
    assert created["id"]
    assert created["name"] == "Ada Lovelace"
    assert created["number"] == "09-1234567"

    r3 = await client.get("/api/contacts")
    assert r3.json() == [created]

    r4 = await client.get(f"/api/contacts/{created['id']}")
    assert r4.status_code == 200
    assert r4.json() == created

    r5 = await client.delete(f"/api/contacts/{created['id']}")
    assert r5.status_code == 204
    assert r5.content == b""

    r6 = await client.get(f"/api/contacts/{created['id']}")
    assert r6.status_code == 404
    assert r6.content == b""


@pytest.mark.asyncio
async def test_delete_unknown_id_is_204(client):
    r = await client.delete("/api/contacts/does-not-exist")
    assert r.status_code == 204
    assert r.content == b""


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"name": "Bob"}, {"number": "12345678"}, {"name": "", "number": "12345678"}, {}])
async def test_missing_name_or_number(client, body):
    r = await client.post("/api/contacts", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "name or number missing"}


@pytest.mark.asyncio
async def test_validation_errors_are_400(client):
    r = await client.post("/api/contacts", json={"name": "A", "number": "12345678"})
    assert r.status_code == 400
    assert "shorter than the minimum allowed length (3)" in r.json()["error"]

    r2 = await client.post("/api/contacts", json={"name": "Arto Hellas", "number": "1234-5678"})
    assert r2.status_code == 400
    assert r2.json() == {"error": "1234-5678 is not a valid phone number"}

    r3 = await client.get("/api/contacts")
    assert r3.json() == []


@pytest.mark.asyncio
async def test_duplicate_name_is_400(client):
    await client.post("/api/contacts", json={"name": "Ada Lovelace", "number": "09-1234567"})
    r = await client.post("/api/contacts", json={"name": "ADA LOVELACE", "number": "12345678"})
    assert r.status_code == 400
    assert r.json() == {"error": "name must be unique"}


@pytest.mark.asyncio
async def test_malformatted_body(client):
    r = await client.post(
        "/api/contacts", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert r.status_code == 400
    assert r.json() == {"error": "malformatted request body"}

    r2 = await client.post("/api/contacts", json={"name": "Bob Smith", "number": 12345678})
    assert r2.status_code == 400
    assert r2.json() == {"error": "malformatted request body"}

    r3 = await client.post("/api/contacts", json=["Bob Smith", "12345678"])
    assert r3.status_code == 400


@pytest.mark.asyncio
async def test_update_contact(client):
    created = (await client.post("/api/contacts", json={"name": "Arto Hellas", "number": "040-123456"})).json()
    await client.post("/api/contacts", json={"name": "Dan Abramov", "number": "12-43234345"})

    r = await client.put(f"/api/contacts/{created['id']}", json={"name": "Arto Hellas", "number": "040-654321"})
    assert r.status_code == 200
    assert r.json() == {"id": created["id"], "name": "Arto Hellas", "number": "040-654321"}

    r2 = await client.put("/api/contacts/missing", json={"name": "Arto Hellas", "number": "040-654321"})
    assert r2.status_code == 404
    assert r2.json() == {"error": "contact not found"}

    r3 = await client.put(f"/api/contacts/{created['id']}", json={"name": "Dan Abramov", "number": "040-654321"})
    assert r3.status_code == 400
    assert r3.json() == {"error": "name must be unique"}

    r4 = await client.put(f"/api/contacts/{created['id']}", json={"name": "Arto Hellas"})
    assert r4.status_code == 400
    assert r4.json() == {"error": "name or number missing"}


@pytest.mark.asyncio
async def test_info_page(client):
    await client.post("/api/contacts", json={"name": "Ada Lovelace", "number": "09-1234567"})
    await client.post("/api/contacts", json={"name": "Arto Hellas", "number": "040-123456"})

    r = await client.get("/info")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "Phonebook has info for 2 people" in r.text


@pytest.mark.asyncio
async def test_unknown_endpoint(client):
    r = await client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json() == {"error": "unknown endpoint"}


@pytest.mark.asyncio
async def test_store_failure_is_500_without_detail(tmp_path):
    # Never initialized, so every store call fails.
    server = WebServer(store=SqliteContactStore(str(tmp_path / "phonebook.db")))
    transport = httpx.ASGITransport(app=server.fastapi, raise_app_exceptions=False)
    lines = []
    sink = logger.add(lambda message: lines.append(str(message)), level="INFO", format="{message}")
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            r = await c.get("/api/contacts")
    finally:
        logger.remove(sink)

    assert r.status_code == 500
    assert r.json() == {"error": "internal server error"}
    assert any(line.startswith("GET /api/contacts 500") for line in lines)


@pytest.mark.asyncio
async def test_static_frontend_is_served(tmp_path):
    build = tmp_path / "build"
    build.mkdir()
    (build / "index.html").write_text("<html><body>phonebook ui</body></html>", encoding="utf-8")

    server = WebServer(store=MemoryContactStore(), static_dir=str(build))
    transport = httpx.ASGITransport(app=server.fastapi)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        r = await c.get("/")
        assert r.status_code == 200
        assert "phonebook ui" in r.text

        r2 = await c.get("/api/contacts")
        assert r2.json() == []


@pytest.mark.asyncio
async def test_cors_headers(client):
    r = await client.get("/api/contacts", headers={"Origin": "http://localhost:3000"})
    assert r.headers.get("access-control-allow-origin") == "*"


@pytest.mark.asyncio
async def test_non_ascii_digits_rejected(client):
    r = await client.post("/api/contacts", json={"name": "Arto Hellas", "number": "０９-1234567"})
    assert r.status_code == 400
    assert r.json() == {"error": "０９-1234567 is not a valid phone number"}

    r2 = await client.get("/api/contacts")
    assert r2.json() == []
