import asyncio

import pytest

from hotserve import make_app

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x01\xff\xfe"

INDEX_HTML = """<!doctype html>
<html>
<head>
  <title>Home</title>
</head>
<body><h1>Hello</h1></body>
</html>
"""


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (root / "nohead.html").write_text("<p>no head here</p>\n", encoding="utf-8")
    (root / "style.css").write_text("body { color: red; }\n", encoding="utf-8")
    (root / "app.js").write_text("console.log('hi');\n", encoding="utf-8")
    (root / "data.json").write_text('{"a": 1}', encoding="utf-8")
    (root / "logo.png").write_bytes(PNG_BYTES)
    (root / "README").write_text("plain", encoding="utf-8")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_text("<head></head>docs", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    return root


@pytest.fixture
async def client(aiohttp_client, site):
    app = make_app(str(site), 8000, watch=False)
    return await aiohttp_client(app)


async def wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
