import asyncio
import sys

import httpx
import pytest
import pytest_asyncio

from webrepl.webrepl_config import ReplConfig
from webrepl.webrepl_server import create_app


@pytest.fixture
def app():
    app = create_app(ReplConfig(namespace="webrepl_server_user", title="test repl"))
    yield app
    sys.modules.pop("webrepl_server_user", None)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


async def post_expr(client, expr):
    resp = await client.post("/repl", data={"expr": expr})
    assert resp.status_code == 200
    return resp.text


@pytest.mark.asyncio
async def test_index_links_to_repl(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert '<a href="/repl">REPL</a>' in resp.text


@pytest.mark.asyncio
async def test_repl_get_renders_empty_form(client):
    resp = await client.get("/repl")
    assert resp.status_code == 200
    assert '<form action="/repl" method="post">' in resp.text
    assert 'name="expr"' in resp.text
    assert "<title>test repl REPL</title>" in resp.text
    assert "<tr>" not in resp.text


@pytest.mark.asyncio
async def test_post_evaluates_and_appends(client, app):
    page = await post_expr(client, "1 + 2")
    assert '<td rowspan="2" valign="top">3</td>' in page
    page = await post_expr(client, "print('hi')")
    assert "<td><pre>hi\n</pre></td>" in page
    assert page.index("1 + 2") < page.index("print(")
    assert [r.expr for r in app.state.session.current()] == ["1 + 2", "print('hi')"]

    resp = await client.get("/repl")
    assert "1 + 2" in resp.text and "print(" in resp.text


@pytest.mark.asyncio
async def test_failures_render_in_the_page(client):
    page = await post_expr(client, "1 / 0")
    assert "ZeroDivisionError: division by zero" in page
    page = await post_expr(client, "")
    assert "SyntaxError" in page


@pytest.mark.asyncio
async def test_missing_form_field_counts_as_empty(client):
    resp = await client.post("/repl")
    assert resp.status_code == 200
    assert "empty expression" in resp.text


@pytest.mark.asyncio
async def test_captured_markup_is_escaped(client):
    page = await post_expr(client, "print('<script>alert(1)</script>')")
    assert "<script>" not in page
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in page


@pytest.mark.asyncio
async def test_function_result_links_to_symbol_page(client):
    page = await post_expr(client, "len")
    assert '<a href="/ns/builtins/len">len</a>' in page


@pytest.mark.asyncio
async def test_repl_definitions_are_browsable(client):
    await post_expr(client, "def greet(name):\n    return 'hi ' + name\n")
    resp = await client.get("/ns/webrepl_server_user")
    assert resp.status_code == 200
    assert '<a href="/ns/webrepl_server_user/greet">greet</a>' in resp.text
    page = await post_expr(client, "greet")
    assert '<a href="/ns/webrepl_server_user/greet">greet</a>' in page


@pytest.mark.asyncio
async def test_concurrent_posts_keep_every_record(client, app):
    n = 50
    await asyncio.gather(*(client.post("/repl", data={"expr": f"print({i})"}) for i in range(n)))
    records = app.state.session.current()
    assert len(records) == n
    assert sorted(r.expr for r in records) == sorted(f"print({i})" for i in range(n))
    for r in records:
        assert r.out == r.expr[len("print("):-1] + "\n"


@pytest.mark.asyncio
async def test_base_exception_renders_in_the_page(client, app):
    await post_expr(client, "class Halt(BaseException):\n    pass\n")
    page = await post_expr(client, "(_ for _ in ()).throw(Halt('x'))")
    assert "Halt: x" in page
    assert len(app.state.session.current()) == 2
    page = await post_expr(client, "1 + 1")
    assert '<td rowspan="2" valign="top">2</td>' in page


@pytest.mark.asyncio
async def test_displaying_an_iterator_does_not_consume_it(client, app):
    await post_expr(client, "it = iter([1, 2, 3])")
    page = await post_expr(client, "it")
    assert "&lt;list_iterator object at " in page
    await post_expr(client, "next(it)")
    records = app.state.session.current()
    assert "[1, 2, 3]" not in records[1].result_html
    assert records[2].result == "1"


@pytest.mark.asyncio
async def test_generator_output_stays_out_of_process_stdout(client, app, capsys):
    await post_expr(client, "(print('side', i) for i in range(2))")
    assert "side" not in capsys.readouterr().out
    record = app.state.session.current()[-1]
    assert record.out == ""
    assert record.result_html.startswith("&lt;generator object")


@pytest.mark.asyncio
async def test_namespace_index(client):
    resp = await client.get("/ns")
    assert resp.status_code == 200
    assert '<li><a href="/ns/json">json</a></li>' in resp.text


@pytest.mark.asyncio
async def test_namespace_page(client):
    resp = await client.get("/ns/json")
    assert resp.status_code == 200
    assert "<h1>json</h1>" in resp.text
    assert '<a href="/ns/json/dumps">dumps</a>' in resp.text


@pytest.mark.asyncio
async def test_symbol_page(client):
    resp = await client.get("/ns/json/dumps")
    assert resp.status_code == 200
    assert "<h1>dumps</h1>" in resp.text
    assert "<pre>def dumps(" in resp.text
    assert '<a href="/ns/json">json</a>' in resp.text


@pytest.mark.asyncio
async def test_dotted_symbol_page(client):
    resp = await client.get("/ns/json.decoder/JSONDecoder.decode")
    assert resp.status_code == 200
    assert "<h1>JSONDecoder.decode</h1>" in resp.text


@pytest.mark.asyncio
async def test_unknown_namespace_is_404(client):
    resp = await client.get("/ns/nonexistent.ns")
    assert resp.status_code == 404
    assert "namespace not found: nonexistent.ns" in resp.text
    resp = await client.get("/ns/nonexistent.ns/foo")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_unknown_symbol_is_404(client):
    resp = await client.get("/ns/json/no_such_name")
    assert resp.status_code == 404
    assert "symbol not found: json/no_such_name" in resp.text


@pytest.mark.asyncio
async def test_reqmap_renders_request(client):
    resp = await client.get("/reqmap", params={"q": "<x>"})
    assert resp.status_code == 200
    assert "&#x27;method&#x27;" not in resp.text
    assert "'method': 'GET'" in resp.text
    assert "'q': '&lt;x&gt;'" in resp.text
