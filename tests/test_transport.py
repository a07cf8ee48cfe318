"""
Integration tests: credential transport and housing API against a local aiohttp server
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from aiohttp import web
from aiohttp import test_utils

from housing_console.adapters.http.api import HousingApi
from housing_console.adapters.http.transport import (
    MALFORMED_RESPONSE_MESSAGE,
    NOT_AUTHENTICATED_MESSAGE,
    TRANSPORT_FAILURE_MESSAGE,
    CredentialTransport,
    ErrorKind,
    extract_error_message,
    open_client_session,
)
from housing_console.domain.models import EntityKind


async def _echo_auth(request):
    return web.json_response({"auth": request.headers.get("Authorization")})


async def _login(request):
    body = await request.json()
    return web.json_response({
        "data": {"token": "tok-1", "userName": body["username"]},
        "auth": request.headers.get("Authorization"),
    })


async def _forbidden(request):
    return web.json_response({"message": "Not allowed"}, status=403)


async def _plain_error(request):
    return web.Response(text="Server exploded", status=500)


async def _html(request):
    return web.Response(text="<html>oops</html>", content_type="text/html")


async def _no_content(request):
    return web.Response(status=204)


async def _update(request):
    body = await request.json()
    return web.json_response({"id": request.match_info["id"], "received": body})


def _make_app():
    app = web.Application()
    app.router.add_get("/api/Buildings", _echo_auth)
    app.router.add_post("/api/Auth/login", _login)
    app.router.add_get("/api/forbidden", _forbidden)
    app.router.add_get("/api/plain", _plain_error)
    app.router.add_get("/api/html", _html)
    app.router.add_delete("/api/Buildings/{id}", _no_content)
    app.router.add_put("/api/Buildings/{id}", _update)
    return app


def run_with_server(scenario):
    """Start a local server, hand a transport bound to it to ``scenario``."""

    async def _main():
        server = test_utils.TestServer(_make_app())
        await server.start_server()
        transport = CredentialTransport(str(server.make_url("/")))
        try:
            return await scenario(transport)
        finally:
            await transport.close()
            await server.close()

    return asyncio.run(_main())


class TestCredentialHeader:

    def test_token_attached_then_stripped(self):
        async def scenario(transport):
            transport.set_token("abc")
            first = await transport.request("GET", "/api/Buildings")
            transport.clear_token()
            second = await transport.request("GET", "/api/Buildings")
            return first, second

        first, second = run_with_server(scenario)
        assert first.ok
        assert first.data == {"auth": "Bearer abc"}
        assert second.ok is False
        assert second.error_kind is ErrorKind.UNAUTHENTICATED
        assert second.error == NOT_AUTHENTICATED_MESSAGE

    def test_login_is_sent_without_credentials(self):
        async def scenario(transport):
            transport.set_token("stale")
            return await HousingApi(transport).login("sara", "pw")

        resp = run_with_server(scenario)
        assert resp.ok
        assert resp.data["data"]["token"] == "tok-1"
        assert resp.data["data"]["userName"] == "sara"
        assert resp.data["auth"] is None


class TestFailures:

    def test_unreachable_remote_is_transport_failure(self):
        async def scenario():
            transport = CredentialTransport("http://127.0.0.1:1", timeout=5)
            transport.set_token("abc")
            try:
                return await transport.request("GET", "/api/Buildings")
            finally:
                await transport.close()

        resp = asyncio.run(scenario())
        assert resp.error_kind is ErrorKind.TRANSPORT
        assert resp.error == TRANSPORT_FAILURE_MESSAGE

    def test_remote_error_message(self):
        async def scenario(transport):
            transport.set_token("abc")
            return await transport.request("GET", "/api/forbidden")

        resp = run_with_server(scenario)
        assert resp.error_kind is ErrorKind.HTTP
        assert resp.status == 403
        assert resp.error == "Not allowed"

    def test_plain_text_error_body(self):
        async def scenario(transport):
            transport.set_token("abc")
            return await transport.request("GET", "/api/plain")

        resp = run_with_server(scenario)
        assert resp.status == 500
        assert resp.error == "Server exploded"

    def test_non_json_success_is_protocol_failure(self):
        async def scenario(transport):
            transport.set_token("abc")
            return await transport.request("GET", "/api/html")

        resp = run_with_server(scenario)
        assert resp.error_kind is ErrorKind.PROTOCOL
        assert resp.error == MALFORMED_RESPONSE_MESSAGE


class TestSharedSession:

    def test_transports_on_one_session_keep_their_own_tokens(self):
        async def _main():
            server = test_utils.TestServer(_make_app())
            await server.start_server()
            shared = open_client_session()
            base = str(server.make_url("/"))
            alice = CredentialTransport(base, session=shared)
            bob = CredentialTransport(base, session=shared)
            try:
                alice.set_token("alice-token")
                bob.set_token("bob-token")
                first = await alice.request("GET", "/api/Buildings")
                second = await bob.request("GET", "/api/Buildings")

                await alice.close()
                after_close = await bob.request("GET", "/api/Buildings")
                return first, second, after_close, shared.closed
            finally:
                await shared.close()
                await server.close()

        first, second, after_close, closed = asyncio.run(_main())
        assert first.data == {"auth": "Bearer alice-token"}
        assert second.data == {"auth": "Bearer bob-token"}
        # closing a borrowing transport leaves the shared session usable
        assert closed is False
        assert after_close.data == {"auth": "Bearer bob-token"}

    def test_own_session_is_closed(self):
        async def scenario():
            transport = CredentialTransport("http://127.0.0.1:1")
            async with transport:
                session = transport.session
                assert session is not None
            return session.closed, transport.session

        closed, after = asyncio.run(scenario())
        assert closed is True
        assert after is None


class TestHousingApi:

    def test_update_and_delete_paths(self):
        async def scenario(transport):
            transport.set_token("abc")
            api = HousingApi(transport)
            updated = await api.update(EntityKind.BUILDINGS, 4, {"name": "B"})
            deleted = await api.delete("buildings", 4)
            return updated, deleted

        updated, deleted = run_with_server(scenario)
        assert updated.data == {"id": "4", "received": {"name": "B"}}
        assert deleted.ok
        assert deleted.status == 204
        assert deleted.data is None

    def test_custom_endpoints(self):
        api = HousingApi(CredentialTransport("http://x"), {"rooms": "/v2/rooms/"})
        assert api.endpoint(EntityKind.ROOMS) == "/v2/rooms"
        assert api.endpoint("buildings") == "/api/Buildings"


class TestExtractErrorMessage:

    def test_order(self):
        assert extract_error_message({"error": "e", "title": "t"}, 400) == "e"
        assert extract_error_message({"data": {"message": "inner"}}, 400) == "inner"
        assert extract_error_message({"message": " "}, 418) == "Request failed with status 418"
        assert extract_error_message(None, 500) == "Request failed with status 500"
