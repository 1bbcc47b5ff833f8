"""Hosted Auth Client — request shape and error mapping, via httpx.MockTransport."""

from uuid import uuid4

import httpx
import pytest

from threesby.core.errors import AccountProviderError, DomainValidationError
from threesby.infrastructure.auth_client import HostedAuthAccountProvider
from threesby.infrastructure.codes import SecretsCodeGenerator
from threesby.core.invite_rules import CODE_ALPHABET


def _provider(handler) -> HostedAuthAccountProvider:
    return HostedAuthAccountProvider(
        "https://auth.example/", "service-key",
        transport=httpx.MockTransport(handler),
    )


async def test_create_account_posts_confirmed_user():
    account_id = uuid4()
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["apikey"] = request.headers["apikey"]
        seen["body"] = request.read()
        return httpx.Response(200, json={"id": str(account_id)})

    result = await _provider(handler).create_account("a@b.io", "longpassword")

    assert result == account_id
    assert seen["method"] == "POST"
    assert seen["url"] == "https://auth.example/admin/users"
    assert seen["auth"] == "Bearer service-key"
    assert seen["apikey"] == "service-key"
    assert b'"email_confirm":true' in seen["body"].replace(b" ", b"")


async def test_existing_email_is_validation_error():
    provider = _provider(lambda request: httpx.Response(422, json={"msg": "exists"}))
    with pytest.raises(DomainValidationError) as exc:
        await provider.create_account("a@b.io", "longpassword")
    assert exc.value.field == "email"


async def test_server_error_is_provider_error():
    provider = _provider(lambda request: httpx.Response(500))
    with pytest.raises(AccountProviderError) as exc:
        await provider.create_account("a@b.io", "longpassword")
    assert exc.value.http_status == 502


async def test_missing_id_is_provider_error():
    provider = _provider(lambda request: httpx.Response(200, json={}))
    with pytest.raises(AccountProviderError):
        await provider.create_account("a@b.io", "longpassword")


async def test_connection_failure_is_provider_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(AccountProviderError) as exc:
        await _provider(handler).delete_account(uuid4())
    assert exc.value.operation == "delete_account"


async def test_delete_account_accepts_empty_body():
    account_id = uuid4()
    paths = []

    def handler(request):
        paths.append((request.method, request.url.path))
        return httpx.Response(204)

    await _provider(handler).delete_account(account_id)
    assert paths == [("DELETE", f"/admin/users/{account_id}")]


def test_generated_codes_use_unambiguous_alphabet():
    codes = {SecretsCodeGenerator(10).generate() for _ in range(50)}
    assert all(len(code) == 10 for code in codes)
    assert all(ch in CODE_ALPHABET for code in codes for ch in code)
