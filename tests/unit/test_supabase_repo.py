# tests/unit/test_supabase_repo.py
import pytest
import httpx

from realleads.common.errors import NotFoundOrForbidden, ProviderError
from realleads.repo.dtos import LeadFilter
from realleads.repo.supabase_repo import SupabaseRepo, _search_expr


class _Resp:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Records the PostgREST builder chain and returns canned rows on execute()."""

    def __init__(self, table, rows=None, error=None):
        self.table = table
        self.rows = rows or []
        self.error = error
        self.ops = []

    def __getattr__(self, name):
        def _op(*args, **kwargs):
            self.ops.append((name, args, kwargs))
            return self
        return _op

    async def execute(self):
        if self.error:
            raise self.error
        return _Resp(self.rows)


class FakeClient:
    def __init__(self, rows=None, error=None):
        self.rows = rows
        self.error = error
        self.queries = []

    def table(self, name):
        q = FakeQuery(name, self.rows, self.error)
        self.queries.append(q)
        return q


def _row(**kw):
    base = {"id": "L1", "first_name": "Ana", "account_id": "acct-1", "owner_agent_id": "agent-1"}
    base.update(kw)
    return base


def test_search_expr_single_token_strips_separators():
    assert _search_expr("Jo(hn),") == (
        "first_name.ilike.%John%,last_name.ilike.%John%,"
        "email.ilike.%John%,phone.ilike.%John%"
    )


def test_search_expr_requires_every_token():
    expr = _search_expr("John Doe")
    assert expr.startswith("and(or(first_name.ilike.%John%,")
    assert "or(first_name.ilike.%Doe%,last_name.ilike.%Doe%," in expr
    assert expr.endswith(")")
    assert _search_expr(" () ") == ""


@pytest.mark.asyncio
async def test_get_leads_is_scoped_and_filtered():
    client = FakeClient(rows=[_row()])
    repo = SupabaseRepo(client)

    leads = await repo.get_leads("agent-1", LeadFilter(status="hot", search="Ana", limit=500, offset=10))

    assert [l.id for l in leads] == ["L1"]
    ops = client.queries[0].ops
    assert ("eq", ("owner_agent_id", "agent-1"), {}) in ops
    assert ("eq", ("status", "hot"), {}) in ops
    assert ("range", (10, 109), {}) in ops
    assert any(name == "or_" for name, _, _ in ops)


@pytest.mark.asyncio
async def test_update_with_no_rows_is_not_found():
    repo = SupabaseRepo(FakeClient(rows=[]))
    with pytest.raises(NotFoundOrForbidden):
        await repo.update_lead("L1", "agent-2", {"status": "hot"})


@pytest.mark.asyncio
async def test_transport_error_becomes_provider_error():
    repo = SupabaseRepo(FakeClient(error=httpx.ConnectError("down")))
    with pytest.raises(ProviderError) as exc:
        await repo.get_lead_by_id("L1", "agent-1")
    assert exc.value.provider == "supabase"
