# tests/unit/test_executor.py
import pytest

from realleads.common.errors import InvalidContext, ProviderError
from realleads.executor.executor import Executor, summarize
from realleads.executor.models import ActionOutcome, ActionResult, ExecutionContext
from realleads.orchestrator.schemas import Action, ActionType


def _a(type_, **params):
    return Action(type=ActionType(type_), params=params)


@pytest.mark.asyncio
async def test_missing_actor_is_invalid_context(executor, repo):
    with pytest.raises(InvalidContext):
        await executor.execute_all([_a("get_leads")], ExecutionContext(actor_id=None, account_id="acct-1"))
    assert repo.calls == []


@pytest.mark.asyncio
async def test_invalid_middle_action_does_not_stop_batch(executor, ctx, repo):
    repo.add(id="L1", first_name="John")
    actions = [
        _a("get_leads", search="John"),
        _a("create_lead", first_name="Bad", email="not-an-email"),
        _a("get_leads", status="new"),
    ]

    result = await executor.execute_all(actions, ctx)

    assert [r.success for r in result.results] == [True, False, True]
    assert result.overall_success is False
    assert result.results[1].error_code == "validation_error"
    assert result.summary == "Executed 3 actions: 2 succeeded, 1 failed"


@pytest.mark.asyncio
async def test_all_success_summary(executor, ctx, repo):
    repo.add(id="L1", first_name="John")
    result = await executor.execute_all([_a("get_leads")], ctx)
    assert result.overall_success is True
    assert result.summary == "Successfully executed 1 action"


@pytest.mark.asyncio
async def test_unhandled_action_type_reports_not_implemented(executor, ctx):
    result = await executor.execute_all([_a("ingest_content", content="Listing copy")], ctx)

    r = result.results[0]
    assert r.success is False
    assert r.error_code == "not_implemented"
    assert "not yet implemented" in r.error


@pytest.mark.asyncio
async def test_handler_exception_becomes_failed_result_and_is_audited(executor, ctx, repo, audit):
    repo.fail_on["create_lead"] = ProviderError("db down", provider="supabase")
    result = await executor.execute_all(
        [
            _a(
                "create_lead",
                first_name="Sarah",
                email="sarah@example.com",
                property_address="1 Market St",
                budget_max=1_000_000,
            )
        ],
        ctx,
    )

    r = result.results[0]
    assert r.success is False
    assert r.error_code == "provider_error"
    assert r.message == "Failed to execute create_lead"
    assert audit.entries[-1]["status"] == "failure"
    assert audit.entries[-1]["parsed_action"] == "create_lead"


@pytest.mark.asyncio
async def test_unexpected_exception_is_internal_error(deps, ctx):
    async def boom(params, context, d):
        raise KeyError("oops")

    executor = Executor(deps, handlers={ActionType.GET_LEADS: boom})
    result = await executor.execute_all([_a("get_leads")], ctx)
    assert result.results[0].error_code == "internal_error"


@pytest.mark.asyncio
async def test_chained_update_targets_first_search_hit(executor, ctx, repo):
    repo.add(id="L1", first_name="John", last_name="Doe", budget_max=900_000)
    repo.add(id="L2", first_name="John", last_name="Smith")

    result = await executor.execute_all(
        [_a("get_leads", search="John"), _a("update_lead", lead_id="{{lead_id}}", budget_max=1_500_000)],
        ctx,
    )

    assert result.overall_success is True
    assert repo.leads["L1"].budget_max == 1_500_000
    assert repo.leads["L2"].budget_max is None


@pytest.mark.asyncio
async def test_actions_run_in_order(deps, ctx):
    seen = []

    async def record(params, context, d):
        seen.append(params.status)
        return ActionOutcome(message="ok")

    executor = Executor(deps, handlers={ActionType.GET_LEADS: record})
    await executor.execute_all([_a("get_leads", status=s) for s in ("new", "hot", "lost")], ctx)
    assert seen == ["new", "hot", "lost"]


def test_summarize_plural():
    ok = ActionResult(success=True, action_type="get_leads", message="")
    assert summarize([ok, ok]) == "Successfully executed 2 actions"


class _BrokenAuditLog:
    async def record(self, *a, **kw):
        raise RuntimeError("audit store down")


@pytest.mark.asyncio
async def test_audit_outage_does_not_escape_or_stop_batch(deps, ctx, repo):
    deps.audit = _BrokenAuditLog()
    repo.add(id="L1", first_name="John")

    result = await Executor(deps).execute_all(
        [_a("update_lead", lead_id="missing", status="hot"), _a("get_leads")], ctx
    )

    assert [r.success for r in result.results] == [False, True]
    assert result.results[0].error_code == "not_found_or_forbidden"
    assert result.summary == "Executed 2 actions: 1 succeeded, 1 failed"
