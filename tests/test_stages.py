"""Tests for stage wrappers — the propagation table."""

import pytest

from eventpipe import Payload
from eventpipe.stages import catch_stage, clear_stage, filter_stage, for_each_stage, map_stage

BOOM = ValueError("boom")


def _boom(*_):
    raise BOOM


def ok(result=1, args=(1,)):
    return Payload(result=result, args=args)


def errored(args=(1,)):
    return Payload(error=BOOM, args=args)


def skipped(result=1, args=(1,)):
    return Payload(result=result, args=args, use=False)


class TestPayload:
    def test_from_occurrence(self):
        p = Payload.from_occurrence(1, "a", None)
        assert p == Payload(result=1, error=None, args=(1, "a", None), use=True)

    def test_from_occurrence_without_args(self):
        p = Payload.from_occurrence()
        assert p.result is None
        assert p.args == ()

    def test_failed_drops_result(self):
        p = ok(result=7).failed(BOOM)
        assert p.result is None
        assert p.error is BOOM
        assert p.args == (1,)
        assert p.use is True

    def test_immutable(self):
        with pytest.raises(AttributeError):
            ok().result = 2  # type: ignore[misc]


class TestMap:
    def test_replaces_result(self):
        calls = []
        stage = map_stage(lambda r, a: calls.append((r, a)) or r + 1)
        assert stage(ok()) == ok(result=2)
        assert calls == [(1, (1,))]

    def test_error_passes_through(self):
        calls = []
        stage = map_stage(lambda r, a: calls.append(r))
        p = errored()
        assert stage(p) is p
        assert calls == []

    def test_unused_passes_through(self):
        calls = []
        stage = map_stage(lambda r, a: calls.append(r))
        p = skipped()
        assert stage(p) is p
        assert calls == []

    def test_exception_becomes_error(self):
        out = map_stage(_boom)(ok(result=5))
        assert out.error is BOOM
        assert out.result is None
        assert out.args == (1,)


class TestForEach:
    def test_effect_only(self):
        calls = []
        stage = for_each_stage(lambda r, a: calls.append(r) or "ignored")
        p = ok()
        assert stage(p) == p
        assert calls == [1]

    def test_skips_error_and_unused(self):
        calls = []
        stage = for_each_stage(lambda r, a: calls.append(r))
        stage(errored())
        stage(skipped())
        assert calls == []

    def test_exception_becomes_error(self):
        assert for_each_stage(_boom)(ok()).error is BOOM


class TestFilter:
    def test_truthy_keeps_use(self):
        out = filter_stage(lambda r, a: "yes")(ok())
        assert out.use is True
        assert out.result == 1

    def test_falsy_clears_use(self):
        out = filter_stage(lambda r, a: 0)(ok())
        assert out.use is False
        assert out.result == 1

    def test_error_forces_unused(self):
        calls = []
        out = filter_stage(lambda r, a: calls.append(r) or True)(errored())
        assert out.use is False
        assert out.error is BOOM
        assert calls == []

    def test_unused_not_reevaluated(self):
        calls = []
        p = skipped()
        assert filter_stage(lambda r, a: calls.append(r) or True)(p) is p
        assert calls == []

    def test_exception_becomes_error(self):
        out = filter_stage(_boom)(ok())
        assert out.error is BOOM


class TestCatch:
    def test_recovers(self):
        calls = []
        out = catch_stage(lambda e, a: calls.append((e, a)) or 2)(errored())
        assert out == Payload(result=2, error=None, args=(1,), use=True)
        assert calls == [(BOOM, (1,))]

    def test_keeps_use(self):
        out = catch_stage(lambda e, a: 2)(Payload(error=BOOM, args=(1,), use=False))
        assert out.use is False
        assert out.has_error is False

    def test_no_error_passes_through(self):
        calls = []
        p = ok()
        assert catch_stage(lambda e, a: calls.append(e))(p) is p
        assert calls == []

    def test_handler_error_replaces(self):
        other = KeyError("other")

        def handler(e, a):
            raise other

        out = catch_stage(handler)(errored())
        assert out.error is other


class TestClear:
    def test_unsubscribes_when_true(self):
        calls = []
        stage = clear_stage(lambda: calls.append("unsub"), lambda r, a: r > 2)
        assert stage(ok(result=1)) == ok(result=1)
        assert calls == []
        assert stage(ok(result=3)) == ok(result=3)
        assert calls == ["unsub"]

    def test_predicate_sees_errored_and_unused(self):
        seen = []
        stage = clear_stage(lambda: None, lambda r, a: seen.append((r, a)))
        stage(errored())
        stage(skipped(result=4))
        assert seen == [(None, (1,)), (4, (1,))]

    def test_exception_becomes_error(self):
        calls = []
        out = clear_stage(lambda: calls.append("unsub"), _boom)(ok())
        assert out.error is BOOM
        assert calls == []
