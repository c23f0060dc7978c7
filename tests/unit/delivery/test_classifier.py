"""
Module: test_classifier.py
Description: Unit tests for result building and partitioning.
"""

import random

import pytest

from webhook_dispatch.delivery.classifier import build_result, classify
from webhook_dispatch.delivery.errors import DeliveryTransportError
from webhook_dispatch.delivery.push import PushResponse


class TestBuildResult:
    """Test cases for build_result()."""

    def test_success_response(self):
        result = build_result("https://a.io", 1, response=PushResponse(success=True, status=204, body=""))
        assert result.success is True
        assert result.status == 204
        assert result.error is None
        assert result.attempt == 1

    def test_http_error_response(self):
        result = build_result("https://a.io", 2, response=PushResponse(success=False, status=422, body="bad"))
        assert result.success is False
        assert result.status == 422
        assert result.body == "bad"
        assert result.error is None

    def test_transport_error(self):
        error = DeliveryTransportError("https://a.io", "Timeout posting to https://a.io")
        result = build_result("https://a.io", 1, error=error)
        assert result.success is False
        assert result.status is None
        assert result.error == "Timeout posting to https://a.io"

    def test_unexpected_error_keeps_type(self):
        result = build_result("https://a.io", 1, error=RuntimeError("boom"))
        assert result.error == "RuntimeError: boom"

    def test_requires_response_or_error(self):
        with pytest.raises(ValueError):
            build_result("https://a.io", 1)


class TestClassify:
    """Test cases for classify()."""

    def test_client_errors_are_failures(self):
        results = [
            build_result("https://a.io", 1, response=PushResponse(success=True, status=200, body="")),
            build_result("https://b.io", 1, response=PushResponse(success=False, status=404, body="")),
            build_result("https://c.io", 1, response=PushResponse(success=False, status=503, body="")),
            build_result("https://d.io", 1, error=DeliveryTransportError("https://d.io", "refused")),
        ]

        succeeded, failed = classify(results)

        assert [r.url for r in succeeded] == ["https://a.io"]
        assert sorted(r.url for r in failed) == ["https://b.io", "https://c.io", "https://d.io"]

    def test_partition_is_total_and_disjoint(self):
        rng = random.Random(7)
        for _ in range(50):
            results = []
            for i in range(rng.randint(0, 12)):
                url = f"https://host{i}.io"
                if rng.random() < 0.2:
                    results.append(build_result(url, 1, error=DeliveryTransportError(url, "timeout")))
                else:
                    status = rng.choice([200, 201, 204, 301, 400, 404, 500, 503])
                    response = PushResponse(success=200 <= status < 300, status=status, body="")
                    results.append(build_result(url, 1, response=response))

            succeeded, failed = classify(results)

            assert len(succeeded) + len(failed) == len(results)
            assert {r.url for r in succeeded} | {r.url for r in failed} == {r.url for r in results}
            assert not {r.url for r in succeeded} & {r.url for r in failed}

    def test_empty_batch(self):
        assert classify([]) == ([], [])
