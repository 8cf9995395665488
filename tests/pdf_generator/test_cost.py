"""
Unit tests for pdf_generator/cost.py
"""

import pytest

from pdf_generator.cost import (
    DEFAULT_REGION,
    REGION_PRICING,
    RESERVED_FREE_DISK_MB,
    UPLOAD_COST,
    estimate_cost,
)


class TestEstimateCost:
    """Tests for the cost estimator."""

    def test_zero_duration_has_no_compute_cost(self):
        metrics = estimate_cost(0, memory_mb=1024, disk_mb=512, region="us-east-1")

        assert metrics.breakdown.compute_cost == 0
        assert metrics.breakdown.storage_cost == 0
        assert metrics.duration_seconds == 0

    def test_zero_duration_total_is_fixed_costs(self):
        metrics = estimate_cost(0, region="us-east-1")
        expected = round(REGION_PRICING["us-east-1"].request_rate + UPLOAD_COST, 7)

        assert metrics.breakdown.total_cost == expected
        assert metrics.estimated_cost_usd == expected

    def test_one_gb_second(self):
        """1024MB for 1s is exactly one GB-second."""
        metrics = estimate_cost(1000, memory_mb=1024, disk_mb=512, region="us-east-1")

        assert metrics.estimated_gb_seconds == 1.0
        assert metrics.breakdown.compute_cost == round(0.0000166667, 7)
        assert metrics.breakdown.total_cost == round(0.0000166667 + 0.0000002 + 0.000005, 7)

    def test_storage_is_free_up_to_reserved_size(self):
        metrics = estimate_cost(60000, disk_mb=RESERVED_FREE_DISK_MB, region="us-east-1")
        assert metrics.breakdown.storage_cost == 0

    def test_storage_charged_above_reserved_size(self):
        metrics = estimate_cost(1_000_000, memory_mb=1024, disk_mb=10240, region="us-east-1")
        expected = (10240 - 512) * 0.0000000309 * 1000 / 1024

        assert metrics.breakdown.storage_cost == pytest.approx(round(expected, 7))
        assert metrics.breakdown.storage_cost > 0

    def test_rounding(self):
        metrics = estimate_cost(1234, memory_mb=1536, disk_mb=512, region="us-east-1")

        assert metrics.duration_seconds == 1.234
        for value in metrics.breakdown.model_dump().values():
            assert round(value, 7) == value

    def test_unknown_region_falls_back_to_default(self):
        metrics = estimate_cost(5000, region="mars-north-1")
        default = estimate_cost(5000, region=DEFAULT_REGION)

        assert metrics.region == DEFAULT_REGION
        assert metrics == default

    def test_regional_pricing_differs(self):
        cheap = estimate_cost(10000, region="us-east-1")
        pricey = estimate_cost(10000, region="ap-east-1")
        assert pricey.estimated_cost_usd > cheap.estimated_cost_usd

    def test_deterministic(self):
        first = estimate_cost(4321, memory_mb=2048, disk_mb=1024, region="eu-west-1")
        second = estimate_cost(4321, memory_mb=2048, disk_mb=1024, region="eu-west-1")

        assert first == second
        assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)

    def test_wire_field_names(self):
        payload = estimate_cost(1500, region="us-east-1").to_payload()

        assert set(payload) == {
            "region", "durationMs", "durationSeconds", "memoryMB", "diskMB",
            "estimatedGBSeconds", "estimatedCostUSD", "breakdown",
        }
        assert set(payload["breakdown"]) == {
            "computeCost", "storageCost", "requestCost", "uploadCost", "totalCost",
        }
