"""
Cost estimation for a single PDF generation run.

Pure functions only: identical inputs always give identical CostMetrics.
Rates are on-demand x86 function pricing in USD.
"""

from dataclasses import dataclass
from typing import Dict

from .models import CostBreakdown, CostMetrics


@dataclass(frozen=True)
class RegionPricing:
    duration_rate: float  # per GB-second of memory
    storage_rate: float  # per GB-second of ephemeral storage above the free tier
    request_rate: float  # per invocation


DEFAULT_REGION = "ap-south-1"

REGION_PRICING: Dict[str, RegionPricing] = {
    "us-east-1": RegionPricing(0.0000166667, 0.0000000309, 0.0000002),
    "us-east-2": RegionPricing(0.0000166667, 0.0000000309, 0.0000002),
    "us-west-2": RegionPricing(0.0000166667, 0.0000000309, 0.0000002),
    "eu-west-1": RegionPricing(0.0000166667, 0.0000000309, 0.0000002),
    "eu-central-1": RegionPricing(0.0000166667, 0.0000000360, 0.0000002),
    "ap-south-1": RegionPricing(0.0000166667, 0.0000000309, 0.0000002),
    "ap-southeast-1": RegionPricing(0.0000166667, 0.0000000340, 0.0000002),
    "ap-northeast-1": RegionPricing(0.0000166667, 0.0000000340, 0.0000002),
    "ap-east-1": RegionPricing(0.00002292, 0.0000000419, 0.00000029),
    "sa-east-1": RegionPricing(0.0000166667, 0.0000000489, 0.0000002),
    "me-south-1": RegionPricing(0.0000206, 0.0000000376, 0.00000025),
}

RESERVED_FREE_DISK_MB = 512
UPLOAD_COST = 0.000005  # one object PUT

MONEY_PLACES = 7


def estimate_cost(
    duration_ms: int,
    memory_mb: int = 1024,
    disk_mb: int = RESERVED_FREE_DISK_MB,
    region: str = DEFAULT_REGION,
) -> CostMetrics:
    """
    Estimate the cost of a run.

    computeCost = durationRate * memoryMB * durationMs / 1000 / 1024
    storageCost = max(0, diskMB - 512) * storageRate * durationMs / 1000 / 1024
    totalCost   = computeCost + storageCost + requestRate + uploadCost

    Monetary values are rounded to 7 decimal places, durationSeconds to 3.
    """
    if region not in REGION_PRICING:
        region = DEFAULT_REGION
    pricing = REGION_PRICING[region]

    duration_seconds = duration_ms / 1000
    gb_seconds = memory_mb * duration_seconds / 1024

    compute_cost = pricing.duration_rate * gb_seconds
    charged_disk_mb = max(0, disk_mb - RESERVED_FREE_DISK_MB)
    storage_cost = charged_disk_mb * pricing.storage_rate * duration_seconds / 1024
    total_cost = compute_cost + storage_cost + pricing.request_rate + UPLOAD_COST

    breakdown = CostBreakdown(
        compute_cost=round(compute_cost, MONEY_PLACES),
        storage_cost=round(storage_cost, MONEY_PLACES),
        request_cost=round(pricing.request_rate, MONEY_PLACES),
        upload_cost=round(UPLOAD_COST, MONEY_PLACES),
        total_cost=round(total_cost, MONEY_PLACES),
    )

    return CostMetrics(
        region=region,
        duration_ms=duration_ms,
        duration_seconds=round(duration_seconds, 3),
        memory_mb=memory_mb,
        disk_mb=disk_mb,
        estimated_gb_seconds=round(gb_seconds, 6),
        estimated_cost_usd=breakdown.total_cost,
        breakdown=breakdown,
    )
