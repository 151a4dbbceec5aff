"""Traffic simulator for the experiment endpoints.

Sends realistic visitor traffic so the results endpoint has something to
show: each simulated visitor keeps its own cookie jar, loads the dashboard
and pricing views, then converts on each experiment's target event with a
per-variant probability.

Usage:
    python -m splitlab.simulate --base-url http://localhost:8000 --visitors 500
"""
import argparse
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import httpx

from splitlab.middleware.logging import get_logger

logger = get_logger()

# Conversion probability per variant when none is given
DEFAULT_CONVERSION_RATES = {"A": 0.10, "B": 0.12}

API_PREFIX = "/api/experiments"


@dataclass
class SimulationSummary:
    visitors: int = 0
    page_views: int = 0
    events_sent: int = 0
    # test_id -> variant -> visitors
    assignments: Dict[str, Dict[str, int]] = field(default_factory=dict)


def simulate_traffic(
    client_factory: Callable[[], httpx.Client],
    visitors: int,
    conversion_rates: Optional[Dict[str, Dict[str, float]]] = None,
    rng: Optional[random.Random] = None,
    revisit_probability: float = 0.2
) -> SimulationSummary:
    """
    Drive the public experiment endpoints with simulated visitors.

    Args:
        client_factory: Returns a fresh client (fresh cookie jar) per visitor
        visitors: Number of distinct visitors to simulate
        conversion_rates: test_id -> {"A": p, "B": p}; missing tests use
            DEFAULT_CONVERSION_RATES
        rng: Random source for conversions and revisits
        revisit_probability: Chance a visitor loads the dashboard a second time

    Returns:
        SimulationSummary with request counts and observed assignments
    """
    rng = rng or random.Random()
    conversion_rates = conversion_rates or {}
    summary = SimulationSummary()

    for _ in range(visitors):
        with client_factory() as client:
            config = client.get(f"{API_PREFIX}/config").json()
            targets = {exp["test_id"]: exp["target_event"] for exp in config.get("experiments", [])}

            dashboard = client.get(f"{API_PREFIX}/dashboard")
            dashboard.raise_for_status()
            variants = dashboard.json()["variants"]
            summary.page_views += 1

            client.get(f"{API_PREFIX}/pricing-view").raise_for_status()
            summary.page_views += 1

            if rng.random() < revisit_probability:
                client.get(f"{API_PREFIX}/dashboard").raise_for_status()
                summary.page_views += 1

            for test_id, variant in variants.items():
                per_test = summary.assignments.setdefault(test_id, {"A": 0, "B": 0})
                per_test[variant] += 1

                rate = conversion_rates.get(test_id, DEFAULT_CONVERSION_RATES).get(variant, 0.0)
                if test_id in targets and rng.random() < rate:
                    response = client.post(
                        f"{API_PREFIX}/events",
                        json={"event": targets[test_id], "testId": test_id}
                    )
                    response.raise_for_status()
                    summary.events_sent += 1

        summary.visitors += 1

    logger.info(
        "simulation_completed",
        visitors=summary.visitors,
        page_views=summary.page_views,
        events_sent=summary.events_sent
    )
    return summary


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Simulate A/B traffic against a running SplitLab server")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--visitors", type=int, default=200)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    summary = simulate_traffic(
        lambda: httpx.Client(base_url=args.base_url, timeout=10.0),
        visitors=args.visitors,
        rng=random.Random(args.seed)
    )
    print(f"Simulated {summary.visitors} visitors: {summary.page_views} page views, {summary.events_sent} events")
    for test_id, counts in summary.assignments.items():
        print(f"  {test_id}: A={counts['A']} B={counts['B']}")


if __name__ == "__main__":
    main()
