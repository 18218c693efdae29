"""
Live CCPI cycle check.
Run with: python run_cycle.py

Uses whatever credentials are in .env and prints where every indicator
was resolved.
"""

import asyncio
import os
import sys

# Set working directory
backend_dir = os.path.dirname(os.path.abspath(__file__))
os.chdir(backend_dir)
sys.path.insert(0, backend_dir)

from dotenv import load_dotenv
load_dotenv(os.path.join(backend_dir, ".env"))


async def run_cycle():
    """Run one resolution cycle against the configured providers."""
    print("\n" + "=" * 60)
    print("CCPI - LIVE CYCLE")
    print("=" * 60)

    from ccpi.services.engine import CCPIService, CycleRequest

    service = CCPIService()

    try:
        # Step 1: Providers
        print("\n[1] Provider Availability...")
        print("-" * 40)
        for provider in service.registry.status():
            state = "OK" if provider["available"] else "NO CREDENTIAL"
            print(f"{provider['name']:<16} {provider['kind']:<15} {state}")

        # Step 2: Cycle
        print("\n[2] Resolving Indicators...")
        print("-" * 40)
        result = await service.execute(CycleRequest(force_refresh=True))

        for indicator in result.indicators:
            print(
                f"{indicator.name:<22} {indicator.value:>12.2f}  "
                f"{indicator.tier.value:<12} {indicator.source}"
            )

        # Step 3: Composite
        print("\n[3] Composite...")
        print("-" * 40)
        for pillar in result.pillars.values():
            flag = "  (low certainty)" if pillar.low_certainty else ""
            print(f"{pillar.label:<32} {pillar.score:>6.1f}  x {pillar.weight:.2f}{flag}")
        print(f"Composite: {result.composite_score}  Amplified: {result.amplified_score}")
        print(f"Certainty: {result.certainty}%")
        print(f"Regime: {result.regime.name} (level {result.regime.level})")
        print(f"Tiers: {result.tier_counts}")
        for canary in result.canaries:
            print(f"  [{canary.severity.value}] {canary.signal}")
    finally:
        await service.close()

    print("\n" + "=" * 60)
    print("CYCLE COMPLETE")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    asyncio.run(run_cycle())
