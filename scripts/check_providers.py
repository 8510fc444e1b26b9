"""
List the image providers in the order a generation request tries them,
with their configuration state and a live probe.
Run from project root; credentials are read from .env (or env).
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_settings
from services.provider_registry import ProviderRegistry


def main():
    registry = ProviderRegistry.from_settings(get_settings())
    print(f"{len(registry)} providers, tried in this order:\n")

    first = None
    for descriptor in registry.candidates():
        if not descriptor.is_configured:
            print(f"  {descriptor.priority:>3}  {descriptor.provider_id:<12} not configured")
            continue
        ok = descriptor.probe()
        print(f"  {descriptor.priority:>3}  {descriptor.provider_id:<12} configured, probe {'OK' if ok else 'FAILED'}")
        if ok and first is None:
            first = descriptor.provider_id

    print()
    if first:
        print("First available provider:", first)
        return 0
    print("No provider reachable; requests will use the local effect.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
