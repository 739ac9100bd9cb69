#!/usr/bin/env python3
"""Helper script to check and create the .env file for the routing API key."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Routing provider key (Required: the map stays disabled without it)
ROUTEDRAW_ROUTING_API_KEY=your-routing-api-key-here

# Routing / geocoding services
ROUTEDRAW_OSRM_BASE_URL=https://router.project-osrm.org
ROUTEDRAW_GEOCODER_BASE_URL=https://nominatim.openstreetmap.org

# Drawing behaviour
# ROUTEDRAW_COMMIT_TRIGGER=enter        # or: pointer
# ROUTEDRAW_EXPORT_FORMAT=gtfs          # or: plain, geojson
# ROUTEDRAW_USE_ROUTED_DISTANCE=true
# ROUTEDRAW_ENABLE_GEOCODING=true

# Data Paths
ROUTEDRAW_DATA_ROOT=./data
"""


def _mask(value: str) -> str:
    if len(value) > 12:
        return value[:6] + "..." + value[-4:]
    return "***"


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Route Drawing Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        print("Creating template .env file...")
        with open(env_file, "w", encoding="utf-8") as f:
            f.write(TEMPLATE)
        print(f"✅ Created .env file at: {env_file}")
        print("⚠️  Please edit .env and add your routing API key!")
        return

    print(f"✅ Found .env file at: {env_file}")
    key = os.getenv("ROUTEDRAW_ROUTING_API_KEY")
    if key:
        print(f"✅ ROUTEDRAW_ROUTING_API_KEY (from environment): {_mask(key)}")
    else:
        print("ℹ️  ROUTEDRAW_ROUTING_API_KEY not in environment; checking .env via config")
    print()

    sys.path.insert(0, str(project_root / "src"))
    from routedraw.config import Settings

    config = Settings()
    if config.routing_api_key:
        print("=" * 60)
        print(f"✅ SUCCESS: routing API key configured ({_mask(config.routing_api_key)})")
        print(f"   OSRM: {config.osrm_base_url}  commit trigger: {config.commit_trigger}")
        print("=" * 60)
    else:
        print("=" * 60)
        print("❌ ERROR: routing API key is NOT configured")
        print("=" * 60)
        print("1. Make sure .env exists in the project root")
        print("2. Make sure variables start with the ROUTEDRAW_ prefix")
        print("3. Restart the server after editing .env")


if __name__ == "__main__":
    main()
