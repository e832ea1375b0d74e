"""CLI for running a hazard risk assessment against the live services.

Usage:
    python -m hazardrisk.data.risk_cli --lat 59.9139 --lon 10.7522 --knr 0301
    python -m hazardrisk.data.risk_cli --lat 63.43 --lon 10.39 --knr 5001 --json
    python -m hazardrisk.data.risk_cli --search "Karl Johans gate 1"
"""

import argparse
import asyncio
import logging

from hazardrisk.api.schemas import address_response, risk_response
from hazardrisk.config import settings
from hazardrisk.data.client import GeoDataClient
from hazardrisk.data.geocode import search_addresses
from hazardrisk.data.resolver import RiskAssessor
from hazardrisk.models.hazard import Address, RiskAssessment


def print_assessment(result: RiskAssessment) -> None:
    addr = result.address
    label = addr.text or f"{addr.latitude:.5f}, {addr.longitude:.5f}"
    elevation = f"{result.elevation:.1f} m" if result.elevation is not None else "unknown"

    print(f"\n{'=' * 72}")
    print(f"  Risk Assessment: {label} ({addr.municipality_code})")
    print(f"{'=' * 72}")
    print(f"  Overall:     {result.overall_score}/100 ({result.overall_level.value})")
    print(f"  Elevation:   {elevation}")
    print(f"  {result.summary}")
    print()

    for h in sorted(result.hazards, key=lambda h: h.score, reverse=True):
        status = h.error or h.description
        print(f"  [{h.level.value.upper():>9}] {h.score:>3}  {h.name:<28} {status}")
    print()

    if result.weather_alerts:
        print("  Active weather alerts:")
        for alert in result.weather_alerts:
            print(f"    {alert.severity:>8}: {alert.event} ({alert.area})")
        print()

    if result.historical_events:
        print("  Historical landslide events:")
        for e in result.historical_events:
            when = e.date.isoformat() if e.date else "date unknown"
            print(f"    {e.distance_m:>5} m  {e.type} ({when}) {e.location}")
        print()


def print_addresses(addresses: list[Address]) -> None:
    if not addresses:
        print("No matching addresses.")
        return
    for a in addresses:
        print(
            f"  {a.text}, {a.postal_code} {a.postal_place}  "
            f"lat={a.latitude:.5f} lon={a.longitude:.5f} knr={a.municipality_code}"
        )


async def main() -> None:
    parser = argparse.ArgumentParser(description="Natural hazard risk assessment CLI")
    parser.add_argument("--lat", type=float, help="Latitude (WGS84)")
    parser.add_argument("--lon", type=float, help="Longitude (WGS84)")
    parser.add_argument("--knr", help="Four-digit municipality number (kommunenummer)")
    parser.add_argument("--text", default="", help="Address label")
    parser.add_argument("--search", help="Search for addresses instead of assessing a point")
    parser.add_argument("--no-history", action="store_true", help="Skip historical landslide events")
    parser.add_argument("--json", action="store_true", help="Print the API response JSON")

    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level)

    client = GeoDataClient()
    try:
        if args.search:
            addresses = await search_addresses(client, args.search)
            if args.json:
                for a in addresses:
                    print(address_response(a).model_dump_json())
            else:
                print_addresses(addresses)
            return

        if args.lat is None or args.lon is None or not args.knr:
            parser.error("--lat, --lon and --knr are required (unless using --search)")

        assessor = RiskAssessor(client, include_historical=not args.no_history)
        result = await assessor.assess(Address(
            text=args.text,
            latitude=args.lat,
            longitude=args.lon,
            municipality_code=args.knr,
        ))
        if args.json:
            print(risk_response(result).model_dump_json(indent=2, exclude_none=True))
        else:
            print_assessment(result)
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
