#!/usr/bin/env python3
"""
Live Turnaround Scenario.

Runs the full flow against the hosted models with a real API key:

1. Discovery  - grounded search + structured extraction
2. Analysis   - turnaround report for the first business found
3. Export     - PDF written to the output directory
4. Media      - optional concept image and explanation video

Requires GEMINI_API_KEY (or GOOGLE_API_KEY) in the environment or .env.

Usage:
    python scripts/run_turnaround.py
    python scripts/run_turnaround.py --industry "Sushi Restaurant" --location Springfield --image
    python scripts/run_turnaround.py --video --ratio 9:16
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, ".")

from bizniz.config.settings import get_settings
from bizniz.core.credentials import ApiKeyCredentialProvider
from bizniz.models.schemas import AspectRatio, ImageSize
from bizniz.orchestration.session import TurnaroundSession
from bizniz.services.gemini_service import GeminiService


# =============================================================================
# Display Helpers
# =============================================================================

def print_header(text: str, char: str = "=") -> None:
    line = char * 70
    print(f"\n{line}")
    print(f" {text}")
    print(f"{line}")


def print_step(num: int, total: int, name: str) -> None:
    print(f"\n  [{num}/{total}] {name}...")


# =============================================================================
# Scenario
# =============================================================================

async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    key = settings.gemini_api_key
    if key is None:
        print("  GEMINI_API_KEY is not set")
        return 1

    credentials = ApiKeyCredentialProvider(key.get_secret_value())
    session = TurnaroundSession(GeminiService(credentials, settings=settings), credentials, settings=settings)
    total = 3 + int(args.image) + int(args.video)

    print_header(f"Biz-Niz Pro: {args.industry} in {args.location}")

    print_step(1, total, "Discovery")
    start = time.time()
    businesses = await session.search(args.industry, args.location)
    print(f"      {len(businesses)} businesses in {time.time() - start:.1f}s")
    if session.message:
        print(f"      {session.message}")
    if not businesses:
        return 1
    for business in businesses:
        print(f"      {business.id}  {business.rating:.1f}  {business.name}")
        for complaint in business.complaints:
            print(f"                - {complaint}")

    target = businesses[0]
    print_step(2, total, f"Analysis of {target.name}")
    start = time.time()
    report = await session.analyze(target.id)
    if report is None:
        print(f"      {session.message}")
        return 1
    print(f"      done in {time.time() - start:.1f}s")
    print(f"      summary: {report.summary[:300]}")
    if args.verbose:
        for theme in report.recurring_themes:
            print(f"      theme: {theme}")
        for item in report.recommendations:
            print(f"      recommendation: {item}")

    print_step(3, total, "PDF export")
    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    filename, content = session.export_pdf()
    (output_dir / filename).write_bytes(content)
    print(f"      wrote {output_dir / filename} ({len(content)} bytes)")

    step = 3
    if args.image:
        step += 1
        print_step(step, total, f"Concept image ({args.size})")
        panel = await session.generate_image(ImageSize(args.size))
        if panel.image is None:
            print("      no image generated")
        else:
            print(f"      {panel.image.mime_type}, {len(panel.image.data_uri)} chars")

    if args.video:
        step += 1
        print_step(step, total, f"Explanation video ({args.ratio})")
        start = time.time()
        panel = await session.generate_video(AspectRatio(args.ratio))
        if panel.video is None:
            print(f"      {panel.message or 'no video'}")
        else:
            stored = session.service.media_store.get(panel.video.handle)
            path = output_dir / f"{Path(filename).stem}.mp4"
            path.write_bytes(stored.content)
            print(f"      wrote {path} in {time.time() - start:.1f}s")

    await session.close()
    print_header("Done")
    return 0


async def main():
    parser = argparse.ArgumentParser(description="Run a live Biz-Niz Pro turnaround scenario")
    parser.add_argument("--industry", default="Sushi Restaurant", help="Industry to search")
    parser.add_argument("--location", default="Springfield", help="Location to search")
    parser.add_argument("--image", action="store_true", help="Also generate the concept image")
    parser.add_argument("--size", default=ImageSize.ONE_K.value, choices=[s.value for s in ImageSize])
    parser.add_argument("--video", action="store_true", help="Also generate the explanation video")
    parser.add_argument("--ratio", default=AspectRatio.LANDSCAPE.value, choices=[r.value for r in AspectRatio])
    parser.add_argument("--output", default="output", help="Directory for exported files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show detailed output")
    return await run(parser.parse_args())


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
