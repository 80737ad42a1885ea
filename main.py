"""ProfileScout - social profile discovery

Simple CLI for running a discovery query.
"""

import argparse
import asyncio
import json

from profile_scout.agents.orchestrator import DiscoveryOrchestrator
from profile_scout.llm_client import get_provider

STATUS_MARKERS = {
    "pending": "~",
    "complete": "+",
    "warning": "!",
    "error": "x",
}


async def run_discovery(
    query: str,
    provider: str | None = None,
    model: str | None = None,
    as_json: bool = False,
):
    """Run discovery for the given query and print the event stream."""
    print(f"Discovery query: {query}")
    print("-" * 50)

    orchestrator = DiscoveryOrchestrator(provider=get_provider(provider, model=model))

    async for event in orchestrator.discover(query):
        event_type = event.event.value
        data = event.data

        if event_type == "activity":
            marker = STATUS_MARKERS.get(data.get("status", ""), "*")
            print(f"[{marker}] {data.get('kind')}: {data.get('message')}")

        elif event_type == "partial-results":
            print(
                f"\n[*] Iteration {data.get('iteration')}: +{data.get('newlyAdded')} new, "
                f"{data.get('totalCandidates')} total\n"
            )

        elif event_type == "results":
            print(f"\n[*] Discovery Complete!")
            print(f"   Iterations: {data.get('iterations')}")
            print(f"   Tokens: {data.get('tokensUsed')}")
            print(f"   Candidates: {data.get('totalCandidates')}")
            print(f"\n{'='*50}")
            if as_json:
                print(json.dumps(data.get("candidates", []), indent=2))
                continue
            for candidate in data.get("candidates", []):
                verified = " (verified)" if candidate.get("verified") else ""
                print(
                    f"@{candidate.get('username')}{verified} - {candidate.get('displayName')} "
                    f"| {candidate.get('followerCount', 0):,} followers | {candidate.get('category')}"
                )

        elif event_type == "error":
            print(f"\n[!] Error: {data.get('message', 'Unknown error')}")


def main():
    parser = argparse.ArgumentParser(description="ProfileScout social profile discovery")
    parser.add_argument("--query", "-q", required=True, help="Description of the accounts to find")
    parser.add_argument("--provider", "-p", help="Model provider: openrouter | openai | anthropic")
    parser.add_argument("--model", "-m", help="Model to use (default: from config)")
    parser.add_argument("--json", action="store_true", help="Print final candidates as JSON")

    args = parser.parse_args()

    asyncio.run(run_discovery(args.query, args.provider, args.model, args.json))


if __name__ == "__main__":
    main()
