from __future__ import annotations

import argparse
import logging
from pathlib import Path

from mfe.contracts import ActionRequest, ActionType, MatchStatus, ProgressionPolicy, TacticalStyle
from mfe.core import DEFAULT_ADMIN_ID, default_engine_config, make_id, seeded_random
from mfe.registry import build_demo_squads
from mfe.simulation import MatchRuntime


def main() -> None:
    parser = argparse.ArgumentParser(description="Segment-level football match engine demo")
    parser.add_argument("--root", type=Path, default=Path.cwd(), help="runtime root directory")
    parser.add_argument("--seed", type=int, default=7, help="seed for squads and local randomness")
    parser.add_argument("--squad-size", type=int, default=11, help="players per side (1-11)")
    parser.add_argument("--home-tactic", choices=[s.name.lower() for s in TacticalStyle], default="balanced")
    parser.add_argument("--away-tactic", choices=[s.name.lower() for s in TacticalStyle], default="balanced")
    parser.add_argument("--referee", type=int, default=3, help="referee strictness (0-10)")
    parser.add_argument("--policy", choices=[p.value for p in ProgressionPolicy], default=ProgressionPolicy.AUTO.value)
    parser.add_argument("--analytics", action="store_true", help="refresh DuckDB marts after the match")
    parser.add_argument("--verbose", action="store_true", help="log lifecycle transitions")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    registry, home_ids, away_ids = build_demo_squads(seeded_random(args.seed).spawn("squads"), args.squad_size)
    runtime = MatchRuntime(
        args.root,
        registry,
        seed=args.seed,
        config=default_engine_config(ProgressionPolicy(args.policy)),
    )

    created = runtime.handle_action(
        ActionRequest(
            make_id("req"),
            ActionType.CREATE_MATCH,
            {
                "home_ids": home_ids,
                "away_ids": away_ids,
                "home_tactic": args.home_tactic,
                "away_tactic": args.away_tactic,
                "referee_strictness": args.referee,
            },
            DEFAULT_ADMIN_ID,
        )
    )
    if not created.success:
        print(created.message)
        print(created.data)
        return
    match_id = created.data["match_id"]

    while True:
        runtime.deliver_pending()
        match = runtime.controller.get_match(match_id)
        if match.status is not MatchStatus.COOLDOWN or runtime.halted:
            break
        triggered = runtime.handle_action(
            ActionRequest(make_id("req"), ActionType.TRIGGER_NEXT_SEGMENT, {"match_id": match_id}, DEFAULT_ADMIN_ID)
        )
        if not triggered.success:
            print(triggered.message)
            break

    view = runtime.handle_action(ActionRequest(make_id("req"), ActionType.GET_MATCH, {"match_id": match_id}, DEFAULT_ADMIN_ID)).data
    print(f"Match {match_id}: {view['status']} after {view['current_segment']} segments")
    print(f"Score: home {view['home_score']} - {view['away_score']} away")
    if view["scorers"]:
        print("Scorers: " + ", ".join(view["scorers"]))
    print("Experience awarded:")
    for player_id, amount in sorted(view["awards"].items()):
        print(f"- {player_id}: +{amount} xp ({registry.tier_of(player_id).value})")
    if runtime.halted:
        print(f"Runtime halted; forensic artifact at {runtime.last_forensic_path}")

    if args.analytics:
        analytics = runtime.refresh_analytics()
        print("Top scorers (all matches):")
        for player_id, goals in analytics.top_scorers(5):
            print(f"- {player_id}: {goals}")


if __name__ == "__main__":
    main()
