#!/usr/bin/env python3
"""
BW Stats - Replay Analyzer
Scans the StarCraft: Brood War autosave archive for one player's replays and
reports race usage or supply building timing.

Usage: python bwstats.py {races,buildings} [--player NAME]
"""

import argparse
import json
import sys

from replay_decoder import ScrepDecoder
from replay_locator import ScanError
from replay_stats import (
    BUILDING_FRIENDLY_NAMES,
    TRACKED_BUILDINGS,
    compute_building_stats,
    compute_race_stats,
)
from settings import SettingsError, get_replay_dir, load_current_user


def print_progress(fraction: float):
    print(f"\rScanning replay files... {fraction * 100:5.1f}%", end='', flush=True)


def report_races(player: str, stats):
    print(f"\n{'='*40}")
    print(f"RACE USAGE: {player}")
    print(f"{'='*40}")
    print(f"  Terran:      {stats.terran:6}")
    print(f"  Zerg:        {stats.zerg:6}")
    print(f"  Protoss:     {stats.protoss:6}")
    print(f"  Total Games: {stats.total:6}")


def report_buildings(player: str, player_stats):
    print(f"\n{'='*40}")
    print(f"SUPPLY BUILDINGS: {player}")
    print(f"{'='*40}")
    if player_stats is None:
        print(f"  No replays found for {player}")
        return
    for attr in TRACKED_BUILDINGS.values():
        timeline = getattr(player_stats, attr)
        name = BUILDING_FRIENDLY_NAMES[attr]
        print(f"  {name:15}: {timeline.total():6} (avg: {player_stats.average_per_second(attr):.2f}/sec)")
    print(f"  {'Total Buildings':15}: {player_stats.total_buildings:6}")
    if player_stats.max_duration:
        print(f"  Longest game: {player_stats.max_duration - 1}s")


def write_json(path: str, data: dict):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def main(argv=None):
    arg_parser = argparse.ArgumentParser(
        description='Race and build statistics from Brood War replays (.rep)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python bwstats.py races
  python bwstats.py buildings --player Flash
  python bwstats.py races --replay-dir ./AutoSave --json races.json

Replays are decoded with screp (https://github.com/icza/screp), which must be
installed on PATH, at ~/go/bin/screp, or given with --screp / $SCREP_PATH.
        """
    )
    arg_parser.add_argument('mode', choices=['races', 'buildings'],
                           help='Which statistics to compute')
    arg_parser.add_argument('--player', '-p',
                           help='Player name to match (default: current user from CSettings.json)')
    arg_parser.add_argument('--replay-dir',
                           help='Autosave archive root (default: $BWSTATS_REPLAY_DIR or the StarCraft folder)')
    arg_parser.add_argument('--settings',
                           help='Path to CSettings.json')
    arg_parser.add_argument('--screp',
                           help='Path to the screp binary')
    arg_parser.add_argument('--json', dest='json_path', metavar='FILE',
                           help='Also write the statistics to a JSON file')
    arg_parser.add_argument('--quiet', '-q', action='store_true',
                           help='Suppress progress output')

    args = arg_parser.parse_args(argv)

    player = args.player
    if not player:
        try:
            player = load_current_user(args.settings)
        except SettingsError as e:
            print(f"Error: {e}")
            sys.exit(1)

    replay_dir = args.replay_dir or get_replay_dir()
    decoder = ScrepDecoder(args.screp)
    on_progress = None if args.quiet else print_progress

    if not args.quiet:
        print(f"Current User: {player}")
        print(f"Replays directory: {replay_dir}")

    try:
        if args.mode == 'races':
            stats = compute_race_stats(player, on_progress, replay_dir=replay_dir, decoder=decoder)
            data = {'player': player, 'races': stats.to_dict()}
        else:
            building_stats = compute_building_stats(player, on_progress, replay_dir=replay_dir, decoder=decoder)
            stats = building_stats.get(player)
            data = {'player': player, 'buildings': stats.to_dict() if stats else None}
    except ScanError as e:
        if on_progress is not None:
            print()
        print(f"Error: {e}")
        sys.exit(1)

    if on_progress is not None:
        print()

    if args.mode == 'races':
        report_races(player, stats)
    else:
        report_buildings(player, stats)

    if args.json_path:
        write_json(args.json_path, data)
        print(f"\nExported statistics to: {args.json_path}")


if __name__ == '__main__':
    main()
