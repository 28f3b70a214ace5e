"""
Replay statistics aggregation.
Race usage counts and per-second building timelines for one player,
accumulated across every replay in the archive.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

from replay_decoder import DecodeResult, Race, ReplayRecord, decode_replay
from replay_locator import ProgressReporter, find_replay_files
from settings import get_replay_dir

Decoder = Callable[[str], DecodeResult]

# Unit type id -> BuildingStats timeline attribute
TRACKED_BUILDINGS = {
    106: 'supply_depots',  # Terran
    109: 'overlords',      # Zerg
    156: 'pylons',         # Protoss
}

# Friendly names for report output
BUILDING_FRIENDLY_NAMES = {
    'supply_depots': 'Supply Depots',
    'overlords': 'Overlords',
    'pylons': 'Pylons',
}


@dataclass
class RaceStats:
    terran: int = 0
    zerg: int = 0
    protoss: int = 0

    def record(self, race: Race):
        """Count one game played as race. Unknown races are ignored."""
        if race is Race.TERRAN:
            self.terran += 1
        elif race is Race.ZERG:
            self.zerg += 1
        elif race is Race.PROTOSS:
            self.protoss += 1

    @property
    def total(self) -> int:
        return self.terran + self.zerg + self.protoss

    def to_dict(self) -> dict:
        return {
            'terran': self.terran,
            'zerg': self.zerg,
            'protoss': self.protoss,
            'total': self.total,
        }


class Timeline:
    """Per-second counters that can only grow."""

    def __init__(self, length: int = 0):
        self._buckets: List[int] = []
        self.ensure_length(length)

    def ensure_length(self, length: int):
        """Grow to at least length, zero-filling new seconds. Never shrinks."""
        missing = length - len(self._buckets)
        if missing > 0:
            self._buckets.extend([0] * missing)

    def increment(self, second: int) -> bool:
        """Bump one bucket. Out-of-range seconds are dropped."""
        if 0 <= second < len(self._buckets):
            self._buckets[second] += 1
            return True
        return False

    def total(self) -> int:
        return sum(self._buckets)

    def to_list(self) -> List[int]:
        return list(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def __getitem__(self, second):
        return self._buckets[second]

    def __iter__(self) -> Iterator[int]:
        return iter(self._buckets)

    def __repr__(self):
        return f"Timeline(len={len(self)}, total={self.total()})"


class BuildingStats:
    """Supply building timelines for one player across many replays.

    All three timelines always share one length: the longest game folded in so
    far, in seconds, plus one.
    """

    def __init__(self, player_name: str, length: int = 0):
        self.player_name = player_name
        self.supply_depots = Timeline()
        self.overlords = Timeline()
        self.pylons = Timeline()
        self.max_duration = 0
        self.ensure_length(length)

    def timelines(self) -> Dict[str, Timeline]:
        return {attr: getattr(self, attr) for attr in TRACKED_BUILDINGS.values()}

    def ensure_length(self, length: int):
        for timeline in self.timelines().values():
            timeline.ensure_length(length)
        self.max_duration = max(self.max_duration, length)

    def record_build(self, unit_id: Optional[int], second: int) -> bool:
        attr = TRACKED_BUILDINGS.get(unit_id)
        if attr is None:
            return False
        return getattr(self, attr).increment(second)

    def totals(self) -> Dict[str, int]:
        return {attr: timeline.total() for attr, timeline in self.timelines().items()}

    @property
    def total_buildings(self) -> int:
        return sum(self.totals().values())

    def average_per_second(self, attr: str) -> float:
        timeline = getattr(self, attr)
        if not len(timeline):
            return 0.0
        return timeline.total() / len(timeline)

    def to_dict(self, include_timelines: bool = True) -> dict:
        result = {
            'player_name': self.player_name,
            'max_duration': self.max_duration,
            'totals': self.totals(),
            'total_buildings': self.total_buildings,
            'average_per_second': {
                attr: self.average_per_second(attr) for attr in TRACKED_BUILDINGS.values()
            },
        }
        if include_timelines:
            result['timelines'] = {
                attr: timeline.to_list() for attr, timeline in self.timelines().items()
            }
        return result


def fold_building_commands(replay: ReplayRecord, target_name: str,
                           building_stats: Dict[str, BuildingStats]) -> bool:
    """Add one replay's supply building commands into building_stats.

    Returns False (and changes nothing) when target_name did not play.
    """
    player = replay.find_player(target_name)
    if player is None:
        return False

    # +1 so the final second has its own bucket
    duration = replay.duration_seconds + 1

    player_stats = building_stats.get(player.name)
    if player_stats is None:
        player_stats = BuildingStats(player.name, duration)
        building_stats[player.name] = player_stats
    else:
        player_stats.ensure_length(duration)

    for cmd in replay.commands:
        if cmd.player_id != player.player_id or not cmd.is_build:
            continue
        player_stats.record_build(cmd.unit_id, math.floor(cmd.seconds))

    return True


def _decoded_replays(replay_files: List[str], decoder: Decoder,
                     on_progress: Optional[ProgressReporter]) -> Iterator[ReplayRecord]:
    """Yield replays that decoded, reporting processed/total after each one."""
    total_files = len(replay_files)
    processed = 0
    for result in map(decoder, replay_files):
        if not result.ok:
            continue
        yield result.replay
        processed += 1
        if on_progress is not None and total_files > 0:
            on_progress(processed / total_files)


def compute_race_stats(target_name: str, on_progress: Optional[ProgressReporter] = None, *,
                       replay_dir: Optional[str] = None,
                       decoder: Optional[Decoder] = None) -> RaceStats:
    """Count the races target_name played across the replay archive.

    Raises ScanError subclasses from find_replay_files.
    """
    if replay_dir is None:
        replay_dir = get_replay_dir()
    replay_files = find_replay_files(replay_dir)

    stats = RaceStats()
    for replay in _decoded_replays(replay_files, decoder or decode_replay, on_progress):
        player = replay.find_player(target_name)
        if player is not None:
            stats.record(player.race)

    return stats


def compute_building_stats(target_name: str, on_progress: Optional[ProgressReporter] = None, *,
                           replay_dir: Optional[str] = None,
                           decoder: Optional[Decoder] = None) -> Dict[str, BuildingStats]:
    """Per-second supply building timelines for target_name.

    Returns an empty dict when the player is in none of the replays.
    Raises ScanError subclasses from find_replay_files.
    """
    if replay_dir is None:
        replay_dir = get_replay_dir()
    replay_files = find_replay_files(replay_dir)

    building_stats: Dict[str, BuildingStats] = {}
    for replay in _decoded_replays(replay_files, decoder or decode_replay, on_progress):
        fold_building_commands(replay, target_name, building_stats)

    return building_stats
