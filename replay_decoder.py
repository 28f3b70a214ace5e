"""
Brood War replay decoding via the screp command-line tool.

screp (github.com/icza/screp) does the binary parsing; this module runs it with
commands enabled and maps its JSON onto the records the statistics code reads.
Decoding never raises for a bad replay: callers get a DecodeResult and filter
on ``ok``.
"""

import json
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

# 1 frame = 42 milliseconds at "fastest" game speed
FRAME_MS = 42

BUILD_COMMAND = 'Build'

DECODE_TIMEOUT_SECS = 60


def frames_to_seconds(frames: Optional[int]) -> float:
    """Convert frame count to seconds"""
    if frames is None:
        return 0.0
    return frames * FRAME_MS / 1000


def get_screp_path() -> str:
    """Locate the screp binary: $SCREP_PATH, then PATH, then ~/go/bin."""
    env_path = os.environ.get('SCREP_PATH')
    if env_path:
        return env_path
    found = shutil.which('screp')
    if found:
        return found
    return str(Path.home() / 'go' / 'bin' / 'screp')


class Race(Enum):
    TERRAN = 'Terran'
    ZERG = 'Zerg'
    PROTOSS = 'Protoss'
    UNKNOWN = 'Unknown'

    @classmethod
    def from_name(cls, name: Optional[str]) -> 'Race':
        for race in (cls.TERRAN, cls.ZERG, cls.PROTOSS):
            if race.value == name:
                return race
        return cls.UNKNOWN


@dataclass
class Player:
    name: str
    race: Race
    player_id: int


@dataclass
class Command:
    player_id: int
    seconds: float
    kind: str
    unit_id: Optional[int] = None

    @property
    def is_build(self) -> bool:
        return self.kind == BUILD_COMMAND


@dataclass
class ReplayRecord:
    """Header and command stream of one decoded replay."""
    path: str
    players: List[Player] = field(default_factory=list)
    duration_seconds: int = 0
    commands: List[Command] = field(default_factory=list)

    def find_player(self, name: str) -> Optional[Player]:
        """First player whose name matches exactly (case-sensitive)."""
        for player in self.players:
            if player.name == name:
                return player
        return None


@dataclass
class DecodeResult:
    ok: bool
    replay: Optional[ReplayRecord] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, replay: ReplayRecord) -> 'DecodeResult':
        return cls(ok=True, replay=replay)

    @classmethod
    def failure(cls, error: str) -> 'DecodeResult':
        return cls(ok=False, error=error)


def _named(value: Any) -> Optional[str]:
    # screp renders enums as {"ID": .., "Name": ..}
    if isinstance(value, dict):
        return value.get('Name')
    return None


def replay_from_screp(data: dict, path: str = '') -> ReplayRecord:
    """Build a ReplayRecord from screp's JSON output.

    Raises KeyError/TypeError/ValueError when required header fields are
    missing or malformed.
    """
    header = data['Header']

    players = []
    for p in header.get('Players') or []:
        players.append(Player(
            name=p['Name'],
            race=Race.from_name(_named(p.get('Race'))),
            player_id=int(p['ID']),
        ))

    commands = []
    cmds = (data.get('Commands') or {}).get('Cmds') or []
    for c in cmds:
        unit_id = None
        unit = c.get('Unit')
        if isinstance(unit, dict) and unit.get('ID') is not None:
            unit_id = int(unit['ID'])
        commands.append(Command(
            player_id=int(c['PlayerID']),
            seconds=frames_to_seconds(c.get('Frame')),
            kind=_named(c.get('Type')) or '',
            unit_id=unit_id,
        ))

    return ReplayRecord(
        path=path,
        players=players,
        duration_seconds=int(frames_to_seconds(int(header['Frames']))),
        commands=commands,
    )


def decode_replay(path: str, screp_path: Optional[str] = None) -> DecodeResult:
    """Decode one replay file. Any failure comes back as DecodeResult.failure."""
    screp = screp_path or get_screp_path()
    try:
        result = subprocess.run(
            [screp, '-cmds', str(path)],
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='replace',
            timeout=DECODE_TIMEOUT_SECS,
        )
    except (OSError, subprocess.SubprocessError, UnicodeDecodeError) as e:
        return DecodeResult.failure(f"could not run screp: {e}")

    if result.returncode != 0:
        return DecodeResult.failure(f"screp failed: {result.stderr.strip()}")

    try:
        data = json.loads(result.stdout)
        return DecodeResult.success(replay_from_screp(data, str(path)))
    except (ValueError, KeyError, TypeError) as e:
        return DecodeResult.failure(f"unexpected screp output: {e!r}")


class ScrepDecoder:
    """Decoder bound to a specific screp binary, for --screp overrides."""

    def __init__(self, screp_path: Optional[str] = None):
        self.screp_path = screp_path or get_screp_path()

    def __call__(self, path: str) -> DecodeResult:
        return decode_replay(path, self.screp_path)
