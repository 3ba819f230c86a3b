# psnprofile/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

TROPHY_GRADES = ("total", "platinum", "gold", "silver", "bronze")


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-10-18T09:15:02.123Z."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def _opt_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class TrophyCounts:
    total: Optional[int] = None
    platinum: Optional[int] = None
    gold: Optional[int] = None
    silver: Optional[int] = None
    bronze: Optional[int] = None

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {grade: getattr(self, grade) for grade in TROPHY_GRADES}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrophyCounts":
        data = data if isinstance(data, dict) else {}
        return cls(**{grade: _opt_int(data.get(grade)) for grade in TROPHY_GRADES})


@dataclass(frozen=True)
class RecentTrophy:
    trophy_name: str = ""
    game: str = ""
    rarity_label: str = ""
    description: str = ""
    earned_text: str = ""
    rarity_percent: str = ""
    trophy_type: str = ""
    trophy_url: str = ""
    image_url: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "trophyName": self.trophy_name,
            "game": self.game,
            "rarityLabel": self.rarity_label,
            "description": self.description,
            "earnedText": self.earned_text,
            "rarityPercent": self.rarity_percent,
            "trophyType": self.trophy_type,
            "trophyUrl": self.trophy_url,
            "imageUrl": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecentTrophy":
        return cls(
            trophy_name=str(data.get("trophyName", "")),
            game=str(data.get("game", "")),
            rarity_label=str(data.get("rarityLabel", "")),
            description=str(data.get("description", "")),
            earned_text=str(data.get("earnedText", "")),
            rarity_percent=str(data.get("rarityPercent", "")),
            trophy_type=str(data.get("trophyType", "")),
            trophy_url=str(data.get("trophyUrl", "")),
            image_url=str(data.get("imageUrl", "")),
        )


@dataclass(frozen=True)
class RecentGame:
    title: str = ""
    trophies_earned: Optional[int] = None
    trophies_total: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.trophies_total is not None and self.trophies_earned == self.trophies_total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "trophiesEarned": self.trophies_earned,
            "trophiesTotal": self.trophies_total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecentGame":
        return cls(
            title=str(data.get("title", "")),
            trophies_earned=_opt_int(data.get("trophiesEarned")),
            trophies_total=_opt_int(data.get("trophiesTotal")),
        )


@dataclass(frozen=True)
class ProfileSnapshot:
    """One run's output record: a fresh extraction or an error placeholder."""

    source: str
    updated: str
    username: str = ""
    level: int = 0
    profile_image: str = ""
    trophy_counts: TrophyCounts = field(default_factory=TrophyCounts)
    stats: Dict[str, str] = field(default_factory=dict)
    recent_trophies: Tuple[RecentTrophy, ...] = ()
    recent_games: Tuple[RecentGame, ...] = ()
    error: Optional[str] = None

    @classmethod
    def placeholder(cls, source: str, error: str, updated: Optional[str] = None) -> "ProfileSnapshot":
        """Empty snapshot written when nothing better exists on disk."""
        if not error:
            raise ValueError("placeholder snapshots need a non-empty error message")
        return cls(source=source, updated=updated or utc_timestamp(), error=error)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "source": self.source,
            "updated": self.updated,
        }
        if self.error:
            data["error"] = self.error
        data.update({
            "username": self.username,
            "level": self.level,
            "profileImage": self.profile_image,
            "trophyCounts": self.trophy_counts.to_dict(),
            "stats": dict(self.stats),
            "recentTrophies": [t.to_dict() for t in self.recent_trophies],
            "recentGames": [g.to_dict() for g in self.recent_games],
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileSnapshot":
        level = _opt_int(data.get("level"))
        stats = data.get("stats") if isinstance(data.get("stats"), dict) else {}
        trophies = data.get("recentTrophies") if isinstance(data.get("recentTrophies"), list) else []
        games = data.get("recentGames") if isinstance(data.get("recentGames"), list) else []
        return cls(
            source=str(data.get("source", "")),
            updated=str(data.get("updated", "")),
            username=str(data.get("username", "")),
            level=level if level is not None and level >= 0 else 0,
            profile_image=str(data.get("profileImage", "")),
            trophy_counts=TrophyCounts.from_dict(data.get("trophyCounts") or {}),
            stats={str(k): str(v) for k, v in stats.items()},
            recent_trophies=tuple(RecentTrophy.from_dict(t) for t in trophies if isinstance(t, dict)),
            recent_games=tuple(RecentGame.from_dict(g) for g in games if isinstance(g, dict)),
            error=data.get("error") or None,
        )
