# psnprofile/scraper/validation.py
"""
Checks that keep junk pages out of the result file.

The #user-bar element only exists on a genuinely rendered profile page;
bot walls, consent interstitials and dead pages lack it.
"""

from typing import List

ANCHOR_SELECTOR = "#user-bar"


def has_user_bar(soup) -> bool:
    """Return True if the parsed document contains the profile anchor element."""
    return soup.select_one(ANCHOR_SELECTOR) is not None


def snapshot_warnings(snapshot) -> List[str]:
    """
    List fields of an extracted snapshot that came back empty.

    Missing fields only produce warnings; markup drift on one field must
    not stop the rest of the snapshot from being written.

    Examples:
        >>> snapshot_warnings(snapshot)
        ['no recent games found']
    """
    warnings = []

    if not snapshot.username:
        warnings.append("username is empty")
    if snapshot.level == 0:
        warnings.append("level is 0 or could not be parsed")
    if snapshot.trophy_counts.total is None:
        warnings.append("total trophy count not found")
    if not snapshot.recent_trophies:
        warnings.append("no recent trophies found")
    if not snapshot.recent_games:
        warnings.append("no recent games found")

    return warnings
