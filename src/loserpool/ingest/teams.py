"""Canonical NFL team codes and the aliases feeds use for them."""

from __future__ import annotations

import re


NFL_TEAM_ALIAS_GROUPS: dict[str, list[str]] = {
    "ARI": ["ARI", "ARIZONA", "ARIZONA CARDINALS", "CARDINALS"],
    "ATL": ["ATL", "ATLANTA", "ATLANTA FALCONS", "FALCONS"],
    "BAL": ["BAL", "BALTIMORE", "BALTIMORE RAVENS", "RAVENS"],
    "BUF": ["BUF", "BUFFALO", "BUFFALO BILLS", "BILLS"],
    "CAR": ["CAR", "CAROLINA", "CAROLINA PANTHERS", "PANTHERS"],
    "CHI": ["CHI", "CHICAGO", "CHICAGO BEARS", "BEARS"],
    "CIN": ["CIN", "CINCINNATI", "CINCINNATI BENGALS", "BENGALS"],
    "CLE": ["CLE", "CLEVELAND", "CLEVELAND BROWNS", "BROWNS"],
    "DAL": ["DAL", "DALLAS", "DALLAS COWBOYS", "COWBOYS"],
    "DEN": ["DEN", "DENVER", "DENVER BRONCOS", "BRONCOS"],
    "DET": ["DET", "DETROIT", "DETROIT LIONS", "LIONS"],
    "GB": ["GB", "GNB", "GREEN BAY", "GREEN BAY PACKERS", "PACKERS"],
    "HOU": ["HOU", "HOUSTON", "HOUSTON TEXANS", "TEXANS"],
    "IND": ["IND", "INDIANAPOLIS", "INDIANAPOLIS COLTS", "COLTS"],
    "JAX": ["JAX", "JAC", "JACKSONVILLE", "JACKSONVILLE JAGUARS", "JAGUARS"],
    "KC": ["KC", "KAN", "KANSAS CITY", "KANSAS CITY CHIEFS", "CHIEFS"],
    "LAC": ["LAC", "LOS ANGELES CHARGERS", "LA CHARGERS", "SAN DIEGO CHARGERS", "CHARGERS"],
    "LAR": ["LAR", "LA", "LOS ANGELES RAMS", "LA RAMS", "ST LOUIS RAMS", "RAMS"],
    "LV": ["LV", "LVR", "LAS VEGAS", "LAS VEGAS RAIDERS", "OAKLAND RAIDERS", "RAIDERS"],
    "MIA": ["MIA", "MIAMI", "MIAMI DOLPHINS", "DOLPHINS"],
    "MIN": ["MIN", "MINNESOTA", "MINNESOTA VIKINGS", "VIKINGS"],
    "NE": ["NE", "NWE", "NEW ENGLAND", "NEW ENGLAND PATRIOTS", "PATRIOTS"],
    "NO": ["NO", "NOR", "NEW ORLEANS", "NEW ORLEANS SAINTS", "SAINTS"],
    "NYG": ["NYG", "NEW YORK GIANTS", "NY GIANTS", "GIANTS"],
    "NYJ": ["NYJ", "NEW YORK JETS", "NY JETS", "JETS"],
    "PHI": ["PHI", "PHILADELPHIA", "PHILADELPHIA EAGLES", "EAGLES"],
    "PIT": ["PIT", "PITTSBURGH", "PITTSBURGH STEELERS", "STEELERS"],
    "SEA": ["SEA", "SEATTLE", "SEATTLE SEAHAWKS", "SEAHAWKS"],
    "SF": ["SF", "SFO", "SAN FRANCISCO", "SAN FRANCISCO 49ERS", "49ERS", "NINERS"],
    "TB": ["TB", "TAM", "TAMPA BAY", "TAMPA BAY BUCCANEERS", "BUCCANEERS", "BUCS"],
    "TEN": ["TEN", "TENNESSEE", "TENNESSEE TITANS", "TITANS"],
    "WAS": ["WAS", "WSH", "WASHINGTON", "WASHINGTON COMMANDERS", "COMMANDERS"],
}


def _team_token(value: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", value.upper())


def _build_alias_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for abbr, variants in NFL_TEAM_ALIAS_GROUPS.items():
        for variant in variants:
            key = _team_token(variant)
            if key:
                lookup.setdefault(key, abbr)
    return lookup


TEAM_ALIAS_LOOKUP = _build_alias_lookup()


def canonical_team(team: str) -> str:
    """Return the NFL abbreviation for ``team``.

    Unknown names are returned stripped and uppercased so that exhibition or
    placeholder teams still compare consistently.
    """

    token = _team_token(team)
    if not token:
        return team.strip().upper()
    return TEAM_ALIAS_LOOKUP.get(token, team.strip().upper())


def same_team(left: str, right: str) -> bool:
    return canonical_team(left) == canonical_team(right)
