"""
Season Roster

The twelve partnered teams of each region, in unlock order.
"""

from typing import Dict, List, Optional

from .models import Region, Team

KICKOFF_DATES: Dict[Region, str] = {
    Region.AMERICAS: "2026-01-16",
    Region.EMEA: "2026-01-20",
    Region.PACIFIC: "2026-01-22",
    Region.CHINA: "2026-01-22",
}

# Predictions for a region close when its kickoff starts.
LOCK_DATES: Dict[Region, str] = dict(KICKOFF_DATES)

# Global unlock event: every team open for one day.
GLOBAL_UNLOCK_START = "2026-01-22T00:00:00+00:00"
GLOBAL_UNLOCK_END = "2026-01-23T00:00:00+00:00"


def _region(region: Region, *teams: tuple) -> List[Team]:
    return [
        Team(id=team_id, name=name, tag=tag, region=region, index=position)
        for position, (team_id, name, tag) in enumerate(teams, start=1)
    ]


TEAMS: List[Team] = [
    *_region(
        Region.AMERICAS,
        ("sen", "Sentinels", "SEN"),
        ("nrg", "NRG", "NRG"),
        ("c9", "Cloud9", "C9"),
        ("100t", "100 Thieves", "100T"),
        ("lev", "Leviatán", "LEV"),
        ("kru", "KRÜ Esports", "KRÜ"),
        ("loud", "LOUD", "LOUD"),
        ("fur", "FURIA", "FUR"),
        ("mibr", "MIBR", "MIBR"),
        ("g2", "G2 Esports", "G2"),
        ("eg", "Evil Geniuses", "EG"),
        ("envy", "Envy", "ENVY"),
    ),
    *_region(
        Region.EMEA,
        ("fnc", "Fnatic", "FNC"),
        ("navi", "Natus Vincere", "NAVI"),
        ("tl", "Team Liquid", "TL"),
        ("vit", "Team Vitality", "VIT"),
        ("kc", "Karmine Corp", "KC"),
        ("th", "Team Heretics", "TH"),
        ("gia", "GIANTX", "GIA"),
        ("fut", "FUT Esports", "FUT"),
        ("bbl", "BBL Esports", "BBL"),
        ("ulf", "ULF Esports", "ULF"),
        ("m8", "Gentle Mates", "M8"),
        ("pcf", "PCIFIC Esports", "PCF"),
    ),
    *_region(
        Region.PACIFIC,
        ("prx", "Paper Rex", "PRX"),
        ("drx", "DRX", "DRX"),
        ("gen", "Gen.G", "GEN"),
        ("t1", "T1", "T1"),
        ("zeta", "ZETA DIVISION", "ZETA"),
        ("dfm", "DetonatioN FocusMe", "DFM"),
        ("fs", "FULL SENSE", "FS"),
        ("ts", "Team Secret", "TS"),
        ("rrq", "Rex Regum Qeon", "RRQ"),
        ("ge", "Global Esports", "GE"),
        ("var", "Varrel", "VAR"),
        ("ns", "Nongshim Redforce", "NS"),
    ),
    *_region(
        Region.CHINA,
        ("edg", "EDward Gaming", "EDG"),
        ("fpx", "FunPlus Phoenix", "FPX"),
        ("te", "Trace Esports", "TE"),
        ("blg", "Bilibili Gaming", "BLG"),
        ("jdg", "JD Gaming", "JDG"),
        ("wol", "Wolves Esports", "WOL"),
        ("tec", "Titan Esports Club", "TEC"),
        ("tyl", "TYLOO", "TYL"),
        ("drg", "Dragon Ranger Gaming", "DRG"),
        ("nova", "Nova Esports", "NOVA"),
        ("ag", "All Gamers", "AG"),
        ("xlg", "Xi Lai Gaming", "XLG"),
    ),
]

_TEAMS_BY_ID: Dict[str, Team] = {team.id: team for team in TEAMS}


def get_team(team_id: str) -> Optional[Team]:
    """Look up a roster team by id."""
    return _TEAMS_BY_ID.get(team_id)
