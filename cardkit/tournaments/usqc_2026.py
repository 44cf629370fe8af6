"""US Quadball Cup 2026."""

from ..layout import USQC26_LAYOUT_V1
from ..models import TournamentConfig

_PREFIX = "config/tournaments/usqc-2026"
_ORG_LOGO = f"{_PREFIX}/logos/org.png"
_TOURNAMENT_LOGO = f"{_PREFIX}/logos/tournament.png"
_PLAYER_POSITIONS = ["Beater", "Chaser", "Keeper", "Seeker", "Utility"]

# (id, display name); logos live at teams/<id>.png
_TEAMS = [
    ("atlantic-dragons", "Atlantic Dragons Quadball"),
    ("ball-state", "Ball State Cardinals"),
    ("bay-area-bakers", "Bay Area Bakers"),
    ("bay-area-breakers", "Bay Area Breakers"),
    ("baylor", "Baylor QC"),
    ("blue-jay-qc", "Blue Jay QC"),
    ("boom-train", "Boom Train"),
    ("bosny", "Bosnyan Bearsharks"),
    ("boston-lobsters", "Boston Lobsters"),
    ("boston-red-pandas", "Boston Red Pandas"),
    ("boston-university", "Boston University Quadball"),
    ("bowling-green", "Bowling Green Quadball"),
    ("brandeis", "Brandeis Quadball"),
    ("brew-cities-qc", "Brew Cities QC"),
    ("brown", "Brown Bears Quadball"),
    ("cal", "Cal Quadball"),
    ("carolina-reapers", "Carolina Reapers"),
    ("chaos", "Chaos QC"),
    ("chicago-united", "Chicago United"),
    ("connecticut", "Connecticut Quadball"),
    ("creighton-qc", "Creighton QC"),
    ("cwru", "CWRUcio Quadball"),
    ("dcqc", "District of Columbia QC"),
    ("emerson", "Emerson College Quadball"),
    ("harvard-horntails", "Harvard Horntails"),
    ("houston-cosmos", "Houston Cosmos"),
    ("illini-ridgebacks", "Illini Ridgebacks"),
    ("jmu", "JMU Quadball"),
    ("marquette", "Marquette Golden Eagles"),
    ("michigan", "Michigan Quadball"),
    ("michigan-state", "Michigan State Quadball"),
    ("middlebury", "Middlebury College QC"),
    ("mile-high", "Mile High QC"),
    ("minnesota", "Minnesota Quadball"),
    ("mizzou", "Mizzou Club Quadball"),
    ("new-jersey-dice", "New Jersey Dice"),
    ("new-york-river-runners", "New York River Runners"),
    ("nyslice", "New York Slice"),
    ("ohio-apollos", "Ohio Apollos"),
    ("ohio-gemini", "Ohio Gemini"),
    ("orlando", "Orlando Quadball Club"),
    ("penn-state", "Penn State Quadball"),
    ("philadelphia-flamingos", "Philadelphia Flamingos"),
    ("pittqc", "QC Pittsburgh"),
    ("purdue", "Purdue Quadball"),
    ("reign-qc", "Reign QC"),
    ("rpi", "RPI Quadball"),
    ("rutgers", "Rutgers University Quadball"),
    ("salisbury", "Salisbury University Phoenixes"),
    ("seattle-sirens", "Seattle Sirens"),
    ("shsu", "Sam Houston State"),
    ("silicon-valley-vipers", "Silicon Valley Vipers"),
    ("texas", "Texas Quadball"),
    ("texas-am", "Texas A&M Quadball"),
    ("texas-copperheads", "Texas Copperheads"),
    ("texas-hill-country-heat", "Texas Hill Country Heat"),
    ("texas-state", "Texas State Quadball"),
    ("the-lost-boys", "The Lost Boys QC"),
    ("the-second-stars", "The Second Stars"),
    ("the-warriors", "The Warriors"),
    ("the-washups", "The Washups"),
    ("trainwreck", "Trainwreck"),
    ("triangle-united", "Triangle United"),
    ("twin-cities-qc", "Twin Cities QC"),
    ("ucla", "UCLA"),
    ("utsa", "UTSA QC"),
    ("uva", "UVA Quadball"),
    ("vermont", "University of Vermont Quadball"),
    ("vermont-united", "Vermont United"),
    ("washington-monuments", "Washington Monuments"),
]

USQC_2026_CONFIG = TournamentConfig.model_validate({
    "id": "usqc-2026",
    "name": "US Quadball Cup 2026",
    "year": 2026,
    "branding": {
        "tournamentLogoKey": _TOURNAMENT_LOGO,
        "orgLogoKey": _ORG_LOGO,
        "primaryColor": "#1b4278",
        "eventIndicator": "USQC26",
    },
    "teams": [
        {"id": team_id, "name": name, "logoKey": f"{_PREFIX}/teams/{team_id}.png"}
        for team_id, name in _TEAMS
    ],
    "cardTypes": [
        {
            "type": "player",
            "label": "Player",
            "showTeamField": True,
            "showJerseyNumber": True,
            "positions": _PLAYER_POSITIONS,
        },
        {
            "type": "national-team",
            "enabled": False,
            "label": "National Team",
            "showTeamField": True,
            "showJerseyNumber": True,
            "positions": _PLAYER_POSITIONS,
        },
        {
            "type": "team-staff",
            "label": "Team Staff",
            "showTeamField": True,
            "showJerseyNumber": True,
            "positions": ["Captain", "Coach", "Manager", "Mascot", "Staff"],
        },
        {
            "type": "media",
            "label": "Media",
            "logoOverrideKey": _ORG_LOGO,
            "positions": ["Commentator", "Livestream", "Photographer", "Videographer", "Media"],
        },
        {
            "type": "official",
            "label": "Official",
            "logoOverrideKey": _ORG_LOGO,
            "positions": ["Flag Runner", "Head Referee", "Referee"],
        },
        {
            "type": "tournament-staff",
            "label": "Tournament Staff",
            "logoOverrideKey": _TOURNAMENT_LOGO,
            "positions": ["Gameplay", "Tournament Staff", "Volunteer"],
        },
        {
            "type": "rare",
            "label": "Rare Card",
            "logoOverrideKey": _TOURNAMENT_LOGO,
            "positions": [],
        },
        {
            "type": "super-rare",
            "enabled": False,
            "label": "Super Rare Card",
            "showJerseyNumber": True,
            "positions": _PLAYER_POSITIONS,
        },
    ],
    "templates": [
        {"id": "usqc26", "label": "USQC26", "layout": USQC26_LAYOUT_V1.to_wire()},
    ],
    "defaultTemplates": {"fallback": "usqc26"},
    "createdAt": "2026-01-10T00:00:00.000Z",
    "updatedAt": "2026-02-02T21:55:24.690Z",
})
