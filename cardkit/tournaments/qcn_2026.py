"""QC National Championships 2026."""

from ..layout import QCN26_LAYOUT_V1
from ..models import TournamentConfig

_TOURNAMENT_LOGO = "config/tournaments/qcn-2026/logos/tournament.png"

QCN_2026_CONFIG = TournamentConfig.model_validate({
    "id": "qcn-2026",
    "name": "QC National Championships 2026",
    "year": 2026,
    "branding": {
        "tournamentLogoKey": _TOURNAMENT_LOGO,
        "primaryColor": "#4a1525",
    },
    # No team logos yet; cards fall back to the tournament logo
    "teams": [
        {"id": "alberta-clippers", "name": "Alberta Clippers"},
        {"id": "carleton-ravens", "name": "Carleton Ravens"},
        {"id": "guelph-quadball", "name": "Guelph Quadball"},
        {"id": "mischief-quadball", "name": "Mischief Quadball"},
        {"id": "montreal-flamingos", "name": "Montreal Flamingos"},
        {"id": "u-of-t-quadball", "name": "U of T Quadball"},
        {"id": "university-of-waterloo", "name": "University of Waterloo"},
        {"id": "university-of-ottawa", "name": "University of Ottawa"},
        {"id": "ubc-quadball", "name": "UBC Quadball"},
    ],
    "cardTypes": [
        {
            "type": "player",
            "label": "Player",
            "showTeamField": True,
            "showJerseyNumber": True,
            "positions": ["Chaser", "Keeper", "Beater", "Seeker"],
            "positionMultiSelect": True,
            "maxPositions": 4,
        },
        {
            "type": "team-staff",
            "label": "Team Staff",
            "showTeamField": True,
            "positions": ["Captain", "Coach", "Manager", "Staff"],
        },
        {
            "type": "media",
            "label": "Media",
            "logoOverrideKey": _TOURNAMENT_LOGO,
            "positions": ["Commentator", "Livestream", "Photographer", "Videographer", "Media"],
        },
        {
            "type": "official",
            "label": "Official",
            "logoOverrideKey": _TOURNAMENT_LOGO,
            "positions": ["Flag Runner", "Head Referee", "Referee"],
        },
        {
            "type": "tournament-staff",
            "label": "Tournament Staff",
            "logoOverrideKey": _TOURNAMENT_LOGO,
            "positions": ["Gameplay", "Tournament Staff", "Volunteer"],
        },
    ],
    "templates": [
        {"id": "qcn26", "label": "QCN26", "layout": QCN26_LAYOUT_V1.to_wire()},
    ],
    "defaultTemplates": {"fallback": "qcn26"},
    "createdAt": "2026-02-16T00:00:00.000Z",
    "updatedAt": "2026-02-16T00:00:00.000Z",
})
