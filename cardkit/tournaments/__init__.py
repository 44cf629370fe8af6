"""Built-in tournament configurations."""

from ..errors import ConfigurationError
from ..models import TournamentConfig
from .qcn_2026 import QCN_2026_CONFIG
from .usqc_2026 import USQC_2026_CONFIG

TOURNAMENTS: dict[str, TournamentConfig] = {
    config.id: config for config in (USQC_2026_CONFIG, QCN_2026_CONFIG)
}


def get_tournament(tournament_id: str) -> TournamentConfig:
    """Look up a built-in tournament by id.

    Raises:
        ConfigurationError: If no tournament has that id
    """
    try:
        return TOURNAMENTS[tournament_id]
    except KeyError:
        known = ", ".join(sorted(TOURNAMENTS))
        raise ConfigurationError(f"Unknown tournament {tournament_id!r} (known: {known})") from None


__all__ = ["TOURNAMENTS", "get_tournament", "USQC_2026_CONFIG", "QCN_2026_CONFIG"]
