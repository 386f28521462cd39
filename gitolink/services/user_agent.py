"""User-agent parsing for click enrichment."""

from dataclasses import dataclass

from user_agents import parse

UNKNOWN = "Unknown"

# ua-parser reports unrecognised families as "Other"
_UNRECOGNISED = {"", "Other"}


@dataclass(frozen=True)
class ClientAgent:
    """Device, browser and OS names extracted from a User-Agent header."""

    device: str = "desktop"
    browser: str = UNKNOWN
    os: str = UNKNOWN


def _family(name: str | None) -> str:
    if name is None or name in _UNRECOGNISED:
        return UNKNOWN
    return name


def parse_user_agent(user_agent: str | None) -> ClientAgent:
    """Best-effort parse of a User-Agent string.

    Anything that is not recognisably a tablet or a phone counts as a
    desktop. Unparseable browser/OS families come back as ``"Unknown"``.
    """
    if not user_agent:
        return ClientAgent()

    ua = parse(user_agent)

    if ua.is_tablet:
        device = "tablet"
    elif ua.is_mobile:
        device = "mobile"
    else:
        device = "desktop"

    return ClientAgent(
        device=device,
        browser=_family(ua.browser.family),
        os=_family(ua.os.family),
    )
