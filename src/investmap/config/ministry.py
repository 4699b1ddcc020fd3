"""Ministry strategic-investments website (secondary source) configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

MINISTRY_BASE_URL = "https://ependyseis.mindev.gov.gr"
PROJECT_LIST_PATH = "/el/stratigikes/erga"
REGION_PATHS = (
    "/el/stratigikes/perifereies/attiki",
    "/el/stratigikes/perifereies/sterea-ellada",
    "/el/stratigikes/perifereies/kentriki-makedonia",
    "/el/stratigikes/perifereies/kriti",
    "/el/stratigikes/perifereies/anatoliki-makedonia-kai-thraki",
    "/el/stratigikes/perifereies/ipiros",
    "/el/stratigikes/perifereies/ionii-nisi",
    "/el/stratigikes/perifereies/vorio-aigaio",
    "/el/stratigikes/perifereies/peloponnisos",
    "/el/stratigikes/perifereies/notio-aigaio",
    "/el/stratigikes/perifereies/thessalia",
    "/el/stratigikes/perifereies/ditiki-ellada",
    "/el/stratigikes/perifereies/ditiki-makedonia",
)
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "el,en-US;q=0.7,en;q=0.3",
    "Referer": f"{MINISTRY_BASE_URL}/",
}


@dataclass(frozen=True, slots=True)
class MinistryConfig:
    resilience: ResilienceConfig
    project_list_path: str = PROJECT_LIST_PATH
    region_paths: tuple[str, ...] = field(default_factory=lambda: REGION_PATHS)
    min_links_before_fallback: int = 5


def get_ministry_config() -> MinistryConfig:
    return MinistryConfig(
        resilience=ResilienceConfig(
            name="ministry",
            base_url=MINISTRY_BASE_URL,
            timeout_seconds=15.0,
            ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
            cache=CacheConfig(backend="memory"),
            default_headers=BROWSER_HEADERS,
        )
    )
