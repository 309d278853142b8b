from typing import List, Optional, Sequence, Tuple

from igscraper.adapters.base import ExtractionResult, MediaItem, StrategyOutcome
from igscraper.errors import NoMediaFound

# (field, strategy) pairs, tried in order; the first non-empty value wins.
FIELD_RULES: Tuple[Tuple[str, str], ...] = (
    ("caption", "meta"),
    ("caption", "ld_json"),
    ("author", "ld_json"),
)


def pick_field(
    field: str,
    outcomes: Sequence[StrategyOutcome],
    rules: Sequence[Tuple[str, str]] = FIELD_RULES,
) -> Optional[str]:
    by_strategy = {o.strategy: o for o in outcomes}
    for rule_field, strategy in rules:
        if rule_field != field or strategy not in by_strategy:
            continue
        for value in by_strategy[strategy].values(field):
            if value:
                return value
    return None


def assemble_result(
    source_url: str,
    items: List[MediaItem],
    outcomes: Sequence[StrategyOutcome],
) -> ExtractionResult:
    if not items:
        raise NoMediaFound()

    return ExtractionResult(
        source_url=source_url,
        caption=pick_field("caption", outcomes),
        author=pick_field("author", outcomes),
        items=tuple(items),
    )
